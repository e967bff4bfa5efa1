"""全局异常处理器

把排序引擎异常和未处理的异常转换为统一的错误响应（见 ysortable.response）。
设置环境变量 DEBUG=true 时，响应中附带异常的上下文信息。
"""

import os

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ysortable.log import get_logger
from ysortable.response import Resp
from .exceptions import BusinessException, ErrorCode

logger = get_logger()


def _is_debug() -> bool:
    return os.getenv("DEBUG", "false").lower() == "true"


async def business_exception_handler(request: Request, exc: BusinessException) -> JSONResponse:
    """业务异常处理器

    响应体追加 error_code；调试模式下追加 debug_info（异常的 extra，如 model、action）。
    """
    logger.warning(
        f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}",
        extra={"error_code": exc.code, "details": exc.details, "context": exc.extra},
    )

    fields = {}
    if exc.code:
        fields["error_code"] = exc.code
    if _is_debug() and exc.extra:
        fields["debug_info"] = exc.extra

    return Resp.Error(exc.status_code, exc.message, exc.details, **fields)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """兜底处理器：记录堆栈，不向调用方暴露原始异常"""
    logger.exception(f"{request.method} {request.url.path} 未处理的异常: {type(exc).__name__}: {exc}")

    details = []
    if _is_debug():
        details = [f"异常类型: {type(exc).__name__}", f"异常消息: {exc}"]

    return Resp.Error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "服务器内部错误",
        details,
        error_code=ErrorCode.INTERNAL_SERVER_ERROR.value,
    )


def register_exception_handlers(app) -> None:
    """注册异常处理器到 FastAPI 应用

    使用示例:
        app = FastAPI()
        register_exception_handlers(app)
        app.include_router(create_sortable_router(Banner), prefix="/api/banner")
    """
    app.add_exception_handler(BusinessException, business_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
    logger.debug("排序异常处理器已注册")
