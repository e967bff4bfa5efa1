"""异常处理模块

提供排序引擎异常类、全局异常处理器等功能。

使用示例:
    from ysortable.exceptions import Err, register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)

    raise Err.precondition("排序列表不能为空")
"""

from .exceptions import (
    # ===== 推荐使用 =====
    Err,
    ErrorCode,
    ErrorCodeType,

    # ===== 异常类 =====
    BusinessException,
    SortableException,
    ConfigurationError,
    PreconditionError,
    PersistenceError,
    NotFoundError,
)

from .handlers import (
    register_exception_handlers,
    business_exception_handler,
    general_exception_handler,
)

__all__ = [
    "Err",
    "ErrorCode",
    "ErrorCodeType",
    "BusinessException",
    "SortableException",
    "ConfigurationError",
    "PreconditionError",
    "PersistenceError",
    "NotFoundError",
    "register_exception_handlers",
    "business_exception_handler",
    "general_exception_handler",
]
