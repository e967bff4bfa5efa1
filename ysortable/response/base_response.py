"""统一响应格式

所有接口（包括异常处理器）返回同一个 JSON 结构:

    {
        "status": "success" | "error",
        "message": "排序已更新",
        "msg_details": [],
        "data": {"updated": 2}
    }
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class ResponseStatus(str, Enum):
    """业务状态，与 HTTP 状态码独立"""
    SUCCESS = "success"
    ERROR = "error"


class OkResponse(BaseModel):
    """成功响应模型（用于 OpenAPI 文档）"""
    status: str = Field(default="success", description="响应状态")
    message: str = Field(default="请求成功", description="响应消息")
    msg_details: List[str] = Field(default=[], description="详细信息")
    data: Any = Field(default=None, description="响应数据")


def serialize(data: Any, top_level: bool = True) -> Any:
    """把响应数据转为可 JSON 序列化的结构

    ORM 对象按表字段转为字典，datetime 格式化为 "%Y-%m-%d %H:%M:%S"。
    顶层 None 转为 {}，嵌套的 None 保持不变。
    """
    if data is None:
        return {} if top_level else None
    if isinstance(data, datetime):
        return data.strftime("%Y-%m-%d %H:%M:%S")
    if hasattr(data, "__table__"):
        return {
            column.name: serialize(getattr(data, column.name, None), False)
            for column in data.__table__.columns
        }
    if isinstance(data, (list, tuple)):
        return [serialize(item, False) for item in data]
    if isinstance(data, dict):
        return {key: serialize(value, False) for key, value in data.items()}
    return data


def build_content(
    message: str,
    data: Any = None,
    msg_details: Optional[List[str]] = None,
    response_status: ResponseStatus = ResponseStatus.SUCCESS,
    **fields: Any
) -> Dict[str, Any]:
    """组装响应体，fields 追加在标准字段之后（如 error_code）"""
    content = {
        "status": response_status.value,
        "message": message,
        "msg_details": list(msg_details) if msg_details else [],
        "data": serialize(data),
    }
    content.update(fields)
    return content


class Resp:
    """响应快捷类

    使用示例:
        from ysortable.response import Resp

        return Resp.OK(data={"updated": 3}, message="排序已更新")
        return Resp.BadRequest(message="参数错误")
    """

    @staticmethod
    def OK(data: Any = None, message: str = "请求成功") -> JSONResponse:
        """200 OK"""
        return JSONResponse(status_code=status.HTTP_200_OK, content=build_content(message, data))

    @staticmethod
    def Error(
        status_code: int,
        message: str,
        msg_details: Optional[List[str]] = None,
        **fields: Any
    ) -> JSONResponse:
        """错误响应，data 固定为 {}"""
        content = build_content(
            message,
            msg_details=msg_details,
            response_status=ResponseStatus.ERROR,
            **fields
        )
        return JSONResponse(status_code=status_code, content=content)

    @staticmethod
    def BadRequest(message: str = "请求参数错误", msg_details: Optional[List[str]] = None) -> JSONResponse:
        """400 Bad Request"""
        return Resp.Error(status.HTTP_400_BAD_REQUEST, message, msg_details)

    @staticmethod
    def NotFound(message: str = "资源不存在", msg_details: Optional[List[str]] = None) -> JSONResponse:
        """404 Not Found"""
        return Resp.Error(status.HTTP_404_NOT_FOUND, message, msg_details)


OK = Resp.OK
BadRequest = Resp.BadRequest
NotFound = Resp.NotFound
