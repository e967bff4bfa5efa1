"""响应模块

使用示例:
    from ysortable.response import Resp

    return Resp.OK(data=result)
    return Resp.NotFound(message="记录不存在")
"""

from .base_response import (
    Resp,
    ResponseStatus,
    OkResponse,
    build_content,
    serialize,
    OK,
    BadRequest,
    NotFound,
)

__all__ = [
    "Resp",
    "ResponseStatus",
    "OkResponse",
    "build_content",
    "serialize",
    "OK",
    "BadRequest",
    "NotFound",
]
