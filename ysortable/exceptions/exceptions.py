"""业务异常类定义

排序引擎的异常都继承自 SortableException，每个子类固定一个错误代码和 HTTP 状态码，
注册 register_exception_handlers 后由 FastAPI 转换为统一的错误响应。
"""

import copy
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from fastapi import status


class ErrorCode(str, Enum):
    """错误代码

    继承自 str，响应中的 error_code 直接使用其值。
    """

    BUSINESS_ERROR = "BUSINESS_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    DATABASE_ERROR = "DATABASE_ERROR"


ErrorCodeType = Union[str, ErrorCode]


class BusinessException(Exception):
    """业务异常基类

    属性:
        message: 错误消息（面向用户）
        code: 错误代码
        status_code: HTTP 状态码
        details: 详细错误信息列表，如 ["ID 9 不存在"]
        extra: 上下文信息，如 model="Banner"、action="设置排序"

    使用示例:
        raise BusinessException("操作失败", extra_field="value")
    """

    def __init__(
        self,
        message: str,
        code: ErrorCodeType = ErrorCode.BUSINESS_ERROR,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or []
        self.extra = extra
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（details 和 extra 为副本）"""
        return {
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "details": copy.deepcopy(self.details),
            "extra": copy.deepcopy(self.extra)
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"status_code={self.status_code})"
        )


class SortableException(BusinessException):
    """排序引擎异常基类

    子类通过类属性声明默认消息、错误代码和 HTTP 状态码。
    extra 中通常带有 model（模型名），写操作失败时还带有 action（操作名）。
    """

    default_message = "排序失败"
    default_code: ErrorCodeType = ErrorCode.BUSINESS_ERROR
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str = None,
        code: ErrorCodeType = None,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        super().__init__(
            message=message or self.default_message,
            code=code or self.default_code,
            status_code=self.http_status,
            details=details,
            **extra
        )


class ConfigurationError(SortableException):
    """排序配置错误

    排序字段不存在、键字段无法解析（复合主键未配置 __sort_key__）、
    分组字段不存在时抛出。构建排序引擎时检查，不可重试。
    """

    default_message = "排序配置错误"
    default_code = ErrorCode.CONFIGURATION_ERROR
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR


class PreconditionError(SortableException):
    """前置条件错误：ID 列表为空、重复或无效，或模型不具备排序能力。不会有任何写入。"""

    default_message = "前置条件不满足"
    default_code = ErrorCode.INVALID_PARAMETER
    http_status = status.HTTP_400_BAD_REQUEST


class PersistenceError(SortableException):
    """持久化错误

    事务内写入或提交失败（约束冲突、连接断开等）。抛出前事务已回滚。
    """

    default_message = "无法设置排序"
    default_code = ErrorCode.DATABASE_ERROR
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE


class NotFoundError(SortableException):
    """重排序引用的 ID 找不到对应记录"""

    default_message = "记录不存在"
    default_code = ErrorCode.RESOURCE_NOT_FOUND
    http_status = status.HTTP_404_NOT_FOUND


class Err:
    """异常快捷创建类

    使用示例:
        from ysortable.exceptions import Err

        raise Err.precondition("排序列表不能为空")
        raise Err.not_found("排序记录不存在", details=["ID 3 不存在"], model="Banner")
    """

    @staticmethod
    def config(message: str = None, **kwargs) -> ConfigurationError:
        return ConfigurationError(message, **kwargs)

    @staticmethod
    def precondition(message: str = None, **kwargs) -> PreconditionError:
        return PreconditionError(message, **kwargs)

    @staticmethod
    def persistence(message: str = None, **kwargs) -> PersistenceError:
        return PersistenceError(message, **kwargs)

    @staticmethod
    def not_found(message: str = None, **kwargs) -> NotFoundError:
        return NotFoundError(message, **kwargs)
