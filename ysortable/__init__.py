"""
YSortable - SQLAlchemy 排序引擎

为 ORM 模型维护分组内从 1 开始、连续无间隙的排序值，
提供新记录赋值、拖拽重排序、删除后间隙修复和导航查询。
"""

__version__ = "0.1.0"

from .orm import (
    CoreModel,
    OrderEngine,
    SortDirection,
    PositionStrategy,
    SortFieldMixin,
    SortableMixin,
    init_database,
    get_db,
    db_session_scope,
    transaction_manager,
)

from .exceptions import (
    Err,
    SortableException,
    ConfigurationError,
    PreconditionError,
    PersistenceError,
    NotFoundError,
    register_exception_handlers,
)

from .response import Resp

from .log import get_logger, setup_logger, setup_root_logger

from .config import AppSettings, SortableSettings, load_yaml_config

from .api import create_sortable_router

__all__ = [
    "__version__",
    # 排序
    "CoreModel",
    "OrderEngine",
    "SortDirection",
    "PositionStrategy",
    "SortFieldMixin",
    "SortableMixin",
    # 会话与事务
    "init_database",
    "get_db",
    "db_session_scope",
    "transaction_manager",
    # 异常
    "Err",
    "SortableException",
    "ConfigurationError",
    "PreconditionError",
    "PersistenceError",
    "NotFoundError",
    "register_exception_handlers",
    # 响应
    "Resp",
    # 日志
    "get_logger",
    "setup_logger",
    "setup_root_logger",
    # 配置
    "AppSettings",
    "SortableSettings",
    "load_yaml_config",
    # API
    "create_sortable_router",
]
