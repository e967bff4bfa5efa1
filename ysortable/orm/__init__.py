"""ORM 模块

提供数据库会话管理、事务管理、基础模型和排序引擎。

使用示例:
    from ysortable.orm import (
        CoreModel, SortFieldMixin, SortableMixin,
        init_database, db_session_scope,
    )

    class Banner(CoreModel, SortFieldMixin, SortableMixin):
        title: Mapped[str] = mapped_column(String(100))

    init_database("sqlite:///./app.db")

    with db_session_scope() as session:
        Banner.sortable_engine().create(session, Banner(title="首页"))
"""

from .core_model import Base, CoreModel
from .db_session import (
    db_manager,
    init_database,
    get_engine,
    get_db,
    db_session_scope,
)
from .transaction import (
    TransactionManager,
    TransactionContext,
    transaction_manager,
    get_current_transaction,
)
from .sortable import (
    OrderEngine,
    SortableConfig,
    SortDirection,
    PositionStrategy,
    SortFieldMixin,
    SortableMixin,
    Restrictions,
)

__all__ = [
    # 模型
    "Base",
    "CoreModel",

    # 会话
    "db_manager",
    "init_database",
    "get_engine",
    "get_db",
    "db_session_scope",

    # 事务
    "TransactionManager",
    "TransactionContext",
    "transaction_manager",
    "get_current_transaction",

    # 排序
    "OrderEngine",
    "SortableConfig",
    "SortDirection",
    "PositionStrategy",
    "SortFieldMixin",
    "SortableMixin",
    "Restrictions",
]
