"""事务管理模块

排序引擎的写操作在事务中执行；同一 session 上的嵌套调用加入外层事务，
LOCKED 插入策略在保存点内重试。

使用示例:
    from ysortable.orm import transaction_manager as tm

    with tm.transaction(session=session, label="Banner 插入") as tx:
        with tx.savepoint():
            session.add(banner)
            session.flush()
"""

from .context import TransactionContext
from .manager import (
    TransactionManager,
    transaction_manager,
    get_current_transaction,
)

__all__ = [
    "TransactionContext",
    "TransactionManager",
    "transaction_manager",
    "get_current_transaction",
]
