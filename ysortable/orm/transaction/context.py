"""排序写操作的事务上下文

一次排序写操作（插入、重排序、间隙修复、删除）对应一个 TransactionContext：
持有 session 和操作标签，记录同一 session 上的加入层级和保存点计数。
"""

from contextlib import contextmanager

from sqlalchemy.orm import Session

from ysortable.log import get_logger

logger = get_logger("ysortable.orm.transaction")


class TransactionContext:
    """排序写操作的事务

    Args:
        session: 数据库会话
        label: 操作标签，如 "SortBanner 设置排序"，用于日志

    属性:
        depth: 当前加入层级，最外层为 1
        savepoint_count: 已创建的保存点数量（LOCKED 插入每次尝试一个）
    """

    def __init__(self, session: Session, label: str = None):
        self.session = session
        self.label = label or "事务"
        self.depth = 0
        self.savepoint_count = 0
        self.status = "pending"

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def begin(self) -> "TransactionContext":
        self.status = "active"
        self.depth = 1
        logger.debug(f"{self.label}: 事务开始")
        return self

    def commit(self) -> None:
        try:
            self.session.commit()
        except Exception:
            self.rollback()
            raise
        self.status = "committed"
        self.depth = 0
        logger.debug(f"{self.label}: 事务已提交")

    def rollback(self) -> None:
        """回滚 session 上的全部未提交变更，重复调用无副作用"""
        if self.status in ("committed", "rolled_back"):
            return
        self.session.rollback()
        self.status = "rolled_back"
        self.depth = 0
        logger.debug(f"{self.label}: 事务已回滚")

    @contextmanager
    def savepoint(self):
        """在当前事务内开启保存点

        块内抛出异常时只回滚到保存点，异常继续向外抛出，外层事务仍可用。
        """
        self.savepoint_count += 1
        number = self.savepoint_count
        with self.session.begin_nested() as nested:
            logger.debug(f"{self.label}: 保存点 #{number}")
            yield nested

    def __repr__(self) -> str:
        return f"TransactionContext(label={self.label!r}, status={self.status}, depth={self.depth})"
