"""排序值写入

重排序、重置和间隙修复共用的写入逻辑：只写发生变化的记录，逐行 flush，
SQLAlchemy 错误统一转换为 PersistenceError。
"""

from contextlib import contextmanager
from typing import Any, List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ysortable.exceptions import PersistenceError
from ysortable.log import get_logger
from ..transaction import transaction_manager
from .config import SortableConfig

logger = get_logger("ysortable.orm.sortable")

Change = Tuple[Any, int]


@contextmanager
def persistence_guard(config: SortableConfig, action: str):
    """把块内抛出的 SQLAlchemyError 转换为 PersistenceError

    与事务上下文配合使用时放在外层，事务先回滚，再转换异常。
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"{config.model_name} {action}失败，事务已回滚: {e}")
        raise PersistenceError(
            "无法设置排序",
            details=[str(e)],
            model=config.model_name,
            action=action
        ) from e


@contextmanager
def sort_transaction(config: SortableConfig, session: Session, action: str):
    """在事务中执行一次排序写操作

    同一 session 上已有事务时加入；失败时先回滚，再转换为 PersistenceError。
    事务标签为 "<模型名> <操作>"。
    """
    with persistence_guard(config, action):
        with transaction_manager.transaction(
            session=session,
            label=f"{config.model_name} {action}"
        ) as tx:
            yield tx


class PositionWriter:
    """把排序值变更写入存储

    __sort_unique__ 模型采用两阶段写入：先把所有待写记录停放到互不相同的负数临时值，
    再写入最终值，避免中间状态违反 (分组, 排序字段) 唯一约束。
    """

    def __init__(self, config: SortableConfig):
        self.config = config

    def write(self, session: Session, changes: List[Change]) -> int:
        """写入变更，返回写入的记录数

        Args:
            session: 数据库会话，调用方负责事务
            changes: (记录, 新排序值) 列表，只应包含确实需要变化的记录
        """
        if not changes:
            return 0

        with persistence_guard(self.config, "写入排序值"):
            if self.config.unique:
                for offset, (record, _) in enumerate(changes, 1):
                    self.config.set_position(record, -offset)
                session.flush()

            for record, value in changes:
                self.config.set_position(record, value)
                session.flush()

        logger.debug(f"{self.config.model_name} 写入 {len(changes)} 条排序值")
        return len(changes)


__all__ = [
    "PositionWriter",
    "persistence_guard",
    "sort_transaction",
]
