"""新记录排序值分配

新记录放到所在分组的最后：max(排序值) + 1，分组为空时为 1。
只依赖分组字段，不依赖主键，可以在插入前（主键尚未生成时）调用。
"""

from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ysortable.exceptions import PersistenceError
from ysortable.log import get_logger
from .config import SortableConfig
from .scope import Restrictions, Scope
from .writer import sort_transaction

logger = get_logger("ysortable.orm.sortable")


class Positioner:
    """计算并赋值新记录的排序值

    LEGACY 策略（assign_initial_position）只读取最大值，不加锁：
    并发插入同一分组时两条记录可能得到相同排序值，之后由间隙修复纠正。

    LOCKED 策略（insert_locked）在事务中以 FOR UPDATE 读取最大值所在行，
    在保存点内插入；配合 (分组, 排序字段) 唯一约束，冲突时重新计算并重试。
    """

    def __init__(self, config: SortableConfig, scope: Scope):
        self.config = config
        self.scope = scope

    def max_position(self, session: Session, restrictions: Restrictions = None) -> int:
        """限制集范围内的最大排序值，无记录时返回 0"""
        query = session.query(func.max(self.config.position_column))
        query = self.scope.apply(query, restrictions)
        return query.scalar() or 0

    def locked_max_position(self, session: Session, restrictions: Restrictions = None) -> int:
        """以 FOR UPDATE 锁定最大值所在行后返回最大排序值"""
        query = session.query(self.config.model_class)
        query = self.scope.apply(query, restrictions)
        top = (
            query.order_by(self.config.position_column.desc())
            .with_for_update()
            .populate_existing()
            .first()
        )
        if top is None:
            return 0
        return self.config.get_position(top) or 0

    def position_taken(self, session: Session, restrictions: Restrictions, position: int) -> bool:
        """限制集范围内是否已有记录占用该排序值"""
        query = session.query(self.config.key_column).filter(self.config.position_column == position)
        query = self.scope.apply(query, restrictions)
        with session.no_autoflush:
            return query.first() is not None

    def assign_initial_position(self, session: Session, record: Any) -> int:
        """为新记录赋值 max + 1 并返回该值

        自动 flush 关闭，避免待插入的记录本身参与最大值计算。
        """
        restrictions = self.scope.derive_restrictions(record)
        with session.no_autoflush:
            position = self.max_position(session, restrictions) + 1
        self.config.set_position(record, position)
        logger.debug(f"{self.config.model_name} 新记录排序值: {position} (分组: {restrictions})")
        return position

    def insert_locked(self, session: Session, record: Any, max_retries: int = None) -> int:
        """加锁计算排序值并插入记录，排序值冲突时重试

        只有冲突的排序值确实已被同组记录占用时才重试；
        其他完整性错误（如非空字段缺失）直接失败。

        Returns:
            最终写入的排序值

        Raises:
            PersistenceError: 重试次数用尽，或插入因其他约束失败
        """
        config = self.config
        if max_retries is None:
            max_retries = config.max_retries
        restrictions = self.scope.derive_restrictions(record)
        attempt = 0

        with sort_transaction(config, session, "加锁插入") as tx:
            while True:
                attempt += 1
                with session.no_autoflush:
                    position = self.locked_max_position(session, restrictions) + 1
                config.set_position(record, position)

                try:
                    with tx.savepoint():
                        session.add(record)
                        session.flush()
                    return position
                except IntegrityError as e:
                    if not self.position_taken(session, restrictions, position):
                        logger.error(f"{config.model_name} 插入失败（非排序值冲突）: {e}")
                        raise PersistenceError(
                            "无法设置排序",
                            details=[str(e)],
                            model=config.model_name,
                            attempts=attempt
                        ) from e
                    if attempt > max_retries:
                        logger.error(
                            f"{config.model_name} 插入排序值冲突，已重试 {max_retries} 次: {e}"
                        )
                        raise PersistenceError(
                            "无法设置排序",
                            details=[str(e)],
                            model=config.model_name,
                            attempts=attempt
                        ) from e
                    logger.warning(
                        f"{config.model_name} 排序值 {position} 已被占用，"
                        f"第 {attempt}/{max_retries} 次重试"
                    )


__all__ = [
    "Positioner",
]
