"""批量重排序

前端拖拽后提交新的 ID 顺序，在一个事务内把目标记录现有的排序值按新顺序重新分配。

对齐规则:
    目标记录按当前排序值排成快照（DESC 降序 / ASC 升序，相同值按键排序），
    快照第 i 个排序值写给 ordered_ids[i]。
    默认 DESC：列表中第一个 ID 获得目标集合中最大的排序值。

    例：A, B, C 排序值为 1, 2, 3，apply_order([C, A, B]) 后 C=3, A=2, B=1。
"""

from collections import Counter
from typing import Any, Dict, List, Sequence, Union

from sqlalchemy.orm import Session

from ysortable.exceptions import Err
from ysortable.log import get_logger
from .config import SortableConfig, SortDirection
from .gap_fixer import GapFixer
from .scope import Restrictions, Scope
from .writer import PositionWriter, sort_transaction

logger = get_logger("ysortable.orm.sortable")


class Reorderer:
    """按客户端给出的顺序重新分配排序值

    流程:
        1. 校验 ID 列表（非空、无重复），不满足时不做任何写入
        2. 开启事务，以 FOR UPDATE 读取目标记录，有 ID 找不到时整个事务中止
        3. 目标记录最大排序值为空或 <= 0 时，先按键升序重置为 1..k
        4. 按对齐规则写入变化的排序值
        5. 提交后对涉及的分组执行间隙修复
    """

    def __init__(
        self,
        config: SortableConfig,
        scope: Scope,
        writer: PositionWriter,
        gap_fixer: GapFixer
    ):
        self.config = config
        self.scope = scope
        self.writer = writer
        self.gap_fixer = gap_fixer

    def _validate_ids(self, ordered_ids: Sequence[Any]) -> List[Any]:
        if ordered_ids is None or isinstance(ordered_ids, (str, bytes)):
            raise Err.precondition("排序 ID 列表不能为空", model=self.config.model_name)

        ids = [self.config.coerce_key(item) for item in ordered_ids]
        if not ids:
            raise Err.precondition("排序 ID 列表不能为空", model=self.config.model_name)

        duplicates = [key for key, count in Counter(ids).items() if count > 1]
        if duplicates:
            raise Err.precondition(
                "排序 ID 列表包含重复项",
                details=[f"重复 ID: {key}" for key in duplicates],
                model=self.config.model_name
            )
        return ids

    def _load_targets(self, session: Session, ids: List[Any]) -> Dict[Any, Any]:
        config = self.config
        # 先写出本 session 未 flush 的变更，再以数据库中的当前值覆盖已加载的记录
        session.flush()
        records = (
            session.query(config.model_class)
            .filter(config.key_column.in_(ids))
            .with_for_update()
            .populate_existing()
            .all()
        )
        by_key = {config.get_key(record): record for record in records}

        missing = [key for key in ids if key not in by_key]
        if missing:
            raise Err.not_found(
                "排序记录不存在",
                details=[f"ID {key} 不存在" for key in missing],
                model=config.model_name
            )
        return by_key

    def reset_sort_order(self, session: Session, records: List[Any]) -> int:
        """按键升序把目标记录的排序值重置为 1..k，返回写入数"""
        config = self.config
        ordered = sorted(records, key=config.get_key)
        changes = [
            (record, rank)
            for rank, record in enumerate(ordered, 1)
            if config.get_position(record) != rank
        ]
        logger.info(f"{config.model_name} 目标记录没有有效排序值，按键重置 {len(ordered)} 条")
        return self.writer.write(session, changes)

    def _snapshot(self, records: List[Any], direction: SortDirection) -> List[int]:
        config = self.config
        ordered = sorted(
            records,
            key=lambda record: (config.get_position(record) or 0, config.get_key(record)),
            reverse=direction == SortDirection.DESC
        )
        return [config.get_position(record) for record in ordered]

    def apply_order(
        self,
        session: Session,
        ordered_ids: Sequence[Any],
        direction: Union[SortDirection, str, None] = None
    ) -> int:
        """按给定顺序重新分配排序值

        Args:
            session: 数据库会话
            ordered_ids: 期望的顺序（从前到后）
            direction: 对齐方向，默认取配置（desc）

        Returns:
            排序值发生变化的记录数（不含之后间隙修复的写入）

        Raises:
            PreconditionError: ID 列表为空、包含重复项或 ID 无效
            NotFoundError: 有 ID 找不到对应记录
            PersistenceError: 写入或提交失败，事务已回滚
        """
        config = self.config
        ids = self._validate_ids(ordered_ids)
        direction = SortDirection.parse(direction, default=config.default_direction)
        restrictions: Restrictions = {}

        with sort_transaction(config, session, "设置排序"):
            by_key = self._load_targets(session, ids)
            records = list(by_key.values())

            positions = [config.get_position(record) for record in records]
            valid = [value for value in positions if value is not None]
            max_position = max(valid) if valid else None
            if max_position is None or max_position <= 0:
                self.reset_sort_order(session, records)

            snapshot = self._snapshot(records, direction)

            changes = []
            for index, key in enumerate(ids):
                record = by_key[key]
                self.scope.accumulate(restrictions, record)
                if config.get_position(record) != snapshot[index]:
                    changes.append((record, snapshot[index]))

            updated = self.writer.write(session, changes)

        logger.debug(
            f"{config.model_name} 重排序完成: {len(ids)} 个 ID，{updated} 条更新，方向 {direction.value}"
        )

        self.gap_fixer.repack(session, restrictions)
        return updated


__all__ = [
    "Reorderer",
]
