"""间隙修复

把限制集范围内的排序值重新编号为 1..N，消除删除或异常留下的间隙与重复。
"""

from typing import Dict

from sqlalchemy.orm import Session

from ysortable.log import get_logger
from .config import SortableConfig
from .scope import Restrictions, Scope
from .writer import PositionWriter, sort_transaction

logger = get_logger("ysortable.orm.sortable")


class GapFixer:
    """排序值重新编号

    按当前排序值升序（相同时按键升序）遍历，依次赋值 1, 2, 3, …，只写发生变化的记录。
    限制集覆盖多个分组时（如重排序涉及多个分类），每个分组各自从 1 编号。
    幂等：连续执行两次，第二次不产生任何写入。
    """

    def __init__(self, config: SortableConfig, scope: Scope, writer: PositionWriter):
        self.config = config
        self.scope = scope
        self.writer = writer

    def repack(self, session: Session, restrictions: Restrictions = None) -> int:
        """重新编号，返回写入的记录数

        Args:
            session: 数据库会话；已有同一 session 的事务时加入该事务
            restrictions: 限制集，为空表示全表
        """
        config = self.config

        with sort_transaction(config, session, "修复排序间隙"):
            session.flush()
            query = session.query(config.model_class)
            query = self.scope.apply(query, restrictions)
            records = (
                query.order_by(config.position_column.asc(), config.key_column.asc())
                .with_for_update()
                .populate_existing()
                .all()
            )

            counters: Dict[tuple, int] = {}
            changes = []
            for record in records:
                partition = self.scope.partition_key(record)
                counters[partition] = counters.get(partition, 0) + 1
                if config.get_position(record) != counters[partition]:
                    changes.append((record, counters[partition]))

            updated = self.writer.write(session, changes)

        if updated:
            logger.debug(f"{config.model_name} 排序间隙修复: {updated}/{len(records)} 条记录更新")
        return updated


__all__ = [
    "GapFixer",
]
