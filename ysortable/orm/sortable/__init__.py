"""排序管理模块

维护分组内从 1 开始、连续无间隙的排序值。

导出:
    - OrderEngine: 排序引擎（新记录赋值、批量重排序、间隙修复、导航查询）
    - SortFieldMixin: 排序字段 Mixin（提供 sort_order 字段）
    - SortableMixin: 排序管理 Mixin（配置 + 快捷方法）
    - SortDirection / PositionStrategy: 方向与插入策略枚举

使用示例:
    from ysortable.orm import CoreModel, SortFieldMixin, SortableMixin

    class Banner(CoreModel, SortFieldMixin, SortableMixin):
        title: Mapped[str] = mapped_column(String(100))

    engine = Banner.sortable_engine()
    engine.create(session, Banner(title="首页"))
    engine.apply_order(session, [3, 1, 2])
"""

from .config import SortDirection, PositionStrategy, SortableConfig, read_attribute
from .scope import Scope, Restrictions
from .writer import PositionWriter, persistence_guard, sort_transaction
from .positioner import Positioner
from .gap_fixer import GapFixer
from .reorderer import Reorderer
from .navigator import Navigator
from .engine import OrderEngine
from .sortable_fields import SortFieldMixin
from .sortable_mixin import SortableMixin

__all__ = [
    "SortDirection",
    "PositionStrategy",
    "SortableConfig",
    "read_attribute",
    "Scope",
    "Restrictions",
    "PositionWriter",
    "persistence_guard",
    "sort_transaction",
    "Positioner",
    "GapFixer",
    "Reorderer",
    "Navigator",
    "OrderEngine",
    "SortFieldMixin",
    "SortableMixin",
]
