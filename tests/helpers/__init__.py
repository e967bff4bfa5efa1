"""测试辅助工具模块

提供测试专用的模型和辅助函数，避免在核心代码中添加测试专用方法。
"""

from .sortable_helpers import (
    SortBanner,
    SortProduct,
    SortTask,
    UniqueSortItem,
    LockedSortItem,
    PlainSortRecord,
    PositionedRecord,
    CompositeSortRecord,
    KeyedCompositeSortRecord,
    BadGroupRecord,
    BadStrategyRecord,
    seed,
    positions,
    set_positions,
)

__all__ = [
    # 测试模型
    'SortBanner',
    'SortProduct',
    'SortTask',
    'UniqueSortItem',
    'LockedSortItem',
    'PlainSortRecord',
    'PositionedRecord',
    'CompositeSortRecord',
    'KeyedCompositeSortRecord',
    'BadGroupRecord',
    'BadStrategyRecord',
    # 数据准备
    'seed',
    'positions',
    'set_positions',
]
