"""排序管理 Mixin

为模型提供排序能力：类属性配置 + 实例/类方法快捷入口，实际逻辑由 OrderEngine 完成。

使用示例:
    from ysortable.orm import CoreModel, SortFieldMixin, SortableMixin

    # 简单列表排序（无分组）
    class Banner(CoreModel, SortFieldMixin, SortableMixin):
        title: Mapped[str] = mapped_column(String(100))

    # 分组排序（同一分类内排序）
    class Product(CoreModel, SortFieldMixin, SortableMixin):
        __sort_group_by__ = "category_id"

        category_id: Mapped[int] = mapped_column(Integer)
        name: Mapped[str] = mapped_column(String(100))

    product = Product(name="鼠标", category_id=1)
    Product.sortable_engine().create(session, product)

    product.is_first(session)          # 分组内是否第一个
    product.next(session)              # 后一个记录的 id
    product.get_sort_order(session, reversed=True)

    Product.set_sort_order(session, [3, 1, 2])    # 拖拽排序
    Product.fix_sort_gaps(session, {"category_id": [1]})
"""

from typing import Any, Dict, List, Optional, Sequence, Union

from sqlalchemy.orm import Session

from .config import PositionStrategy, SortDirection
from .engine import OrderEngine
from .scope import Restrictions

_engines: Dict[type, OrderEngine] = {}


class SortableMixin:
    """排序管理 Mixin

    字段要求（使用者需定义或使用 SortFieldMixin）:
        - 排序字段，默认 sort_order

    可配置属性（子类可覆盖）:
        - __sort_field__: 排序字段名，None 时取 SortableSettings.position_field
        - __sort_key__: 键字段名，None 时使用单列主键
        - __sort_group_by__: 分组字段，str 或 list，None 表示全局排序
        - __sort_unique__: (分组, 排序字段) 上有唯一约束时设为 True
        - __sort_strategy__: PositionStrategy.LEGACY / LOCKED
    """

    # ==================== 配置 ====================

    __sort_field__: Optional[str] = None

    __sort_key__: Optional[str] = None

    # - None: 不分组，全局排序
    # - str: 单字段分组
    # - list: 多字段分组
    __sort_group_by__: Union[str, List[str], None] = None

    __sort_unique__: bool = False

    __sort_strategy__: Optional[PositionStrategy] = None

    # ==================== 引擎 ====================

    @classmethod
    def sortable_engine(cls) -> OrderEngine:
        """获取该模型的排序引擎（按类缓存）"""
        engine = _engines.get(cls)
        if engine is None:
            engine = OrderEngine(cls)
            _engines[cls] = engine
        return engine

    def get_attribute(self, name: str, default: Any = None) -> Any:
        """按名称读取属性，排序引擎通过它访问分组字段、键和排序值"""
        return getattr(self, name, default)

    # ==================== 实例方法 ====================

    def is_first(self, session: Session, sort: Union[SortDirection, str] = SortDirection.ASC) -> bool:
        return self.sortable_engine().is_first(session, self, sort)

    def is_last(self, session: Session, sort: Union[SortDirection, str] = SortDirection.ASC) -> bool:
        return self.sortable_engine().is_last(session, self, sort)

    def prev(self, session: Session, sort: Union[SortDirection, str] = SortDirection.ASC) -> Optional[Any]:
        return self.sortable_engine().prev(session, self, sort)

    def next(self, session: Session, sort: Union[SortDirection, str] = SortDirection.ASC) -> Optional[Any]:
        return self.sortable_engine().next(session, self, sort)

    def get_sort_order(self, session: Session, reversed: bool = False) -> Optional[int]:
        """当前排序值，reversed=True 时返回倒数名次

        Example:
            # 分组内排序值 1..4，当前记录为 2
            item.get_sort_order(session)                 # 2
            item.get_sort_order(session, reversed=True)  # 3
        """
        return self.sortable_engine().current_position(session, self, reversed)

    # ==================== 类方法 ====================

    @classmethod
    def set_sort_order(
        cls,
        session: Session,
        ids: Sequence[Any],
        sort: Union[SortDirection, str, None] = None
    ) -> int:
        """批量重排序

        Args:
            session: 数据库会话
            ids: ID 列表，按期望的顺序排列
            sort: 对齐方向，默认 desc（第一个 ID 获得最大排序值）

        Returns:
            排序值发生变化的记录数
        """
        return cls.sortable_engine().apply_order(session, ids, sort)

    @classmethod
    def fix_sort_gaps(cls, session: Session, restrictions: Restrictions = None) -> int:
        """修复排序间隙

        Example:
            # 排序值为 1, 3, 7, 10
            Banner.fix_sort_gaps(session)
            # 变成 1, 2, 3, 4
        """
        return cls.sortable_engine().repack(session, restrictions)


__all__ = [
    "SortableMixin",
]
