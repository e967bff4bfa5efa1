"""排序字段

SortFieldMixin 为模型添加默认的排序字段 sort_order（SortableSettings.position_field 的默认值）。
使用其他字段名时不需要这个 Mixin，在模型上声明 __sort_field__ 即可。

使用示例:
    class Banner(CoreModel, SortFieldMixin, SortableMixin):
        title: Mapped[str] = mapped_column(String(100))
"""

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column


class SortFieldMixin:
    """提供带索引的 sort_order 列

    新记录插入前为 0，由排序引擎赋值为分组内 max + 1；
    之后在每个分组内保持 1..N 连续。
    """

    sort_order: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        index=True,
        comment="分组内排序值，从 1 开始连续",
    )


__all__ = [
    "SortFieldMixin",
]
