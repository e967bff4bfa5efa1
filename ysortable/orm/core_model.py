"""
ORM 基础模型

Base 是所有模型（包括不继承 CoreModel 的普通模型）共用的声明基类；
CoreModel 在其上提供自增整数主键和由类名推导的表名，是排序引擎默认的键字段来源。
"""

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, declarative_base, declared_attr, mapped_column

from .utils import to_snake_case

Base = declarative_base()


class CoreModel(Base):
    """带自增主键 id 的抽象模型

    未显式声明 __tablename__ 时，表名由类名转换而来：SortBanner -> sort_banner。
    类名中含下划线时无法可靠转换，定义类时直接报错。

    使用示例:
        class Banner(CoreModel, SortFieldMixin, SortableMixin):
            __sort_group_by__ = "category_id"

            title: Mapped[str] = mapped_column(String(100))
            category_id: Mapped[int] = mapped_column(Integer)
    """
    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    @declared_attr.directive
    def __tablename__(cls) -> str:
        if "_" in cls.__name__:
            raise ValueError(f"无法从类名 {cls.__name__} 推导表名：类名不能包含下划线")
        return to_snake_case(cls.__name__)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"
