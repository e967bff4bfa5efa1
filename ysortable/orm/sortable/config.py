"""排序配置解析

从模型类属性和 SortableSettings 中解析出排序引擎使用的配置，
并在解析时完成字段校验。

模型可配置的类属性:
    - __sort_field__: 排序字段名，默认取 SortableSettings.position_field（"sort_order"）
    - __sort_key__: 记录键字段名，默认为单列主键
    - __sort_group_by__: 分组字段，str 或 list，默认 None（全表一个排序空间）
    - __sort_unique__: 分组 + 排序字段上存在唯一约束，写入时先停放到负数临时值
    - __sort_strategy__: 插入策略，PositionStrategy.LEGACY（默认）或 LOCKED
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Union

from sqlalchemy.exc import NoInspectionAvailable

from ysortable.config import SortableSettings
from ysortable.exceptions import ConfigurationError, PreconditionError
from ..utils import get_column_attrs, get_primary_key_attrs


class SortDirection(str, Enum):
    """排序方向

    重排序时决定 ID 列表与现有排序值的对齐方式：
    - DESC: 列表中第一个 ID 获得最大的排序值
    - ASC: 列表中第一个 ID 获得最小的排序值

    导航查询时决定序列的遍历方向。
    """

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: Union["SortDirection", str, None], default: "SortDirection" = None) -> "SortDirection":
        """解析方向参数，支持枚举或不区分大小写的字符串"""
        if value is None:
            if default is None:
                raise PreconditionError("缺少排序方向参数")
            return cls.parse(default)
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise PreconditionError(
                f"无效的排序方向: {value}",
                details=["可选值: asc, desc"]
            )


class PositionStrategy(str, Enum):
    """新记录排序值的分配策略"""

    LEGACY = "legacy"
    """读取最大值后直接赋值，不加锁；并发插入同一分组时可能得到相同排序值"""

    LOCKED = "locked"
    """事务内以 FOR UPDATE 读取最大值所在行，保存点内插入，唯一约束冲突时重试"""


def read_attribute(record: Any, name: str, default: Any = None) -> Any:
    """通过 get_attribute 读取记录属性，普通模型回退到 getattr"""
    accessor = getattr(record, "get_attribute", None)
    if callable(accessor):
        return accessor(name, default)
    return getattr(record, name, default)


def _normalize_group_by(group_by) -> List[str]:
    if not group_by:
        return []
    if isinstance(group_by, str):
        return [group_by]
    return list(group_by)


@dataclass
class SortableConfig:
    """已解析并校验的排序配置"""

    model_class: type
    position_field: str
    key_field: str
    group_fields: List[str] = field(default_factory=list)
    unique: bool = False
    strategy: PositionStrategy = PositionStrategy.LEGACY
    default_direction: SortDirection = SortDirection.DESC
    items_param: str = "sortItems"
    max_retries: int = 3

    @classmethod
    def resolve(cls, model_class: type, settings: Optional[SortableSettings] = None) -> "SortableConfig":
        """从模型类解析配置

        Raises:
            ConfigurationError: 模型未映射、排序字段/键字段/分组字段不存在、
                复合主键未显式配置 __sort_key__
        """
        settings = settings or SortableSettings()
        model_name = getattr(model_class, "__name__", repr(model_class))

        try:
            columns = get_column_attrs(model_class)
        except NoInspectionAvailable:
            raise ConfigurationError(f"{model_name} 不是已映射的 ORM 模型", model=model_name)

        position_field = getattr(model_class, "__sort_field__", None) or settings.position_field
        if position_field not in columns:
            raise ConfigurationError(
                f"排序字段 `{position_field}` 不存在",
                model=model_name,
                field=position_field
            )

        key_field = getattr(model_class, "__sort_key__", None)
        if key_field is None:
            primary_keys = get_primary_key_attrs(model_class)
            if len(primary_keys) != 1:
                raise ConfigurationError(
                    "复合主键模型必须显式配置 __sort_key__",
                    model=model_name,
                    primary_keys=primary_keys
                )
            key_field = primary_keys[0]
        elif key_field not in columns:
            raise ConfigurationError(
                f"键字段 `{key_field}` 不存在",
                model=model_name,
                field=key_field
            )

        group_fields = _normalize_group_by(getattr(model_class, "__sort_group_by__", None))
        unknown = [name for name in group_fields if name not in columns]
        if unknown:
            raise ConfigurationError(
                f"分组字段不存在: {', '.join(unknown)}",
                model=model_name,
                fields=unknown
            )

        strategy = getattr(model_class, "__sort_strategy__", None) or PositionStrategy.LEGACY
        try:
            strategy = PositionStrategy(strategy)
        except ValueError:
            raise ConfigurationError(f"无效的插入策略: {strategy}", model=model_name)

        return cls(
            model_class=model_class,
            position_field=position_field,
            key_field=key_field,
            group_fields=group_fields,
            unique=bool(getattr(model_class, "__sort_unique__", False)),
            strategy=strategy,
            default_direction=SortDirection.parse(settings.default_direction),
            items_param=settings.items_param,
            max_retries=settings.max_retries,
        )

    # ==================== 列与取值 ====================

    @property
    def model_name(self) -> str:
        return self.model_class.__name__

    @property
    def position_column(self):
        return getattr(self.model_class, self.position_field)

    @property
    def key_column(self):
        return getattr(self.model_class, self.key_field)

    def column(self, name: str):
        """按属性名获取列，非映射列抛出 ConfigurationError"""
        if name not in get_column_attrs(self.model_class):
            raise ConfigurationError(
                f"字段 `{name}` 不存在",
                model=self.model_name,
                field=name
            )
        return getattr(self.model_class, name)

    def get_position(self, record) -> Optional[int]:
        return read_attribute(record, self.position_field)

    def set_position(self, record, value: int) -> None:
        setattr(record, self.position_field, value)

    def get_key(self, record) -> Any:
        return read_attribute(record, self.key_field)

    def coerce_key(self, value: Any) -> Any:
        """把外部传入的 ID 转为键字段的 Python 类型（如 "3" -> 3）

        转换会丢失信息的值（如整数键收到 3.7）视为无效 ID。
        """
        try:
            python_type = self.key_column.type.python_type
        except NotImplementedError:
            return value
        if value is None or isinstance(value, python_type):
            return value

        invalid = PreconditionError(
            f"无效的 ID: {value!r}",
            details=[f"无效 ID: {value!r}"],
            model=self.model_name
        )
        try:
            coerced = python_type(value)
        except (TypeError, ValueError, ArithmeticError):
            raise invalid
        if isinstance(value, (int, float)) and coerced != value:
            raise invalid
        return coerced


__all__ = [
    "SortDirection",
    "PositionStrategy",
    "SortableConfig",
    "read_attribute",
]
