"""排序引擎

OrderEngine 是排序功能的统一入口，按模型类构建，组合：
    - Positioner: 新记录排序值
    - Reorderer: 批量重排序
    - GapFixer: 间隙修复
    - Scope: 分组限制集
    - Navigator: 导航查询

生命周期钩子是显式函数，由调用方在插入前/删除后调用，不注册任何 ORM 事件。
所有操作都显式接收 Session。

使用示例:
    engine = OrderEngine(Product)

    product = Product(name="键盘", category_id=1)
    engine.on_before_create(session, product)   # sort_order = max + 1
    session.add(product)
    session.commit()

    engine.apply_order(session, [3, 1, 2])       # 拖拽排序

    session.delete(product)
    session.flush()
    engine.on_after_delete(session, product)     # 修复分组内的间隙
"""

from typing import Any, Iterable, List, Optional, Sequence, Union

from sqlalchemy.orm import Session

from ysortable.config import SortableSettings
from ysortable.log import get_logger
from .config import PositionStrategy, SortableConfig, SortDirection
from .gap_fixer import GapFixer
from .navigator import Navigator
from .positioner import Positioner
from .reorderer import Reorderer
from .scope import Restrictions, Scope
from .writer import PositionWriter, sort_transaction

logger = get_logger()


class OrderEngine:
    """排序引擎

    Args:
        model_class: 已映射的 ORM 模型类
        config: 已解析的配置，不传则从模型类属性和 settings 解析
        settings: 排序默认配置，不传则读取环境变量（YSORT_SORTABLE_*）

    Raises:
        ConfigurationError: 模型配置无效
    """

    def __init__(
        self,
        model_class: type,
        config: SortableConfig = None,
        settings: SortableSettings = None
    ):
        self.config = config or SortableConfig.resolve(model_class, settings)
        self.scope = Scope(self.config)
        self.writer = PositionWriter(self.config)
        self.positioner = Positioner(self.config, self.scope)
        self.gap_fixer = GapFixer(self.config, self.scope, self.writer)
        self.reorderer = Reorderer(self.config, self.scope, self.writer, self.gap_fixer)
        self.navigator = Navigator(self.config, self.scope, self.positioner)

    @property
    def model_class(self) -> type:
        return self.config.model_class

    # ==================== 生命周期钩子 ====================

    def on_before_create(self, session: Session, record: Any) -> int:
        """插入前调用：为记录赋值 max + 1"""
        return self.positioner.assign_initial_position(session, record)

    def on_after_delete(self, session: Session, record: Any) -> int:
        """删除（并 flush）后调用：修复记录原分组内的间隙，返回写入数"""
        restrictions = self.scope.derive_restrictions(record)
        return self.gap_fixer.repack(session, restrictions)

    # ==================== 写操作 ====================

    def apply_order(
        self,
        session: Session,
        ordered_ids: Sequence[Any],
        direction: Union[SortDirection, str, None] = None
    ) -> int:
        """按给定 ID 顺序重新分配排序值，详见 Reorderer.apply_order"""
        return self.reorderer.apply_order(session, ordered_ids, direction)

    def repack(self, session: Session, restrictions: Restrictions = None) -> int:
        """把限制集范围内的排序值重新编号为 1..N"""
        return self.gap_fixer.repack(session, restrictions)

    def create(self, session: Session, record: Any) -> Any:
        """分配排序值并插入记录

        LEGACY 策略在事务中赋值后插入；LOCKED 策略加锁并在冲突时重试。
        """
        if self.config.strategy == PositionStrategy.LOCKED:
            self.positioner.insert_locked(session, record)
            return record

        with sort_transaction(self.config, session, "插入记录"):
            self.on_before_create(session, record)
            session.add(record)
            session.flush()
        return record

    def delete(self, session: Session, record: Any) -> int:
        """删除记录并修复间隙，返回间隙修复的写入数"""
        restrictions = self.scope.derive_restrictions(record)
        key = self.config.get_key(record)
        with sort_transaction(self.config, session, "删除记录"):
            session.delete(record)
            session.flush()
        logger.debug(f"{self.config.model_name} 删除记录 {key}")
        return self.gap_fixer.repack(session, restrictions)

    # ==================== 读操作 ====================

    def derive_restrictions(self, records: Union[Any, Iterable[Any]]) -> Restrictions:
        return self.scope.derive_restrictions(records)

    def max_position(self, session: Session, restrictions: Restrictions = None) -> int:
        return self.positioner.max_position(session, restrictions)

    def sorted_keys(self, session: Session, owner: Any, sort=SortDirection.ASC) -> List[Any]:
        return self.navigator.sorted_keys(session, owner, sort)

    def is_first(self, session: Session, owner: Any, sort=SortDirection.ASC) -> bool:
        return self.navigator.is_first(session, owner, sort)

    def is_last(self, session: Session, owner: Any, sort=SortDirection.ASC) -> bool:
        return self.navigator.is_last(session, owner, sort)

    def prev(self, session: Session, owner: Any, sort=SortDirection.ASC) -> Optional[Any]:
        return self.navigator.prev(session, owner, sort)

    def next(self, session: Session, owner: Any, sort=SortDirection.ASC) -> Optional[Any]:
        return self.navigator.next(session, owner, sort)

    def current_position(self, session: Session, owner: Any, reversed: bool = False) -> Optional[int]:
        return self.navigator.current_position(session, owner, reversed)

    def __repr__(self) -> str:
        return (
            f"OrderEngine(model={self.config.model_name}, "
            f"field={self.config.position_field!r}, "
            f"group_by={self.config.group_fields!r})"
        )


__all__ = [
    "OrderEngine",
]
