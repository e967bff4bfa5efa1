"""排序导航查询

在记录所在分组内回答：是否第一个/最后一个、前一个/后一个的键、当前名次。
只读，不修改任何数据。
"""

from typing import Any, List, Optional, Union

from sqlalchemy.orm import Session

from .config import SortableConfig, SortDirection
from .positioner import Positioner
from .scope import Scope

SortArg = Union[SortDirection, str]


class Navigator:

    def __init__(self, config: SortableConfig, scope: Scope, positioner: Positioner):
        self.config = config
        self.scope = scope
        self.positioner = positioner

    def sorted_keys(self, session: Session, owner: Any, sort: SortArg = SortDirection.ASC) -> List[Any]:
        """owner 所在分组内按排序值排列的键列表（相同排序值按键排列）"""
        config = self.config
        sort = SortDirection.parse(sort)
        restrictions = self.scope.derive_restrictions(owner)

        query = self.scope.apply(session.query(config.key_column), restrictions)
        if sort == SortDirection.DESC:
            query = query.order_by(config.position_column.desc(), config.key_column.desc())
        else:
            query = query.order_by(config.position_column.asc(), config.key_column.asc())
        return [row[0] for row in query.all()]

    def _index_of(self, keys: List[Any], owner: Any) -> Optional[int]:
        try:
            return keys.index(self.config.get_key(owner))
        except ValueError:
            return None

    def is_first(self, session: Session, owner: Any, sort: SortArg = SortDirection.ASC) -> bool:
        keys = self.sorted_keys(session, owner, sort)
        return bool(keys) and keys[0] == self.config.get_key(owner)

    def is_last(self, session: Session, owner: Any, sort: SortArg = SortDirection.ASC) -> bool:
        keys = self.sorted_keys(session, owner, sort)
        return bool(keys) and keys[-1] == self.config.get_key(owner)

    def prev(self, session: Session, owner: Any, sort: SortArg = SortDirection.ASC) -> Optional[Any]:
        """前一个记录的键，owner 不在分组中或已在开头时返回 None"""
        keys = self.sorted_keys(session, owner, sort)
        index = self._index_of(keys, owner)
        if index is None or index == 0:
            return None
        return keys[index - 1]

    def next(self, session: Session, owner: Any, sort: SortArg = SortDirection.ASC) -> Optional[Any]:
        """后一个记录的键，owner 不在分组中或已在末尾时返回 None"""
        keys = self.sorted_keys(session, owner, sort)
        index = self._index_of(keys, owner)
        if index is None or index == len(keys) - 1:
            return None
        return keys[index + 1]

    def current_position(self, session: Session, owner: Any, reversed: bool = False) -> Optional[int]:
        """当前排序值；reversed=True 时返回从另一端数的名次 (max + 1) - position"""
        position = self.config.get_position(owner)
        if not reversed or position is None:
            return position
        restrictions = self.scope.derive_restrictions(owner)
        return self.positioner.max_position(session, restrictions) + 1 - position


__all__ = [
    "Navigator",
]
