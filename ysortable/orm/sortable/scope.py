"""排序分组（限制集）

限制集是 属性名 -> 取值列表 的映射，从一组记录上临时推导，从不持久化。
查询时解释为：不同属性之间 AND，同一属性的多个取值之间 IN。
"""

from typing import Any, Dict, Iterable, List, Union

from sqlalchemy import false, inspect, or_

from .config import SortableConfig, read_attribute

Restrictions = Dict[str, List[Any]]

_MISSING = object()


class Scope:
    """从记录推导限制集，并把限制集应用到查询上

    使用示例:
        scope = Scope(config)

        restrictions = scope.derive_restrictions(product)
        # {"category_id": [1]}

        restrictions = scope.derive_restrictions([p1, p2, p3])
        # {"category_id": [1, 2]}

        query = scope.apply(session.query(Product), restrictions)
    """

    def __init__(self, config: SortableConfig):
        self.config = config

    @property
    def fields(self) -> List[str]:
        return self.config.group_fields

    def accumulate(self, restrictions: Restrictions, record: Any) -> Restrictions:
        """把单条记录的分组取值并入 restrictions（原地修改，按属性去重）

        记录上不存在的属性跳过。
        None 不跳过：作为取值保留，查询时匹配 IS NULL，使 NULL 分组自成一个排序空间；
        跳过 None 会把该记录的修复范围扩大到其他分组。
        """
        for name in self.fields:
            value = read_attribute(record, name, _MISSING)
            if value is _MISSING:
                continue
            values = restrictions.setdefault(name, [])
            if value not in values:
                values.append(value)
        return restrictions

    @staticmethod
    def _is_collection(records: Any) -> bool:
        if isinstance(records, (str, bytes)):
            return False
        return inspect(records, raiseerr=False) is None and isinstance(records, Iterable)

    def derive_restrictions(self, records: Union[Any, Iterable[Any]]) -> Restrictions:
        """推导单条或多条记录的限制集

        records 可以是单个 ORM 实例，也可以是任意可迭代对象（列表、生成器、查询结果等）。
        """
        if records is None:
            return {}
        if self._is_collection(records):
            items = records
        else:
            items = [records]

        restrictions: Restrictions = {}
        for record in items:
            self.accumulate(restrictions, record)
        return restrictions

    def partition_key(self, record: Any) -> tuple:
        """记录所属排序空间的标识（各分组字段取值组成的元组）"""
        return tuple(read_attribute(record, name) for name in self.fields)

    def apply(self, query, restrictions: Restrictions = None):
        """为查询添加限制集过滤条件，空限制集表示全表"""
        if not restrictions:
            return query

        for name, values in restrictions.items():
            column = self.config.column(name)
            if not isinstance(values, (list, tuple, set)):
                values = [values]
            values = list(values)

            non_null = [v for v in values if v is not None]
            conditions = []
            if len(non_null) == 1:
                conditions.append(column == non_null[0])
            elif non_null:
                conditions.append(column.in_(non_null))
            if len(non_null) < len(values):
                conditions.append(column.is_(None))

            if not conditions:
                query = query.filter(false())
            elif len(conditions) == 1:
                query = query.filter(conditions[0])
            else:
                query = query.filter(or_(*conditions))

        return query


__all__ = [
    "Scope",
    "Restrictions",
]
