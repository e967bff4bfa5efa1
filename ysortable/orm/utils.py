"""ORM 工具函数

排序配置解析时读取模型的映射信息；CoreModel 用 to_snake_case 推导表名。
"""
import re
from typing import List

from sqlalchemy import inspect

# 小写后接大写，或缩写/数字串后接首字母大写的单词
_WORD_BOUNDARY = re.compile(r"(?<=[a-z])(?=[A-Z])|(?<=[A-Z\d])(?=[A-Z][a-z])")


def to_snake_case(name: str) -> str:
    """类名转表名，连续大写的缩写视为一个单词

    Examples:
        >>> to_snake_case("SortBanner")
        'sort_banner'
        >>> to_snake_case("E2EOrder")
        'e2e_order'
        >>> to_snake_case("APIClient")
        'api_client'
    """
    return _WORD_BOUNDARY.sub("_", name).lower()


def get_column_attrs(model_class) -> List[str]:
    """模型上映射为列的属性名，用于校验排序字段、键字段和分组字段"""
    return [attr.key for attr in inspect(model_class).column_attrs]


def get_primary_key_attrs(model_class) -> List[str]:
    mapper = inspect(model_class)
    return [mapper.get_property_by_column(column).key for column in mapper.primary_key]


__all__ = [
    "to_snake_case",
    "get_column_attrs",
    "get_primary_key_attrs",
]
