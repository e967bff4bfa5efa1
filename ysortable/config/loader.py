"""YAML 配置加载

使用示例:
    from ysortable.config import AppSettings, load_yaml_config

    settings = load_yaml_config("config/settings.yaml", AppSettings)
    engine = OrderEngine(Banner, settings=settings.sortable)
"""

import os
from typing import Any, Dict, Optional, Type, TypeVar

import yaml
from pydantic_settings import BaseSettings

T = TypeVar("T", bound=BaseSettings)


class ConfigLoader:
    """按绝对路径缓存已解析的 YAML 文件

    文件修改后需调用 clear_cache() 才会重新读取。
    """

    _cache: Dict[str, Dict[str, Any]] = {}

    @staticmethod
    def resolve_path(config_path: str, base_dir: Optional[str] = None) -> str:
        if not os.path.isabs(config_path) and base_dir:
            config_path = os.path.join(base_dir, config_path)
        return os.path.abspath(config_path)

    @classmethod
    def load(
        cls,
        config_path: str,
        base_dir: Optional[str] = None,
        use_cache: bool = True
    ) -> Dict[str, Any]:
        """读取 YAML 文件为字典，空文件返回 {}

        Raises:
            FileNotFoundError: 文件不存在
            yaml.YAMLError: YAML 语法错误
        """
        path = cls.resolve_path(config_path, base_dir)
        if use_cache and path in cls._cache:
            return cls._cache[path]

        if not os.path.isfile(path):
            raise FileNotFoundError(f"配置文件不存在: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if use_cache:
            cls._cache[path] = data
        return data

    @classmethod
    def clear_cache(cls):
        cls._cache.clear()


def _settings_kwargs(settings_class: Type[BaseSettings], data: Dict[str, Any]) -> Dict[str, Any]:
    """把 YAML 段转为构造参数

    pydantic-settings 的构造参数优先于环境变量，因此已由环境变量（含 env_prefix）
    提供的字段不传入；子配置（如 sortable 段）递归构造，使其自身的前缀生效。
    """
    prefix = (settings_class.model_config.get("env_prefix") or "").upper()
    env_keys = {key.upper() for key in os.environ}
    kwargs: Dict[str, Any] = {}

    for name, value in data.items():
        field = settings_class.model_fields.get(name)
        nested = field.annotation if field is not None else None
        if isinstance(value, dict) and isinstance(nested, type) and issubclass(nested, BaseSettings):
            kwargs[name] = nested(**_settings_kwargs(nested, value))
        elif f"{prefix}{name}".upper() not in env_keys:
            kwargs[name] = value
    return kwargs


def load_yaml_config(
    config_path: str,
    settings_class: Type[T],
    base_dir: Optional[str] = None,
    **overrides
) -> T:
    """加载 YAML 并构造 Settings，优先级：overrides > 环境变量 > YAML > 默认值

    使用示例:
        settings = load_yaml_config("config/settings.yaml", AppSettings)
        sortable = load_yaml_config("config/sortable.yaml", SortableSettings, max_retries=5)
    """
    data = ConfigLoader.load(config_path, base_dir)
    settings = settings_class(**_settings_kwargs(settings_class, data))
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings
