"""
日志工具模块

排序引擎各模块通过 get_logger() 取得 "ysortable.*" 下的日志器：
写入和间隙修复为 DEBUG，LOCKED 重试为 WARNING，回滚为 ERROR。
setup_root_logger() 按 LoggingSettings（环境变量前缀 YSORT_LOG_ 或 YAML 的 logging 段）配置输出。
"""

import inspect
import logging
import os
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from ysortable.config import ConfigLoader, LoggingSettings

DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d - %(message)s"
SQL_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER = "ysortable"


class MicrosecondFormatter(logging.Formatter):
    """时间戳带 6 位微秒的格式化器，如 2024-01-02 03:04:05.123456"""

    def formatTime(self, record, datefmt=None):
        moment = datetime.fromtimestamp(record.created)
        return f"{moment.strftime(datefmt or '%Y-%m-%d %H:%M:%S')}.{moment.microsecond:06d}"


def create_formatter(
    log_format: str = None,
    datefmt: str = "%Y-%m-%d %H:%M:%S",
    use_microseconds: bool = True
) -> logging.Formatter:
    formatter_class = MicrosecondFormatter if use_microseconds else logging.Formatter
    return formatter_class(fmt=log_format or DEFAULT_LOG_FORMAT, datefmt=datefmt)


def _file_handler(log_file: str, max_bytes: int, backup_count: int, encoding: str) -> logging.Handler:
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    if max_bytes > 0:
        return RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding=encoding)
    return logging.FileHandler(log_file, encoding=encoding)


def setup_logger(
    name: str = None,
    level: str = "INFO",
    log_file: str = None,
    log_format: str = None,
    console: bool = True,
    use_microseconds: bool = True,
    propagate: bool = True,
    max_bytes: int = 0,
    backup_count: int = 5,
    encoding: str = "utf-8"
) -> logging.Logger:
    """配置并返回日志器（替换其已有处理器）

    Args:
        name: 日志器名称，为空时配置根日志器
        level: 日志级别名称
        log_file: 日志文件路径，为空时不写文件
        max_bytes: 大于 0 时使用 RotatingFileHandler 按大小轮转

    使用示例:
        setup_logger("ysortable.orm.sortable", level="DEBUG", log_file="logs/sortable.log")
    """
    target = logging.getLogger(name) if name else logging.getLogger()
    target.setLevel(getattr(logging, level.upper(), logging.INFO))
    target.propagate = propagate

    for handler in target.handlers[:]:
        target.removeHandler(handler)

    handlers: List[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler())
    if log_file:
        handlers.append(_file_handler(log_file, max_bytes, backup_count, encoding))

    formatter = create_formatter(log_format, use_microseconds=use_microseconds)
    for handler in handlers:
        handler.setFormatter(formatter)
        target.addHandler(handler)
    return target


def setup_root_logger(
    config: Optional[LoggingSettings] = None,
    config_path: str = None,
    config_base_dir: str = None,
    use_microseconds: bool = True
) -> logging.Logger:
    """按 LoggingSettings 配置根日志器

    Args:
        config: 日志配置，不传时读取 config_path 的 logging 段，二者都不传时读取环境变量
        config_path: YAML 配置文件路径
        config_base_dir: 解析相对 config_path 的基础目录

    sql_log_enabled 为 True 时，"sqlalchemy.engine" 单独输出（不向根日志器传播）。

    使用示例:
        setup_root_logger(config=settings.logging)
        setup_root_logger(config_path="config/settings.yaml")
    """
    if config is None:
        if config_path is not None:
            data = ConfigLoader.load(config_path, base_dir=config_base_dir)
            config = LoggingSettings(**(data.get("logging") or {}))
        else:
            config = LoggingSettings()

    if config.sql_log_enabled:
        setup_logger(
            name="sqlalchemy.engine",
            level=config.sql_log_level,
            log_format=SQL_LOG_FORMAT,
            console=config.enable_console,
            propagate=False
        )

    return setup_logger(
        name=None,
        level=config.level,
        log_file=config.file_path or None,
        console=config.enable_console,
        use_microseconds=use_microseconds,
        propagate=False,
        max_bytes=config.file_max_bytes,
        backup_count=config.file_backup_count,
        encoding=config.file_encoding
    )


def get_logger(name: str = None) -> logging.Logger:
    """获取日志器

    不传名称时使用调用模块的 __name__；不含点号的短名称加 "ysortable." 前缀。

    使用示例:
        logger = get_logger()                      # 调用模块的 __name__
        logger = get_logger("sortable")            # "ysortable.sortable"
        logger = get_logger("sqlalchemy.engine")   # 原样
    """
    if name is None:
        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        name = caller.f_globals.get("__name__", PACKAGE_LOGGER) if caller is not None else PACKAGE_LOGGER
    elif name != PACKAGE_LOGGER and "." not in name:
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


logger = logging.getLogger(PACKAGE_LOGGER)
