"""
数据库会话管理模块

排序引擎的所有操作都显式接收 Session；这里负责创建引擎和按线程隔离的 scoped session，
供 HTTP 路由（get_db）和脚本（db_session_scope）使用。

公开 API:
- db_manager: 数据库管理器单例
- init_database(): 初始化数据库连接
- get_engine(): 获取数据库引擎
- get_db(): FastAPI 依赖注入用的生成器
- db_session_scope(): 非 HTTP 场景的上下文管理器
"""

from contextlib import contextmanager
from typing import Any, Callable, Dict, Generator, Tuple

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, scoped_session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from ysortable.config import DatabaseSettings, LoggingSettings
from ysortable.log import get_logger

logger = get_logger("ysortable.orm.session")

__all__ = [
    'db_manager',
    'init_database',
    'get_engine',
    'get_db',
    'db_session_scope',
]

_NOT_INITIALIZED = "数据库未初始化，请先调用 init_database()"


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///", "sqlite:///:memory:")


def _engine_options(config: DatabaseSettings, echo: Any) -> Dict[str, Any]:
    """按数据库类型生成 create_engine 参数

    SQLite 内存库只有一个连接（StaticPool），否则各会话看到的是不同的空库；
    SQLite 文件库和其他数据库使用 QueuePool。
    """
    options: Dict[str, Any] = {"echo": echo}
    url = config.url

    if _is_memory_sqlite(url):
        options.update(connect_args={"check_same_thread": False}, poolclass=StaticPool)
        return options

    if url.startswith("sqlite"):
        options.update(
            connect_args={"check_same_thread": False, "timeout": config.pool_timeout},
            poolclass=QueuePool,
        )

    options.update(
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
        pool_recycle=config.pool_recycle,
        pool_pre_ping=config.pool_pre_ping,
    )
    return options


class DatabaseManager:
    """数据库管理器（单例）

    使用示例:
        from ysortable.orm import db_manager

        db_manager.init(DatabaseSettings(url="sqlite:///./app.db"))
        session = db_manager.get_session()
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._engine = None
            cls._instance._session_scope = None
        return cls._instance

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._engine

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None and self._session_scope is not None

    def init(
        self,
        config: DatabaseSettings,
        logging_config: LoggingSettings = None,
        scopefunc: Callable = None,
    ) -> Tuple[Engine, scoped_session]:
        """创建引擎和 scoped session

        Args:
            config: 数据库配置
            logging_config: 日志配置，sql_log_enabled 为 True 时输出 SQL（DEBUG 级别）
            scopefunc: session 作用域函数，默认按线程隔离

        Returns:
            (engine, session_scope)
        """
        if not config.url:
            raise ValueError("数据库 URL 不能为空，请通过参数或 YSORT_DB_URL 提供")

        echo = "debug" if logging_config is not None and logging_config.sql_log_enabled else config.echo
        options = _engine_options(config, echo)

        try:
            self._engine = create_engine(config.url, **options)
        except Exception as e:
            logger.error(f"创建数据库引擎失败 ({config.url}): {e}")
            raise

        pool_name = options.get("poolclass", QueuePool).__name__
        logger.info(f"数据库引擎已创建: {config.url} ({pool_name})")

        session_maker = sessionmaker(autocommit=False, autoflush=True, bind=self._engine)
        self._session_scope = scoped_session(session_maker, scopefunc=scopefunc)
        return self._engine, self._session_scope

    def get_session(self) -> Session:
        """当前作用域的 session

        直接使用时需要自行提交/回滚，并在结束时调用 cleanup()。
        优先使用 get_db() 或 db_session_scope()。
        """
        if self._session_scope is None:
            raise RuntimeError(_NOT_INITIALIZED)
        return self._session_scope()

    def cleanup(self):
        """移除当前 scoped session，归还连接（幂等）"""
        if self._session_scope is not None and self._session_scope.registry.has():
            self._session_scope.remove()

    def reset(self):
        """释放引擎并清空状态（测试用）"""
        self.cleanup()
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_scope = None


db_manager = DatabaseManager()


def init_database(
    database_url: str = None,
    config: DatabaseSettings = None,
    logging_config: LoggingSettings = None,
    scopefunc: Callable = None,
) -> Tuple[Engine, scoped_session]:
    """初始化数据库连接

    Args:
        database_url: 数据库 URL，提供 config 时忽略
        config: 数据库配置（如 settings.database）
        logging_config: 日志配置（如 settings.logging）
        scopefunc: session 作用域函数

    使用示例:
        init_database("sqlite:///./app.db")

        settings = load_yaml_config("config/settings.yaml", AppSettings)
        init_database(config=settings.database, logging_config=settings.logging)
    """
    if config is None:
        config = DatabaseSettings(url=database_url) if database_url else DatabaseSettings()
    return db_manager.init(config, logging_config=logging_config, scopefunc=scopefunc)


def get_engine() -> Engine:
    """获取数据库引擎

    Raises:
        RuntimeError: 数据库未初始化时
    """
    return db_manager.engine


def get_db() -> Generator[Session, None, None]:
    """获取数据库 session（FastAPI 依赖注入）

    使用示例:
        @router.post("/sort")
        def sort(db: Session = Depends(get_db)):
            ...
    """
    with db_session_scope() as session:
        yield session


@contextmanager
def db_session_scope(auto_commit: bool = True) -> Generator[Session, None, None]:
    """非 HTTP 场景的 session 上下文管理器

    正常结束时提交，异常时回滚，最后清理 session。

    使用示例:
        with db_session_scope() as session:
            Banner.sortable_engine().create(session, Banner(title="首页"))
    """
    session = db_manager.get_session()
    try:
        yield session
        if auto_commit:
            session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        db_manager.cleanup()
