"""事务管理器

排序引擎的每个多行写操作都通过 transaction_manager.transaction() 执行：
同一 session 上已有事务时加入（由外层提交或回滚），否则开启新事务，
正常退出时提交，异常时回滚并继续抛出。
"""

from contextlib import contextmanager
from contextvars import ContextVar
from functools import wraps
from typing import Callable, Generator, Optional

from sqlalchemy.orm import Session

from ysortable.log import get_logger

from .context import TransactionContext

logger = get_logger("ysortable.orm.transaction")

_current_transaction: ContextVar[Optional[TransactionContext]] = ContextVar(
    "_current_transaction", default=None
)


def get_current_transaction() -> Optional[TransactionContext]:
    """当前线程/协程中最外层的排序事务，不在事务中时返回 None"""
    return _current_transaction.get()


def _find_session(args: tuple, kwargs: dict) -> Optional[Session]:
    session = kwargs.get("session")
    if isinstance(session, Session):
        return session
    for arg in args:
        if isinstance(arg, Session):
            return arg
    return None


class TransactionManager:
    """事务管理器

    使用示例:
        from ysortable.orm import transaction_manager as tm

        # 多个排序操作在一个事务内提交
        with tm.transaction(session=session, label="批量调整首页"):
            banner_engine.apply_order(session, [3, 1, 2])
            product_engine.repack(session, {"category_id": [1]})

        # 装饰器（从参数中查找 Session）
        @tm.transactional(label="置顶")
        def move_to_top(session, banner_id):
            ...
    """

    def get_session(self) -> Session:
        from ..db_session import db_manager
        return db_manager.get_session()

    @property
    def current_transaction(self) -> Optional[TransactionContext]:
        return _current_transaction.get()

    @contextmanager
    def transaction(
        self,
        session: Session = None,
        label: str = None,
    ) -> Generator[TransactionContext, None, None]:
        """开启或加入事务

        Args:
            session: 数据库会话，不传则从 db_manager 获取
            label: 操作标签，写入日志

        Yields:
            TransactionContext；加入外层事务时为外层的上下文
        """
        if session is None:
            session = self.get_session()

        current = self.current_transaction
        if current is not None and current.is_active and current.session is session:
            current.depth += 1
            if label:
                logger.debug(f"{label}: 加入 {current.label} (depth={current.depth})")
            try:
                yield current
            finally:
                current.depth -= 1
            return

        ctx = TransactionContext(session, label).begin()
        token = _current_transaction.set(ctx)
        try:
            yield ctx
        except BaseException:
            ctx.rollback()
            raise
        else:
            ctx.commit()
        finally:
            _current_transaction.reset(token)

    def transactional(self, label: str = None):
        """事务装饰器

        从被装饰函数的参数中查找 Session（关键字参数 session 或任意位置参数），
        找不到时使用 db_manager 的 session。标签默认取函数名。
        """
        def decorator(func: Callable) -> Callable:
            @wraps(func)
            def wrapper(*args, **kwargs):
                session = _find_session(args, kwargs)
                with self.transaction(session=session, label=label or func.__name__):
                    return func(*args, **kwargs)
            return wrapper

        return decorator

    def is_in_transaction(self, session: Session = None) -> bool:
        """检查当前是否在事务中

        Args:
            session: 只在该 session 的事务中时才返回 True，不传则不限定
        """
        tx = self.current_transaction
        if tx is None or not tx.is_active:
            return False
        return session is None or tx.session is session


transaction_manager = TransactionManager()
