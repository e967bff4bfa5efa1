"""事务管理器测试

测试排序写操作使用的事务：
1. 提交与回滚
2. 同一 session 上加入外层事务，不同 session 互不干扰
3. 保存点
4. @transactional 装饰器
"""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from ysortable.orm import Base, TransactionContext
from ysortable.orm.transaction import get_current_transaction, transaction_manager

from tests.helpers import SortBanner, UniqueSortItem, positions


class TransactionTestBase:
    """公共初始化：支持保存点的内存数据库"""

    @pytest.fixture(autouse=True)
    def setup_db(self, savepoint_engine):
        """自动初始化数据库会话"""
        Base.metadata.create_all(bind=savepoint_engine)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=savepoint_engine)
        self.session = SessionLocal()
        self.other_session = SessionLocal()
        self.tm = transaction_manager
        yield
        self.session.close()
        self.other_session.close()

    def add_banner(self, name: str, sort_order: int) -> SortBanner:
        banner = SortBanner(name=name, sort_order=sort_order)
        self.session.add(banner)
        self.session.flush()
        return banner


class TestTransactionLifecycle(TransactionTestBase):
    """提交与回滚"""

    def test_commit_on_exit(self):
        with self.tm.transaction(session=self.session, label="SortBanner 插入") as tx:
            self.add_banner("A", 1)
            assert tx.is_active
            assert tx.label == "SortBanner 插入"
            assert get_current_transaction() is tx

        assert tx.status == "committed"
        assert get_current_transaction() is None
        self.session.expire_all()
        assert positions(self.session, SortBanner) == {"A": 1}

    def test_rollback_on_error(self):
        with pytest.raises(ValueError):
            with self.tm.transaction(session=self.session) as tx:
                self.add_banner("A", 1)
                raise ValueError("测试异常")

        assert tx.status == "rolled_back"
        assert positions(self.session, SortBanner) == {}

    def test_commit_failure_rolls_back(self):
        """测试提交时违反唯一约束：回滚后抛出原异常"""
        with pytest.raises(IntegrityError):
            with self.tm.transaction(session=self.session) as tx:
                self.session.add(UniqueSortItem(name="A", category_id=1, sort_order=1))
                self.session.add(UniqueSortItem(name="B", category_id=1, sort_order=1))

        assert tx.status == "rolled_back"
        assert self.session.query(UniqueSortItem).count() == 0

    def test_rollback_is_idempotent(self):
        tx = TransactionContext(self.session, "SortBanner 设置排序").begin()
        tx.rollback()
        tx.rollback()

        assert tx.status == "rolled_back"
        assert tx.depth == 0
        assert "SortBanner 设置排序" in repr(tx)


class TestJoinTransaction(TransactionTestBase):
    """加入外层事务"""

    def test_same_session_joins(self):
        with self.tm.transaction(session=self.session, label="外层") as outer:
            with self.tm.transaction(session=self.session, label="内层") as inner:
                assert inner is outer
                assert outer.depth == 2
                self.add_banner("A", 1)
            assert outer.depth == 1
            assert outer.is_active

        self.session.expire_all()
        assert positions(self.session, SortBanner) == {"A": 1}

    def test_inner_error_rolls_back_outer(self):
        """测试内层抛出的异常由外层统一回滚"""
        with pytest.raises(ValueError):
            with self.tm.transaction(session=self.session) as outer:
                self.add_banner("A", 1)
                with self.tm.transaction(session=self.session):
                    self.add_banner("B", 2)
                    raise ValueError("测试异常")

        assert outer.status == "rolled_back"
        assert positions(self.session, SortBanner) == {}

    def test_other_session_does_not_join(self):
        with self.tm.transaction(session=self.session) as outer:
            assert self.tm.is_in_transaction(self.session)
            assert not self.tm.is_in_transaction(self.other_session)

            with self.tm.transaction(session=self.other_session) as inner:
                assert inner is not outer
                assert inner.session is self.other_session
                assert get_current_transaction() is inner

            assert get_current_transaction() is outer

    def test_not_in_transaction(self):
        assert self.tm.is_in_transaction() is False
        assert self.tm.current_transaction is None


class TestSavepoint(TransactionTestBase):
    """保存点"""

    def test_failed_savepoint_keeps_outer_changes(self):
        with self.tm.transaction(session=self.session) as tx:
            self.add_banner("A", 1)

            with pytest.raises(ValueError):
                with tx.savepoint():
                    self.add_banner("B", 2)
                    raise ValueError("测试异常")

            with tx.savepoint():
                self.add_banner("C", 2)

            assert tx.savepoint_count == 2
            assert tx.is_active

        self.session.expire_all()
        assert positions(self.session, SortBanner) == {"A": 1, "C": 2}

    def test_integrity_error_in_savepoint(self):
        """测试保存点内违反唯一约束，只撤销冲突的插入"""
        with self.tm.transaction(session=self.session) as tx:
            self.session.add(UniqueSortItem(name="A", category_id=1, sort_order=1))
            self.session.flush()

            with pytest.raises(IntegrityError):
                with tx.savepoint():
                    self.session.add(UniqueSortItem(name="B", category_id=1, sort_order=1))
                    self.session.flush()

        assert positions(self.session, UniqueSortItem) == {"A": 1}


class TestTransactionalDecorator(TransactionTestBase):
    """@transactional 装饰器"""

    def test_session_from_positional_arg(self):
        @self.tm.transactional()
        def add_first(session, name):
            tx = get_current_transaction()
            assert tx.session is session
            assert tx.label == "add_first"
            session.add(SortBanner(name=name, sort_order=1))

        add_first(self.session, "A")

        self.session.expire_all()
        assert positions(self.session, SortBanner) == {"A": 1}

    def test_session_from_keyword_arg(self):
        @self.tm.transactional(label="置顶")
        def move_to_top(name, session=None):
            assert get_current_transaction().label == "置顶"
            session.add(SortBanner(name=name, sort_order=1))
            raise ValueError("测试异常")

        with pytest.raises(ValueError):
            move_to_top("A", session=self.session)

        assert positions(self.session, SortBanner) == {}
