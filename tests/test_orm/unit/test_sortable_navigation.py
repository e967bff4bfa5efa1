"""排序分组与导航测试

测试内容：
1. 限制集推导（单条、多条、去重、空值、缺失属性）
2. 限制集查询（IN、IS NULL、空列表）
3. 导航查询（首尾判断、前后记录、倒数名次）
4. SortableMixin 快捷方法
"""

from types import SimpleNamespace

import pytest
from sqlalchemy.orm import sessionmaker

from ysortable.exceptions import ConfigurationError, PreconditionError
from ysortable.orm import Base, OrderEngine, SortDirection

from tests.helpers import SortBanner, SortProduct, SortTask, positions, seed, set_positions


# ==================== 限制集推导 ====================

class TestScopeRestrictions:
    """限制集推导测试"""

    def setup_method(self):
        self.scope = OrderEngine(SortTask).scope

    def test_single_record(self):
        """测试单条记录的限制集"""
        task = SortTask(name="A", project_id=1, status="todo")

        assert self.scope.derive_restrictions(task) == {"project_id": [1], "status": ["todo"]}

    def test_multiple_records_are_deduplicated(self):
        """测试多条记录按属性去重"""
        tasks = [
            SortTask(name="A", project_id=1, status="todo"),
            SortTask(name="B", project_id=2, status="todo"),
            SortTask(name="C", project_id=1, status="done"),
        ]

        assert self.scope.derive_restrictions(tasks) == {
            "project_id": [1, 2],
            "status": ["todo", "done"],
        }

    def test_generator_of_records(self):
        """测试生成器等任意可迭代对象按多条记录处理"""
        tasks = (SortTask(name=name, project_id=1, status=status) for name, status in [("A", "todo"), ("B", "done")])

        assert self.scope.derive_restrictions(tasks) == {
            "project_id": [1],
            "status": ["todo", "done"],
        }

    def test_none_value_is_kept(self):
        """测试空值作为取值保留"""
        task = SortTask(name="A", project_id=None, status="todo")

        assert self.scope.derive_restrictions(task) == {"project_id": [None], "status": ["todo"]}

    def test_missing_attribute_is_skipped(self):
        """测试记录上不存在的属性被跳过"""
        record = SimpleNamespace(status="todo")

        assert self.scope.derive_restrictions(record) == {"status": ["todo"]}

    def test_get_attribute_is_preferred(self):
        """测试优先通过 get_attribute 读取属性"""

        class Proxy:
            def get_attribute(self, name, default=None):
                return {"project_id": 7, "status": "todo"}.get(name, default)

        assert self.scope.derive_restrictions(Proxy()) == {"project_id": [7], "status": ["todo"]}

    def test_ungrouped_model_has_empty_restrictions(self):
        """测试不分组的模型限制集为空"""
        scope = OrderEngine(SortBanner).scope

        assert scope.derive_restrictions(SortBanner(name="A")) == {}
        assert scope.derive_restrictions(None) == {}

    def test_partition_key(self):
        """测试排序空间标识"""
        task = SortTask(name="A", project_id=None, status="todo")

        assert self.scope.partition_key(task) == (None, "todo")


# ==================== 限制集查询 ====================

class TestScopeQuery:
    """限制集查询测试"""

    @pytest.fixture(autouse=True)
    def setup_db(self, memory_engine):
        """自动初始化数据库会话"""
        Base.metadata.create_all(bind=memory_engine)
        self.session = sessionmaker(autocommit=False, autoflush=False, bind=memory_engine)()
        self.engine = OrderEngine(SortTask)
        seed(self.session, self.engine, SortTask, ["A", "B"], project_id=1, status="todo")
        seed(self.session, self.engine, SortTask, ["C", "D"], project_id=None, status="todo")
        seed(self.session, self.engine, SortTask, ["E"], project_id=2, status="done")
        yield
        self.session.close()

    def _names(self, restrictions):
        query = self.engine.scope.apply(self.session.query(SortTask), restrictions)
        return sorted(task.name for task in query.all())

    def test_null_group_has_own_sequence(self):
        """测试空值分组独立编号"""
        assert positions(self.session, SortTask, project_id=None) == {"C": 1, "D": 2}
        assert positions(self.session, SortTask, project_id=1) == {"A": 1, "B": 2}

    def test_apply_single_value(self):
        assert self._names({"project_id": [1]}) == ["A", "B"]

    def test_apply_in_values(self):
        assert self._names({"project_id": [1, 2]}) == ["A", "B", "E"]

    def test_apply_null_value(self):
        """测试 None 匹配 IS NULL"""
        assert self._names({"project_id": [None]}) == ["C", "D"]
        assert self._names({"project_id": [2, None]}) == ["C", "D", "E"]

    def test_apply_and_between_attributes(self):
        """测试不同属性之间为 AND"""
        assert self._names({"project_id": [1, 2], "status": ["done"]}) == ["E"]

    def test_apply_scalar_value(self):
        assert self._names({"status": "done"}) == ["E"]

    def test_apply_empty_values_matches_nothing(self):
        assert self._names({"project_id": []}) == []

    def test_apply_empty_restrictions_matches_all(self):
        assert self._names({}) == ["A", "B", "C", "D", "E"]

    def test_apply_unknown_attribute_raises(self):
        with pytest.raises(ConfigurationError):
            self._names({"owner_id": [1]})

    def test_repack_null_group_only(self):
        """测试修复空值分组不影响其他分组"""
        set_positions(self.session, SortTask, {"C": 3, "D": 7, "B": 5})
        task = self.session.query(SortTask).filter_by(name="C").one()

        self.engine.repack(self.session, self.engine.derive_restrictions(task))

        assert positions(self.session, SortTask, project_id=None) == {"C": 1, "D": 2}
        assert positions(self.session, SortTask, project_id=1) == {"A": 1, "B": 5}


# ==================== 导航查询 ====================

class TestNavigator:
    """导航查询测试

    序列 [A, B, C, D]，排序值 1..4
    """

    @pytest.fixture(autouse=True)
    def setup_db(self, memory_engine):
        """自动初始化数据库会话"""
        Base.metadata.create_all(bind=memory_engine)
        self.session = sessionmaker(autocommit=False, autoflush=False, bind=memory_engine)()
        self.engine = OrderEngine(SortBanner)
        self.a, self.b, self.c, self.d = seed(
            self.session, self.engine, SortBanner, ["A", "B", "C", "D"]
        )
        yield
        self.session.close()

    def test_sorted_keys(self):
        ids = [self.a.id, self.b.id, self.c.id, self.d.id]

        assert self.engine.sorted_keys(self.session, self.a) == ids
        assert self.engine.sorted_keys(self.session, self.a, SortDirection.DESC) == ids[::-1]

    def test_is_first(self):
        """测试默认 ASC 下首个记录判断"""
        assert self.engine.is_first(self.session, self.a) is True
        assert self.engine.is_first(self.session, self.b) is False
        assert self.engine.is_first(self.session, self.a, SortDirection.DESC) is False
        assert self.engine.is_first(self.session, self.d, "desc") is True

    def test_is_last(self):
        assert self.engine.is_last(self.session, self.d) is True
        assert self.engine.is_last(self.session, self.c) is False
        assert self.engine.is_last(self.session, self.d, SortDirection.DESC) is False
        assert self.engine.is_last(self.session, self.a, SortDirection.DESC) is True

    def test_prev_and_next(self):
        """测试前后记录的键"""
        assert self.engine.next(self.session, self.b) == self.c.id
        assert self.engine.prev(self.session, self.b) == self.a.id
        assert self.engine.prev(self.session, self.b, SortDirection.DESC) == self.c.id
        assert self.engine.next(self.session, self.b, SortDirection.DESC) == self.a.id

    def test_boundaries_return_none(self):
        """测试到达两端时返回 None"""
        assert self.engine.prev(self.session, self.a) is None
        assert self.engine.next(self.session, self.d) is None
        assert self.engine.next(self.session, self.a, SortDirection.DESC) is None

    def test_record_not_in_scope(self):
        """测试未持久化的记录不在序列中"""
        ghost = SortBanner(name="ghost")

        assert self.engine.prev(self.session, ghost) is None
        assert self.engine.next(self.session, ghost) is None
        assert self.engine.is_first(self.session, ghost) is False

    def test_current_position(self):
        """测试当前名次与倒数名次"""
        assert self.engine.current_position(self.session, self.b) == 2
        assert self.engine.current_position(self.session, self.b, reversed=True) == 3
        assert self.engine.current_position(self.session, self.d, reversed=True) == 1

    def test_invalid_sort_raises(self):
        with pytest.raises(PreconditionError):
            self.engine.is_first(self.session, self.a, "sideways")

    def test_navigation_within_group(self):
        """测试导航只在记录所在分组内进行"""
        engine = OrderEngine(SortProduct)
        p1, p2 = seed(self.session, engine, SortProduct, ["P1", "P2"], category_id=1)
        q1, = seed(self.session, engine, SortProduct, ["Q1"], category_id=2)

        assert engine.next(self.session, p1) == p2.id
        assert engine.next(self.session, p2) is None
        assert engine.is_first(self.session, q1) is True
        assert engine.is_last(self.session, q1) is True


# ==================== Mixin 快捷方法 ====================

class TestSortableMixin:
    """SortableMixin 快捷方法测试"""

    @pytest.fixture(autouse=True)
    def setup_db(self, memory_engine):
        """自动初始化数据库会话"""
        Base.metadata.create_all(bind=memory_engine)
        self.session = sessionmaker(autocommit=False, autoflush=False, bind=memory_engine)()
        self.a, self.b, self.c = seed(
            self.session, SortBanner.sortable_engine(), SortBanner, ["A", "B", "C"]
        )
        yield
        self.session.close()

    def test_engine_is_cached_per_class(self):
        assert SortBanner.sortable_engine() is SortBanner.sortable_engine()
        assert SortBanner.sortable_engine() is not SortProduct.sortable_engine()

    def test_get_attribute(self):
        assert self.a.get_attribute("name") == "A"
        assert self.a.get_attribute("missing", "default") == "default"

    def test_instance_navigation(self):
        assert self.a.is_first(self.session) is True
        assert self.c.is_last(self.session) is True
        assert self.b.next(self.session) == self.c.id
        assert self.b.prev(self.session, "desc") == self.c.id
        assert self.b.get_sort_order(self.session) == 2
        assert self.a.get_sort_order(self.session, reversed=True) == 3

    def test_set_sort_order(self):
        """测试类方法批量重排序"""
        updated = SortBanner.set_sort_order(self.session, [self.c.id, self.a.id, self.b.id])

        assert updated == 2
        assert positions(self.session, SortBanner) == {"C": 3, "A": 2, "B": 1}

    def test_set_sort_order_asc(self):
        SortBanner.set_sort_order(self.session, [self.c.id, self.a.id, self.b.id], sort="asc")

        assert positions(self.session, SortBanner) == {"C": 1, "A": 2, "B": 3}

    def test_fix_sort_gaps(self):
        """测试类方法修复间隙"""
        set_positions(self.session, SortBanner, {"A": 1, "B": 3, "C": 7})

        assert SortBanner.fix_sort_gaps(self.session) == 2
        assert positions(self.session, SortBanner) == {"A": 1, "B": 2, "C": 3}
