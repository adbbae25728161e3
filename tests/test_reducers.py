"""
reducer 建構器與 combine_reducers 的測試。
"""
import logging

import pytest

from pystorecore import (
    Action,
    CombineOptions,
    ConfigurationError,
    ReducerContractError,
    ShapeMismatchPolicy,
    StateRecord,
    UnexpectedStateShapeError,
    combine_reducers,
    create_action,
    create_reducer,
    init_store,
    on,
)

from todo_example import (
    SHOW_ALL,
    SHOW_COMPLETED,
    add_todo,
    set_visibility_filter,
    todos,
    visibility_filter,
)

increment = create_action("[Counter] Increment")
increment_by = create_action("[Counter] Increment By")


def slice_a(state=None, action=None):
    if state is None:
        return ("a",)
    if action["type"] == "TOUCH_A":
        return state + ("touched",)
    return state


def slice_b(state=None, action=None):
    if state is None:
        return ("b",)
    return state


# ============================================================================
# create_reducer / on
# ============================================================================


class TestCreateReducer:
    """以處理函數建構 reducer 的測試。"""

    def test_none_state_yields_initial_state(self):
        """以 None 呼叫時返回初始狀態。"""
        reducer = create_reducer(0, on(increment, lambda state, action: state + 1))

        assert reducer(None, init_store()) == 0
        assert reducer.initial_state == 0

    def test_dispatches_to_registered_handler(self):
        """由該 action type 註冊的處理函數計算下一個狀態。"""
        reducer = create_reducer(
            0,
            on(increment, lambda state, action: state + 1),
            on(increment_by, lambda state, action: state + action.payload),
        )

        assert reducer(1, increment()) == 2
        assert reducer(1, increment_by(5)) == 6

    def test_unknown_action_returns_same_reference(self):
        """未處理的 action 原樣返回輸入的狀態。"""
        state = ("x",)
        reducer = create_reducer((), on(increment, lambda s, a: s + ("y",)))

        assert reducer(state, Action("OTHER")) is state

    def test_accepts_tuples_and_plain_dict_actions(self):
        """處理器可用 tuple 指定，action 可以是字典。"""
        reducer = create_reducer(0, ("ADD", lambda state, action: state + action["amount"]))

        assert reducer(0, {"type": "ADD", "amount": 3}) == 3
        assert "ADD" in reducer.handlers

    def test_on_accepts_plain_type_strings(self):
        """on() 收到字串時直接以該字串為鍵。"""
        handler = lambda state, action: state  # noqa: E731

        assert on("RESET", handler) == {"RESET": handler}
        assert on(increment, handler) == {"[Counter] Increment": handler}

    def test_rejects_none_initial_state(self):
        """沒有已定義初始狀態的 reducer 建構會被拒絕。"""
        with pytest.raises(ReducerContractError):
            create_reducer(None)

    def test_rejects_unknown_handler_shape(self):
        """處理器必須是 (type, fn) tuple 或映射。"""
        with pytest.raises(ConfigurationError):
            create_reducer(0, ["ADD"])


# ============================================================================
# combine_reducers
# ============================================================================


class TestCombineReducers:
    """將 slice reducer 組合為 root reducer 的測試。"""

    def test_initial_state_has_every_key_in_map_order(self):
        """以 None 呼叫時由各 slice 的預設值組成記錄。"""
        root = combine_reducers({"visibility_filter": visibility_filter, "todos": todos})

        state = root(None, init_store())

        assert isinstance(state, StateRecord)
        assert list(state.keys()) == ["visibility_filter", "todos"]
        assert state == {"visibility_filter": SHOW_ALL, "todos": ()}

    def test_only_recognising_slice_changes(self):
        """只影響某個 slice 的 action 只改變該 slice，其餘沿用原引用。"""
        root = combine_reducers({"a": slice_a, "b": slice_b})
        x, y = ("x",), ("y",)
        state = StateRecord(a=x, b=y)

        next_state = root(state, {"type": "TOUCH_A"})

        assert next_state == {"a": slice_a(x, {"type": "TOUCH_A"}), "b": y}
        assert next_state["b"] is y
        assert next_state is not state

    def test_no_op_returns_original_reference(self):
        """沒有 slice 改變時返回原本的狀態物件。"""
        root = combine_reducers({"a": slice_a, "b": slice_b})
        state = root(None, init_store())

        assert root(state, {"type": "NOTHING"}) is state

    def test_plain_dict_state_is_accepted(self):
        """鍵正確的普通字典狀態與記錄一樣處理。"""
        root = combine_reducers({"visibility_filter": visibility_filter, "todos": todos})
        state = {"visibility_filter": SHOW_ALL, "todos": ()}

        assert root(state, {"type": "NOTHING"}) is state
        changed = root(state, set_visibility_filter(SHOW_COMPLETED))
        assert changed == {"visibility_filter": SHOW_COMPLETED, "todos": ()}
        assert changed["todos"] is state["todos"]

    def test_nested_combination(self):
        """組合後的 reducer 本身也可以作為 slice。"""
        inner = combine_reducers({"a": slice_a, "b": slice_b})
        root = combine_reducers({"inner": inner, "todos": todos})
        state = root(None, init_store())

        next_state = root(state, add_todo("A"))

        assert next_state["inner"] is state["inner"]
        assert len(next_state["todos"]) == 1

    def test_exposes_reducer_keys(self):
        """組合後的 reducer 列出其 slice 鍵。"""
        root = combine_reducers({"a": slice_a, "b": slice_b})

        assert root.reducer_keys == ("a", "b")

    def test_empty_map_warns_and_yields_empty_record(self, caplog):
        """允許空的 reducer 映射，但會記錄警告。"""
        with caplog.at_level(logging.WARNING, logger="pystorecore"):
            root = combine_reducers({})

        assert root(None, init_store()) == {}
        assert any("空的 reducer 映射" in r.getMessage() for r in caplog.records)


class TestCombineReducersContract:
    """違反 reducer 契約之 slice reducer 的測試。"""

    def test_none_on_initialisation_fails_at_composition(self):
        """初始化時返回 None 的 slice 在組合時即被拒絕。"""
        def lazy(state=None, action=None):
            return state

        with pytest.raises(ReducerContractError) as exc_info:
            combine_reducers({"lazy": lazy, "b": slice_b})

        assert exc_info.value.reducer_name == "lazy"

    def test_handling_init_action_specially_is_caught(self):
        """只對初始化 action 返回預設值的 slice 無法通過未知 action 的檢查。"""
        def cunning(state=None, action=None):
            if action["type"] == init_store().type:
                return 0
            return state

        with pytest.raises(ReducerContractError):
            combine_reducers({"cunning": cunning})

    def test_probing_can_be_disabled(self):
        """關閉檢查時組合成功，改為在第一次呼叫時失敗。"""
        def lazy(state=None, action=None):
            return state

        root = combine_reducers({"lazy": lazy}, options={"probe_reducers": False})

        with pytest.raises(ReducerContractError):
            root(None, init_store())

    def test_none_on_dispatch_names_slice_and_action(self):
        """slice 對實際 action 返回 None 時拋出帶上下文的錯誤。"""
        def forgetful(state=None, action=None):
            if state is None:
                return 0
            if action["type"] == "FORGET":
                return None
            return state

        root = combine_reducers({"forgetful": forgetful})
        state = root(None, init_store())

        with pytest.raises(ReducerContractError) as exc_info:
            root(state, {"type": "FORGET"})

        assert exc_info.value.reducer_name == "forgetful"
        assert exc_info.value.action_type == "FORGET"

    def test_slice_exceptions_propagate_unchanged(self):
        """slice 拋出的異常原樣傳給呼叫端。"""
        def fragile(state=None, action=None):
            if state is None:
                return 0
            if action["type"] == "BREAK":
                raise LookupError("fragile")
            return state

        root = combine_reducers({"fragile": fragile})
        state = root(None, init_store())

        with pytest.raises(LookupError):
            root(state, {"type": "BREAK"})

    @pytest.mark.parametrize("bad_map", [None, [("a", slice_a)], "a"])
    def test_rejects_non_mapping(self, bad_map):
        """reducer_map 必須是映射。"""
        with pytest.raises(ConfigurationError):
            combine_reducers(bad_map)

    def test_rejects_non_callable_slice(self):
        """每個 slice 的值都必須可呼叫。"""
        with pytest.raises(ConfigurationError):
            combine_reducers({"a": slice_a, "b": "not a reducer"})

    def test_rejects_non_string_keys(self):
        """slice 鍵必須是字串。"""
        with pytest.raises(ConfigurationError):
            combine_reducers({1: slice_a})


class TestStateShape:
    """狀態鍵不符處理策略的測試。"""

    def test_non_mapping_state_always_fails(self):
        """前一個狀態不是映射時無法組合。"""
        root = combine_reducers({"a": slice_a})

        with pytest.raises(UnexpectedStateShapeError):
            root(["a"], {"type": "NOTHING"})

    def test_warn_policy_drops_unexpected_keys(self, caplog):
        """多餘的鍵只警告一次，並從下一個狀態中移除。"""
        root = combine_reducers({"a": slice_a, "b": slice_b})
        state = {"a": ("a",), "b": ("b",), "stale": 1}

        with caplog.at_level(logging.WARNING, logger="pystorecore"):
            first = root(state, {"type": "NOTHING"})
            root(state, {"type": "NOTHING"})

        assert first == {"a": ("a",), "b": ("b",)}
        assert first is not state
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING and "stale" in r.getMessage()]
        assert len(warnings) == 1

    def test_warn_policy_fills_missing_keys(self):
        """缺少的鍵使用 slice 的預設值。"""
        root = combine_reducers({"a": slice_a, "b": slice_b})

        next_state = root({"a": ("kept",)}, {"type": "NOTHING"})

        assert next_state == {"a": ("kept",), "b": ("b",)}
        assert list(next_state) == ["a", "b"]

    def test_raise_policy_rejects_missing_keys(self):
        """raise 策略下缺少鍵即為錯誤。"""
        root = combine_reducers(
            {"a": slice_a, "b": slice_b},
            options=CombineOptions(shape_mismatch=ShapeMismatchPolicy.RAISE),
        )

        with pytest.raises(UnexpectedStateShapeError) as exc_info:
            root({"a": ("a",)}, {"type": "NOTHING"})

        assert exc_info.value.missing_keys == ["b"]
        assert exc_info.value.unexpected_keys == []

    def test_raise_policy_rejects_unexpected_keys(self):
        """raise 策略下多餘的鍵即為錯誤。"""
        root = combine_reducers({"a": slice_a}, options={"shape_mismatch": "raise"})

        with pytest.raises(UnexpectedStateShapeError) as exc_info:
            root({"a": ("a",), "extra": 0}, {"type": "NOTHING"})

        assert exc_info.value.unexpected_keys == ["extra"]

    def test_unknown_policy_is_a_configuration_error(self):
        """只接受已定義的策略。"""
        with pytest.raises(ConfigurationError):
            combine_reducers({"a": slice_a}, options={"shape_mismatch": "ignore"})
