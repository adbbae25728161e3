import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional, Set, Union

from .actions import action_type_of, init_store, is_reserved_action_type, probe_unknown_action
from .config import CombineOptions, ShapeMismatchPolicy, resolve_options
from .errors import ConfigurationError, ReducerContractError, UnexpectedStateShapeError
from .records import StateRecord
from .types import S, ActionHandler, Reducer, ReducerMap

logger = logging.getLogger(__name__)


def create_reducer(initial_state: S, *handlers) -> Reducer[S]:
    """
    創建一個 reducer 函式，用於處理狀態變更。

    Args:
        initial_state: 初始狀態，前一個狀態為 None 時使用。
        *handlers: 一系列 (action_type, handler_fn) 元組或使用 on 函式創建的處理器。

    Returns:
        一個 reducer 函式，根據 action 的類型執行對應的處理邏輯。
    """
    if initial_state is None:
        raise ReducerContractError("create_reducer 的 initial_state 不可為 None", "create_reducer")

    action_handlers: Dict[Any, ActionHandler] = {}  # action 類型與處理函式的對應關係

    for handler in handlers:
        if isinstance(handler, tuple) and len(handler) == 2:
            action_type, handler_fn = handler
            action_handlers[action_type] = handler_fn
        elif isinstance(handler, Mapping):
            action_handlers.update(handler)
        else:
            raise ConfigurationError(
                f"無法識別的處理器: {handler!r}", "create_reducer", "handlers"
            )

    def reducer(state: S = None, action: Any = None) -> S:
        if state is None:
            state = initial_state
        if action is None:
            return state

        handler = action_handlers.get(action_type_of(action))
        if handler:
            return handler(state, action)
        return state  # 沒有對應的處理函式，返回原狀態

    # 設置 reducer 的初始狀態和處理器映射
    reducer.initial_state = initial_state
    reducer.handlers = action_handlers

    return reducer


def on(action_creator_or_type: Union[Callable[..., Any], str], handler: ActionHandler) -> Dict[Any, ActionHandler]:
    """
    創建一個 action 類型與處理函式的映射。

    Args:
        action_creator_or_type: Action 創建器函式或 Action 類型字串。
        handler: 處理該 Action 的函式，接收 (state, action) 並返回新狀態。

    Returns:
        一個包含 {action_type: handler} 的字典。
    """
    if callable(action_creator_or_type) and hasattr(action_creator_or_type, 'type'):
        action_type = action_creator_or_type.type
    else:
        action_type = action_creator_or_type

    return {action_type: handler}


def _describe_action(action: Any) -> str:
    action_type = action_type_of(action)
    if is_reserved_action_type(action_type):
        return "初始化 action"
    return f'action "{action_type}"'


def _probe_reducer_shape(reducers: Dict[str, Callable[[Any, Any], Any]]) -> None:
    """
    以 (None, init) 與 (None, 未知 action) 呼叫每個 slice reducer，
    確認它們在沒有前一個狀態時都能返回已定義的預設值。
    """
    for key, reducer in reducers.items():
        if reducer(None, init_store()) is None:
            raise ReducerContractError(
                f'slice "{key}" 的 reducer 在初始化時返回了 None；'
                "前一個狀態為 None 時必須返回初始狀態，若沒有值可用 () 或其他非 None 的空值",
                reducer_name=key,
            )
        probe = probe_unknown_action()
        if reducer(None, probe) is None:
            raise ReducerContractError(
                f'slice "{key}" 的 reducer 對未知 action 返回了 None；'
                "未知 action 必須返回目前狀態，不要自行處理保留的初始化 action",
                reducer_name=key,
                action_type=probe.type,
            )


def combine_reducers(
    reducer_map: ReducerMap,
    *,
    options: Union[CombineOptions, Mapping, None] = None,
) -> Reducer[StateRecord]:
    """
    將多個 slice reducer 組合為單一 root reducer。

    產生的 reducer 以 (state, action) 呼叫時，會把 state[key] 交給對應的
    slice reducer，再以 reducer_map 的鍵順序組成新的 StateRecord。
    所有 slice 的結果都與先前的值為同一個物件時，直接返回原本的 state。

    Args:
        reducer_map: slice 鍵名到 reducer 的映射。
        options: CombineOptions 或等價的字典。

    Returns:
        組合後的 root reducer，附帶 `reducer_keys` 屬性。

    Raises:
        ConfigurationError: reducer_map 不是映射、鍵不是字串或值不可呼叫。
        ReducerContractError: 探測時某個 slice reducer 返回 None。
    """
    if not isinstance(reducer_map, Mapping):
        raise ConfigurationError(
            f"combine_reducers 需要映射，收到 {type(reducer_map).__name__}", "combine_reducers"
        )
    opts = resolve_options(options, CombineOptions, "combine_reducers")

    final_reducers: Dict[str, Callable[[Any, Any], Any]] = {}
    for key, reducer in reducer_map.items():
        if not isinstance(key, str):
            raise ConfigurationError(
                f"slice 鍵必須是字串，收到 {key!r}", "combine_reducers", "reducer_map"
            )
        if not callable(reducer):
            raise ConfigurationError(
                f'slice "{key}" 的 reducer 不可呼叫', "combine_reducers", key
            )
        final_reducers[key] = reducer

    if not final_reducers:
        logger.warning("combine_reducers 收到空的 reducer 映射，狀態將永遠是空記錄")

    if opts.probe_reducers:
        _probe_reducer_shape(final_reducers)

    reducer_keys = tuple(final_reducers)
    key_set = frozenset(reducer_keys)
    # 每個多餘的鍵只警告一次
    reported_keys: Set[Any] = set()

    def check_state_shape(state: Mapping, action: Any) -> frozenset:
        present = frozenset(state.keys())
        unexpected = [k for k in state.keys() if k not in key_set]
        missing = [k for k in reducer_keys if k not in present]
        if not unexpected and not missing:
            return frozenset()

        if opts.shape_mismatch is ShapeMismatchPolicy.RAISE:
            raise UnexpectedStateShapeError(
                f"{_describe_action(action)} 收到的前一個狀態與 reducer 鍵不符；"
                f"預期的鍵: {list(reducer_keys)}",
                missing_keys=missing,
                unexpected_keys=unexpected,
            )

        if missing:
            logger.debug("state 缺少鍵 %s，由 slice reducer 提供預設值", missing)
        fresh = [k for k in unexpected if k not in reported_keys]
        if fresh:
            reported_keys.update(fresh)
            logger.warning(
                "%s 收到的前一個狀態包含未知的鍵 %s，這些鍵會被忽略；預期的鍵: %s",
                _describe_action(action), fresh, list(reducer_keys),
            )
        return frozenset(unexpected)

    def combination(state: Optional[Mapping], action: Any) -> StateRecord:
        if state is None:
            previous: Mapping = StateRecord()
        elif isinstance(state, Mapping):
            previous = state
        else:
            raise UnexpectedStateShapeError(
                f"{_describe_action(action)} 收到的前一個狀態類型為 {type(state).__name__}，"
                f"預期是具有鍵 {list(reducer_keys)} 的映射",
            )

        dropped = frozenset()
        if state is not None and not is_reserved_action_type(action_type_of(action)):
            dropped = check_state_shape(previous, action)

        has_changed = state is None or bool(dropped) or len(previous) != len(reducer_keys)
        next_state: Dict[str, Any] = {}
        for key, reducer in final_reducers.items():
            previous_for_key = previous.get(key)
            next_for_key = reducer(previous_for_key, action)
            if next_for_key is None:
                raise ReducerContractError(
                    f'slice "{key}" 的 reducer 在處理 {_describe_action(action)} 時返回了 None；'
                    "若要忽略某個 action，必須明確返回前一個狀態",
                    reducer_name=key,
                    action_type=action_type_of(action),
                )
            next_state[key] = next_for_key
            has_changed = has_changed or next_for_key is not previous_for_key

        if not has_changed:
            return state
        return StateRecord._from_dict(next_state)

    combination.reducer_keys = reducer_keys
    return combination
