"""
pystorecore 的 Action 定義模組。

此模組提供 Action 類別、Action 生成器，以及引擎保留的初始化 Action。
Actions 是描述狀態變更意圖的不可變對象；引擎只讀取其 type 判別欄位，
其餘內容原封不動地交給 reducer。
"""
import uuid
from collections.abc import Mapping
from typing import Any, Callable, Dict, Generic, Optional, Union, overload

from immutables import Map as ImmutableMap

from .errors import ConfigurationError, InvalidActionError
from .types import P, ActionCreator, ActionCreatorWithoutPayload, ActionCreatorWithPayload

# 保留的 action type 前綴，應用程式不應自行建構此命名空間下的 type
RESERVED_PREFIX = "@@pystorecore/"


def _random_suffix() -> str:
    return uuid.uuid4().hex[:12]


class Action(Generic[P]):
    """
    表示一個有類型和可選負載的動作。

    泛型參數:
        P: 負載的類型

    屬性:
        type: 動作的類型字符串
        payload: 動作的負載數據（可選）
    """
    __slots__ = ('type', 'payload')

    def __init__(self, type: str, payload: Optional[P] = None):
        if type is None:
            raise InvalidActionError("Action 的 type 不可為 None", None)
        object.__setattr__(self, 'type', type)
        object.__setattr__(self, 'payload', payload)

    def __setattr__(self, name, value):
        raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")

    def __delattr__(self, name):
        raise AttributeError(f"Cannot delete immutable instance attribute '{name}'")

    def __getitem__(self, key):
        # 讓以字典風格撰寫的 reducer 也能讀取 action["type"]
        if key in self.__slots__:
            return getattr(self, key)
        raise KeyError(key)

    def get(self, key, default=None):
        return getattr(self, key) if key in self.__slots__ else default

    def __eq__(self, other):
        if not isinstance(other, Action):
            return NotImplemented
        return self.type == other.type and self.payload == other.payload

    def __hash__(self):
        return hash((self.type, self.payload))

    def __repr__(self):
        return f"Action(type='{self.type}', payload={self.payload!r})"


def action_type_of(action: Any) -> Any:
    """
    讀取 action 的 type 判別欄位。

    接受 Action 實例、帶 "type" 鍵的映射，或任何具備非 None `type` 屬性的
    非可呼叫物件。

    Args:
        action: 要檢查的值。

    Returns:
        action 的 type。

    Raises:
        InvalidActionError: 值不是結構化的 Action。
    """
    if action is None:
        raise InvalidActionError("Action 不可為 None", action)
    if isinstance(action, Action):
        return action.type
    if isinstance(action, Mapping):
        action_type = action.get("type")
        if action_type is None:
            raise InvalidActionError('Action 映射缺少 "type" 鍵', action)
        return action_type
    if isinstance(action, (str, bytes, int, float, bool)):
        raise InvalidActionError(
            f"Action 必須是結構化的值，收到 {type(action).__name__}", action
        )
    if callable(action):
        # 最常見的情況：把 action 生成器本身當作 action 分發
        raise InvalidActionError(
            "Action 不可是可呼叫物件；是否忘了呼叫 action 生成器？", action
        )
    action_type = getattr(action, "type", None)
    if action_type is None:
        raise InvalidActionError(
            f"{type(action).__name__} 缺少 type 判別欄位", action
        )
    return action_type


def _process_payload(payload: Any) -> Any:
    """
    處理 payload，將字典轉換為不可變的 Map。

    Args:
        payload: 原始 payload

    Returns:
        處理後的 payload
    """
    if isinstance(payload, dict):
        return ImmutableMap(payload)
    return payload


@overload
def create_action(action_type: str) -> ActionCreatorWithoutPayload[None]: ...


@overload
def create_action(action_type: str, prepare_fn: Callable[..., P]) -> ActionCreatorWithPayload[P]: ...


def create_action(action_type: str, prepare_fn: Optional[Callable[..., Any]] = None) -> ActionCreator:
    """
    創建一個 Action 生成器函數。

    Args:
        action_type: Action 的類型標識符
        prepare_fn: 可選的預處理函數，用於在創建 Action 前處理輸入參數

    Returns:
        一個可調用的函數，用於生成指定類型的 Action

    範例:
        >>> add_todo = create_action("ADD_TODO")
        >>> add_todo("Learn about actions")
        Action(type='ADD_TODO', payload='Learn about actions')
        >>> toggle_todo = create_action("TOGGLE_TODO", lambda index: {"index": index})
        >>> toggle_todo(0).payload["index"]
        0
    """
    if not isinstance(action_type, str) or not action_type:
        raise ConfigurationError("action_type 必須是非空字串", "create_action", "action_type")
    if action_type.startswith(RESERVED_PREFIX):
        raise ConfigurationError(
            f"'{RESERVED_PREFIX}' 是保留的命名空間", "create_action", "action_type"
        )

    def action_creator(*args: Any, **kwargs: Any) -> Action[Any]:
        if prepare_fn:
            return Action(action_type, _process_payload(prepare_fn(*args, **kwargs)))
        if len(args) == 1 and not kwargs:
            return Action(action_type, _process_payload(args[0]))
        if args or kwargs:
            payload: Dict[Union[int, str], Any] = dict(zip(range(len(args)), args))
            payload.update(kwargs)
            return Action(action_type, _process_payload(payload))
        # 無參數，無負載
        return Action(action_type)

    # 添加 type 屬性以便於識別
    action_creator.type = action_type  # type: ignore[attr-defined]
    return action_creator  # type: ignore[return-value]


def bind_action_creators(creators: Any, dispatch: Callable[[Any], Any]) -> Any:
    """
    將 action 生成器與 dispatch 綁定，呼叫後直接分發生成的 Action。

    Args:
        creators: 單一 action 生成器，或名稱到生成器的映射。
        dispatch: 通常是 store.dispatch。

    Returns:
        綁定後的單一函數，或同樣鍵名的字典（非可呼叫的值會被略過）。
    """
    def bind(creator: Callable[..., Any]) -> Callable[..., Any]:
        def bound(*args: Any, **kwargs: Any) -> Any:
            return dispatch(creator(*args, **kwargs))
        bound.type = getattr(creator, "type", None)  # type: ignore[attr-defined]
        bound.__name__ = getattr(creator, "__name__", "bound_action_creator")
        return bound

    if callable(creators):
        return bind(creators)
    if not isinstance(creators, Mapping):
        raise ConfigurationError(
            f"bind_action_creators 需要函數或映射，收到 {type(creators).__name__}",
            "bind_action_creators",
        )
    return {key: bind(creator) for key, creator in creators.items() if callable(creator)}


# 根 Actions：type 帶隨機後綴，確保不會與應用程式的 action 衝突
INIT_TYPE = f"{RESERVED_PREFIX}INIT.{_random_suffix()}"
_init_action: Action[None] = Action(INIT_TYPE)


def init_store() -> Action[None]:
    """返回引擎在建立 Store 與組合 reducer 時使用的保留初始化 Action。"""
    return _init_action


def probe_unknown_action() -> Action[None]:
    """返回一個每次都不同的保留 Action，用來確認 reducer 對未知 action 仍返回已定義狀態。"""
    return Action(f"{RESERVED_PREFIX}PROBE_UNKNOWN_ACTION.{_random_suffix()}")


def is_reserved_action_type(action_type: Any) -> bool:
    return isinstance(action_type, str) and action_type.startswith(RESERVED_PREFIX)
