"""
pystorecore 共用型別定義模組。

集中定義 Store、Reducer、Action 與監聽器之間的型別契約，
供各模組與型別存根文件引用。
"""
from typing import Any, Callable, Dict, Mapping, TypeVar, Union

from typing_extensions import Protocol, runtime_checkable

S = TypeVar("S")  # 狀態類型
P = TypeVar("P")  # 負載類型
T = TypeVar("T")  # 選擇結果類型
S_co = TypeVar("S_co", covariant=True)
P_co = TypeVar("P_co", covariant=True)


@runtime_checkable
class HasActionType(Protocol):
    """任何帶有 `type` 判別欄位的物件。"""

    type: Any


# Action 可以是 Action 實例、帶 "type" 鍵的映射，或任何具 type 屬性的物件
ActionLike = Union[HasActionType, Mapping[str, Any]]


class Reducer(Protocol[S]):
    """
    純函數契約：(前一個狀態, action) -> 下一個狀態。

    前一個狀態為 None 時必須返回自身的預設狀態；
    無法識別的 action 必須原樣返回輸入的狀態引用。
    """

    def __call__(self, state: Any, action: Any) -> S: ...


class ActionCreatorWithoutPayload(Protocol[P_co]):
    """無負載的 Action 生成器。"""

    type: str

    def __call__(self) -> Any: ...


class ActionCreatorWithPayload(Protocol[P_co]):
    """帶負載的 Action 生成器。"""

    type: str

    def __call__(self, *args: Any, **kwargs: Any) -> Any: ...


ActionCreator = Union[ActionCreatorWithoutPayload[Any], ActionCreatorWithPayload[Any]]

ActionHandler = Callable[[Any, Any], Any]
HandlerMap = Dict[str, ActionHandler]
ReducerMap = Mapping[str, Callable[[Any, Any], Any]]

Listener = Callable[[], None]
Unsubscribe = Callable[[], None]
DispatchFunction = Callable[[Any], Any]
StateSelector = Callable[[S], T]
