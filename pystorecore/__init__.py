"""
pystorecore：可預測的集中式狀態容器。

整個應用狀態保存在單一 Store 中，只能透過 dispatch action、
由純函數 reducer 計算新狀態來替換。
"""
from .errors import (
    StoreCoreError, ActionError, InvalidActionError, ReducerError,
    ReducerContractError, UnexpectedStateShapeError, StoreError,
    ReentrantDispatchError, ConfigurationError, ErrorHandler, global_error_handler,
)
from .config import CombineOptions, ShapeMismatchPolicy, StoreOptions
from .actions import (
    Action, action_type_of, bind_action_creators, create_action, init_store,
)
from .records import StateRecord
from .reducers import combine_reducers, create_reducer, on
from .subscriptions import ListenerRegistry
from .store import Store, create_store
from .immutable_utils import to_dict, to_immutable, to_pydantic

__version__ = "0.1.0"

__all__ = [
    # Errors
    "StoreCoreError", "ActionError", "InvalidActionError", "ReducerError",
    "ReducerContractError", "UnexpectedStateShapeError", "StoreError",
    "ReentrantDispatchError", "ConfigurationError", "ErrorHandler", "global_error_handler",

    # Config
    "CombineOptions", "ShapeMismatchPolicy", "StoreOptions",

    # Actions
    "Action", "action_type_of", "bind_action_creators", "create_action", "init_store",

    # Reducers
    "StateRecord", "combine_reducers", "create_reducer", "on",

    # Store
    "ListenerRegistry", "Store", "create_store",

    # Immutable Utils
    "to_dict", "to_immutable", "to_pydantic",
]
