import logging
from typing import Any, Callable, Generic, Mapping, Optional, Union

import reactivex
from reactivex import Observable, operators as ops
from reactivex.abc import ObserverBase, SchedulerBase
from reactivex.disposable import Disposable

from .actions import action_type_of, init_store
from .config import StoreOptions, resolve_options
from .errors import (
    ConfigurationError,
    ErrorHandler,
    ReducerContractError,
    ReducerError,
    ReentrantDispatchError,
    StoreCoreError,
    global_error_handler,
)
from .subscriptions import ListenerRegistry
from .types import S, Listener, Reducer, StateSelector, Unsubscribe

logger = logging.getLogger(__name__)


def _reducer_name(reducer: Callable[..., Any]) -> str:
    return getattr(reducer, "__qualname__", None) or type(reducer).__name__


def _selected_value_changed(pair) -> bool:
    previous, current = pair
    return previous is not current and previous != current


class Store(Generic[S]):
    """
    狀態容器，保存應用的完整狀態樹，並在每次狀態提交後通知訂閱者。

    狀態只能透過 dispatch 一個 action、由 root reducer 計算新狀態來替換；
    Store 本身從不就地修改狀態。整個 dispatch（reducer 計算與通知）同步完成，
    Store 沒有內部鎖，多執行緒環境下需由呼叫端自行序列化存取。
    """

    def __init__(
        self,
        reducer: Reducer[S],
        initial_state: Optional[S] = None,
        *,
        options: Union[StoreOptions, Mapping, None] = None,
    ):
        """
        建立 Store。

        Args:
            reducer: root reducer，通常由 combine_reducers 產生。
            initial_state: 初始狀態；為 None 時以 reducer(None, init_store()) 計算。
            options: StoreOptions 或等價的字典。

        Raises:
            ConfigurationError: reducer 不可呼叫或配置無效。
            ReducerContractError: 初始化時 reducer 返回 None。
            ReducerError: 初始化時 reducer 拋出異常。
        """
        if not callable(reducer):
            raise ConfigurationError(
                f"root reducer 必須是可呼叫物件，收到 {type(reducer).__name__}", "Store", "reducer"
            )
        self._options = resolve_options(options, StoreOptions, "Store")
        self._reducer = reducer
        self._listeners = ListenerRegistry()
        # 只在 root reducer 執行期間為 True
        self._is_reducing = False
        # reducer 執行期間偵測到 dispatch 時設為 True，該次外層 dispatch 必須放棄
        self._reentry_detected = False

        if initial_state is None:
            initial_state = self._reduce(None, init_store())
        self._state: S = initial_state
        logger.debug("store created with reducer %s", _reducer_name(reducer))

    @property
    def error_handler(self) -> ErrorHandler:
        return self._options.error_handler or global_error_handler

    @property
    def state(self) -> S:
        """
        獲取當前狀態的快照。

        Returns:
            最近一次提交的狀態引用。
        """
        return self._state

    def get_state(self) -> S:
        """返回最近一次提交的狀態引用，可在任何時候（包括監聽器內）呼叫。"""
        return self._state

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _report(self, error: StoreCoreError) -> None:
        if self._options.report_errors:
            self.error_handler.handle(error)

    def _reduce(self, state: Any, action: Any) -> S:
        """
        呼叫 root reducer 計算下一個狀態，不提交任何變更。

        reducer 拋出的異常除 ReducerError 與 ReentrantDispatchError 外，
        一律包裝為 ReducerError。
        """
        action_type = action_type_of(action)
        self._is_reducing = True
        self._reentry_detected = False
        try:
            next_state = self._reducer(state, action)
        except (ReducerError, ReentrantDispatchError):
            # 引擎自身的 reducer 契約錯誤與重入錯誤原樣傳出
            raise
        except Exception as err:
            raise ReducerError(
                f"reducer 處理 action {action_type!r} 時失敗: {err}",
                reducer_name=_reducer_name(self._reducer),
                action_type=action_type,
                original=err,
            ) from err
        finally:
            self._is_reducing = False

        if self._reentry_detected:
            # reducer 即使攔截了內層的錯誤，這次計算也不能提交
            raise ReentrantDispatchError(
                f"reducer 在處理 action {action_type!r} 時呼叫了 dispatch；本次狀態轉換已放棄",
                action_type=action_type,
            )
        if next_state is None:
            raise ReducerContractError(
                f"root reducer 處理 action {action_type!r} 時返回了 None",
                reducer_name=_reducer_name(self._reducer),
                action_type=action_type,
            )
        return next_state

    def dispatch(self, action: Any) -> Any:
        """
        分發一個動作，觸發狀態更新。

        reducer 成功返回後才替換狀態，接著依註冊順序同步呼叫
        分發開始時登錄表快照中的監聽器。任何失敗都不會提交狀態、
        也不會通知監聽器；監聽器自身拋出的異常則在狀態提交後傳出，
        本輪剩下的監聽器不會被呼叫。

        Args:
            action: 帶 type 判別欄位的 Action。

        Returns:
            傳入的 Action。

        Raises:
            InvalidActionError: action 缺少 type 判別欄位。
            ReentrantDispatchError: 在 reducer 執行期間呼叫 dispatch。
            ReducerError: reducer 拋出異常（原始異常在 `original`）。
            ReducerContractError: reducer 返回 None。
        """
        if self._is_reducing:
            # 由外層 dispatch 統一報告
            self._reentry_detected = True
            raise ReentrantDispatchError("reducer 執行期間不可 dispatch", action=action)

        try:
            next_state = self._reduce(self._state, action)
        except StoreCoreError as err:
            self._report(err)
            raise

        logger.debug("dispatched %r", action_type_of(action))
        self._state = next_state
        self._listeners.notify()
        return action

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """
        註冊一個無參數的監聽器，每次 dispatch 提交狀態後被呼叫。

        Args:
            listener: 回呼函數，透過 get_state() 讀取新狀態。

        Returns:
            取消訂閱的函數，可重複呼叫。
        """
        return self._listeners.add(listener)

    def select(self, selector: Optional[StateSelector[S, Any]] = None) -> Observable:
        """
        選擇狀態的一部分進行觀察。

        每次 dispatch 提交後，若選取的值有變化，發出 (舊值, 新值) 的元組。

        Args:
            selector: 一個函數，接收整個狀態並返回希望觀察的部分；None 表示整個狀態。

        Returns:
            一個可觀察對象，處置訂閱即取消對 Store 的監聽。
        """
        pick = selector or (lambda state: state)

        def subscribe(observer: ObserverBase, scheduler: Optional[SchedulerBase] = None) -> Disposable:
            last = [pick(self._state)]

            def listener() -> None:
                previous, last[0] = last[0], pick(self._state)
                observer.on_next((previous, last[0]))

            return Disposable(self.subscribe(listener))

        return reactivex.create(subscribe).pipe(ops.filter(_selected_value_changed))

    def teardown(self) -> None:
        """取消所有訂閱；Store 本身仍可繼續使用。"""
        self._listeners.clear()

    def __enter__(self) -> "Store[S]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.teardown()


def create_store(
    reducer: Reducer[S],
    initial_state: Optional[S] = None,
    *,
    options: Union[StoreOptions, Mapping, None] = None,
) -> Store[S]:
    """
    創建一個新的 Store 實例。

    Args:
        reducer: root reducer。
        initial_state: 可選的初始狀態。
        options: StoreOptions 或等價的字典。

    Returns:
        Store: 新創建的 Store 實例。
    """
    return Store(reducer, initial_state, options=options)
