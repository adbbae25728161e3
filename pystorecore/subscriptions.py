"""
Store 的訂閱登錄表。

監聽器依註冊順序保存，每次註冊都有獨立的身分，可以單獨取消。
通知時先取得當下登錄表的快照再逐一呼叫：
  - 通知期間新增的監聽器不會在本輪被呼叫；
  - 通知期間被取消、且本輪尚未執行的監聽器會被略過。
"""
import logging
from typing import Callable, List

from .errors import ConfigurationError
from .types import Listener, Unsubscribe

logger = logging.getLogger(__name__)


class Registration:
    """單一次訂閱，保存監聽器與其存活旗標。"""

    __slots__ = ("listener", "active")

    def __init__(self, listener: Listener):
        self.listener = listener
        self.active = True

    def __repr__(self) -> str:
        state = "active" if self.active else "disposed"
        return f"Registration({getattr(self.listener, '__qualname__', self.listener)!r}, {state})"


class ListenerRegistry:
    """有序的監聽器集合。"""

    def __init__(self) -> None:
        self._registrations: List[Registration] = []

    def __len__(self) -> int:
        return len(self._registrations)

    def add(self, listener: Listener) -> Unsubscribe:
        """
        將監聽器加到登錄表末尾。

        Args:
            listener: 無參數的回呼函數。

        Returns:
            取消訂閱的函數；重複呼叫不會有任何效果。
        """
        if not callable(listener):
            raise ConfigurationError(
                f"監聽器必須是可呼叫物件，收到 {type(listener).__name__}", "subscribe", "listener"
            )
        registration = Registration(listener)
        self._registrations.append(registration)

        def unsubscribe() -> None:
            self._remove(registration)

        return unsubscribe

    def _remove(self, registration: Registration) -> None:
        if not registration.active:
            return
        registration.active = False
        # 依身分移除，同一個函數的其他註冊不受影響
        self._registrations = [r for r in self._registrations if r is not registration]

    def snapshot(self) -> List[Registration]:
        return list(self._registrations)

    def notify(self) -> None:
        """
        依註冊順序呼叫快照中仍存活的監聽器。

        監聽器拋出的異常不會被攔截，本輪剩下的監聽器也不會被呼叫。
        """
        for registration in self.snapshot():
            if registration.active:
                registration.listener()

    def clear(self) -> None:
        """取消所有訂閱；已發出的取消函數之後呼叫不會有效果。"""
        for registration in self._registrations:
            registration.active = False
        if self._registrations:
            logger.debug("cleared %d listener(s)", len(self._registrations))
        self._registrations = []

    def listeners(self) -> List[Callable[[], None]]:
        return [r.listener for r in self._registrations]
