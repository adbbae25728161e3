"""
pystorecore 錯誤處理模組。

定義 Store 引擎所有的異常類別，以及集中式的錯誤報告器。
所有錯誤皆同步拋出給觸發它的呼叫者；報告器只負責記錄，不會吞掉錯誤。
"""
import logging
import sys
import traceback
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__.rsplit(".", 1)[0])


class StoreCoreError(Exception):
    """所有 pystorecore 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        # 只在處理中的異常存在時記錄追蹤資訊
        self.traceback = traceback.format_exc() if sys.exc_info()[0] is not None else ""

    def to_dict(self) -> Dict[str, Any]:
        """
        將錯誤轉換為可序列化的字典。

        Returns:
            包含錯誤類型、訊息與細節的字典。
        """
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        extras = ", ".join(f"{k}={v!r}" for k, v in self.details.items() if v is not None)
        return f"{self.message} ({extras})" if extras else self.message


class ActionError(StoreCoreError):
    """與 Action 相關的錯誤。"""

    def __init__(self, message: str, action: Any = None, **kwargs: Any):
        details = {"action": action}
        details.update(kwargs)
        super().__init__(message, details)
        self.action = action


class InvalidActionError(ActionError):
    """被分發的值不是合法的 Action（缺少 type 判別欄位）。"""


class ReducerError(StoreCoreError):
    """
    Reducer 在計算下一個狀態時失敗。

    原始異常保存在 `original`，同時透過 `raise ... from` 串接。
    """

    def __init__(
        self,
        message: str,
        reducer_name: Optional[str] = None,
        action_type: Any = None,
        original: Optional[BaseException] = None,
        **kwargs: Any,
    ):
        details = {"reducer_name": reducer_name, "action_type": action_type}
        details.update(kwargs)
        super().__init__(message, details)
        self.reducer_name = reducer_name
        self.action_type = action_type
        self.original = original


class ReducerContractError(ReducerError):
    """Reducer 返回了 None，違反「必須產生已定義狀態」的契約。"""


class UnexpectedStateShapeError(ReducerError):
    """組合 reducer 收到的前一個狀態與設定的鍵不符。"""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[List[str]] = None,
        unexpected_keys: Optional[List[str]] = None,
        **kwargs: Any,
    ):
        super().__init__(
            message,
            missing_keys=list(missing_keys or []),
            unexpected_keys=list(unexpected_keys or []),
            **kwargs,
        )
        self.missing_keys = list(missing_keys or [])
        self.unexpected_keys = list(unexpected_keys or [])


class StoreError(StoreCoreError):
    """與 Store 操作相關的錯誤。"""

    def __init__(self, message: str, operation: str, **kwargs: Any):
        details = {"operation": operation}
        details.update(kwargs)
        super().__init__(message, details)
        self.operation = operation


class ReentrantDispatchError(StoreError):
    """在 root reducer 執行期間又呼叫了 dispatch。"""

    def __init__(self, message: str, action_type: Any = None, **kwargs: Any):
        super().__init__(message, "dispatch", action_type=action_type, **kwargs)
        self.action_type = action_type


class ConfigurationError(StoreCoreError):
    """配置相關的錯誤，例如傳入不可呼叫的 reducer 或監聽器。"""

    def __init__(self, message: str, component: str, config_key: Optional[str] = None, **kwargs: Any):
        details = {"component": component, "config_key": config_key}
        details.update(kwargs)
        super().__init__(message, details)
        self.component = component
        self.config_key = config_key


class ErrorHandler:
    """
    集中式錯誤報告器，負責日誌記錄與通知已註冊的處理函數。

    報告器只觀察錯誤：呼叫 handle() 之後，錯誤仍由呼叫端繼續拋出。
    """

    def __init__(self, log_to_console: bool = True, log_to_file: bool = False, log_file: Optional[str] = None):
        self.log_to_console = log_to_console
        self.log_to_file = log_to_file
        self.log_file = log_file
        self.handlers: List[Callable[[StoreCoreError], None]] = []
        self._file_handler: Optional[logging.Handler] = None

        if log_to_file:
            if not log_file:
                raise ConfigurationError("log_to_file 需要指定 log_file", "ErrorHandler", "log_file")
            self._file_handler = logging.FileHandler(log_file, encoding="utf-8")
            self._file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            )

    def register_handler(self, handler: Callable[[StoreCoreError], None]) -> None:
        """
        註冊一個錯誤處理函數。

        Args:
            handler: 接收 StoreCoreError 的函數。
        """
        self.handlers.append(handler)

    def unregister_handler(self, handler: Callable[[StoreCoreError], None]) -> None:
        if handler in self.handlers:
            self.handlers.remove(handler)

    def handle(self, error: Union[StoreCoreError, Exception]) -> StoreCoreError:
        """
        記錄錯誤並通知所有處理函數。

        非 pystorecore 的異常會先包裝為 StoreCoreError。

        Args:
            error: 要報告的錯誤。

        Returns:
            被報告的 StoreCoreError。
        """
        if not isinstance(error, StoreCoreError):
            error = StoreCoreError(str(error), {"original_type": type(error).__name__})

        if self.log_to_console:
            logger.error("%s: %s", type(error).__name__, error)
        if self._file_handler is not None:
            record = logger.makeRecord(
                logger.name, logging.ERROR, __file__, 0,
                "%s: %s", (type(error).__name__, error), None,
            )
            self._file_handler.handle(record)

        for handler in list(self.handlers):
            try:
                handler(error)
            except Exception:
                # 處理函數只能觀察錯誤，不能取代呼叫端要拋出的錯誤
                logger.exception("錯誤處理函數 %r 執行失敗", handler)
        return error

    def close(self) -> None:
        """關閉日誌文件；之後報告的錯誤不再寫入文件。"""
        if self._file_handler is not None:
            self._file_handler.close()
            self._file_handler = None


# 單例錯誤報告器
global_error_handler = ErrorHandler()
