"""
pystorecore 配置模型。

使用 pydantic 描述 Store 與組合 reducer 的可調整行為，
可直接傳入模型實例，也可傳入普通字典由模型驗證。
"""
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConfigurationError, ErrorHandler

M = TypeVar("M", bound=BaseModel)


class ShapeMismatchPolicy(str, Enum):
    """組合 reducer 遇到狀態鍵不符時的處理策略。"""

    WARN = "warn"    # 缺少的鍵用預設值補上，多餘的鍵記錄警告後丟棄
    RAISE = "raise"  # 任何不符皆拋出 UnexpectedStateShapeError


class CombineOptions(BaseModel):
    """combine_reducers 的配置。"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    shape_mismatch: ShapeMismatchPolicy = ShapeMismatchPolicy.WARN
    # 組合時以 (None, init) 與 (None, 未知 action) 探測每個 slice reducer
    probe_reducers: bool = True


class StoreOptions(BaseModel):
    """Store 的配置。"""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    # dispatch 失敗時先交給錯誤報告器記錄，再拋出給呼叫端
    report_errors: bool = True
    # None 表示使用 global_error_handler
    error_handler: Optional[ErrorHandler] = None


def resolve_options(
    options: Union[M, Mapping[str, Any], None],
    model: Type[M],
    component: str,
) -> M:
    """
    將使用者傳入的配置統一轉為模型實例。

    Args:
        options: 模型實例、字典或 None。
        model: 目標 pydantic 模型類別。
        component: 用於錯誤訊息的元件名稱。

    Returns:
        驗證後的模型實例。
    """
    if options is None:
        return model()
    if isinstance(options, model):
        return options
    if isinstance(options, Mapping):
        try:
            return model.model_validate(dict(options))
        except ValidationError as err:
            raise ConfigurationError(
                f"{component} 的配置無效: {err}", component, errors=err.errors()
            ) from err
    raise ConfigurationError(
        f"{component} 的配置必須是 {model.__name__} 或字典，收到 {type(options).__name__}",
        component,
    )
