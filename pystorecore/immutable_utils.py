# pystorecore/immutable_utils.py
from collections.abc import Hashable, Mapping
from typing import Any, Type, TypeVar

from immutables import Map
from pydantic import BaseModel

from .records import StateRecord

T = TypeVar('T', bound=BaseModel)


def to_immutable(obj: Any) -> Any:
    """將任何對象轉換為不可變形式 (包括 Pydantic 模型)"""
    if isinstance(obj, (Map, StateRecord)):
        # 已經是不可變映射，只需轉換其中的值
        return type(obj)({k: to_immutable(v) for k, v in obj.items()})
    if isinstance(obj, BaseModel):
        return Map({k: to_immutable(v) for k, v in obj.model_dump().items()})
    if isinstance(obj, dict):
        return Map({k: to_immutable(v) for k, v in obj.items()})
    if isinstance(obj, (list, tuple)):
        return tuple(to_immutable(i) for i in obj)
    if isinstance(obj, (set, frozenset)):
        return frozenset(to_immutable(i) for i in obj)
    return obj


def to_dict(obj: Any) -> Any:
    """將 Map、StateRecord 及其巢狀結構轉換為普通字典與列表"""
    if isinstance(obj, BaseModel):
        return obj.model_dump()
    if isinstance(obj, Mapping):
        return {k: to_dict(v) for k, v in obj.items()}
    if isinstance(obj, (tuple, list)):
        return [to_dict(i) for i in obj]
    if isinstance(obj, frozenset):
        items = [to_dict(i) for i in obj]
        # 元素解凍為 list 或 dict 後不可雜湊，只能以列表返回
        if all(isinstance(i, Hashable) for i in items):
            return set(items)
        return items
    return obj


def to_pydantic(map_obj: Mapping, model_class: Type[T]) -> T:
    """將 Map 轉換回 Pydantic 模型 (僅在需要時使用)"""
    return model_class.model_validate(to_dict(map_obj))
