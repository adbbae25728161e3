"""
組合狀態使用的唯讀記錄型別。

StateRecord 是依插入順序迭代的不可變映射，所有「修改」都返回新的記錄，
未變更的值以引用方式沿用。
"""
from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional, Tuple

_MISSING = object()


class StateRecord(Mapping):
    """
    不可變、保持鍵順序的狀態記錄。

    與其他 StateRecord 以及 dict 等不可雜湊的 Mapping 以內容比較相等，
    因此可以直接與普通字典比較：

        >>> StateRecord(todos=(), visibility_filter="SHOW_ALL") == {"todos": (), "visibility_filter": "SHOW_ALL"}
        True
    """

    __slots__ = ("_data", "_hash")

    def __init__(self, data: Optional[Mapping] = None, **kwargs: Any):
        items: Dict[Any, Any] = dict(data) if data is not None else {}
        items.update(kwargs)
        object.__setattr__(self, "_data", items)
        object.__setattr__(self, "_hash", None)

    @classmethod
    def _from_dict(cls, items: Dict[Any, Any]) -> "StateRecord":
        # 呼叫端保證 items 不會再被其他人持有
        record = cls.__new__(cls)
        object.__setattr__(record, "_data", items)
        object.__setattr__(record, "_hash", None)
        return record

    def __getitem__(self, key: Any) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"'{type(self).__name__}' is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"'{type(self).__name__}' is immutable")

    def __setitem__(self, key: Any, value: Any) -> None:
        raise TypeError(f"'{type(self).__name__}' does not support item assignment; use set()")

    def __delitem__(self, key: Any) -> None:
        raise TypeError(f"'{type(self).__name__}' does not support item deletion; use delete()")

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if isinstance(other, StateRecord):
            return self._data == other._data
        # 其他可雜湊的映射（如 immutables.Map）雜湊算法不同，不視為相等
        if not isinstance(other, Mapping) or getattr(other, "__hash__", None) is not None:
            return NotImplemented
        return self._data == dict(other.items())

    def __hash__(self) -> int:
        if self._hash is None:
            object.__setattr__(self, "_hash", hash(frozenset(self._data.items())))
        return self._hash

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {v!r}" for k, v in self._data.items())
        return f"StateRecord({{{body}}})"

    def __reduce__(self) -> Tuple[Any, ...]:
        return (type(self), (self._data,))

    def set(self, key: Any, value: Any) -> "StateRecord":
        """
        返回修改一個鍵後的新記錄。

        Args:
            key: 要設定的鍵。
            value: 新值。

        Returns:
            新的記錄；若值與現有值為同一個物件則返回自身。
        """
        if self._data.get(key, _MISSING) is value:
            return self
        items = dict(self._data)
        items[key] = value
        return self._from_dict(items)

    def update(self, changes: Optional[Mapping] = None, **kwargs: Any) -> "StateRecord":
        """
        返回一次修改多個鍵後的新記錄，未改變任何值時返回自身。
        """
        pending: Dict[Any, Any] = dict(changes) if changes is not None else {}
        pending.update(kwargs)
        if all(self._data.get(k, _MISSING) is v for k, v in pending.items()):
            return self
        items = dict(self._data)
        items.update(pending)
        return self._from_dict(items)

    def delete(self, key: Any) -> "StateRecord":
        if key not in self._data:
            raise KeyError(key)
        items = dict(self._data)
        del items[key]
        return self._from_dict(items)

    def to_dict(self) -> Dict[Any, Any]:
        """淺層轉換為普通字典。"""
        return dict(self._data)
