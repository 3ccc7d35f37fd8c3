"""
Key-value store abstraction for ledger maps.

The ledger only needs get-with-default, insert and remove, plus iteration for
audits and state roots. Any backing store (in-memory dict, on-disk index,
external state tree) can implement `KeyValueStore`. Only key uniqueness is
assumed; iteration order is not.
"""

from __future__ import annotations

from typing import Dict, Generic, Hashable, Iterator, List, Optional, Protocol, Tuple, TypeVar


K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


class KeyValueStore(Protocol[K, V]):
    def get(self, key: K, default: V) -> V:
        ...

    def insert(self, key: K, value: V) -> None:
        ...

    def remove(self, key: K) -> None:
        ...

    def items(self) -> Iterator[Tuple[K, V]]:
        ...


class DictStore(Generic[K, V]):
    """In-memory `KeyValueStore` backed by a plain dict."""

    def __init__(self) -> None:
        self._data: Dict[K, V] = {}

    def get(self, key: K, default: V) -> V:
        return self._data.get(key, default)

    def insert(self, key: K, value: V) -> None:
        self._data[key] = value

    def remove(self, key: K) -> None:
        self._data.pop(key, None)

    def items(self) -> Iterator[Tuple[K, V]]:
        # Snapshot so callers may mutate while iterating.
        return iter(list(self._data.items()))

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"DictStore({len(self._data)} entries)"


class JournaledStore(Generic[K, V]):
    """
    Wraps a `KeyValueStore` with an undo journal.

    While a journal is open, the first write to each key records the prior
    value (or its absence). `rollback()` replays the journal in reverse;
    `commit()` discards it.
    """

    def __init__(self, inner: KeyValueStore[K, V]) -> None:
        self._inner = inner
        self._journal: Optional[List[Tuple[K, object]]] = None
        self._touched: set = set()

    @property
    def inner(self) -> KeyValueStore[K, V]:
        return self._inner

    def get(self, key: K, default: V) -> V:
        return self._inner.get(key, default)

    def _record(self, key: K) -> None:
        if self._journal is None or key in self._touched:
            return
        self._touched.add(key)
        self._journal.append((key, self._inner.get(key, _MISSING)))  # type: ignore[arg-type]

    def insert(self, key: K, value: V) -> None:
        self._record(key)
        self._inner.insert(key, value)

    def remove(self, key: K) -> None:
        self._record(key)
        self._inner.remove(key)

    def items(self) -> Iterator[Tuple[K, V]]:
        return self._inner.items()

    def begin(self) -> None:
        if self._journal is not None:
            raise RuntimeError("journal already open")
        self._journal = []
        self._touched = set()

    def commit(self) -> None:
        self._journal = None
        self._touched = set()

    def rollback(self) -> None:
        journal = self._journal or []
        self._journal = None
        self._touched = set()
        for key, prior in reversed(journal):
            if prior is _MISSING:
                self._inner.remove(key)
            else:
                self._inner.insert(key, prior)  # type: ignore[arg-type]
