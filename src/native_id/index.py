"""One-to-one mapping queryable in both directions."""

from typing import Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V", bound=Hashable)


class BidirectionalIndex(Generic[K, V]):
    """Injective key <-> value mapping.

    A key participates in at most one pair and so does a value. Adding a
    pair whose key or value is already bound is rejected, never overwritten.

    Not thread-safe; callers serialize access.
    """

    def __init__(self) -> None:
        self._forward: dict[K, V] = {}
        self._backward: dict[V, K] = {}

    def __len__(self) -> int:
        return len(self._forward)

    def try_add(self, key: K, value: V) -> bool:
        """Bind ``key`` to ``value``. Returns False if either is already bound."""
        if self.has_key(key) or self.has_value(value):
            return False
        self._forward[key] = value
        self._backward[value] = key
        return True

    def get_value(self, key: K) -> V | None:
        return self._forward.get(key)

    def get_key(self, value: V) -> K | None:
        return self._backward.get(value)

    def has_key(self, key: K) -> bool:
        return key in self._forward

    def has_value(self, value: V) -> bool:
        return value in self._backward

    def items(self) -> list[tuple[K, V]]:
        """Snapshot of all pairs in insertion order."""
        return list(self._forward.items())
