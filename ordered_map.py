import json
import logging

from rw_lock import ReadWriteLock

logger = logging.getLogger(__name__)


class _Entry:
    __slots__ = ("value", "order_stamp")

    def __init__(self, value, order_stamp: int):
        self.value = value
        self.order_stamp = order_stamp


class OrderedStringMap:
    """
    A string-keyed map that remembers which keys were touched most recently.

    Every insert or update stamps the entry with a value from a growing
    counter; the key order is recovered by sorting on those stamps. When the
    counter reaches MAX_STAMP the live entries are renumbered 1..N in their
    current order and counting resumes from N.

    Lookups share a read lock. Inserts, deletes and reindexing take the
    write lock and exclude everything else.
    """

    # Width of the stamp counter (unsigned 64-bit).
    MAX_STAMP = 2**64 - 1

    def __init__(self, capacity_hint: int = 0):
        if not isinstance(capacity_hint, int) or isinstance(capacity_hint, bool):
            raise TypeError("capacity_hint must be an int")
        if capacity_hint < 0:
            raise ValueError("capacity_hint must be non-negative")

        # dicts cannot be presized; the hint is kept for callers that ask
        self._capacity_hint = capacity_hint
        self._data = {}
        self._next_stamp = 0
        self._lock = ReadWriteLock()

    @property
    def capacity_hint(self) -> int:
        return self._capacity_hint

    def set(self, key: str, value):
        """
        Insert or update `key`. Either way the key becomes the most
        recently touched one.
        """
        with self._lock.write_context():
            entry = self._data.get(key)
            if entry is None:
                self._data[key] = _Entry(value, self._issue_stamp())
            else:
                entry.value = value
                entry.order_stamp = self._issue_stamp()

    def delete(self, key: str):
        """
        Remove `key` if present. Missing keys are ignored.
        """
        with self._lock.write_context():
            self._data.pop(key, None)

    def get(self, key: str):
        """
        Return `(value, True)` if `key` is present, otherwise `(None, False)`.
        Reading does not change the key order.
        """
        with self._lock.read_context():
            entry = self._data.get(key)
            if entry is None:
                return None, False
            return entry.value, True

    def __len__(self) -> int:
        with self._lock.read_context():
            return len(self._data)

    def __contains__(self, key) -> bool:
        with self._lock.read_context():
            return key in self._data

    def __repr__(self) -> str:
        with self._lock.read_context():
            keys = self._sorted_keys()
        return f"{self.__class__.__name__}(keys={keys!r})"

    def key_order(self) -> list:
        """
        Snapshot of the keys, least recently touched first.
        """
        with self._lock.read_context():
            return self._sorted_keys()

    def reindex(self):
        """
        Renumber every entry 1..N without changing the key order.
        """
        with self._lock.write_context():
            self._reindex_locked()

    def to_json(self, **kwargs) -> str:
        """
        Encode the map as a JSON object of key -> value.

        Stamps are not emitted and member order is not guaranteed to follow
        key_order(). Keyword arguments are passed through to json.dumps;
        a caller's `default` is used for anything that is not a nested map.
        Values json cannot encode raise json's own TypeError/ValueError.
        """
        fallback = kwargs.pop("default", None)

        def encode_nested(obj):
            if isinstance(obj, OrderedStringMap):
                return obj._snapshot()
            if fallback is not None:
                return fallback(obj)
            raise TypeError(
                f"Object of type {obj.__class__.__name__} is not JSON serializable"
            )

        return json.dumps(self._snapshot(), default=encode_nested, **kwargs)

    def _snapshot(self) -> dict:
        with self._lock.read_context():
            return {key: entry.value for key, entry in self._data.items()}

    # The helpers below expect the caller to hold the lock already.

    def _sorted_keys(self) -> list:
        # sorted() is stable, so ties would fall back to dict order
        items = sorted(self._data.items(), key=lambda item: item[1].order_stamp)
        return [key for key, _ in items]

    def _reindex_locked(self, overflow: bool = False):
        keys = self._sorted_keys()
        self._next_stamp = 0
        for key in keys:
            self._next_stamp += 1
            self._data[key].order_stamp = self._next_stamp

        logger.debug(
            "reindexed %d entries (overflow=%s)", len(keys), overflow
        )

    def _issue_stamp(self) -> int:
        if self._next_stamp >= self.MAX_STAMP:
            self._reindex_locked(overflow=True)
        self._next_stamp += 1
        return self._next_stamp
