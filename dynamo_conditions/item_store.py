import logging
import threading
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from dynamo_conditions.errors import InvalidItemKeyError

logger = logging.getLogger(__name__)

Item = Dict[str, Any]


class Key(NamedTuple):
    partition_key: str
    sort_key: str


class KeySchema(NamedTuple):
    """Names of the attributes that make up an item's composite key."""
    partition_key: str = "pk"
    sort_key: str = "sk"

    def key_of(self, item: Item) -> Key:
        """Derive the composite key from an item, failing fast on a malformed one."""
        parts = []
        for name in (self.partition_key, self.sort_key):
            if name not in item:
                raise InvalidItemKeyError(f"Item is missing key attribute '{name}': {item}", attribute=name)
            value = item[name]
            if not isinstance(value, str) or not value:
                raise InvalidItemKeyError(
                    f"Key attribute '{name}' must be a non-empty string, got {value!r}", attribute=name
                )
            parts.append(value)
        return Key(*parts)

    def to_dict(self, key: Key) -> Dict[str, str]:
        return {self.partition_key: key.partition_key, self.sort_key: key.sort_key}


class ItemStore:
    """In-memory snapshot of items keyed by composite key.

    The store has no notion of conditions. ``lock`` is held by callers that need
    a read-evaluate-write sequence to be atomic.
    """

    def __init__(self):
        self._items: Dict[Key, Item] = {}
        self.lock = threading.RLock()

    def get(self, key: Key) -> Optional[Item]:
        item = self._items.get(key)
        if item is None:
            return None
        return dict(item)

    def set(self, key: Key, item: Item) -> None:
        with self.lock:
            self._items[key] = dict(item)
        logger.debug(f"Stored item at {key}")

    def present_attributes(self, key: Key, names: Sequence[str]) -> Optional[List[str]]:
        """Names from ``names`` set on the item at ``key``, or None when nothing is stored there."""
        item = self._items.get(key)
        if item is None:
            return None
        return [name for name in names if name in item]

    def __contains__(self, key: Key) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
