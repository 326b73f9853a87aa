import logging
from typing import Optional, Sequence

from dynamo_conditions.condition_expression import as_attribute_list, failure_message
from dynamo_conditions.errors import ConditionalCheckFailedException
from dynamo_conditions.item_store import Item, ItemStore, Key, KeySchema

logger = logging.getLogger(__name__)


class ConditionalPut:
    """Put items into an ItemStore the way DynamoDB evaluates ``attribute_not_exists``.

    The item at the target key is selected first and the condition is evaluated
    against it. When nothing is stored there the condition passes regardless of
    its content, which is why ``attribute_not_exists(pk)``,
    ``attribute_not_exists(sk)`` and their conjunction behave identically: a
    stored item always has both key attributes.

    Only the previously stored item is evaluated, never the item being written.
    """

    def __init__(self, store: Optional[ItemStore] = None, schema: Optional[KeySchema] = None):
        self.store = store if store is not None else ItemStore()
        self.schema = schema or KeySchema()

    def put_item(self, item: Item, attribute_not_exists: Optional[Sequence[str]] = None) -> None:
        key = self.schema.key_of(item)
        requested = as_attribute_list(attribute_not_exists)

        with self.store.lock:
            present = self.store.present_attributes(key, requested)
            if present:
                message = failure_message(requested)
                logger.info(f"❌ Rejected put at {key}: {present} already exist")
                raise ConditionalCheckFailedException(message, key=key, attributes=requested)

            self.store.set(key, item)

        if present is None:
            logger.debug(f"✅ Inserted {key} (nothing to evaluate {requested} against)")
        else:
            logger.debug(f"✅ Replaced {key}")

    def get_item(self, key: Key) -> Optional[Item]:
        return self.store.get(key)

