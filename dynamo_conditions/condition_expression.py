from functools import reduce
from typing import List, Optional, Sequence, Union

from boto3.dynamodb.conditions import Attr, ConditionBase


def as_attribute_list(attributes: Optional[Union[str, Sequence[str]]]) -> List[str]:
    """Normalise a predicate to a list of names; a bare string is one name."""
    if not attributes:
        return []
    if isinstance(attributes, str):
        return [attributes]
    return list(attributes)


def render_not_exists(attributes: Sequence[str]) -> str:
    """Render e.g. ``attribute_not_exists(pk) AND attribute_not_exists(sk)``.

    Names are kept in the given order, duplicates included.
    """
    return " AND ".join(f"attribute_not_exists({name})" for name in attributes)


def failure_message(attributes: Sequence[str]) -> str:
    # Lists every requested attribute, not only the ones present on the item
    return f"failed {render_not_exists(attributes)}"


def build_not_exists_condition(attributes: Optional[Sequence[str]]) -> Optional[ConditionBase]:
    """Build the boto3 condition equivalent to the rendered expression.

    Returns None for an empty predicate so the put is sent unconditionally.
    """
    if not attributes:
        return None
    conditions = [Attr(name).not_exists() for name in attributes]
    return reduce(lambda left, right: left & right, conditions)
