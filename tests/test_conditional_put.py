"""The in-memory conditional put, and why pk, sk and pk AND sk checks are equivalent.

DynamoDB selects the item at the target key first and only then evaluates the
condition. Nothing stored there means nothing to fail against.
"""
import threading

import pytest

from dynamo_conditions.conditional_put import ConditionalPut
from dynamo_conditions.errors import ConditionalCheckFailedException, InvalidItemKeyError
from dynamo_conditions.item_store import ItemStore, Key, KeySchema

ORIGINAL = {"pk": "123", "sk": "abc", "attribute": "value"}
REPLACEMENT = {"pk": "123", "sk": "abc", "attribute": "replaced-value"}


def test_put_no_condition(dynamo):
    dynamo.put_item(ORIGINAL)
    assert dynamo.get_item(Key("123", "abc")) == ORIGINAL


def test_replace_no_condition(dynamo):
    dynamo.put_item(ORIGINAL)
    dynamo.put_item(REPLACEMENT)
    assert dynamo.get_item(Key("123", "abc")) == REPLACEMENT


def test_empty_condition_list_always_succeeds(dynamo):
    dynamo.put_item(ORIGINAL, [])
    dynamo.put_item(REPLACEMENT, [])
    assert dynamo.get_item(Key("123", "abc")) == REPLACEMENT


def test_put_if_irrelevant_attribute_not_exists(dynamo):
    dynamo.put_item(ORIGINAL, ["irrelevant"])
    assert dynamo.get_item(Key("123", "abc")) == ORIGINAL


def test_replace_if_irrelevant_attribute_not_exists(dynamo):
    dynamo.put_item(ORIGINAL, ["irrelevant"])
    dynamo.put_item(REPLACEMENT, ["someAttributeNeverSet"])
    assert dynamo.get_item(Key("123", "abc")) == REPLACEMENT


@pytest.mark.parametrize("condition", [["pk"], ["sk"], ["pk", "sk"], ["attribute"], ["pk", "irrelevant"]])
def test_absent_key_passes_any_condition(dynamo, condition):
    dynamo.put_item(ORIGINAL, condition)
    assert dynamo.get_item(Key("123", "abc")) == ORIGINAL


@pytest.mark.parametrize("condition, message", [
    (["pk"], "failed attribute_not_exists(pk)"),
    (["sk"], "failed attribute_not_exists(sk)"),
    (["pk", "sk"], "failed attribute_not_exists(pk) AND attribute_not_exists(sk)"),
])
def test_key_attribute_checks_fail_identically_on_existing_item(dynamo, store, condition, message):
    dynamo.put_item(ORIGINAL, condition)

    with pytest.raises(ConditionalCheckFailedException) as exc:
        dynamo.put_item(REPLACEMENT, condition)

    assert exc.value.message == message
    assert str(exc.value) == message
    assert exc.value.key == Key("123", "abc")
    assert exc.value.attributes == condition
    assert store.get(Key("123", "abc")) == ORIGINAL
    assert len(store) == 1


def test_non_key_attribute_present_on_existing_item_fails(dynamo):
    dynamo.put_item(ORIGINAL)
    with pytest.raises(ConditionalCheckFailedException):
        dynamo.put_item(REPLACEMENT, ["attribute"])


def test_message_lists_all_requested_attributes_in_caller_order(dynamo):
    dynamo.put_item({"pk": "1", "sk": "1"})

    with pytest.raises(ConditionalCheckFailedException) as exc:
        dynamo.put_item({"pk": "1", "sk": "1"}, ["irrelevant", "sk", "other"])

    assert exc.value.message == (
        "failed attribute_not_exists(irrelevant) AND attribute_not_exists(sk) AND attribute_not_exists(other)"
    )


def test_condition_is_not_evaluated_against_the_new_item(dynamo):
    dynamo.put_item({"pk": "1", "sk": "1"})
    dynamo.put_item({"pk": "1", "sk": "1", "flag": True}, ["flag"])

    with pytest.raises(ConditionalCheckFailedException):
        dynamo.put_item({"pk": "1", "sk": "1"}, ["flag"])


def test_replacement_is_full_not_merged(dynamo):
    dynamo.put_item({"pk": "1", "sk": "1", "a": 1, "b": 2})
    dynamo.put_item({"pk": "1", "sk": "1", "c": 3}, ["irrelevant"])
    assert dynamo.get_item(Key("1", "1")) == {"pk": "1", "sk": "1", "c": 3}


def test_end_to_end_pk_not_exists(dynamo, store):
    dynamo.put_item({"pk": "1", "sk": "1"})
    # (1, 2) does not exist yet, so there is nothing to evaluate the condition against
    dynamo.put_item({"pk": "1", "sk": "2"}, ["pk"])

    with pytest.raises(ConditionalCheckFailedException):
        dynamo.put_item({"pk": "1", "sk": "1", "new": "x"}, ["pk"])

    assert store.get(Key("1", "1")) == {"pk": "1", "sk": "1"}
    assert store.get(Key("1", "2")) == {"pk": "1", "sk": "2"}
    assert len(store) == 2


def test_end_to_end_sk_not_exists(dynamo, store):
    dynamo.put_item({"pk": "1", "sk": "1"})
    dynamo.put_item({"pk": "2", "sk": "1"}, ["sk"])

    with pytest.raises(ConditionalCheckFailedException):
        dynamo.put_item({"pk": "1", "sk": "1"}, ["sk"])

    assert len(store) == 2


def test_missing_key_attribute_fails_fast_without_touching_store(dynamo, store):
    with pytest.raises(InvalidItemKeyError):
        dynamo.put_item({"pk": "1", "attribute": "value"}, ["pk"])
    assert len(store) == 0


def test_stores_are_independent():
    first, second = ConditionalPut(), ConditionalPut()
    first.put_item({"pk": "1", "sk": "1"})
    second.put_item({"pk": "1", "sk": "1"}, ["pk"])

    assert len(first.store) == 1
    assert len(second.store) == 1


def test_custom_key_schema():
    dynamo = ConditionalPut(ItemStore(), KeySchema("id", "version"))
    dynamo.put_item({"id": "a", "version": "1"})

    with pytest.raises(ConditionalCheckFailedException) as exc:
        dynamo.put_item({"id": "a", "version": "1"}, ["version"])
    assert exc.value.message == "failed attribute_not_exists(version)"

    dynamo.put_item({"id": "a", "version": "2"}, ["id"])
    assert dynamo.get_item(Key("a", "2")) == {"id": "a", "version": "2"}


def test_bare_string_condition_is_a_single_attribute_name(dynamo, store):
    dynamo.put_item({"pk": "1", "sk": "1"})

    with pytest.raises(ConditionalCheckFailedException) as exc:
        dynamo.put_item({"pk": "1", "sk": "1", "attribute": "overwrite"}, "pk")

    assert exc.value.message == "failed attribute_not_exists(pk)"
    assert exc.value.attributes == ["pk"]
    assert store.get(Key("1", "1")) == {"pk": "1", "sk": "1"}


def test_item_holding_uncopyable_value_commits(dynamo):
    handle = threading.Lock()
    dynamo.put_item({"pk": "1", "sk": "1", "handle": handle}, ["pk"])

    assert dynamo.get_item(Key("1", "1"))["handle"] is handle
    with pytest.raises(ConditionalCheckFailedException):
        dynamo.put_item({"pk": "1", "sk": "1"}, ["handle"])
