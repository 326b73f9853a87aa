import logging
import os
import uuid
from typing import Any, Dict, Optional, Sequence

import boto3

from dynamo_conditions.condition_expression import as_attribute_list, build_not_exists_condition, render_not_exists
from dynamo_conditions.errors import ConditionalCheckFailedException
from dynamo_conditions.item_store import Item, Key, KeySchema

logger = logging.getLogger(__name__)


class DDBReferenceTable:
    """A real DynamoDB table used as ground truth for the in-memory model.

    Each instance creates its own uniquely named table with the composite key
    schema (partition key HASH, sort key RANGE, both strings).
    """

    def __init__(
        self,
        region: str = "us-east-1",
        schema: Optional[KeySchema] = None,
        table_prefix: str = "conditions",
        endpoint_url: Optional[str] = None,
    ):
        # Support local DynamoDB via DYNAMODB_ENDPOINT (e.g., http://localhost:8000)
        endpoint_url = os.getenv("DYNAMODB_ENDPOINT") or endpoint_url
        self.schema = schema or KeySchema()
        self.dynamodb = boto3.resource(
            "dynamodb",
            region_name=region,
            endpoint_url=endpoint_url
        )
        self.table_name = f"{table_prefix}-{uuid.uuid4().hex}"
        self.table = self._create_table()

    def _create_table(self):
        table = self.dynamodb.create_table(
            TableName=self.table_name,
            KeySchema=[
                {"AttributeName": self.schema.partition_key, "KeyType": "HASH"},
                {"AttributeName": self.schema.sort_key, "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": self.schema.partition_key, "AttributeType": "S"},
                {"AttributeName": self.schema.sort_key, "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        table.wait_until_exists()
        logger.info(f"🗄️ Created table {self.table_name}")
        return table

    def put_item(self, item: Item, attribute_not_exists: Optional[Sequence[str]] = None) -> None:
        key = self.schema.key_of(item)
        requested = as_attribute_list(attribute_not_exists)
        request: Dict[str, Any] = {"Item": item}
        condition = build_not_exists_condition(requested)
        if condition is not None:
            request["ConditionExpression"] = condition

        try:
            self.table.put_item(**request)
        except self.table.meta.client.exceptions.ConditionalCheckFailedException as e:
            message = e.response.get("Error", {}).get("Message", "The conditional request failed")
            logger.info(f"❌ DynamoDB rejected put at {key} with {render_not_exists(requested)}")
            raise ConditionalCheckFailedException(message, key=key, attributes=requested) from e

    def get_item(self, key: Key) -> Optional[Item]:
        response = self.table.get_item(Key=self.schema.to_dict(key), ConsistentRead=True)
        return response.get("Item")

    def delete(self) -> None:
        self.table.delete()
        logger.info(f"🧹 Deleted table {self.table_name}")
