"""
DynamoDB-backed document store.

Every collection lives in one table: the partition key ``pk`` is
``<collection>#<key>`` and the sort key ``sk`` is the collection name.
Equality queries go through a global secondary index named
``<field>-index`` keyed on the first attribute of the query; any further
equalities are applied as filters. Index reads are eventually consistent and
may return documents that were just deleted; point reads are consistent.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from oauth_relay.clients.document_store import DocumentNotFoundError
from oauth_relay.core.config import StoreSettings

_KEY_ATTRIBUTES = ("pk", "sk")


def _from_dynamo(item: Dict[str, Any]) -> Dict[str, Any]:
    """Strip key attributes and turn integral Decimals back into ints."""
    document: Dict[str, Any] = {}
    for name, value in item.items():
        if name in _KEY_ATTRIBUTES:
            continue
        if isinstance(value, Decimal):
            value = int(value) if value == value.to_integral_value() else float(value)
        document[name] = value
    return document


class DynamoDBClient:
    """Document store operations on a single DynamoDB table."""

    def __init__(self, settings: StoreSettings, resource: Any | None = None) -> None:
        if not settings.dynamodb_table_name:
            raise ValueError("DYNAMODB_TABLE_NAME is required for the dynamodb backend.")
        self._settings = settings
        self._resource = resource or boto3.resource(
            "dynamodb", region_name=settings.region_name
        )
        self._table = self._resource.Table(settings.dynamodb_table_name)

    @staticmethod
    def _key(collection: str, key: str) -> Dict[str, str]:
        return {"pk": f"{collection}#{key}", "sk": collection}

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        response = self._table.get_item(
            Key=self._key(collection, key), ConsistentRead=True
        )
        item = response.get("Item")
        if not item:
            return None
        return _from_dynamo(item)

    def put(self, collection: str, key: str, data: Dict[str, Any]) -> None:
        self._table.put_item(Item={**data, **self._key(collection, key)})

    def update(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        names: Dict[str, str] = {}
        values: Dict[str, Any] = {}
        assignments: list[str] = []
        for index, (name, value) in enumerate(fields.items()):
            names[f"#f{index}"] = name
            values[f":v{index}"] = value
            assignments.append(f"#f{index} = :v{index}")

        try:
            self._table.update_item(
                Key=self._key(collection, key),
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression=Attr("pk").exists(),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
            )
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code == "ConditionalCheckFailedException":
                raise DocumentNotFoundError(f"{collection}/{key} does not exist") from exc
            raise

    def delete(self, collection: str, key: str) -> bool:
        response = self._table.delete_item(
            Key=self._key(collection, key), ReturnValues="ALL_OLD"
        )
        return bool(response.get("Attributes"))

    def query(
        self, collection: str, *, where: Dict[str, Any], limit: int = 1
    ) -> list[Dict[str, Any]]:
        (index_field, index_value), *rest = where.items()
        condition = Attr("sk").eq(collection)
        for field, value in rest:
            condition = condition & Attr(field).eq(value)

        # Limit is applied before FilterExpression, so trim afterwards.
        response = self._table.query(
            IndexName=f"{index_field}-index",
            KeyConditionExpression=Key(index_field).eq(index_value),
            FilterExpression=condition,
        )
        items = response.get("Items", [])
        return [_from_dynamo(item) for item in items[:limit]]


__all__ = ["DynamoDBClient"]
