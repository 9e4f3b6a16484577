"""DynamoDB-backed document store for multi-instance deployments."""

from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import ClientError

from infrastructure.logging import get_module_logger
from infrastructure.persistence.errors import (
    ConditionFailedError,
    DocumentNotFoundError,
    DuplicateKeyError,
    PersistenceError,
)
from infrastructure.persistence.store import DocumentStore

logger = get_module_logger()

PARTITION_KEY = "pk"
SORT_KEY = "sk"
DOCUMENT_ATTRIBUTE = "doc"
COUNTER_ATTRIBUTE = "count"
EXPIRY_ATTRIBUTE = "expires_at"

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _to_dynamodb_value(value: Any) -> Any:
    """Convert floats to Decimal recursively, DynamoDB rejects floats."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _to_dynamodb_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_dynamodb_value(v) for v in value]
    return value


def _from_dynamodb_value(value: Any) -> Any:
    """Convert Decimal numbers back to int or float recursively."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _from_dynamodb_value(v) for k, v in value.items()}
    if isinstance(value, (list, set)):
        return [_from_dynamodb_value(v) for v in value]
    return value


def _serialize(value: Any) -> Dict[str, Any]:
    return _serializer.serialize(_to_dynamodb_value(value))


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


class DynamoDBDocumentStore(DocumentStore):
    """Single-table DynamoDB document store.

    Table Schema:
        PK: pk (String) - collection name
        SK: sk (String) - document key
        Attributes:
            doc (Map) - the document
            count (Number) - counter value for increment_if_below documents
            expires_at (Number) - counter expiry, usable as the table TTL attribute

    Uniqueness, compare-and-set and counters all rely on conditional
    writes, so concurrent workers on separate instances stay consistent.

    Args:
        table_name: DynamoDB table name
        region_name: AWS region
        endpoint_url: Optional endpoint override (local DynamoDB)
        client: Optional preconfigured boto3 DynamoDB client
    """

    def __init__(
        self,
        table_name: str,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client: Any = None,
    ):
        self.table_name = table_name
        self._client = client or boto3.client(
            "dynamodb", region_name=region_name, endpoint_url=endpoint_url
        )
        logger.info(
            "initialized_dynamodb_document_store",
            table_name=table_name,
            region=region_name,
            endpoint_url=endpoint_url,
        )

    def _key(self, collection: str, key: str) -> Dict[str, Any]:
        return {PARTITION_KEY: {"S": collection}, SORT_KEY: {"S": key}}

    def _item_to_document(self, item: Dict[str, Any]) -> Dict[str, Any]:
        document: Dict[str, Any] = {}
        if DOCUMENT_ATTRIBUTE in item:
            document = _from_dynamodb_value(
                _deserializer.deserialize(item[DOCUMENT_ATTRIBUTE])
            )
        if COUNTER_ATTRIBUTE in item:
            document[COUNTER_ATTRIBUTE] = int(item[COUNTER_ATTRIBUTE]["N"])
        if EXPIRY_ATTRIBUTE in item:
            document[EXPIRY_ATTRIBUTE] = int(item[EXPIRY_ATTRIBUTE]["N"])
        return document

    def _fail(self, operation: str, collection: str, key: str, error: ClientError):
        logger.error(
            "dynamodb_operation_failed",
            operation=operation,
            table_name=self.table_name,
            collection=collection,
            key=key,
            error_code=_error_code(error),
            error=str(error),
        )
        raise PersistenceError(f"DynamoDB {operation} failed: {error}") from error

    def insert(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        item = self._key(collection, key)
        item[DOCUMENT_ATTRIBUTE] = _serialize(document)
        try:
            self._client.put_item(
                TableName=self.table_name,
                Item=item,
                ConditionExpression=f"attribute_not_exists({PARTITION_KEY})",
            )
        except ClientError as e:
            if _error_code(e) == "ConditionalCheckFailedException":
                raise DuplicateKeyError(collection, key) from e
            self._fail("insert", collection, key, e)

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        try:
            response = self._client.get_item(
                TableName=self.table_name,
                Key=self._key(collection, key),
                ConsistentRead=True,
            )
        except ClientError as e:
            self._fail("get", collection, key, e)
        item = response.get("Item")
        if not item:
            return None
        return self._item_to_document(item)

    def put(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        item = self._key(collection, key)
        item[DOCUMENT_ATTRIBUTE] = _serialize(document)
        try:
            self._client.put_item(TableName=self.table_name, Item=item)
        except ClientError as e:
            self._fail("put", collection, key, e)

    def update(
        self,
        collection: str,
        key: str,
        changes: Dict[str, Any],
        expected: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        names = {"#doc": DOCUMENT_ATTRIBUTE}
        values: Dict[str, Any] = {}
        assignments = []
        for index, (field, value) in enumerate(changes.items()):
            names[f"#c{index}"] = field
            values[f":c{index}"] = _serialize(value)
            assignments.append(f"#doc.#c{index} = :c{index}")

        conditions = [f"attribute_exists({PARTITION_KEY})"]
        for index, (field, value) in enumerate((expected or {}).items()):
            names[f"#e{index}"] = field
            values[f":e{index}"] = _serialize(value)
            if value is None:
                conditions.append(
                    f"(attribute_not_exists(#doc.#e{index}) OR #doc.#e{index} = :e{index})"
                )
            else:
                conditions.append(f"#doc.#e{index} = :e{index}")

        try:
            response = self._client.update_item(
                TableName=self.table_name,
                Key=self._key(collection, key),
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression=" AND ".join(conditions),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if _error_code(e) != "ConditionalCheckFailedException":
                self._fail("update", collection, key, e)
            if self.get(collection, key) is None:
                raise DocumentNotFoundError(collection, key) from e
            raise ConditionFailedError(collection, key) from e
        return self._item_to_document(response.get("Attributes", {}))

    def delete(self, collection: str, key: str) -> bool:
        try:
            response = self._client.delete_item(
                TableName=self.table_name,
                Key=self._key(collection, key),
                ReturnValues="ALL_OLD",
            )
        except ClientError as e:
            self._fail("delete", collection, key, e)
        return bool(response.get("Attributes"))

    def _query_items(self, collection: str) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        kwargs: Dict[str, Any] = {
            "TableName": self.table_name,
            "KeyConditionExpression": "#pk = :pk",
            "ExpressionAttributeNames": {"#pk": PARTITION_KEY},
            "ExpressionAttributeValues": {":pk": {"S": collection}},
            "ConsistentRead": True,
        }
        while True:
            try:
                response = self._client.query(**kwargs)
            except ClientError as e:
                self._fail("query", collection, "*", e)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    def list(
        self, collection: str, filters: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        documents = [self._item_to_document(item) for item in self._query_items(collection)]
        if filters:
            documents = [
                doc
                for doc in documents
                if all(doc.get(field) == value for field, value in filters.items())
            ]
        return documents

    def increment_if_below(
        self,
        collection: str,
        key: str,
        limit: int,
        expires_at: Optional[int] = None,
    ) -> Optional[int]:
        if limit <= 0:
            return None
        names = {"#count": COUNTER_ATTRIBUTE}
        values = {
            ":zero": {"N": "0"},
            ":one": {"N": "1"},
            ":limit": {"N": str(limit)},
        }
        update = "SET #count = if_not_exists(#count, :zero) + :one"
        if expires_at is not None:
            names["#expires"] = EXPIRY_ATTRIBUTE
            values[":expires"] = {"N": str(int(expires_at))}
            update += ", #expires = :expires"
        try:
            response = self._client.update_item(
                TableName=self.table_name,
                Key=self._key(collection, key),
                UpdateExpression=update,
                ConditionExpression="attribute_not_exists(#count) OR #count < :limit",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="UPDATED_NEW",
            )
        except ClientError as e:
            if _error_code(e) == "ConditionalCheckFailedException":
                return None
            self._fail("increment", collection, key, e)
        return int(response["Attributes"][COUNTER_ATTRIBUTE]["N"])

    def decrement(self, collection: str, key: str) -> Optional[int]:
        try:
            response = self._client.update_item(
                TableName=self.table_name,
                Key=self._key(collection, key),
                UpdateExpression="SET #count = #count - :one",
                ConditionExpression="#count > :zero",
                ExpressionAttributeNames={"#count": COUNTER_ATTRIBUTE},
                ExpressionAttributeValues={":zero": {"N": "0"}, ":one": {"N": "1"}},
                ReturnValues="UPDATED_NEW",
            )
        except ClientError as e:
            if _error_code(e) == "ConditionalCheckFailedException":
                return None
            self._fail("decrement", collection, key, e)
        return int(response["Attributes"][COUNTER_ATTRIBUTE]["N"])

    def purge_expired(self, collection: str, now: float) -> int:
        """Delete expired documents with a conditional delete per item.

        The expiry is read from the top-level ``expires_at`` attribute of
        counters or from the ``expires_at`` field of the document, and the
        delete is skipped when the value moved past ``now`` in between.
        """
        deleted = 0
        for item in self._query_items(collection):
            expires_at = self._item_to_document(item).get(EXPIRY_ATTRIBUTE)
            if expires_at is None or expires_at > now:
                continue
            key = item[SORT_KEY]["S"]
            try:
                self._client.delete_item(
                    TableName=self.table_name,
                    Key=self._key(collection, key),
                    ConditionExpression="#expires <= :now OR #doc.#expires <= :now",
                    ExpressionAttributeNames={
                        "#expires": EXPIRY_ATTRIBUTE,
                        "#doc": DOCUMENT_ATTRIBUTE,
                    },
                    ExpressionAttributeValues={":now": _serialize(now)},
                )
            except ClientError as e:
                if _error_code(e) == "ConditionalCheckFailedException":
                    continue
                self._fail("purge", collection, key, e)
            deleted += 1
        logger.info("dynamodb_expired_purged", collection=collection, deleted=deleted)
        return deleted

    def clear(self, collection: str) -> int:
        deleted = 0
        for item in self._query_items(collection):
            if self.delete(collection, item[SORT_KEY]["S"]):
                deleted += 1
        logger.info("dynamodb_collection_cleared", collection=collection, deleted=deleted)
        return deleted
