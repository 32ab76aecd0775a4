"""Row storage backed by a DynamoDB table.

The client works against any object that offers the low-level DynamoDB
operations (``describe_table``, ``create_table``, ``get_item``, ``query``,
``put_item``, ``update_item`` and ``delete_item``), called with keyword
arguments and returning response mappings, as a boto3 DynamoDB client does.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from schemastore import slug
from schemastore.row import StoredRow, columns_to_map, item_to_row, value_to_attribute
from schemastore.storage import RowStorer

log = logging.getLogger(__name__)

KEY_TYPE = "type"
KEY_ID = "id"

ATTR_PARENT_ID = "parent_id"
ATTR_LABEL = "label"
ATTR_COLUMNS = "columns"

GSI_BY_PARENT_AND_LABEL = "ByParentAndLabel"
GSI_BY_PARENT = "ByParent"
GSI_BY_TYPE = "ByType"

LSI_BY_TYPE_AND_LABEL = "ByTypeAndLabel"
LSI_BY_TYPE_AND_PARENT = "ByTypeAndParent"

_HTTP_BAD_REQUEST = 400
_NOT_EXISTS = "attribute_not_exists(#type) AND attribute_not_exists(#id)"
_EXISTS = "attribute_exists(#type) AND attribute_exists(#id)"


class StorageError(Exception):
    """Base class for errors reported by the storage client."""

    default_message = "storage error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class CannotDeleteRowError(StorageError):
    default_message = "cannot delete row"


class CollisionParentLabelError(StorageError):
    default_message = "a row with that parent and label already exists"


class CollisionTypeLabelError(StorageError):
    default_message = "a row with that type and label already exists"


class NilQueryOutputError(StorageError):
    default_message = "something went wrong: the query output was nil"


class RowNotFoundError(StorageError):
    default_message = "row not found"


class TooManyFoundError(StorageError):
    default_message = "multiple exist where there must only be one"


def _quote(text: str) -> str:
    return json.dumps(text)


def _s(value: str) -> dict[str, str]:
    return {"S": value}


def _http_status(exc: BaseException) -> int | None:
    """Return the HTTP status carried by a service response error, if any."""
    response = getattr(exc, "response", None)
    if not isinstance(response, Mapping):
        return None
    metadata = response.get("ResponseMetadata")
    if not isinstance(metadata, Mapping):
        return None
    status = metadata.get("HTTPStatusCode")
    return status if isinstance(status, int) else None


def _key_schema(hash_key: str, range_key: str | None = None) -> list[dict[str, str]]:
    schema = [{"AttributeName": hash_key, "KeyType": "HASH"}]
    if range_key is not None:
        schema.append({"AttributeName": range_key, "KeyType": "RANGE"})
    return schema


def _index(name: str, hash_key: str, range_key: str | None = None) -> dict[str, Any]:
    return {
        "IndexName": name,
        "KeySchema": _key_schema(hash_key, range_key),
        "Projection": {"ProjectionType": "ALL"},
    }


def _items(output: Mapping[str, Any] | None) -> list[Mapping[str, Any]]:
    if output is None or output.get("Items") is None:
        raise NilQueryOutputError()
    return list(output["Items"])


def _attributes(output: Mapping[str, Any] | None) -> Mapping[str, Any]:
    if output is None or output.get("Attributes") is None:
        raise NilQueryOutputError()
    return output["Attributes"]


class DynamoDBClient(RowStorer):
    """Stores rows in a single DynamoDB table keyed by type and id."""

    def __init__(self, ddb: Any, region: str, table_name: str, key_arn: str) -> None:
        self.ddb = ddb
        self.region = region
        self.table_name = table_name
        self.key_arn = key_arn

    def create_table_if_not_exists(self) -> None:
        """Create the table with its indexes unless it already exists."""
        try:
            output = self.ddb.describe_table(TableName=self.table_name)
        except Exception as exc:
            status = _http_status(exc)
            if status is None:
                log.warning("unexpected error during DescribeTable: %s", exc)
                raise
            if status != _HTTP_BAD_REQUEST:
                log.warning("DescribeTable failed with HTTP status %d: %s", status, exc)
        else:
            if output is not None:
                table_id = (output.get("Table") or {}).get("TableId")
                log.debug("table %s exists (tableID %s)", self.table_name, table_id)
            return

        self.ddb.create_table(
            TableName=self.table_name,
            AttributeDefinitions=[
                {"AttributeName": name, "AttributeType": "S"}
                for name in (KEY_TYPE, KEY_ID, ATTR_PARENT_ID, ATTR_LABEL)
            ],
            KeySchema=_key_schema(KEY_TYPE, KEY_ID),
            GlobalSecondaryIndexes=[
                _index(GSI_BY_PARENT_AND_LABEL, ATTR_PARENT_ID, ATTR_LABEL),
                _index(GSI_BY_TYPE, KEY_TYPE),
            ],
            LocalSecondaryIndexes=[
                _index(LSI_BY_TYPE_AND_LABEL, KEY_TYPE, ATTR_LABEL),
                _index(LSI_BY_TYPE_AND_PARENT, KEY_TYPE, ATTR_PARENT_ID),
            ],
            BillingMode="PAY_PER_REQUEST",
            SSESpecification={
                "Enabled": True,
                "SSEType": "KMS",
                "KMSMasterKeyId": self.key_arn,
            },
        )

    def _key(self, row_type: str, row_id: str) -> dict[str, dict[str, str]]:
        return {KEY_TYPE: _s(row_type), KEY_ID: _s(row_id)}

    def _query_type_label(self, row_type: str, row_label: str) -> list[Mapping[str, Any]]:
        return _items(
            self.ddb.query(
                TableName=self.table_name,
                IndexName=LSI_BY_TYPE_AND_LABEL,
                KeyConditionExpression="#type = :type AND #label = :label",
                ExpressionAttributeNames={"#type": KEY_TYPE, "#label": ATTR_LABEL},
                ExpressionAttributeValues={":type": _s(row_type), ":label": _s(row_label)},
            )
        )

    def _query_parent_label(self, parent_id: str, label: str) -> list[Mapping[str, Any]]:
        return _items(
            self.ddb.query(
                TableName=self.table_name,
                IndexName=GSI_BY_PARENT_AND_LABEL,
                KeyConditionExpression="#parent_id = :parent_id AND #label = :label",
                ExpressionAttributeNames={"#parent_id": ATTR_PARENT_ID, "#label": ATTR_LABEL},
                ExpressionAttributeValues={":parent_id": _s(parent_id), ":label": _s(label)},
            )
        )

    def _ensure_label_free(self, label: str, parent_id: str) -> None:
        try:
            self.get_child(label, parent_id)
        except RowNotFoundError:
            return
        raise CollisionParentLabelError()

    def get_row_by_id(self, row_type: str, row_id: str) -> StoredRow:
        log.debug("GetRowByID %s", _quote(row_id))
        output = self.ddb.get_item(
            TableName=self.table_name,
            Key=self._key(row_type, row_id),
            ConsistentRead=True,
        )
        item = (output or {}).get("Item")
        if item is None:
            raise RowNotFoundError(f"row not found: {_quote(row_id)}")
        return item_to_row(item)

    def get_row(self, row_type: str, row_label: str) -> StoredRow:
        log.debug("GetRow %s %s", _quote(row_type), _quote(row_label))
        items = self._query_type_label(row_type, row_label)
        where = f"type {_quote(row_type)} and label {_quote(row_label)}"
        if not items:
            raise RowNotFoundError(f"row not found: {where}")
        if len(items) > 1:
            raise TooManyFoundError(f"multiple exist where there must only be one: {where}")
        return item_to_row(items[0])

    def create_row(self, row_type: str, row_label: str) -> StoredRow:
        log.debug("CreateRow %s %s", _quote(row_type), _quote(row_label))
        if self._query_type_label(row_type, row_label):
            raise CollisionTypeLabelError()

        row_id = slug.generate(row_type)
        self.ddb.put_item(
            TableName=self.table_name,
            Item={KEY_TYPE: _s(row_type), KEY_ID: _s(row_id), ATTR_LABEL: _s(row_label)},
            ExpressionAttributeNames={"#type": KEY_TYPE, "#id": KEY_ID},
            ConditionExpression=_NOT_EXISTS,
        )
        return StoredRow(type=row_type, id=row_id, label=row_label)

    def create_child(
        self,
        row_type: str,
        row_label: str,
        parent_type: str,
        parent_id: str,
        columns: Mapping[str, Any] | None,
    ) -> StoredRow:
        log.debug(
            "CreateChild %s %s %s %s",
            _quote(row_type), _quote(row_label), _quote(parent_type), _quote(parent_id),
        )
        row_id = slug.generate(row_type)
        parent = self.get_row_by_id(parent_type, parent_id)

        if self._query_parent_label(parent_id, row_label):
            raise CollisionParentLabelError()

        self.ddb.put_item(
            TableName=self.table_name,
            Item={
                KEY_TYPE: _s(row_type),
                KEY_ID: _s(row_id),
                ATTR_LABEL: _s(row_label),
                ATTR_PARENT_ID: _s(parent_id),
                ATTR_COLUMNS: {"M": columns_to_map(columns)},
            },
            ExpressionAttributeNames={"#type": KEY_TYPE, "#id": KEY_ID},
            ConditionExpression=_NOT_EXISTS,
        )
        return StoredRow(
            type=row_type,
            id=row_id,
            label=row_label,
            parent_id=parent.id,
            columns=dict(columns or {}),
        )

    def get_child(self, child_label: str, parent_id: str) -> StoredRow:
        log.debug("GetChild %s %s", _quote(child_label), _quote(parent_id))
        items = self._query_parent_label(parent_id, child_label)
        where = f"parent ID {_quote(parent_id)} and label {_quote(child_label)}"
        if not items:
            raise RowNotFoundError(f"row not found with {where}")
        if len(items) > 1:
            raise TooManyFoundError(f"multiple exist where there must only be one: {where}")
        return item_to_row(items[0])

    def list_rows(
        self, row_type: str, label_filter: str, parent_id_filter: str
    ) -> list[StoredRow]:
        log.debug(
            "ListRows %s %s %s",
            _quote(row_type), _quote(label_filter), _quote(parent_id_filter),
        )
        names = {"#type": KEY_TYPE}
        values: dict[str, Any] = {":type": _s(row_type)}
        filters = []
        if label_filter:
            filters.append("contains(#label, :label)")
            names["#label"] = ATTR_LABEL
            values[":label"] = _s(label_filter)
        if parent_id_filter:
            filters.append("#parent_id = :parent_id")
            names["#parent_id"] = ATTR_PARENT_ID
            values[":parent_id"] = _s(parent_id_filter)

        request: dict[str, Any] = {
            "TableName": self.table_name,
            "IndexName": GSI_BY_TYPE,
            "KeyConditionExpression": "#type = :type",
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": values,
        }
        if filters:
            request["FilterExpression"] = " AND ".join(filters)

        return [item_to_row(item) for item in _items(self.ddb.query(**request))]

    def update_row(self, row_type: str, row_id: str, new_label: str) -> StoredRow:
        log.debug("UpdateRow %s %s %s", _quote(row_type), _quote(row_id), _quote(new_label))
        current = self.get_row_by_id(row_type, row_id)
        self._ensure_label_free(new_label, current.parent_id)

        output = self.ddb.update_item(
            TableName=self.table_name,
            Key=self._key(row_type, row_id),
            UpdateExpression="SET #label = :new_label",
            ExpressionAttributeNames={"#label": ATTR_LABEL, "#type": KEY_TYPE, "#id": KEY_ID},
            ExpressionAttributeValues={":new_label": _s(new_label)},
            ConditionExpression=_NOT_EXISTS,
            ReturnValues="ALL_NEW",
        )
        return item_to_row(_attributes(output))

    def update_child(
        self,
        child_type: str,
        child_id: str,
        new_child_label: str,
        parent_type: str,
        new_parent_id: str,
    ) -> StoredRow:
        log.debug(
            "UpdateChild %s %s %s %s %s",
            _quote(child_type), _quote(child_id), _quote(new_child_label),
            _quote(parent_type), _quote(new_parent_id),
        )
        self.get_row_by_id(parent_type, new_parent_id)
        self._ensure_label_free(new_child_label, new_parent_id)

        output = self.ddb.update_item(
            TableName=self.table_name,
            Key=self._key(child_type, child_id),
            UpdateExpression="SET #label = :new_label, #parent_id = :new_parent_id",
            ExpressionAttributeNames={
                "#label": ATTR_LABEL,
                "#parent_id": ATTR_PARENT_ID,
                "#type": KEY_TYPE,
                "#id": KEY_ID,
            },
            ExpressionAttributeValues={
                ":new_label": _s(new_child_label),
                ":new_parent_id": _s(new_parent_id),
            },
            ConditionExpression=_NOT_EXISTS,
            ReturnValues="ALL_NEW",
        )
        return item_to_row(_attributes(output))

    def update_column(
        self, row_type: str, row_id: str, column_name: str, column_value: Any
    ) -> None:
        log.debug(
            "UpdateColumn %s %s %s %r",
            _quote(row_type), _quote(row_id), _quote(column_name), column_value,
        )
        self.ddb.update_item(
            TableName=self.table_name,
            Key=self._key(row_type, row_id),
            UpdateExpression="SET #columns.#key = :value",
            ExpressionAttributeNames={
                "#columns": ATTR_COLUMNS,
                "#key": column_name,
                "#type": KEY_TYPE,
                "#id": KEY_ID,
            },
            ExpressionAttributeValues={":value": value_to_attribute(column_value)},
            ConditionExpression=_EXISTS,
        )

    def update_columns(
        self, row_type: str, row_id: str, columns: Mapping[str, Any] | None
    ) -> None:
        log.debug("UpdateColumns %s %s", _quote(row_type), _quote(row_id))
        self.ddb.update_item(
            TableName=self.table_name,
            Key=self._key(row_type, row_id),
            UpdateExpression="SET #columns = :new_columns",
            ExpressionAttributeNames={"#columns": ATTR_COLUMNS, "#type": KEY_TYPE, "#id": KEY_ID},
            ExpressionAttributeValues={":new_columns": {"M": columns_to_map(columns)}},
            ConditionExpression=_EXISTS,
        )

    def delete_row(self, row_type: str, child_type: str, row_id: str) -> None:
        log.debug("DeleteRow %s %s %s", _quote(row_type), _quote(child_type), _quote(row_id))
        if child_type:
            children = _items(
                self.ddb.query(
                    TableName=self.table_name,
                    IndexName=LSI_BY_TYPE_AND_PARENT,
                    KeyConditionExpression="#type = :type AND #parent_id = :parent_id",
                    ExpressionAttributeNames={"#type": KEY_TYPE, "#parent_id": ATTR_PARENT_ID},
                    ExpressionAttributeValues={":type": _s(child_type), ":parent_id": _s(row_id)},
                )
            )
            if children:
                raise CannotDeleteRowError(f"{row_type} {row_id} has children: cannot delete row")

        self.ddb.delete_item(
            TableName=self.table_name,
            Key=self._key(row_type, row_id),
            ExpressionAttributeNames={"#type": KEY_TYPE, "#id": KEY_ID},
            ConditionExpression="attribute_exists(#type) and attribute_exists(#id)",
        )


def new_client(ddb: Any, region: str, table_name: str, key_arn: str) -> DynamoDBClient:
    """Build a client and make sure its table exists."""
    client = DynamoDBClient(ddb, region, table_name, key_arn)
    client.create_table_if_not_exists()
    return client