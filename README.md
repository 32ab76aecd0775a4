# schemastore

`schemastore` keeps typed rows in a single DynamoDB-style table. Each row has
a type, a generated id, a label and, optionally, a parent row and a map of
columns. The store checks labels for uniqueness, refuses to delete a row that
still has children of a given type, and can create its table, indexes and
server-side KMS encryption when the table does not exist yet.

## Installation

```
pip install schemastore
```

The package has no runtime dependencies. You pass in the DynamoDB client
object yourself: any object offering `describe_table`, `create_table`,
`get_item`, `query`, `put_item`, `update_item` and `delete_item`, called with
keyword arguments and returning response mappings, as a boto3 DynamoDB client
does.

## Modules

- `schemastore.slug` – `generate(prefix)` returns ids such as
  `team_qhzkwbnmre`: the prefix, an underscore and ten random lower-case
  letters.
- `schemastore.storage` – the `Row` protocol and the abstract `RowStorer`
  class that a storage backend implements.
- `schemastore.row` – the `StoredRow` dataclass, plus `item_to_row`,
  `value_to_attribute` and `columns_to_map`, which convert between rows and
  DynamoDB attribute values such as `{"S": "text"}`. `item_to_row` raises
  `AttributeDecodeError` for items it cannot decode.
- `schemastore.dynamodb` – `DynamoDBClient`, the DynamoDB backend,
  `new_client`, and the errors it raises, all subclasses of `StorageError`:
  `RowNotFoundError`, `TooManyFoundError`, `CollisionTypeLabelError`,
  `CollisionParentLabelError`, `CannotDeleteRowError` and
  `NilQueryOutputError`.
- `schemastore.provider` – `SchemaProvider`, which checks a `ProviderConfig`
  and builds a storage client from it. Problems are reported as `Diagnostic`
  entries on a `ConfigurationError`.

## Usage

```python
from schemastore.dynamodb import new_client, RowNotFoundError

store = new_client(ddb, "us-east-1", "schema-rows", "arn:aws:kms:us-east-1:000000000000:key/placeholder")

team = store.create_row("team", "platform")
service = store.create_child("service", "billing", "team", team.id, {"tier": "gold"})

store.update_column("service", service.id, "owners", ["alice", "bob"])
for row in store.list_rows("service", "bill", team.id):
    print(row.id, row.label, row.columns)

try:
    store.get_child("missing", team.id)
except RowNotFoundError as exc:
    print(exc)

store.delete_row("service", "", service.id)
store.delete_row("team", "service", team.id)
```

`new_client` calls `create_table_if_not_exists`: if `describe_table` succeeds
nothing is created; if it fails with an error carrying an HTTP status, the
table is created; any other error is raised.

`list_rows` treats an empty label or parent filter as "no filter"; the label
filter matches substrings. Pass an empty `child_type` to `delete_row` to skip
the check for children.

Column values are encoded as strings (`{"S": ...}`) or lists of strings
(`{"SS": [...]}`); any other value is encoded as `None`.

## Provider

```python
from schemastore.provider import SchemaProvider, ProviderConfig, ConfigurationError, UNKNOWN

provider = SchemaProvider("1.0.0", "abc1234", client_factory)
config = ProviderConfig(profile="default", region="us-east-1",
                        table_name="schema-rows", kms_key_arn="arn:aws:kms:us-east-1:000000000000:key/placeholder")
try:
    client = provider.configure(config)
except ConfigurationError as exc:
    for diagnostic in exc.diagnostics:
        print(diagnostic.summary, diagnostic.attribute)
```

Any setting may be `UNKNOWN`; `configure` then raises `ConfigurationError`
with one diagnostic per unknown setting. Otherwise `client_factory` is called
with the profile, region, table name and key ARN, and its result is returned;
an exception from the factory becomes a `ConfigurationError` too.
`metadata()` gives the type name `schema` and the version `"<version>-<commit>"`,
and `schema()` describes the four required string settings.

## What the package does not do

- It has no command-line program and does not serve the provider to any
  infrastructure tool; `SchemaProvider` is a plain Python object.
- It does not build an AWS client or read AWS profiles: the DynamoDB client,
  or the `client_factory` that builds one, comes from you.
- `data_sources()` and `resources()` return empty lists.

## Running the tests

```
pip install -e ".[test]"
pytest
```