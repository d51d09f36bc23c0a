"""
Key/value persistence boundary.

Every payload is a JSON string. Services receive a store through their
constructor; nothing here is a process-wide singleton.
"""
from typing import Dict, List, Optional, Protocol

from aws_lambda_powertools import Logger

from src.utils.dynamo import (
    DynamoDBClient,
    KV_PREFIX,
    create_kv_sk,
    create_pk,
    get_table_name,
)

logger = Logger()


class KeyValueStore(Protocol):
    """Minimal string key/value interface the services depend on."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...

    def multi_remove(self, keys: List[str]) -> None:
        ...

    def get_all_keys(self) -> List[str]:
        ...


class InMemoryKeyValueStore:
    """Dictionary-backed store for local runs and tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def multi_remove(self, keys: List[str]) -> None:
        for key in keys:
            self._items.pop(key, None)

    def get_all_keys(self) -> List[str]:
        return list(self._items)


class DynamoKeyValueStore:
    """
    Store scoped to one user's partition in the tracker table.

    Each key becomes an item with PK "USER#{user_id}", SK "KV#{key}" and the
    JSON payload in the "value" attribute.
    """

    def __init__(self, client: DynamoDBClient, user_id: str):
        self.client = client
        self.pk = create_pk(user_id)

    def _key(self, key: str) -> Dict[str, str]:
        return {"PK": self.pk, "SK": create_kv_sk(key)}

    def get_item(self, key: str) -> Optional[str]:
        item = self.client.get_item(self._key(key))
        if not item:
            return None
        return item.get("value")

    def set_item(self, key: str, value: str) -> None:
        self.client.put_item({**self._key(key), "value": value})

    def remove_item(self, key: str) -> None:
        self.client.delete_item(self._key(key))

    def multi_remove(self, keys: List[str]) -> None:
        if keys:
            self.client.delete_items([self._key(key) for key in keys])

    def get_all_keys(self) -> List[str]:
        items = self.client.query_items(
            partition_key="PK",
            partition_value=self.pk,
            sort_key_prefix=KV_PREFIX
        )
        return [item["SK"][len(KV_PREFIX):] for item in items]


def create_store(user_id: str) -> DynamoKeyValueStore:
    """
    Build a DynamoDB-backed store for a user.

    Raises:
        EnvironmentError: If TRACKER_TABLE_NAME is not set
    """
    table_name = get_table_name()
    logger.debug("Creating key/value store", extra={"table": table_name, "user_id": user_id})
    return DynamoKeyValueStore(DynamoDBClient(table_name), user_id)
