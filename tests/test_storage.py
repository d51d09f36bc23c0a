"""
Tests for key/value store implementations.
"""
import pytest
from unittest.mock import MagicMock, Mock, patch

from src.utils.dynamo import DynamoDBClient, create_kv_sk, create_pk, get_table_name
from src.utils.storage import DynamoKeyValueStore, InMemoryKeyValueStore, create_store


@pytest.fixture
def table():
    return MagicMock()


@pytest.fixture
def dynamo_store(table):
    return DynamoKeyValueStore(DynamoDBClient("TrackerTable-test", table=table), "123")


def test_in_memory_store():
    store = InMemoryKeyValueStore({"a": "1"})
    store.set_item("b", "2")

    assert store.get_item("a") == "1"
    assert sorted(store.get_all_keys()) == ["a", "b"]

    store.multi_remove(["a", "missing"])
    store.remove_item("b")
    assert store.get_all_keys() == []
    assert store.get_item("a") is None


def test_keys():
    assert create_pk("123") == "USER#123"
    assert create_kv_sk("cycle_data") == "KV#cycle_data"


def test_dynamo_get_item(dynamo_store, table):
    table.get_item.return_value = {"Item": {"PK": "USER#123", "SK": "KV#cycle_data", "value": "{}"}}

    assert dynamo_store.get_item("cycle_data") == "{}"
    table.get_item.assert_called_once_with(Key={"PK": "USER#123", "SK": "KV#cycle_data"})


def test_dynamo_get_missing_item(dynamo_store, table):
    table.get_item.return_value = {}
    assert dynamo_store.get_item("cycle_data") is None


def test_dynamo_set_item(dynamo_store, table):
    dynamo_store.set_item("daily_records", "[]")

    table.put_item.assert_called_once_with(
        Item={"PK": "USER#123", "SK": "KV#daily_records", "value": "[]"}
    )


def test_dynamo_remove_items(dynamo_store, table):
    batch = Mock()
    table.batch_writer.return_value.__enter__.return_value = batch

    dynamo_store.remove_item("a")
    dynamo_store.multi_remove(["b", "c"])
    dynamo_store.multi_remove([])

    table.delete_item.assert_called_once_with(Key={"PK": "USER#123", "SK": "KV#a"})
    assert batch.delete_item.call_count == 2
    table.batch_writer.assert_called_once()


def test_dynamo_get_all_keys_paginates(dynamo_store, table):
    """Test every page of the partition query is read."""
    table.query.side_effect = [
        {"Items": [{"SK": "KV#cycle_data"}], "LastEvaluatedKey": {"PK": "USER#123", "SK": "KV#cycle_data"}},
        {"Items": [{"SK": "KV#__smart_cache__predictions:2024-01-10"}]},
    ]

    assert dynamo_store.get_all_keys() == ["cycle_data", "__smart_cache__predictions:2024-01-10"]
    assert table.query.call_count == 2
    assert "ExclusiveStartKey" in table.query.call_args.kwargs


def test_table_name_required(monkeypatch):
    monkeypatch.delenv("TRACKER_TABLE_NAME", raising=False)

    with pytest.raises(EnvironmentError):
        get_table_name()


def test_create_store(monkeypatch):
    monkeypatch.setenv("TRACKER_TABLE_NAME", "TrackerTable-prod")

    with patch("src.utils.dynamo.boto3") as mock_boto3:
        store = create_store("42")

    mock_boto3.resource.return_value.Table.assert_called_once_with("TrackerTable-prod")
    assert store.pk == "USER#42"
