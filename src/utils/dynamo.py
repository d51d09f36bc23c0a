"""
DynamoDB utility functions for data access.
"""
import os
from typing import Dict, List, Optional, Any
import boto3
from boto3.dynamodb.conditions import Key


def get_table_name() -> str:
    """
    Resolve the tracker table name from the environment.

    Raises:
        EnvironmentError: If TRACKER_TABLE_NAME environment variable is not set
    """
    try:
        return os.environ['TRACKER_TABLE_NAME']
    except KeyError:
        raise EnvironmentError(
            "TRACKER_TABLE_NAME environment variable not set. "
            "This variable must be set to the DynamoDB table name."
        )


class DynamoDBClient:
    """Client for interacting with DynamoDB table."""

    def __init__(self, table_name: str, table: Optional[Any] = None):
        if table is None:
            table = boto3.resource('dynamodb').Table(table_name)
        self.table = table

    def put_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Put a single item into the table.

        Args:
            item: Dictionary containing item attributes

        Returns:
            Response from DynamoDB
        """
        return self.table.put_item(Item=item)

    def get_item(self, key: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """
        Get a single item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Item if found, None otherwise
        """
        response = self.table.get_item(Key=key)
        return response.get('Item')

    def query_items(
        self,
        partition_key: str,
        partition_value: str,
        sort_key_prefix: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Query items by partition key, optionally narrowed to a sort key prefix.

        Follows LastEvaluatedKey so callers always get the full result set.
        """
        key_condition = Key(partition_key).eq(partition_value)
        if sort_key_prefix:
            key_condition = key_condition & Key('SK').begins_with(sort_key_prefix)

        items = []
        kwargs = {"KeyConditionExpression": key_condition}
        while True:
            response = self.table.query(**kwargs)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    def delete_item(self, key: Dict[str, str]) -> Dict[str, Any]:
        """
        Delete an item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Response from DynamoDB
        """
        return self.table.delete_item(Key=key)

    def delete_items(self, keys: List[Dict[str, str]]) -> None:
        """Delete several items with a batch writer."""
        with self.table.batch_writer() as batch:
            for key in keys:
                batch.delete_item(Key=key)


def create_pk(user_id: str) -> str:
    """Create partition key from user ID."""
    return f"USER#{user_id}"


KV_PREFIX = "KV#"


def create_kv_sk(key: str) -> str:
    """
    Create sort key for a key/value store entry.

    Args:
        key: Application or cache key

    Returns:
        Sort key in format "KV#{key}"
    """
    return f"{KV_PREFIX}{key}"
