"""
Integration test helpers for dynapage.

This module provides utilities for setting up and managing LocalStack
resources during integration tests.
"""

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError


class LocalStackHelper:
    """
    Helper class for managing LocalStack resources in integration tests.

    Provides methods for creating tables and cleaning up resources between tests.
    """

    def __init__(self, endpoint_url: str = "http://localhost:4566", region: str = "eu-south-1"):
        """Initialize LocalStack helper with connection details."""
        self.endpoint_url = endpoint_url
        self.region = region
        self.client = boto3.client(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id="test",
            aws_secret_access_key="test",
        )

    def is_available(self) -> bool:
        """Returns True when LocalStack answers a ListTables call."""
        try:
            self.client.list_tables(Limit=1)
        except (BotoCoreError, ClientError):
            return False
        return True

    def create_table(self, table_name: str, pk_name: str = "id", pk_type: str = "S") -> None:
        """
        Create a DynamoDB table keyed on a single partition key.

        Args:
            table_name: Name of the table to create
            pk_name: Partition key attribute name
            pk_type: Partition key attribute type (S, N, B)
        """
        try:
            self.client.create_table(
                TableName=table_name,
                KeySchema=[{"AttributeName": pk_name, "KeyType": "HASH"}],
                AttributeDefinitions=[{"AttributeName": pk_name, "AttributeType": pk_type}],
                ProvisionedThroughput={"ReadCapacityUnits": 5, "WriteCapacityUnits": 5},
            )
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceInUseException":
                raise

        # Wait for table to be active
        self.client.get_waiter("table_exists").wait(TableName=table_name)

    def clear_table(self, table_name: str, pk_name: str = "id") -> None:
        """
        Delete all items from a table.

        Args:
            table_name: Name of the table to clear
            pk_name: Partition key attribute name
        """
        paginator = self.client.get_paginator("scan")
        for page in paginator.paginate(TableName=table_name):
            for item in page["Items"]:
                self.client.delete_item(TableName=table_name, Key={pk_name: item[pk_name]})

    def put_raw_item(self, table_name: str, item: dict[str, Any]) -> None:
        """Put an item already in DynamoDB JSON format."""
        self.client.put_item(TableName=table_name, Item=item)
