"""
Shared pytest fixtures and configuration for dynapage tests.

This module provides common fixtures used across unit and integration tests,
including mocked boto3 clients, an in-memory storage facade, LocalStack clients
and sample entities.
"""

import os
from unittest.mock import MagicMock

import boto3
import pytest

from tests.helpers.entities import ProductRepository, make_products
from tests.helpers.memory_table import InMemoryTable


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "integration: Integration tests against LocalStack")
    config.addinivalue_line("markers", "slow: Slow tests that may take longer")


@pytest.fixture
def mock_client():
    """
    Creates a fully mocked boto3 DynamoDB client.

    Defaults describe an empty table: no items, ItemCount 0.
    """
    client = MagicMock()
    client.get_paginator.return_value.paginate.return_value = [{"Items": []}]
    client.scan.return_value = {"Items": []}
    client.get_item.return_value = {}
    client.describe_table.return_value = {"Table": {"ItemCount": 0}}
    return client


@pytest.fixture
def product_repository(mock_client):
    """A ProductRepository bound to the mocked client."""
    return ProductRepository(client=mock_client)


@pytest.fixture
def memory_table_factory():
    """Builds an InMemoryTable holding products '1'..'count'."""

    def factory(count: int, **kwargs) -> InMemoryTable:
        return InMemoryTable(make_products(count), **kwargs)

    return factory


# Integration Test Fixtures


@pytest.fixture(scope="session")
def localstack_endpoint() -> str:
    """Get LocalStack endpoint URL from environment or default."""
    return os.getenv("LOCALSTACK_ENDPOINT", "http://localhost:4566")


@pytest.fixture(scope="session")
def localstack_client(localstack_endpoint: str):
    """
    Creates a boto3 client connected to LocalStack.

    This fixture is session-scoped to avoid creating multiple clients.
    """
    return boto3.client(
        "dynamodb",
        endpoint_url=localstack_endpoint,
        region_name="eu-south-1",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )


@pytest.fixture(scope="session")
def localstack_helper(localstack_endpoint: str):
    """Provides a LocalStackHelper instance, skipping when LocalStack is down."""
    from tests.helpers.localstack import LocalStackHelper

    helper = LocalStackHelper(endpoint_url=localstack_endpoint)
    if not helper.is_available():
        pytest.skip(f"LocalStack not reachable at {localstack_endpoint}")
    return helper


@pytest.fixture
def integration_repository(localstack_helper, localstack_client):
    """
    A ProductRepository on a fresh, empty LocalStack table.

    The table is created if needed and emptied before and after each test.
    """
    table_name = ProductRepository.Meta.table_name
    localstack_helper.create_table(table_name=table_name)
    localstack_helper.clear_table(table_name=table_name)

    yield ProductRepository(client=localstack_client)

    localstack_helper.clear_table(table_name=table_name)
