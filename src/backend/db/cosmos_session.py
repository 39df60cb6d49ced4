"""
Azure Cosmos DB session management for document storage.

Uses async Cosmos DB SDK with DefaultAzureCredential for RBAC authentication.
This module provides a unified client for all Cosmos DB operations.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from azure.core import MatchConditions
from azure.core.exceptions import ResourceNotFoundError, ServiceRequestError, ServiceResponseError
from azure.cosmos.aio import ContainerProxy, CosmosClient, DatabaseProxy
from azure.cosmos.exceptions import CosmosAccessConditionFailedError, CosmosClientTimeoutError
from azure.identity.aio import DefaultAzureCredential

from core.config import settings
from core.exceptions import ConflictError, GatewayError

logger = logging.getLogger(__name__)

# Container names
USERS_CONTAINER = "users"
EMAIL_LOOKUP_CONTAINER = "email-lookup"
CNIC_LOOKUP_CONTAINER = "cnic-lookup"
MOBILE_LOOKUP_CONTAINER = "mobile-lookup"
COMPLAINTS_CONTAINER = "complaints"
NOTIFICATIONS_CONTAINER = "notifications"
FEEDBACK_CONTAINER = "feedback"
LOCATIONS_CONTAINER = "locations"

# Transactional batches are limited to 100 operations per partition
MAX_BATCH_OPERATIONS = 100

# Global client instances (lazy-initialized)
_cosmos_client: CosmosClient | None = None
_database: DatabaseProxy | None = None
_credential: DefaultAzureCredential | None = None


async def get_cosmos_client() -> CosmosClient:
    """
    Get or create the Cosmos DB client.

    Supports two authentication modes:
    1. Connection string (for local development with Cosmos DB Emulator)
    2. DefaultAzureCredential/RBAC (for Azure deployment)

    The client is singleton and reused across requests.

    Returns:
        CosmosClient: Async Cosmos DB client
    """
    global _cosmos_client, _credential

    if _cosmos_client is None:
        if settings.AZURE_COSMOS_CONNECTION_STRING:
            # Format: AccountEndpoint=https://...;AccountKey=...;
            conn_parts = dict(
                part.split("=", 1) for part in settings.AZURE_COSMOS_CONNECTION_STRING.split(";") if "=" in part
            )
            endpoint = conn_parts.get("AccountEndpoint", "")
            key = conn_parts.get("AccountKey", "")

            if not endpoint or not key:
                raise ValueError("AZURE_COSMOS_CONNECTION_STRING must contain AccountEndpoint and AccountKey")

            # Emulator uses a self-signed certificate
            _cosmos_client = CosmosClient(
                url=endpoint,
                credential=key,
                connection_verify=not settings.AZURE_COSMOS_DISABLE_SSL,
                connection_timeout=settings.AZURE_COSMOS_TIMEOUT_SECONDS,
                read_timeout=settings.AZURE_COSMOS_TIMEOUT_SECONDS,
                timeout=settings.AZURE_COSMOS_TIMEOUT_SECONDS,
            )
            logger.info(
                f"Initialized Cosmos DB client for {endpoint} (connection string mode, "
                f"SSL verification: {not settings.AZURE_COSMOS_DISABLE_SSL})"
            )
        else:
            if not settings.AZURE_COSMOS_ENDPOINT:
                raise ValueError("Either AZURE_COSMOS_ENDPOINT or AZURE_COSMOS_CONNECTION_STRING must be set")

            _credential = DefaultAzureCredential()
            _cosmos_client = CosmosClient(
                url=settings.AZURE_COSMOS_ENDPOINT,
                credential=_credential,
                connection_timeout=settings.AZURE_COSMOS_TIMEOUT_SECONDS,
                read_timeout=settings.AZURE_COSMOS_TIMEOUT_SECONDS,
                timeout=settings.AZURE_COSMOS_TIMEOUT_SECONDS,
            )
            logger.info(f"Initialized Cosmos DB client for {settings.AZURE_COSMOS_ENDPOINT} (RBAC mode)")

    return _cosmos_client


async def get_database() -> DatabaseProxy:
    """
    Get the Cosmos DB database proxy.

    Returns:
        DatabaseProxy: Database proxy for the application database
    """
    global _database

    if _database is None:
        client = await get_cosmos_client()
        _database = client.get_database_client(settings.AZURE_COSMOS_DATABASE)
        logger.info(f"Connected to database: {settings.AZURE_COSMOS_DATABASE}")

    return _database


async def get_container(container_name: str) -> ContainerProxy:
    """
    Get a container proxy for the specified container.

    Args:
        container_name: Name of the container (e.g., 'users', 'complaints')

    Returns:
        ContainerProxy: Container proxy for CRUD operations
    """
    database = await get_database()
    return database.get_container_client(container_name)


async def close_cosmos() -> None:
    """
    Close Cosmos DB connections.

    Should be called during application shutdown.
    """
    global _cosmos_client, _database, _credential

    if _cosmos_client is not None:
        await _cosmos_client.close()
        _cosmos_client = None
        _database = None
        logger.info("Closed Cosmos DB client")

    if _credential is not None:
        await _credential.close()
        _credential = None


@asynccontextmanager
async def _translate_transport_errors(operation: str, container_name: str) -> AsyncGenerator[None, None]:
    """Surface connectivity failures and timeouts as GatewayError."""
    try:
        yield
    except (ServiceRequestError, ServiceResponseError, CosmosClientTimeoutError) as e:
        logger.error(f"Cosmos DB {operation} on {container_name} failed: {e}")
        raise GatewayError("Document store is unavailable") from e


# ============================================================================
# Utility Functions for Common Operations
# ============================================================================


async def create_item(container_name: str, item: dict[str, Any]) -> dict[str, Any]:
    """
    Create a new item in the specified container.

    Raises azure.core.exceptions.ResourceExistsError when an item with the
    same id already exists in the partition.

    Args:
        container_name: Container to create item in
        item: Item data (must include 'id' and partition key field)

    Returns:
        Created item with system properties
    """
    async with _translate_transport_errors("create", container_name):
        container = await get_container(container_name)
        return await container.create_item(body=item)


async def read_item(
    container_name: str,
    item_id: str,
    partition_key: str,
) -> dict[str, Any] | None:
    """
    Read an item by ID and partition key.

    Args:
        container_name: Container to read from
        item_id: The item's ID
        partition_key: The partition key value

    Returns:
        Item data or None if not found
    """
    async with _translate_transport_errors("read", container_name):
        container = await get_container(container_name)
        try:
            return await container.read_item(item=item_id, partition_key=partition_key)
        except ResourceNotFoundError:
            return None


async def upsert_item(container_name: str, item: dict[str, Any]) -> dict[str, Any]:
    """
    Create or update an item in the specified container.

    Args:
        container_name: Container to upsert item in
        item: Item data (must include 'id' and partition key field)

    Returns:
        Upserted item with system properties
    """
    async with _translate_transport_errors("upsert", container_name):
        container = await get_container(container_name)
        return await container.upsert_item(body=item)


async def replace_item(
    container_name: str,
    item: dict[str, Any],
    etag: str | None = None,
) -> dict[str, Any]:
    """
    Replace an existing item, optionally guarded by its ETag.

    When ``etag`` is given the write only succeeds if the stored item has not
    changed since it was read; otherwise ConflictError is raised.

    Args:
        container_name: Container holding the item
        item: Full replacement body (must include 'id')
        etag: The ``_etag`` value observed when the item was read

    Returns:
        Replaced item with system properties
    """
    kwargs: dict[str, Any] = {}
    if etag:
        kwargs["etag"] = etag
        kwargs["match_condition"] = MatchConditions.IfNotModified

    async with _translate_transport_errors("replace", container_name):
        container = await get_container(container_name)
        try:
            return await container.replace_item(item=item["id"], body=item, **kwargs)
        except CosmosAccessConditionFailedError as e:
            raise ConflictError("The resource was modified by another request, please retry") from e


async def patch_item(
    container_name: str,
    item_id: str,
    partition_key: str,
    operations: list[dict[str, Any]],
) -> dict[str, Any]:
    """
    Apply JSON patch operations to a single item.

    Raises azure.core.exceptions.ResourceNotFoundError if the item does not exist.

    Example:
        await patch_item(
            'notifications', notification_id, user_id,
            [{'op': 'set', 'path': '/is_read', 'value': True}],
        )
    """
    async with _translate_transport_errors("patch", container_name):
        container = await get_container(container_name)
        return await container.patch_item(
            item=item_id,
            partition_key=partition_key,
            patch_operations=operations,
        )


async def delete_item(
    container_name: str,
    item_id: str,
    partition_key: str,
) -> None:
    """
    Delete an item by ID and partition key.

    Args:
        container_name: Container to delete from
        item_id: The item's ID
        partition_key: The partition key value
    """
    async with _translate_transport_errors("delete", container_name):
        container = await get_container(container_name)
        await container.delete_item(item=item_id, partition_key=partition_key)


async def execute_batch(
    container_name: str,
    partition_key: str,
    operations: list[tuple[str, tuple[Any, ...]]],
) -> int:
    """
    Execute operations as transactional batches within one partition.

    Operations are split into chunks of MAX_BATCH_OPERATIONS; each chunk is
    atomic on its own.

    Args:
        container_name: Container to write to
        partition_key: The partition every operation targets
        operations: Batch operations, e.g. ``("patch", (item_id, patch_ops))``

    Returns:
        Number of operations executed
    """
    executed = 0
    async with _translate_transport_errors("batch", container_name):
        container = await get_container(container_name)
        for start in range(0, len(operations), MAX_BATCH_OPERATIONS):
            chunk = operations[start : start + MAX_BATCH_OPERATIONS]
            await container.execute_item_batch(batch_operations=chunk, partition_key=partition_key)
            executed += len(chunk)
    return executed


async def query_items(
    container_name: str,
    query: str,
    parameters: list[dict[str, Any]] | None = None,
    partition_key: str | None = None,
    max_items: int | None = None,
) -> list[dict[str, Any]]:
    """
    Query items using SQL-like syntax.

    Args:
        container_name: Container to query
        query: Cosmos DB SQL query string
        parameters: Query parameters for parameterized queries
        partition_key: Optional partition key for scoped queries
        max_items: Maximum number of items to return

    Returns:
        List of matching items

    Example:
        results = await query_items(
            'complaints',
            'SELECT * FROM c WHERE c.constituent_id = @id',
            parameters=[{'name': '@id', 'value': user_id}]
        )
    """
    # Cross-partition queries are enabled automatically when no partition_key is given
    query_kwargs: dict[str, Any] = {
        "query": query,
    }

    if parameters:
        query_kwargs["parameters"] = parameters

    if partition_key:
        query_kwargs["partition_key"] = partition_key

    if max_items:
        query_kwargs["max_item_count"] = max_items

    items: list[dict[str, Any]] = []
    async with _translate_transport_errors("query", container_name):
        container = await get_container(container_name)
        async for item in container.query_items(**query_kwargs):
            items.append(item)
            if max_items and len(items) >= max_items:
                break

    return items


async def query_count(
    container_name: str,
    query: str,
    parameters: list[dict[str, Any]] | None = None,
    partition_key: str | None = None,
) -> int:
    """
    Execute a COUNT query and return the integer result.

    This is a convenience wrapper for queries using SELECT VALUE COUNT(1).
    """
    results = await query_items(container_name, query, parameters, partition_key)
    if results:
        result = results[0]
        if isinstance(result, (int, float)):
            return int(result)
    return 0
