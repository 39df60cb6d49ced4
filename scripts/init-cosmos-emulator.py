#!/usr/bin/env python3
"""
Initialize Cosmos DB Emulator with the Constituency Connect database and containers.

Run this once after starting the emulator to set up the local development
environment.

Prerequisites:
1. Install Cosmos DB Emulator: https://aka.ms/cosmosdb-emulator
2. Start the emulator (it runs on https://localhost:8081)
3. Run this script: python scripts/init-cosmos-emulator.py

The emulator uses a well-known key that is safe for local development only.
"""

import asyncio

from azure.cosmos import PartitionKey
from azure.cosmos.aio import CosmosClient

# Cosmos DB Emulator connection details (well-known credentials)
EMULATOR_ENDPOINT = "https://localhost:8081"
EMULATOR_KEY = "C2y6yDjf5/R+ob0N8A7Cgv30VRDJIWEHLM+4QDU5DE2nQ9nDuVTqobD4b8mGGyPMbIZnqyMsEcaGQy67XIw/Jw=="
DATABASE_NAME = "constituency-connect"

# Container definitions with partition keys
CONTAINERS = [
    {"name": "users", "partition_key": "/id"},
    {"name": "email-lookup", "partition_key": "/email"},
    {"name": "cnic-lookup", "partition_key": "/cnic"},
    {"name": "mobile-lookup", "partition_key": "/mobile"},
    {"name": "complaints", "partition_key": "/id"},
    {"name": "notifications", "partition_key": "/recipient_id"},
    {"name": "feedback", "partition_key": "/complaint_id"},
    {"name": "locations", "partition_key": "/document_type"},
]


async def init_emulator():
    """Initialize the Cosmos DB Emulator with required database and containers."""
    print(f"Connecting to Cosmos DB Emulator at {EMULATOR_ENDPOINT}...")

    # Disable SSL verification for emulator's self-signed certificate
    client = CosmosClient(
        url=EMULATOR_ENDPOINT,
        credential=EMULATOR_KEY,
        connection_verify=False,
    )

    try:
        print(f"\nCreating database: {DATABASE_NAME}")
        database = await client.create_database_if_not_exists(id=DATABASE_NAME)
        print(f"   Database '{DATABASE_NAME}' ready")

        print("\nCreating containers...")
        for container_def in CONTAINERS:
            container_name = container_def["name"]
            partition_key = container_def["partition_key"]
            await database.create_container_if_not_exists(
                id=container_name,
                partition_key=PartitionKey(path=partition_key),
            )
            print(f"   Container '{container_name}' (partition: {partition_key})")

        print("\nCosmos DB Emulator initialization complete!")
        print("\nNext steps:")
        print("   1. Set AZURE_COSMOS_CONNECTION_STRING to the emulator connection string")
        print("   2. Set AZURE_COSMOS_DISABLE_SSL=true")
        print("   3. Start the backend: cd src/backend && uvicorn main:app --reload")
        print("   4. Seed provinces through constituencies via the reference data endpoints")

    except Exception as e:
        print(f"\nError: {e}")
        print("\nTroubleshooting:")
        print("   1. Make sure Cosmos DB Emulator is running")
        print("   2. Open https://localhost:8081/_explorer/index.html in browser")
        print("   3. If certificate error, add exception or install emulator cert")
        raise
    finally:
        await client.close()


if __name__ == "__main__":
    print("=" * 60)
    print("Constituency Connect - Cosmos DB Emulator Initialization")
    print("=" * 60)
    asyncio.run(init_emulator())
