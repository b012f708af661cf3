#!/usr/bin/env python3
"""
Initialize the report history table and seed the container registry with sample data
"""

import asyncio
import json
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import redis.asyncio as redis

from uptime_report.core.config import settings
from uptime_report.database.connection import create_db_engine, init_database

SAMPLE_CONTAINERS = [
    {"container_id": "CONT_001", "status": "ON"},
    {"container_id": "CONT_002", "status": "ON"},
    {"container_id": "CONT_003", "status": "OFF"},
]


async def seed_registry():
    """Write sample containers under the registry key unless it already exists"""
    client = redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        password=settings.redis_password or None,
    )
    try:
        created = await client.set(settings.registry_key, json.dumps(SAMPLE_CONTAINERS), nx=True)
    finally:
        await client.aclose()
    return bool(created)


def main():
    engine = create_db_engine(settings.database_url)
    try:
        init_database(engine)
        print("✅ Report history table created")
    finally:
        engine.dispose()

    if asyncio.run(seed_registry()):
        print(f"✅ Sample containers written to '{settings.registry_key}'")
    else:
        print(f"Registry key '{settings.registry_key}' already exists, left unchanged")

    print("\n🎉 Initialization complete!")
    print("You can now start the service with: python -m uptime_report.main")


if __name__ == "__main__":
    main()
