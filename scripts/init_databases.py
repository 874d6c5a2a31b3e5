#!/usr/bin/env python3
"""
Database Initialization Script
==============================

Create the assurance MongoDB indexes.

Usage:
    python scripts/init_databases.py
    python scripts/init_databases.py --database assurance_staging

Version: 0.1.0
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shared.logging import get_logger, setup_logging

setup_logging(log_level="INFO", json_logs=False, service_name="init-db")
logger = get_logger(__name__)


async def init_mongodb(database: str | None = None) -> bool:
    """Initialize MongoDB indexes."""
    from shared.database.mongodb import MongoDBClient

    logger.info("Initializing MongoDB...")

    try:
        client = MongoDBClient.get_client()

        await MongoDBClient.create_indexes(MongoDBClient.get_database(database))

        info = await client.server_info()
        logger.info(f"MongoDB connected: v{info['version']}")

        logger.info("MongoDB initialized successfully")
        return True

    except Exception as e:
        logger.error(f"MongoDB initialization failed: {e}")
        return False

    finally:
        await MongoDBClient.close()


async def main(args: argparse.Namespace) -> int:
    """Main initialization function."""
    logger.info("=" * 60)
    logger.info("Assurance Database Initialization")
    logger.info("=" * 60)

    if not await init_mongodb(args.database):
        logger.error("Failed: MongoDB")
        return 1

    logger.info("All databases initialized successfully")
    return 0


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Initialize assurance databases",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--database",
        default=None,
        help="Database name (default from MONGODB_DB)",
    )

    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    exit_code = asyncio.run(main(args))
    sys.exit(exit_code)
