"""
Storage Setup Script for the Marketplace Listings Backend
This script checks the data file and rate limit backend and seeds initial listings.
"""

import asyncio
import logging

from src.config import DB_FILE, RATE_LIMIT_BACKEND
from src.db.json_store import JsonDocumentStore
from src.exceptions import StoreIOError
from src.loaders.document_loader import DocumentLoader

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

async def check_storage(store: JsonDocumentStore) -> bool:
    """Check that the document store can be read and written."""
    logger.info(f"Checking document store at {store.path}...")

    try:
        store.read()
        store.write()
        logger.info("✅ Document store: OK")
    except StoreIOError as e:
        logger.error(f"❌ Document store error: {e}")
        return False

    return True

async def check_rate_limit_backend() -> bool:
    """Check the Redis connection when Redis backs the rate limiter."""
    if RATE_LIMIT_BACKEND != "redis":
        logger.info("In-memory rate limiter configured, nothing to check")
        return True

    from redis.exceptions import RedisError

    from src.db.redis_client import redis_client

    try:
        redis_client.ping()
        logger.info("✅ Redis connection: OK")
    except RedisError as e:
        logger.error(f"❌ Redis connection error: {e}")
        return False

    return True

async def main() -> bool:
    """Main setup function."""
    logger.info("🚀 Setting up Marketplace Listings Backend...")
    store = JsonDocumentStore(DB_FILE)

    if not await check_storage(store):
        logger.error("❌ Document store check failed!")
        return False

    if not await check_rate_limit_backend():
        logger.error("❌ Rate limit backend check failed!")
        return False

    DocumentLoader(store).load_products()
    logger.info(f"📦 Products in store: {len(store.data.get('products', []))}")

    logger.info("✅ Setup complete! Ready to start the server.")
    return True

if __name__ == "__main__":
    asyncio.run(main())
