#!/usr/bin/env python3
"""
Marketplace Listings Backend Startup Script
This script starts the FastAPI server backed by the JSON document store.
"""

import uvicorn
import logging

from src.config import API_PREFIX, DB_FILE, HOST, LOG_LEVEL, PORT, RELOAD

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logger.info("Starting Marketplace Listings Backend...")
    logger.info(f"Data file: {DB_FILE}")
    logger.info("Available endpoints:")
    logger.info(f"  - Health Check: GET {API_PREFIX}/health")
    logger.info(f"  - Products: GET/POST {API_PREFIX}/products")
    logger.info(f"  - Product: PUT/DELETE {API_PREFIX}/products/{{id}}")
    logger.info(f"  - API Docs: http://localhost:{PORT}/docs")

    uvicorn.run(
        "src.main:app",
        host=HOST,
        port=PORT,
        reload=RELOAD,
        log_level=LOG_LEVEL.lower()
    )
