"""Seed the JSON document store with default listings."""

import logging
from typing import Any

from src.db.json_store import JsonDocumentStore
from src.models.products import Product, now_ms

logger = logging.getLogger(__name__)


def seed_products() -> list[dict[str, Any]]:
    """The two listings written into an empty store."""
    created_at = now_ms()
    return [
        Product(
            id=1,
            title="iPhone 13 Pro",
            description="Excellent condition, 256GB, Graphite.",
            price=799.0,
            category="Electronics",
            subcategory="Smartphones & Tablets",
            images=["https://images.unsplash.com/photo-1603899124210-36e0f7a5a8f0?w=1200"],
            likes=12,
            dislikes=1,
            created_at=created_at,
        ).to_document(),
        Product(
            id=2,
            title="Gaming Chair",
            description="Ergonomic chair, adjustable armrests.",
            price=149.99,
            category="Home & Garden",
            subcategory="Furniture",
            images=["https://images.unsplash.com/photo-1582582494700-1b1a3e6a96d2?w=1200"],
            likes=3,
            dislikes=0,
            created_at=created_at,
        ).to_document(),
    ]


class DocumentLoader:
    def __init__(self, store: JsonDocumentStore):
        self.store = store

    def load_products(self) -> bool:
        """Write the seed listings when the store holds no products.

        Returns:
            True if the store was seeded, False if it already had products
        """
        data = self.store.read()
        products = data.get("products")
        if isinstance(products, list) and products:
            logger.info(f"Document store already holds {len(products)} products")
            return False

        data["products"] = seed_products()
        self.store.write()
        logger.info(f"Seeded {len(data['products'])} products into {self.store.path}")
        return True


if __name__ == "__main__":
    from src.config import DB_FILE

    logging.basicConfig(level=logging.INFO)
    DocumentLoader(JsonDocumentStore(DB_FILE)).load_products()
