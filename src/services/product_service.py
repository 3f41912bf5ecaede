"""Product repository over the JSON document store."""

import logging
import math
import threading
from typing import Any, Iterable, Mapping

from src.db.json_store import JsonDocumentStore
from src.exceptions import NotFoundError, ValidationError
from src.models.products import Product, ProductCreate, ProductPatch, SortOrder, now_ms

logger = logging.getLogger(__name__)


def _as_number(value: Any) -> float:
    """Numeric view of a stored value; anything non-numeric counts as 0."""
    if isinstance(value, str):
        value = value.strip() or 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) else number


def _parse_id(product_id: Any) -> float | None:
    """Numeric product id, or None when it is not a number."""
    try:
        number = float(product_id)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _matches_id(product: Mapping[str, Any], target: float | None) -> bool:
    """Whether a stored product carries the requested id. Missing or non-numeric ids never match."""
    stored = _parse_id(product.get("id"))
    return target is not None and stored is not None and stored == target


def next_id(items: Iterable[Mapping[str, Any]]) -> int:
    """One more than the highest numeric id in the collection."""
    highest = max((_as_number(item.get("id")) for item in items), default=0.0)
    return int(max(highest, 0)) + 1


class ProductRepository:
    def __init__(self, store: JsonDocumentStore):
        self.store = store
        self._lock = threading.Lock()

    def _load_products(self) -> list[dict[str, Any]]:
        """Re-read the store and return its product list, creating it when missing."""
        data = self.store.read()
        products = data.get("products")
        if not isinstance(products, list):
            products = []
            data["products"] = products
        return products

    def list_products(
        self,
        q: str | None = None,
        category: str | None = None,
        subcategory: str | None = None,
        sort: str | SortOrder | None = SortOrder.NEWEST,
    ) -> list[dict[str, Any]]:
        """
        Filter and sort a copy of the collection.

        Args:
            q: Case-insensitive substring searched in title and description
            category: Exact category match
            subcategory: Exact subcategory match
            sort: newest, price-asc or price-desc; anything else means newest

        Returns:
            New list of product records
        """
        # store.read() replaces the shared in-memory document
        with self._lock:
            items = list(self._load_products())

        if category:
            items = [p for p in items if p.get("category") == category]
        if subcategory:
            items = [p for p in items if p.get("subcategory") == subcategory]
        if q:
            term = str(q).lower()
            items = [
                p
                for p in items
                if term in str(p.get("title") or "").lower() or term in str(p.get("description") or "").lower()
            ]

        order = sort if isinstance(sort, SortOrder) else SortOrder.parse(sort)
        if order is SortOrder.PRICE_ASC:
            items.sort(key=lambda p: _as_number(p.get("price")))
        elif order is SortOrder.PRICE_DESC:
            items.sort(key=lambda p: _as_number(p.get("price")), reverse=True)
        else:
            items.sort(key=lambda p: _as_number(p.get("createdAt")), reverse=True)

        return items

    def create_product(self, payload: ProductCreate) -> dict[str, Any]:
        """Insert a new listing and persist the document."""
        if not payload.title or not payload.category:
            raise ValidationError("title and category are required")

        with self._lock:
            products = self._load_products()
            product = Product(
                id=next_id(products),
                title=payload.title,
                description=payload.description or "",
                price=payload.price,
                category=payload.category,
                subcategory=payload.subcategory or "",
                images=payload.images,
                likes=0,
                dislikes=0,
                created_at=now_ms(),
            ).to_document()
            products.append(product)
            self.store.write()

        logger.info(f"Created product {product['id']}: {product['title']}")
        return product

    def update_product(self, product_id: Any, patch: ProductPatch) -> dict[str, Any]:
        """Apply the fields present in the patch to an existing product and persist the document."""
        target = _parse_id(product_id)

        with self._lock:
            products = self._load_products()
            index = next((i for i, p in enumerate(products) if _matches_id(p, target)), None)
            if index is None:
                raise NotFoundError()

            previous = products[index]
            updated = {**previous, **patch.changes()}
            products[index] = updated
            self.store.write()

        logger.info(f"Updated product {updated.get('id')}")
        return updated

    def delete_product(self, product_id: Any) -> None:
        """Remove a product and persist the document."""
        target = _parse_id(product_id)

        with self._lock:
            data = self.store.read()
            products = data.get("products") if isinstance(data.get("products"), list) else []
            remaining = [p for p in products if not _matches_id(p, target)]
            if len(remaining) == len(products):
                raise NotFoundError()
            data["products"] = remaining
            self.store.write()

        logger.info(f"Deleted product {product_id}")
