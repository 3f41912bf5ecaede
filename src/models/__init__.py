"""
Init file for the pydantic models.
"""

from .products import Product, ProductCreate, ProductPatch, SortOrder

__all__ = [
    "Product",
    "ProductCreate",
    "ProductPatch",
    "SortOrder",
]
