"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .additional import Additional, AdditionalCategory, ProductAdditionalCategory
from .category import Category
from .product import Product

__all__ = [
    "Additional",
    "AdditionalCategory",
    "Category",
    "Product",
    "ProductAdditionalCategory",
]
