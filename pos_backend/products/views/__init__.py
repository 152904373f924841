from .additional import AdditionalCategoryViewSet, AdditionalViewSet
from .category import CategoryViewSet
from .product import ProductViewSet

__all__ = [
    "AdditionalCategoryViewSet",
    "AdditionalViewSet",
    "CategoryViewSet",
    "ProductViewSet",
]
