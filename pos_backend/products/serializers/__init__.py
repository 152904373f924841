from .additional import AdditionalCategorySerializer, AdditionalSerializer
from .category import CategorySerializer
from .product import ProductSerializer

__all__ = [
    "AdditionalCategorySerializer",
    "AdditionalSerializer",
    "CategorySerializer",
    "ProductSerializer",
]
