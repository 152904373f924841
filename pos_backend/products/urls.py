# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register catalog routes under /api/products/
- Named sub-collections are registered BEFORE the root product routes;
  product pks are digits-only so they never shadow them.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from products.views import (
    AdditionalCategoryViewSet,
    AdditionalViewSet,
    CategoryViewSet,
    ProductViewSet,
)

router = SimpleRouter()

router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"additional-categories", AdditionalCategoryViewSet, basename="additional-categories")
router.register(r"additionals", AdditionalViewSet, basename="additionals")
router.register(r"", ProductViewSet, basename="products")

urlpatterns = [
    path("", include(router.urls)),
]
