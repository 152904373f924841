# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for sales app models.
"""

from .payment_method import PaymentMethod
from .sale import Sale
from .sale_item import SaleItem, SaleItemAdditional
from .settings import SalesSettings

__all__ = [
    "PaymentMethod",
    "Sale",
    "SaleItem",
    "SaleItemAdditional",
    "SalesSettings",
]
