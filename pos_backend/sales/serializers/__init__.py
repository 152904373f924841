from .payment_method import PaymentMethodSerializer
from .sale import (
    SaleEditInputSerializer,
    SaleInputSerializer,
    SaleItemSerializer,
    SaleSerializer,
)
from .settings import SalesSettingsSerializer

__all__ = [
    "PaymentMethodSerializer",
    "SaleEditInputSerializer",
    "SaleInputSerializer",
    "SaleItemSerializer",
    "SaleSerializer",
    "SalesSettingsSerializer",
]
