# sales/services/exceptions.py

"""
SALE ENGINE ERRORS

Centralized domain errors for post / edit / void.
Each carries an HTTP status so the API layer can map it without a lookup table.
"""

from __future__ import annotations


class SaleTransactionError(Exception):
    """Base exception for all sale engine failures."""

    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class SaleNotFoundError(SaleTransactionError):
    """Referenced sale, product or payment target does not exist."""

    status_code = 404


class InvalidSaleInputError(SaleTransactionError):
    """Malformed quantities, prices, flags or line references."""

    status_code = 400


class InvalidAddOnError(SaleTransactionError):
    """Selected add-on is unknown, malformed or not eligible for the product."""

    status_code = 400

    def __init__(self, message: str = "", *, product_name: str = ""):
        super().__init__(message)
        self.product_name = product_name


class InsufficientStockError(SaleTransactionError):
    """Tracked stock cannot cover the requested quantity."""

    status_code = 409

    def __init__(self, message: str = "", *, product_name: str = "", available: int = 0, requested: int = 0):
        super().__init__(message)
        self.product_name = product_name
        self.available = available
        self.requested = requested


class SaleForbiddenError(SaleTransactionError):
    """Caller's role or ownership does not allow the operation."""

    status_code = 403


class PersistenceFailureError(SaleTransactionError):
    """The atomic commit failed; nothing was written."""

    status_code = 500
