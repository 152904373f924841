from .catalog_snapshot import CatalogSnapshot, load_catalog_snapshot
from .stock_ledger import apply_stock_deltas, check_availability

__all__ = [
    "CatalogSnapshot",
    "load_catalog_snapshot",
    "apply_stock_deltas",
    "check_availability",
]
