# products/services/catalog_snapshot.py

"""
CATALOG SNAPSHOT LOADER

Loads exactly the products and add-ons a sale request references, in one
read, as immutable values the validator and pricing work from.

Rules:
- Must be called inside transaction.atomic(): product rows are locked with
  select_for_update() (ordered by pk so concurrent sales lock in the same order).
- A missing product aborts with SaleNotFoundError before anything is written.
- Missing add-ons are simply absent from the snapshot; the validator reports
  them against the product they were attached to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from products.models import Additional, Product, ProductAdditionalCategory
from sales.services.exceptions import SaleNotFoundError


@dataclass(frozen=True)
class ProductSnapshot:
    id: int
    name: str
    price: Decimal
    stock: Optional[int]
    variable_price: bool
    suspended: bool
    eligible_category_ids: frozenset = field(default_factory=frozenset)

    @property
    def tracks_stock(self) -> bool:
        return self.stock is not None


@dataclass(frozen=True)
class AdditionalSnapshot:
    id: int
    name: str
    price: Decimal
    category_id: int
    category_name: str
    suspended: bool


@dataclass(frozen=True)
class CatalogSnapshot:
    products: Mapping[int, ProductSnapshot]
    additionals: Mapping[int, AdditionalSnapshot]

    def product(self, product_id: int) -> ProductSnapshot:
        try:
            return self.products[product_id]
        except KeyError:
            raise SaleNotFoundError(f"Product {product_id} not found") from None

    def additional(self, additional_id: int) -> Optional[AdditionalSnapshot]:
        return self.additionals.get(additional_id)


def load_catalog_snapshot(
    *,
    product_ids: Iterable[int],
    additional_ids: Iterable[int] = (),
) -> CatalogSnapshot:
    wanted_products = sorted(set(product_ids))
    wanted_additionals = sorted(set(additional_ids))

    rows = list(
        Product.objects.select_for_update().filter(pk__in=wanted_products).order_by("pk")
    )

    found = {p.pk for p in rows}
    for pid in wanted_products:
        if pid not in found:
            raise SaleNotFoundError(f"Product {pid} not found")

    eligibility: dict[int, set[int]] = {pid: set() for pid in found}
    links = ProductAdditionalCategory.objects.filter(product_id__in=found).values_list(
        "product_id", "additional_category_id"
    )
    for pid, cid in links:
        eligibility[pid].add(cid)

    products = {
        p.pk: ProductSnapshot(
            id=p.pk,
            name=p.name,
            price=Decimal(p.price),
            stock=p.stock,
            variable_price=bool(p.variable_price),
            suspended=bool(p.suspended),
            eligible_category_ids=frozenset(eligibility[p.pk]),
        )
        for p in rows
    }

    additionals = {}
    if wanted_additionals:
        for a in Additional.objects.select_related("category").filter(pk__in=wanted_additionals):
            additionals[a.pk] = AdditionalSnapshot(
                id=a.pk,
                name=a.name,
                price=Decimal(a.price),
                category_id=a.category_id,
                category_name=a.category.name,
                suspended=bool(a.suspended),
            )

    return CatalogSnapshot(products=products, additionals=additionals)
