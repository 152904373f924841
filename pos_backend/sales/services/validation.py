# sales/services/validation.py

"""
SALE INPUT VALIDATION

Two passes, both before any write:

1) parse_*_payload(): structural checks on the raw request body
   (types, required keys, positive integer quantities). Produces the ids the
   catalog snapshot loader needs.

2) validate_*(): business rules against the locked catalog snapshot
   (variable-price rules, add-on eligibility, stock availability).
   Produces frozen Validated* values; pricing and persistence only ever see
   these.

Bounds (the storage columns cannot hold more):
- ids          <= MAX_ROW_ID
- quantities   <= MAX_QUANTITY
- unit prices  <= MAX_UNIT_PRICE
- sale total   <= MAX_SALE_TOTAL (check_sale_total, after pricing)

Request shape (post):
    {
      "payment_method_id": 1,
      "items": [
        {
          "product_id": 3,
          "quantity": 2,
          "unit_price": "15.50",      # variable-price products only
          "is_delivery": false,
          "additionals": [{"additional_id": 7, "quantity": 1, "unit_price": "2.00"}]
        }
      ]
    }

Edit requests address existing lines by "id"; omitted fields keep their
stored values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from products.services.catalog_snapshot import CatalogSnapshot, ProductSnapshot
from products.services.stock_ledger import check_availability, edit_deltas, post_deltas

from .exceptions import InvalidAddOnError, InvalidSaleInputError
from .pricing import money

MAX_ROW_ID = 9223372036854775807
MAX_QUANTITY = 2147483647
MAX_UNIT_PRICE = Decimal("99999999.99")
MAX_SALE_TOTAL = Decimal("9999999999.99")


# ============================================================
# VALIDATED VALUES
# ============================================================

@dataclass(frozen=True)
class ValidatedAddOn:
    additional_id: int
    quantity: int
    unit_price: Decimal


@dataclass(frozen=True)
class ValidatedLine:
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    is_delivery: bool
    additionals: tuple = ()
    line_id: Optional[int] = None
    # whether posting this line took stock; only such lines give it back
    stock_tracked: bool = True

    @classmethod
    def from_record(cls, item) -> "ValidatedLine":
        """Build from a persisted SaleItem (prefetch product and additionals)."""
        return cls(
            product_id=item.product_id,
            product_name=item.product.name,
            quantity=int(item.quantity),
            unit_price=money(item.unit_price),
            is_delivery=bool(item.is_delivery),
            stock_tracked=bool(item.stock_tracked),
            additionals=tuple(
                ValidatedAddOn(
                    additional_id=a.additional_id,
                    quantity=int(a.quantity),
                    unit_price=money(a.unit_price),
                )
                for a in item.additionals.all()
            ),
            line_id=item.pk,
        )


@dataclass(frozen=True)
class ValidatedSale:
    payment_method_id: int
    lines: tuple


@dataclass(frozen=True)
class LineChange:
    before: ValidatedLine
    after: ValidatedLine
    replaces_additionals: bool


@dataclass(frozen=True)
class ValidatedEdit:
    payment_method_id: Optional[int]
    changes: tuple


# ============================================================
# STRUCTURAL INPUT
# ============================================================

@dataclass(frozen=True)
class LineInput:
    product_id: int
    quantity: int
    unit_price: Any
    is_delivery: bool
    additionals: tuple


@dataclass(frozen=True)
class PostInput:
    payment_method_id: int
    lines: tuple

    @property
    def product_ids(self) -> set[int]:
        return {line.product_id for line in self.lines}

    @property
    def additional_ids(self) -> set[int]:
        return _referenced_additional_ids(line.additionals for line in self.lines)


@dataclass(frozen=True)
class EditLineInput:
    line_id: int
    product_id: Optional[int]
    quantity: Optional[int]
    unit_price: Any
    is_delivery: Optional[bool]
    additionals: Optional[tuple]


@dataclass(frozen=True)
class EditInput:
    payment_method_id: Optional[int]
    lines: tuple

    @property
    def line_ids(self) -> set[int]:
        return {line.line_id for line in self.lines}

    @property
    def additional_ids(self) -> set[int]:
        return _referenced_additional_ids(
            line.additionals for line in self.lines if line.additionals is not None
        )


# ============================================================
# PRIMITIVE PARSERS
# ============================================================

def _maybe_int(value) -> Optional[int]:
    """Integers and digit strings only. bool is an int subclass and is rejected."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)
    return None


def _to_int(value, *, field_name: str) -> int:
    v = _maybe_int(value)
    if v is None:
        raise InvalidSaleInputError(f"{field_name} must be an integer")
    if v > MAX_ROW_ID:
        raise InvalidSaleInputError(f"{field_name} is out of range")
    return v


def _to_positive_int(value, *, field_name: str) -> int:
    v = _to_int(value, field_name=field_name)
    if v <= 0:
        raise InvalidSaleInputError(f"{field_name} must be greater than zero")
    if v > MAX_QUANTITY:
        raise InvalidSaleInputError(f"{field_name} must be at most {MAX_QUANTITY}")
    return v


def _to_decimal(value) -> Optional[Decimal]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not d.is_finite():
        return None
    return d


def _to_optional_bool(value, *, field_name: str) -> Optional[bool]:
    if value is None:
        return None
    if not isinstance(value, bool):
        raise InvalidSaleInputError(f"{field_name} must be a boolean")
    return value


def _require_mapping(value, *, what: str) -> Mapping:
    if not isinstance(value, Mapping):
        raise InvalidSaleInputError(f"{what} must be an object")
    return value


def _require_items(payload: Mapping) -> list:
    items = payload.get("items")
    if not isinstance(items, (list, tuple)) or not items:
        raise InvalidSaleInputError("items must be a non-empty list")
    return list(items)


def _parse_additionals(raw, *, position: int) -> tuple:
    if not isinstance(raw, (list, tuple)):
        raise InvalidSaleInputError(f"items[{position}].additionals must be a list")
    for entry in raw:
        _require_mapping(entry, what=f"items[{position}].additionals[]")
    return tuple(raw)


def _referenced_additional_ids(groups) -> set[int]:
    out = set()
    for group in groups:
        for entry in group:
            aid = _maybe_int(entry.get("additional_id"))
            if aid is not None and aid <= MAX_ROW_ID:
                out.add(aid)
    return out


# ============================================================
# PASS 1: STRUCTURE
# ============================================================

def parse_post_payload(payload) -> PostInput:
    payload = _require_mapping(payload, what="Sale request")

    if payload.get("payment_method_id") in (None, ""):
        raise InvalidSaleInputError("payment_method_id is required")
    payment_method_id = _to_int(payload.get("payment_method_id"), field_name="payment_method_id")

    lines = []
    for idx, raw in enumerate(_require_items(payload)):
        item = _require_mapping(raw, what=f"items[{idx}]")

        if item.get("product_id") in (None, ""):
            raise InvalidSaleInputError(f"items[{idx}].product_id is required")

        is_delivery = _to_optional_bool(item.get("is_delivery"), field_name="is_delivery")

        raw_additionals = item.get("additionals")
        lines.append(
            LineInput(
                product_id=_to_int(item.get("product_id"), field_name=f"items[{idx}].product_id"),
                quantity=_to_positive_int(item.get("quantity"), field_name=f"items[{idx}].quantity"),
                unit_price=item.get("unit_price"),
                is_delivery=bool(is_delivery),
                additionals=(
                    _parse_additionals(raw_additionals, position=idx)
                    if raw_additionals is not None
                    else ()
                ),
            )
        )

    return PostInput(payment_method_id=payment_method_id, lines=tuple(lines))


def parse_edit_payload(payload) -> EditInput:
    payload = _require_mapping(payload, what="Sale request")

    payment_method_id = None
    if payload.get("payment_method_id") not in (None, ""):
        payment_method_id = _to_int(payload.get("payment_method_id"), field_name="payment_method_id")

    seen: set[int] = set()
    lines = []
    for idx, raw in enumerate(_require_items(payload)):
        item = _require_mapping(raw, what=f"items[{idx}]")

        if item.get("id") in (None, ""):
            raise InvalidSaleInputError(f"items[{idx}].id is required to edit a line")
        line_id = _to_int(item.get("id"), field_name=f"items[{idx}].id")

        if line_id in seen:
            raise InvalidSaleInputError(f"Line {line_id} appears more than once")
        seen.add(line_id)

        product_id = None
        if item.get("product_id") not in (None, ""):
            product_id = _to_int(item.get("product_id"), field_name=f"items[{idx}].product_id")

        quantity = None
        if "quantity" in item:
            quantity = _to_positive_int(item.get("quantity"), field_name=f"items[{idx}].quantity")

        raw_additionals = item.get("additionals")
        lines.append(
            EditLineInput(
                line_id=line_id,
                product_id=product_id,
                quantity=quantity,
                unit_price=item.get("unit_price"),
                is_delivery=_to_optional_bool(item.get("is_delivery"), field_name="is_delivery"),
                additionals=(
                    _parse_additionals(raw_additionals, position=idx)
                    if raw_additionals is not None
                    else None
                ),
            )
        )

    return EditInput(payment_method_id=payment_method_id, lines=tuple(lines))


# ============================================================
# PASS 2: BUSINESS RULES
# ============================================================

def _resolve_unit_price(product: ProductSnapshot, raw) -> Decimal:
    if not product.variable_price:
        return money(product.price)

    price = _to_decimal(raw)
    if price is not None and price > MAX_UNIT_PRICE:
        raise InvalidSaleInputError(
            f"Unit price for {product.name} must be at most {MAX_UNIT_PRICE}"
        )
    if price is None or price <= 0 or money(price) <= Decimal("0.00"):
        raise InvalidSaleInputError(f"Invalid unit price for {product.name}")
    return money(price)


def _validate_addons(product: ProductSnapshot, raw_addons, snapshot: CatalogSnapshot) -> tuple:
    out = []
    for entry in raw_addons:
        aid = _maybe_int(entry.get("additional_id"))
        additional = snapshot.additional(aid) if aid is not None else None
        if additional is None:
            raise InvalidAddOnError(
                f"Invalid add-on for product {product.name}",
                product_name=product.name,
            )

        raw_qty = entry.get("quantity")
        qty = 1 if raw_qty is None else _maybe_int(raw_qty)
        if qty is None or qty <= 0 or qty > MAX_QUANTITY:
            raise InvalidAddOnError(
                f"Invalid add-on quantity for product {product.name}",
                product_name=product.name,
            )

        price = _to_decimal(entry.get("unit_price"))
        if price is None or price < 0 or price > MAX_UNIT_PRICE:
            raise InvalidAddOnError(
                f"Invalid add-on price for product {product.name}",
                product_name=product.name,
            )

        if additional.category_id not in product.eligible_category_ids:
            raise InvalidAddOnError(
                f"Add-on category {additional.category_name} is not allowed for product {product.name}",
                product_name=product.name,
            )

        out.append(ValidatedAddOn(additional_id=aid, quantity=qty, unit_price=money(price)))

    return tuple(out)


def validate_post(request: PostInput, snapshot: CatalogSnapshot) -> ValidatedSale:
    lines = []
    for line in request.lines:
        product = snapshot.product(line.product_id)
        lines.append(
            ValidatedLine(
                product_id=product.id,
                product_name=product.name,
                quantity=line.quantity,
                unit_price=_resolve_unit_price(product, line.unit_price),
                is_delivery=line.is_delivery,
                additionals=_validate_addons(product, line.additionals, snapshot),
                stock_tracked=product.tracks_stock,
            )
        )

    check_availability(post_deltas((l.product_id, l.quantity) for l in lines), snapshot)

    return ValidatedSale(payment_method_id=request.payment_method_id, lines=tuple(lines))


def validate_edit(
    request: EditInput,
    existing: Mapping[int, ValidatedLine],
    snapshot: CatalogSnapshot,
) -> ValidatedEdit:
    """
    existing: the sale's current lines keyed by line id ("before" state).
    Stock is checked once, on the net delta per product.
    """
    changes = []
    for line in request.lines:
        current = existing.get(line.line_id)
        if current is None:
            raise InvalidSaleInputError(
                f"Line {line.line_id} is not part of this sale; lines cannot be added or removed"
            )

        if line.product_id is not None and line.product_id != current.product_id:
            raise InvalidSaleInputError(
                f"Line {line.line_id} sells {current.product_name}; the product of a line cannot change"
            )

        product = snapshot.product(current.product_id)

        unit_price = current.unit_price
        if product.variable_price and line.unit_price is not None:
            unit_price = _resolve_unit_price(product, line.unit_price)

        additionals = current.additionals
        if line.additionals is not None:
            additionals = _validate_addons(product, line.additionals, snapshot)

        after = replace(
            current,
            quantity=line.quantity if line.quantity is not None else current.quantity,
            unit_price=unit_price,
            is_delivery=line.is_delivery if line.is_delivery is not None else current.is_delivery,
            additionals=additionals,
        )
        changes.append(
            LineChange(
                before=current,
                after=after,
                replaces_additionals=line.additionals is not None,
            )
        )

    check_availability(edit_stock_deltas(changes), snapshot)

    return ValidatedEdit(payment_method_id=request.payment_method_id, changes=tuple(changes))


def edit_stock_deltas(changes) -> dict[int, int]:
    """Net stock deltas of an edit. Lines posted without stock tracking never move stock."""
    return edit_deltas(
        (c.before.product_id, c.before.quantity, c.after.quantity)
        for c in changes
        if c.before.stock_tracked
    )


def edited_lines(existing: Mapping[int, ValidatedLine], edit: ValidatedEdit) -> list:
    """The sale's lines as they will read once the edit is stored."""
    lines = dict(existing)
    for change in edit.changes:
        lines[change.before.line_id] = change.after
    return [lines[pk] for pk in sorted(lines)]


def check_sale_total(total: Decimal) -> Decimal:
    if total > MAX_SALE_TOTAL:
        raise InvalidSaleInputError(f"Sale total must be at most {MAX_SALE_TOTAL}")
    return total
