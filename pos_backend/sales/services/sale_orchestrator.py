# sales/services/sale_orchestrator.py

"""
SALE RECORD ORCHESTRATOR (APPLICATION SERVICE)

Entry points:
- post_sale(user=, payload=)            -> Sale
- edit_sale(user=, sale_id=, payload=)  -> Sale
- void_sale(user=, sale_id=)            -> VoidResult

Pipeline (each call is ONE database transaction):
    parse -> lock + snapshot catalog -> validate -> price
          -> stock deltas + sale rows (commit together or not at all)

Hard rules:
- Totals are computed server-side from validated lines; clients never send them.
- Every validation failure is raised before the first write.
- Any DatabaseError rolls everything back and surfaces as PersistenceFailureError.
  It is never retried here: replaying a money mutation could apply it twice.

Roles:
- post: pos.sell
- edit: own sales with pos.sell, any sale with pos.edit_any
- void: pos.void
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import DatabaseError, transaction

from permissions.roles import (
    CAP_POS_EDIT_ANY,
    CAP_POS_SELL,
    CAP_POS_VOID,
    user_has_capability,
)
from products.services.catalog_snapshot import load_catalog_snapshot
from products.services.stock_ledger import apply_stock_deltas, post_deltas, void_deltas
from sales.models import PaymentMethod, Sale, SaleItem, SaleItemAdditional

from .exceptions import (
    InvalidSaleInputError,
    PersistenceFailureError,
    SaleForbiddenError,
    SaleNotFoundError,
    SaleTransactionError,
)
from .pricing import sale_total
from .validation import (
    MAX_ROW_ID,
    ValidatedLine,
    check_sale_total,
    edit_stock_deltas,
    edited_lines,
    parse_edit_payload,
    parse_post_payload,
    validate_edit,
    validate_post,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoidResult:
    sale_id: int
    total: Decimal
    restored_stock: dict


# ============================================================
# HELPERS
# ============================================================

def _who(user) -> str:
    return getattr(user, "username", None) or str(user)


def _execute(operation: str, user, fn):
    try:
        with transaction.atomic():
            return fn()
    except SaleTransactionError as exc:
        logger.warning(
            "Sale %s rejected for %s: %s: %s",
            operation,
            _who(user),
            exc.__class__.__name__,
            exc,
        )
        raise
    except DatabaseError as exc:
        logger.exception("Sale %s failed to commit for %s", operation, _who(user))
        raise PersistenceFailureError(
            f"Could not {operation} the sale; nothing was saved"
        ) from exc


def _sale_pk(sale_id) -> int:
    if isinstance(sale_id, bool):
        raise SaleNotFoundError(f"Sale {sale_id} not found")
    if isinstance(sale_id, int):
        if not 0 < sale_id <= MAX_ROW_ID:
            raise SaleNotFoundError(f"Sale {sale_id} not found")
        return sale_id
    s = str(sale_id or "").strip()
    if not s.isdigit() or int(s) > MAX_ROW_ID:
        raise SaleNotFoundError(f"Sale {sale_id} not found")
    return int(s)


def _load_sale_for_update(sale_id) -> Sale:
    sale = Sale.objects.select_for_update().filter(pk=_sale_pk(sale_id)).first()
    if sale is None:
        raise SaleNotFoundError(f"Sale {sale_id} not found")
    return sale


def _sale_lines(sale: Sale) -> list[SaleItem]:
    return list(
        SaleItem.objects.filter(sale=sale)
        .select_related("product")
        .prefetch_related("additionals")
        .order_by("id")
    )


def _resolve_payment_method(payment_method_id: int) -> PaymentMethod:
    method = PaymentMethod.objects.filter(pk=payment_method_id).first()
    if method is None:
        raise InvalidSaleInputError(f"Payment method {payment_method_id} not found")
    return method


def _create_additionals(item: SaleItem, additionals) -> None:
    if not additionals:
        return
    SaleItemAdditional.objects.bulk_create(
        [
            SaleItemAdditional(
                sale_item=item,
                additional_id=a.additional_id,
                quantity=a.quantity,
                unit_price=a.unit_price,
            )
            for a in additionals
        ]
    )


def _assert_can_sell(user) -> None:
    if not user_has_capability(user, CAP_POS_SELL):
        raise SaleForbiddenError("You are not allowed to register sales")


def _assert_can_edit(user, sale: Sale) -> None:
    if user_has_capability(user, CAP_POS_EDIT_ANY):
        return
    if user_has_capability(user, CAP_POS_SELL) and sale.user_id == user.pk:
        return
    raise SaleForbiddenError("You can only edit your own sales")


def _assert_can_void(user) -> None:
    if not user_has_capability(user, CAP_POS_VOID):
        raise SaleForbiddenError("Only an administrator can void a sale")


# ============================================================
# POST
# ============================================================

def post_sale(*, user, payload) -> Sale:
    def _post() -> Sale:
        _assert_can_sell(user)

        request = parse_post_payload(payload)
        payment_method = _resolve_payment_method(request.payment_method_id)

        snapshot = load_catalog_snapshot(
            product_ids=request.product_ids,
            additional_ids=request.additional_ids,
        )
        validated = validate_post(request, snapshot)
        total = check_sale_total(sale_total(validated.lines))

        apply_stock_deltas(
            post_deltas((line.product_id, line.quantity) for line in validated.lines),
            snapshot,
        )

        sale = Sale.objects.create(user=user, payment_method=payment_method, total=total)
        for line in validated.lines:
            item = SaleItem.objects.create(
                sale=sale,
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                is_delivery=line.is_delivery,
                stock_tracked=line.stock_tracked,
            )
            _create_additionals(item, line.additionals)

        return sale

    sale = _execute("post", user, _post)
    logger.info("Sale %s posted by %s: total=%s", sale.pk, _who(user), sale.total)
    return sale


# ============================================================
# EDIT
# ============================================================

def edit_sale(*, user, sale_id, payload) -> Sale:
    def _edit() -> Sale:
        sale = _load_sale_for_update(sale_id)
        _assert_can_edit(user, sale)

        request = parse_edit_payload(payload)

        payment_method = None
        if request.payment_method_id is not None:
            payment_method = _resolve_payment_method(request.payment_method_id)

        records = {item.pk: item for item in _sale_lines(sale)}
        existing = {pk: ValidatedLine.from_record(item) for pk, item in records.items()}

        snapshot = load_catalog_snapshot(
            product_ids={existing[i].product_id for i in request.line_ids if i in existing},
            additional_ids=request.additional_ids,
        )
        validated = validate_edit(request, existing, snapshot)
        total = check_sale_total(sale_total(edited_lines(existing, validated)))

        apply_stock_deltas(edit_stock_deltas(validated.changes), snapshot)

        for change in validated.changes:
            item = records[change.before.line_id]
            item.quantity = change.after.quantity
            item.unit_price = change.after.unit_price
            item.is_delivery = change.after.is_delivery
            item.save(update_fields=["quantity", "unit_price", "is_delivery"])

            if change.replaces_additionals:
                SaleItemAdditional.objects.filter(sale_item=item).delete()
                _create_additionals(item, change.after.additionals)

        sale.total = total
        update_fields = ["total", "updated_at"]
        if payment_method is not None:
            sale.payment_method = payment_method
            update_fields.append("payment_method")
        sale.save(update_fields=update_fields)

        return sale

    sale = _execute("edit", user, _edit)
    logger.info("Sale %s edited by %s: total=%s", sale.pk, _who(user), sale.total)
    return sale


# ============================================================
# VOID
# ============================================================

def void_sale(*, user, sale_id) -> VoidResult:
    def _void() -> VoidResult:
        _assert_can_void(user)
        sale = _load_sale_for_update(sale_id)

        items = _sale_lines(sale)
        snapshot = load_catalog_snapshot(product_ids={item.product_id for item in items})

        deltas = void_deltas(
            (item.product_id, item.quantity) for item in items if item.stock_tracked
        )
        apply_stock_deltas(deltas, snapshot)

        SaleItemAdditional.objects.filter(sale_item__sale=sale).delete()
        SaleItem.objects.filter(sale=sale).delete()

        result = VoidResult(
            sale_id=sale.pk,
            total=sale.total,
            restored_stock={
                pid: qty for pid, qty in deltas.items() if snapshot.product(pid).tracks_stock
            },
        )
        sale.delete()
        return result

    result = _execute("void", user, _void)
    logger.info("Sale %s voided by %s: total=%s", result.sale_id, _who(user), result.total)
    return result
