# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET (STAFF)

Endpoints (mounted at /api/sales/):
- GET    /            sales history (filters: start, end, payment_method, product)
- GET    /<id>/       one sale with lines and add-ons
- POST   /            post a sale
- PATCH  /<id>/       edit existing lines (PUT behaves the same)
- DELETE /<id>/       void: restores stock and removes the sale

Visibility:
- reports.view (admin) sees every sale
- otherwise only own sales; retrieving someone else's sale is 403

Write rules live in sales.services.sale_orchestrator; this view only maps
engine errors to HTTP responses.
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_POS_SELL, CAP_REPORTS_VIEW, HasCapability, user_has_capability
from sales.api.filters import SaleFilter
from sales.models import Sale
from sales.serializers.sale import SaleEditInputSerializer, SaleInputSerializer, SaleSerializer
from sales.services.exceptions import SaleTransactionError
from sales.services.sale_orchestrator import edit_sale, post_sale, void_sale


def engine_error_response(exc: SaleTransactionError) -> Response:
    return Response({"detail": str(exc)}, status=exc.status_code)


class SaleViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_POS_SELL
    filterset_class = SaleFilter
    lookup_value_regex = r"\d+"

    def _can_see_all(self) -> bool:
        return user_has_capability(self.request.user, CAP_REPORTS_VIEW)

    def _base_queryset(self):
        return (
            Sale.objects.all()
            .select_related("user", "payment_method")
            .prefetch_related(
                "items__product",
                "items__additionals__additional__category",
            )
            .order_by("-created_at", "-id")
        )

    def get_queryset(self):
        qs = self._base_queryset()
        if self.action == "list" and not self._can_see_all():
            qs = qs.filter(user=self.request.user)
        return qs

    def get_object(self):
        sale = super().get_object()
        if not self._can_see_all() and sale.user_id != self.request.user.pk:
            raise PermissionDenied("Access denied")
        return sale

    def _render(self, sale_pk, *, status_code=status.HTTP_200_OK) -> Response:
        sale = self._base_queryset().get(pk=sale_pk)
        return Response(SaleSerializer(sale).data, status=status_code)

    @extend_schema(
        parameters=[
            OpenApiParameter("start", str, description="YYYY-MM-DD or ISO datetime"),
            OpenApiParameter("end", str, description="YYYY-MM-DD (whole day) or ISO datetime"),
            OpenApiParameter("payment_method", int),
            OpenApiParameter("product", int),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(request=SaleInputSerializer, responses={201: SaleSerializer})
    def create(self, request, *args, **kwargs):
        try:
            sale = post_sale(user=request.user, payload=request.data)
        except SaleTransactionError as exc:
            return engine_error_response(exc)
        return self._render(sale.pk, status_code=status.HTTP_201_CREATED)

    @extend_schema(request=SaleEditInputSerializer, responses={200: SaleSerializer})
    def partial_update(self, request, pk=None):
        try:
            sale = edit_sale(user=request.user, sale_id=pk, payload=request.data)
        except SaleTransactionError as exc:
            return engine_error_response(exc)
        return self._render(sale.pk)

    @extend_schema(request=SaleEditInputSerializer, responses={200: SaleSerializer})
    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    @extend_schema(request=None, responses={204: None})
    def destroy(self, request, pk=None):
        try:
            void_sale(user=request.user, sale_id=pk)
        except SaleTransactionError as exc:
            return engine_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)
