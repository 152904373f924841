# products/views/product.py

"""
PRODUCT VIEWSET

Endpoints (mounted at /api/products/):
- GET    /                           list (suspended hidden unless ?include_suspended=true)
- POST   /                           create
- GET    /<id>/                      retrieve
- PUT    /<id>/ | PATCH /<id>/       update
- PATCH  /<id>/suspended/            {"suspended": bool}
- DELETE /<id>/                      refused while sale lines reference it
- GET    /<id>/additional-categories/
- PUT    /<id>/additional-categories/   {"category_ids": [..]} replaces the set

Policy:
- Any authenticated user can READ (the POS screen needs the catalog)
- Writes require catalog.manage
"""

import logging

from django.db import transaction
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_CATALOG_MANAGE, CapabilityForWrites
from products.models import AdditionalCategory, Product, ProductAdditionalCategory
from products.serializers import AdditionalCategorySerializer, ProductSerializer

logger = logging.getLogger(__name__)


def _truthy(value) -> bool:
    return str(value or "").strip().lower() in {"1", "true", "yes"}


class SuspendedSerializer(serializers.Serializer):
    suspended = serializers.BooleanField(required=True)

    def to_internal_value(self, data):
        # strict: "true"/1 are not booleans here
        if not isinstance(data, dict) or not isinstance(data.get("suspended"), bool):
            raise serializers.ValidationError({"suspended": 'Parameter "suspended" must be a boolean'})
        return super().to_internal_value(data)


class AdditionalCategoryIdsSerializer(serializers.Serializer):
    category_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=True)


class ProductViewSet(viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, CapabilityForWrites]
    required_capability = CAP_CATALOG_MANAGE
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        qs = Product.objects.all().order_by("name")
        if self.action == "list" and not _truthy(self.request.query_params.get("include_suspended")):
            qs = qs.filter(suspended=False)
        return qs

    @extend_schema(parameters=[OpenApiParameter("include_suspended", bool)])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def perform_update(self, serializer):
        # re-read under lock so a concurrent sale's stock write is not overwritten
        with transaction.atomic():
            serializer.instance = Product.objects.select_for_update().get(pk=serializer.instance.pk)
            serializer.save()

    def destroy(self, request, *args, **kwargs):
        product = self.get_object()
        if product.sale_items.exists():
            return Response(
                {"detail": "Product has linked sales; deletion not allowed."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        logger.info("Product %s deleted by %s", product.pk, request.user.username)
        product.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=SuspendedSerializer, responses={200: ProductSerializer})
    @action(detail=True, methods=["patch"], url_path="suspended")
    def suspended(self, request, pk=None):
        product = self.get_object()
        ser = SuspendedSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        product.suspended = ser.validated_data["suspended"]
        product.save(update_fields=["suspended", "updated_at"])
        return Response(ProductSerializer(product).data)

    @extend_schema(
        request=AdditionalCategoryIdsSerializer,
        responses={200: AdditionalCategorySerializer(many=True)},
    )
    @action(detail=True, methods=["get", "put"], url_path="additional-categories")
    def additional_categories(self, request, pk=None):
        product = self.get_object()

        if request.method == "PUT":
            ser = AdditionalCategoryIdsSerializer(data=request.data)
            ser.is_valid(raise_exception=True)
            desired = set(ser.validated_data["category_ids"])

            found = set(AdditionalCategory.objects.filter(pk__in=desired).values_list("pk", flat=True))
            missing = sorted(desired - found)
            if missing:
                return Response(
                    {"detail": f"Unknown additional categories: {missing}"},
                    status=status.HTTP_400_BAD_REQUEST,
                )

            with transaction.atomic():
                current = set(product.additional_category_links.values_list("additional_category_id", flat=True))
                product.additional_category_links.filter(
                    additional_category_id__in=current - desired
                ).delete()
                ProductAdditionalCategory.objects.bulk_create(
                    [
                        ProductAdditionalCategory(product=product, additional_category_id=cid)
                        for cid in sorted(desired - current)
                    ]
                )

        categories = AdditionalCategory.objects.filter(product_links__product=product).order_by("name")
        return Response(AdditionalCategorySerializer(categories, many=True).data)
