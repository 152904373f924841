# products/views/additional.py

"""
ADD-ON CATALOG

- /additional-categories/  CRUD; delete refused while add-ons or product links use it
- /additionals/            CRUD; list hides suspended unless ?include_suspended=true;
                           PATCH /<id>/suspended/; delete refused once used on a sale
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_CATALOG_MANAGE, CapabilityForWrites
from products.models import Additional, AdditionalCategory
from products.serializers import AdditionalCategorySerializer, AdditionalSerializer

from .product import SuspendedSerializer, _truthy


class AdditionalCategoryViewSet(viewsets.ModelViewSet):
    queryset = AdditionalCategory.objects.all().order_by("name")
    serializer_class = AdditionalCategorySerializer
    permission_classes = [IsAuthenticated, CapabilityForWrites]
    required_capability = CAP_CATALOG_MANAGE

    def destroy(self, request, *args, **kwargs):
        category = self.get_object()
        if category.additionals.exists() or category.product_links.exists():
            return Response(
                {"detail": "Category has linked add-ons or products; deletion not allowed."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class AdditionalViewSet(viewsets.ModelViewSet):
    serializer_class = AdditionalSerializer
    permission_classes = [IsAuthenticated, CapabilityForWrites]
    required_capability = CAP_CATALOG_MANAGE

    def get_queryset(self):
        qs = Additional.objects.select_related("category").order_by("name")
        if self.action == "list" and not _truthy(self.request.query_params.get("include_suspended")):
            qs = qs.filter(suspended=False)
        return qs

    @extend_schema(parameters=[OpenApiParameter("include_suspended", bool)])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        additional = self.get_object()
        if additional.sale_item_additionals.exists():
            return Response(
                {"detail": "Add-on already used in sales; deletion not allowed."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        additional.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=SuspendedSerializer, responses={200: AdditionalSerializer})
    @action(detail=True, methods=["patch"], url_path="suspended")
    def suspended(self, request, pk=None):
        additional = self.get_object()
        ser = SuspendedSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        additional.suspended = ser.validated_data["suspended"]
        additional.save(update_fields=["suspended", "updated_at"])
        return Response(AdditionalSerializer(additional).data)
