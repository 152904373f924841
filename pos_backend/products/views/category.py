# products/views/category.py

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_CATALOG_MANAGE, CapabilityForWrites
from products.models import Category, Product
from products.serializers import CategorySerializer, ProductSerializer


class AssignProductSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)


class CategoryViewSet(viewsets.ModelViewSet):
    """
    Category API

    Policy:
    - Any authenticated user can READ categories (needed for product forms)
    - Only catalog managers can CREATE/UPDATE/DELETE categories

    Products hold the category NAME, so deleting a category leaves existing
    labels in place; the UI can reassign them.
    """

    queryset = Category.objects.all().order_by("name")
    serializer_class = CategorySerializer
    permission_classes = [IsAuthenticated, CapabilityForWrites]
    required_capability = CAP_CATALOG_MANAGE

    @extend_schema(request=AssignProductSerializer, responses={200: ProductSerializer(many=True)})
    @action(detail=True, methods=["get", "post"], url_path="products")
    def products(self, request, pk=None):
        category = self.get_object()

        if request.method == "POST":
            ser = AssignProductSerializer(data=request.data)
            ser.is_valid(raise_exception=True)

            product = get_object_or_404(Product, pk=ser.validated_data["product_id"])
            product.category = category.name
            product.save(update_fields=["category", "updated_at"])
            return Response(ProductSerializer(product).data)

        qs = Product.objects.filter(category=category.name).order_by("name")
        return Response(ProductSerializer(qs, many=True).data)

    @extend_schema(request=None, responses={204: None})
    @action(detail=True, methods=["delete"], url_path=r"products/(?P<product_id>\d+)")
    def remove_product(self, request, pk=None, product_id=None):
        category = self.get_object()
        product = get_object_or_404(Product, pk=product_id)

        if product.category != category.name:
            return Response(
                {"detail": "Product does not belong to this category."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        product.category = None
        product.save(update_fields=["category", "updated_at"])
        return Response(status=status.HTTP_204_NO_CONTENT)
