"""
CASHIER MANAGEMENT (ADMIN ONLY)

Endpoints (mounted under /api/auth/):
- GET    cashiers/all/              list every account (optional ?role=cashier|admin)
- POST   cashiers/                  create a cashier account
- PUT    cashiers/<id>/             update name/username/email
- PUT    cashiers/<id>/password/    set a new password
- DELETE cashiers/<id>/password/    disable the password (account cannot log in)
- DELETE cashiers/<id>/             delete (refused when the cashier owns sales)

Only accounts with role=cashier are reachable through cashiers/; administrators
are managed through Django admin.
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_USERS_MANAGE, ROLE_CASHIER, HasCapability
from users.serializers import CashierSerializer, PasswordSerializer, UserSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


class CashierViewSet(
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = CashierSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_USERS_MANAGE

    def get_queryset(self):
        return User.objects.filter(role=ROLE_CASHIER)

    @extend_schema(responses={200: UserSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="all")
    def list_users(self, request):
        qs = User.objects.all().order_by("username")
        role = (request.query_params.get("role") or "").strip().lower()
        if role:
            qs = qs.filter(role=role)
        return Response(UserSerializer(qs, many=True).data)

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info("Cashier %s created by %s", user.username, self.request.user.username)

    def destroy(self, request, *args, **kwargs):
        cashier = self.get_object()

        if cashier.sales.exists():
            return Response(
                {"detail": "Cashier has linked sales; deletion not allowed."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        logger.info("Cashier %s deleted by %s", cashier.username, request.user.username)
        cashier.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=PasswordSerializer, responses={200: dict})
    @action(detail=True, methods=["put", "delete"], url_path="password")
    def password(self, request, pk=None):
        cashier = self.get_object()

        if request.method == "DELETE":
            cashier.set_unusable_password()
            cashier.save(update_fields=["password"])
            return Response(
                {
                    "success": True,
                    "detail": "Password disabled. Set a new one to reactivate the account.",
                }
            )

        ser = PasswordSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        cashier.set_password(ser.validated_data["password"])
        cashier.save(update_fields=["password"])
        return Response({"success": True})
