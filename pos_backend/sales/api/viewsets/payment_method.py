# sales/api/viewsets/payment_method.py

from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_CATALOG_MANAGE, CapabilityForWrites
from sales.models import PaymentMethod
from sales.serializers.payment_method import PaymentMethodSerializer


class PaymentMethodViewSet(viewsets.ModelViewSet):
    """
    Payment methods.

    Policy:
    - Any authenticated user can READ (the POS screen needs the list)
    - Only catalog managers can CREATE/UPDATE/DELETE
    - A method used by any sale cannot be deleted
    """

    queryset = PaymentMethod.objects.all().order_by("name")
    serializer_class = PaymentMethodSerializer
    permission_classes = [IsAuthenticated, CapabilityForWrites]
    required_capability = CAP_CATALOG_MANAGE

    def destroy(self, request, *args, **kwargs):
        method = self.get_object()
        if method.sales.exists():
            return Response(
                {"detail": "Payment method is used by sales; deletion not allowed."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        method.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
