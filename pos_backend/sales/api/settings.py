# sales/api/settings.py

"""
POS SETTINGS (ADMIN)

GET /api/sales/settings/   current settings (created with defaults on first read)
PUT /api/sales/settings/   update; recent_sales_limit must be 1..500
"""

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import CAP_SETTINGS_MANAGE, HasCapability
from sales.models import SalesSettings
from sales.serializers.settings import SalesSettingsSerializer


class SalesSettingsView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SETTINGS_MANAGE

    @extend_schema(responses={200: SalesSettingsSerializer})
    def get(self, request):
        return Response(SalesSettingsSerializer(SalesSettings.load()).data)

    @extend_schema(request=SalesSettingsSerializer, responses={200: SalesSettingsSerializer})
    def put(self, request):
        ser = SalesSettingsSerializer(SalesSettings.load(), data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response(ser.data)
