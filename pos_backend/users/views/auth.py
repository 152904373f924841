import logging

from django.contrib.auth import authenticate
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from users.serializers import LoginResponseSerializer, LoginSerializer, UserSerializer

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    """
    Public self-registration is disabled.
    Cashier accounts are created by an administrator.
    """

    permission_classes = [AllowAny]

    @extend_schema(
        request=None,
        responses={403: dict},
        description="Public registration is disabled",
    )
    def post(self, request):
        return Response(
            {"detail": "Public registration is disabled."},
            status=status.HTTP_403_FORBIDDEN,
        )


class LoginView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [AnonRateThrottle]
    serializer_class = LoginSerializer

    @extend_schema(
        request=LoginSerializer,
        responses={200: LoginResponseSerializer},
        description="Authenticate with login (username or email) and password; returns JWT pair",
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        login = serializer.validated_data["login"].strip()
        password = serializer.validated_data["password"]

        user = authenticate(request=request, username=login, password=password)

        if not user:
            logger.warning("Failed login attempt for %r", login)
            return Response(
                {"detail": "Invalid credentials"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        refresh = RefreshToken.for_user(user)
        refresh["role"] = user.role

        return Response(
            {
                "access": str(refresh.access_token),
                "refresh": str(refresh),
                "user": UserSerializer(user).data,
            }
        )
