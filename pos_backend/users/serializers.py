from django.contrib.auth import get_user_model
from rest_framework import serializers

from permissions.roles import ROLE_CASHIER

User = get_user_model()


# ---------------- LOGIN (INPUT ONLY) ----------------
class LoginSerializer(serializers.Serializer):
    """
    Input validation only.
    Authentication is handled in the view.
    """

    login = serializers.CharField()
    password = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
    )


# ---------------- USER OUTPUT ----------------
class UserSerializer(serializers.ModelSerializer):
    """
    Safe user representation for frontend consumption.
    """

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "name",
            "email",
            "role",
            "is_active",
            "created_at",
        ]
        read_only_fields = fields


class LoginResponseSerializer(serializers.Serializer):
    access = serializers.CharField()
    refresh = serializers.CharField()
    user = UserSerializer()


# ---------------- CASHIER MANAGEMENT ----------------
class CashierSerializer(serializers.ModelSerializer):
    """
    Admin-facing cashier create/update.

    - password is write-only and only accepted on create
      (use the password action afterwards).
    - role is always cashier; admins are not created through this endpoint.
    """

    password = serializers.CharField(
        write_only=True,
        required=False,
        style={"input_type": "password"},
    )
    email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "name",
            "email",
            "password",
            "role",
            "is_active",
            "created_at",
        ]
        read_only_fields = ["id", "role", "is_active", "created_at"]

    def validate_username(self, value):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("username cannot be blank")

        qs = User.objects.filter(username__iexact=v)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("Login already exists")
        return v

    def validate_name(self, value):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("name cannot be blank")
        return v

    def validate_email(self, value):
        return (value or "").strip() or None

    def validate(self, attrs):
        if self.instance is None and not attrs.get("password"):
            raise serializers.ValidationError({"password": "password is required"})
        if self.instance is not None and "password" in attrs:
            raise serializers.ValidationError(
                {"password": "Use the password endpoint to change a password"}
            )
        return attrs

    def create(self, validated_data):
        return User.objects.create_user(
            username=validated_data["username"],
            password=validated_data["password"],
            name=validated_data.get("name", ""),
            email=validated_data.get("email"),
            role=ROLE_CASHIER,
        )


class PasswordSerializer(serializers.Serializer):
    password = serializers.CharField(
        write_only=True,
        min_length=4,
        style={"input_type": "password"},
    )
