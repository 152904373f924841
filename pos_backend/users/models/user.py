"""
PATH: users/models/user.py

CUSTOM USER MODEL

Identity:
- username is the login typed at the POS terminal (unique, required).
- email is optional; when present it is unique and can also be used to log in.
- role decides what the account may do (see permissions.roles).

Accounts are created by an administrator (cashier management endpoints) or by
the seed_pos command; there is no public self-registration.
"""

from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models


# ---------------- USER MANAGER ----------------
class UserManager(BaseUserManager):
    def create_user(self, username=None, password=None, **extra_fields):
        """
        Rules:
        - username is mandatory.
        - email is normalized, blank email is stored as NULL (keeps uniqueness sane).
        - no password => unusable password (account cannot log in until one is set).
        """
        username = (username or "").strip()
        if not username:
            raise ValueError("A username is required")

        email = (extra_fields.pop("email", None) or "").strip()
        extra_fields["email"] = self.normalize_email(email) if email else None
        extra_fields.setdefault("is_active", True)

        user = self.model(username=username, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.full_clean(exclude=["password"])
        user.save(using=self._db)
        return user

    def create_superuser(self, username, password=None, **extra_fields):
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.setdefault("role", "admin")
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True")

        return self.create_user(username=username, password=password, **extra_fields)


# ---------------- USER MODEL ----------------
class User(AbstractBaseUser, PermissionsMixin):
    ROLE_ADMIN = "admin"
    ROLE_CASHIER = "cashier"

    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_CASHIER, "Cashier"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    username = models.CharField(max_length=150, unique=True)
    name = models.CharField(max_length=150, blank=True)
    email = models.EmailField(unique=True, null=True, blank=True)

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_CASHIER)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "username"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["username"]

    def clean(self):
        self.username = (self.username or "").strip()
        if not self.username:
            raise ValidationError("User must have a username")
        if self.email is not None:
            self.email = self.__class__.objects.normalize_email(self.email).strip() or None

    @property
    def is_admin(self) -> bool:
        return self.role == self.ROLE_ADMIN

    def __str__(self):
        return f"{self.username} ({self.role})"
