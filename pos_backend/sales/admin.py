# sales/admin.py

"""
Sales admin is view-only for sales and lines: posting, editing and voiding
go through sales.services.sale_orchestrator so stock stays consistent.
"""

from django.contrib import admin

from sales.models import PaymentMethod, Sale, SaleItem, SaleItemAdditional, SalesSettings


class _ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ======================================================
# SALE ADMIN
# ======================================================


class SaleItemInline(_ReadOnlyAdminMixin, admin.TabularInline):
    model = SaleItem
    extra = 0
    fields = ("product", "quantity", "unit_price", "is_delivery", "stock_tracked")
    readonly_fields = fields


@admin.register(Sale)
class SaleAdmin(_ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("id", "user", "payment_method", "total", "created_at")
    list_filter = ("payment_method", "created_at")
    search_fields = ("user__username", "user__name")
    readonly_fields = ("user", "payment_method", "total", "created_at", "updated_at")
    inlines = [SaleItemInline]


@admin.register(SaleItemAdditional)
class SaleItemAdditionalAdmin(_ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("sale_item", "additional", "quantity", "unit_price")
    search_fields = ("additional__name",)


# ======================================================
# CONFIGURATION
# ======================================================


@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)


@admin.register(SalesSettings)
class SalesSettingsAdmin(admin.ModelAdmin):
    list_display = ("recent_sales_limit", "recent_sales_enabled", "dark_mode", "updated_at")
