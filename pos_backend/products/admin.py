# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules:

- Stock is a plain count; NULL means "not tracked".
- Stock written here does not take the row lock the API uses, so prefer
  the API for restocks during trading hours.
- Eligible add-on categories are edited inline on the Product page.
"""

from django.contrib import admin

from products.models import (
    Additional,
    AdditionalCategory,
    Category,
    Product,
    ProductAdditionalCategory,
)


# =====================================================
# CATEGORY
# =====================================================

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)
    ordering = ("name",)


# =====================================================
# PRODUCT
# =====================================================

class ProductAdditionalCategoryInline(admin.TabularInline):
    model = ProductAdditionalCategory
    extra = 1
    fields = ("additional_category", "created_at")
    readonly_fields = ("created_at",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "category",
        "price",
        "stock",
        "variable_price",
        "suspended",
        "updated_at",
    )
    list_filter = ("suspended", "variable_price", "category")
    search_fields = ("name",)
    ordering = ("name",)
    readonly_fields = ("created_at", "updated_at")

    inlines = [ProductAdditionalCategoryInline]


# =====================================================
# ADD-ONS
# =====================================================

@admin.register(AdditionalCategory)
class AdditionalCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "description", "created_at")
    search_fields = ("name",)
    ordering = ("name",)


@admin.register(Additional)
class AdditionalAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "suspended")
    list_filter = ("suspended", "category")
    search_fields = ("name", "category__name")
    ordering = ("name",)
