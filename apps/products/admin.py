# apps/products/admin.py

"""
Django admin configuration for the product catalog.
"""

from typing import ClassVar

from django.contrib import admin
from django.utils.html import format_html

from apps.products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """
    Admin interface for Product model.
    """

    list_display: ClassVar[list] = [
        "name",
        "sku",
        "brand",
        "retail_price",
        "wholesale_price",
        "stock_display",
        "status",
        "is_active",
    ]
    list_filter: ClassVar[list] = ["status", "is_active", "brand", "category"]
    search_fields: ClassVar[list] = ["name", "sku", "brand", "description"]
    prepopulated_fields: ClassVar[dict] = {"slug": ("name",)}
    ordering: ClassVar[list] = ["name"]
    readonly_fields: ClassVar[list] = ["id", "created_at", "updated_at"]

    fieldsets: ClassVar[list] = [
        (
            "Basic Information",
            {"fields": ("name", "slug", "sku", "brand", "category", "description")},
        ),
        ("Pricing", {"fields": ("retail_price", "wholesale_price", "cost_price")}),
        ("Inventory", {"fields": ("stock_quantity", "min_stock", "weight")}),
        ("Status", {"fields": ("status", "is_active")}),
        (
            "Timestamps",
            {"fields": ("id", "created_at", "updated_at"), "classes": ("collapse",)},
        ),
    ]

    @admin.display(description="Stock", ordering="stock_quantity")
    def stock_display(self, obj):
        """Display stock with color coding."""
        if obj.stock_quantity == 0:
            color = "red"
        elif obj.is_low_stock:
            color = "orange"
        else:
            color = "green"
        return format_html(
            '<span style="color: {};">{}</span>', color, obj.stock_quantity
        )
