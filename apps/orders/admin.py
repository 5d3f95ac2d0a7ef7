# apps/orders/admin.py

from typing import ClassVar

from django.contrib import admin, messages
from django.urls import reverse
from django.utils.html import format_html

from apps.orders.models import Coupon, CouponUsage, Order, OrderItem
from apps.payments.exceptions import GatewayError
from apps.payments.gateway import get_gateway
from apps.payments.services import reconcile_order

STATUS_COLORS = {
    "pending": "orange",
    "confirmed": "blue",
    "processing": "purple",
    "shipped": "green",
    "delivered": "darkgreen",
    "cancelled": "red",
}

PAYMENT_STATUS_COLORS = {
    "pending": "orange",
    "processing": "orange",
    "in_mediation": "brown",
    "authorized": "blue",
    "approved": "green",
    "paid": "green",
    "rejected": "red",
    "cancelled": "red",
    "refunded": "gray",
    "charged_back": "gray",
}


class OrderItemInline(admin.TabularInline):
    """Inline admin for order items."""

    model = OrderItem
    extra = 0
    readonly_fields: ClassVar[list] = [
        "id",
        "product_name",
        "product_sku",
        "total_price",
        "created_at",
    ]
    raw_id_fields: ClassVar[list] = ["product"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin interface for Order model."""

    list_display: ClassVar[list] = [
        "order_number",
        "user_link",
        "status_display",
        "payment_status_display",
        "payment_external_id",
        "total_amount",
        "created_at",
    ]
    list_filter: ClassVar[list] = [
        "status",
        "payment_status",
        "payment_review_required",
        "customer_type",
        "created_at",
        "shipped_at",
    ]
    search_fields: ClassVar[list] = [
        "order_number",
        "user__email",
        "email",
        "customer_name",
        "payment_external_id",
    ]
    readonly_fields: ClassVar[list] = [
        "id",
        "order_number",
        "created_at",
        "updated_at",
        "subtotal",
        "total_amount",
        "payment_external_id",
        "payment_details",
        "stock_committed",
        "shipped_at",
        "delivered_at",
        "cancelled_at",
    ]
    raw_id_fields: ClassVar[list] = ["user", "shipping_address", "coupon"]
    inlines: ClassVar[list] = [OrderItemInline]
    actions: ClassVar[list] = ["reconcile_payments"]

    fieldsets = (
        (
            "Order Information",
            {"fields": ("order_number", "user", "status", "customer_notes")},
        ),
        (
            "Customer",
            {
                "fields": (
                    "customer_name",
                    "customer_type",
                    "email",
                    "phone_number",
                ),
            },
        ),
        (
            "Shipping Address",
            {
                "fields": (
                    "shipping_address",
                    "shipping_recipient_name",
                    "shipping_street",
                    "shipping_number",
                    "shipping_complement",
                    "shipping_neighborhood",
                    "shipping_city",
                    "shipping_state",
                    "shipping_zip_code",
                    "shipping_method",
                ),
            },
        ),
        (
            "Payment",
            {
                "fields": (
                    "payment_status",
                    "payment_method",
                    "payment_external_id",
                    "payment_details",
                    "payment_review_required",
                ),
            },
        ),
        (
            "Financial Information",
            {
                "fields": (
                    "subtotal",
                    "discount_amount",
                    "shipping_cost",
                    "total_amount",
                    "coupon",
                ),
            },
        ),
        (
            "Fulfillment",
            {
                "fields": (
                    "stock_committed",
                    "tracking_number",
                    "carrier",
                    "shipped_at",
                    "delivered_at",
                    "cancelled_at",
                ),
            },
        ),
        (
            "Notes",
            {"fields": ("notes",), "classes": ("collapse",)},
        ),
        (
            "Timestamps",
            {"fields": ("id", "created_at", "updated_at"), "classes": ("collapse",)},
        ),
    )

    @admin.display(description="User")
    def user_link(self, obj):
        """Create clickable link to user."""
        url = reverse("admin:accounts_user_change", args=[obj.user.id])
        return format_html('<a href="{}">{}</a>', url, obj.user.email)

    @admin.display(description="Status", ordering="status")
    def status_display(self, obj):
        """Display status with color coding."""
        return format_html(
            '<span style="color: {};">{}</span>',
            STATUS_COLORS.get(obj.status, "black"),
            obj.get_status_display(),
        )

    @admin.display(description="Payment", ordering="payment_status")
    def payment_status_display(self, obj):
        """Display payment status with color coding."""
        return format_html(
            '<span style="color: {};">{}</span>',
            PAYMENT_STATUS_COLORS.get(obj.payment_status, "black"),
            obj.get_payment_status_display(),
        )

    @admin.action(description="Check payment status with Mercado Pago")
    def reconcile_payments(self, request, queryset):
        try:
            gateway = get_gateway()
        except GatewayError as e:
            self.message_user(request, e.message, level=messages.ERROR)
            return

        updated = 0
        for order in queryset.filter(payment_external_id__regex=r"^\d+$"):
            try:
                updated += reconcile_order(order, gateway)
            except GatewayError as e:
                self.message_user(
                    request,
                    f"{order.order_number}: {e.message}",
                    level=messages.WARNING,
                )

        self.message_user(request, f"{updated} order(s) updated.")

    def get_queryset(self, request):
        """Optimize queryset for admin list view."""
        return super().get_queryset(request).select_related("user")


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    """Admin interface for Coupon model."""

    list_display: ClassVar[list] = [
        "code",
        "name",
        "type",
        "value",
        "used_count",
        "usage_limit",
        "start_date",
        "end_date",
        "is_active",
    ]
    list_filter: ClassVar[list] = ["type", "is_active", "start_date", "end_date"]
    search_fields: ClassVar[list] = ["code", "name"]
    readonly_fields: ClassVar[list] = ["id", "used_count", "created_at", "updated_at"]


@admin.register(CouponUsage)
class CouponUsageAdmin(admin.ModelAdmin):
    """Admin interface for CouponUsage model."""

    list_display: ClassVar[list] = [
        "coupon",
        "user",
        "order",
        "discount_amount",
        "created_at",
    ]
    search_fields: ClassVar[list] = ["coupon__code", "user__email"]
    raw_id_fields: ClassVar[list] = ["coupon", "user", "order"]
    readonly_fields: ClassVar[list] = ["id", "created_at", "updated_at"]
