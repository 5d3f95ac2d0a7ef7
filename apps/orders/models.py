# apps/orders/models.py

"""
Order management models for the storefront.
Handles orders, their line items and discount coupons.
"""

import random
import string
from decimal import Decimal
from typing import ClassVar

import structlog
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models, transaction
from django.utils import timezone

from apps.core.models import AuditStampedModelBase
from apps.core.utils import create_money_from_price
from apps.orders.enums import OrderStatus, PaymentStatus
from apps.orders.managers import CouponManager, OrderManager
from apps.orders.utils import InventoryManager, OrderStatusManager

logger = structlog.get_logger(__name__)


class Coupon(AuditStampedModelBase):
    """
    Discount coupon redeemable once per customer.
    """

    class CouponType(models.TextChoices):
        PERCENTAGE = "percentage", "Percentual"
        FIXED = "fixed", "Valor fixo"

    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=100, blank=True)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=20, choices=CouponType.choices)
    value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Percentage (0-100) or fixed amount in reais",
    )
    min_order_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Minimum order subtotal required",
    )
    max_discount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Cap for percentage discounts",
    )
    usage_limit = models.PositiveIntegerField(
        null=True, blank=True, help_text="Total redemptions allowed"
    )
    used_count = models.PositiveIntegerField(default=0)
    start_date = models.DateTimeField(default=timezone.now)
    end_date = models.DateTimeField(null=True, blank=True)

    objects = CouponManager()

    class Meta:
        db_table = "orders_coupon"
        ordering: ClassVar[list[str]] = ["-created_at"]

    def __str__(self) -> str:
        return self.code

    def save(self, *args, **kwargs):
        self.code = self.code.strip().upper()
        super().save(*args, **kwargs)


class CouponUsage(AuditStampedModelBase):
    """Records a customer redeeming a coupon."""

    coupon = models.ForeignKey(Coupon, on_delete=models.CASCADE, related_name="usages")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="coupon_usages",
    )
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="coupon_usages",
    )
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = "orders_coupon_usage"
        constraints: ClassVar[list] = [
            models.UniqueConstraint(
                fields=["coupon", "user"], name="unique_coupon_usage_per_user"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.coupon.code} used by {self.user_id}"


class Order(AuditStampedModelBase):
    """
    A customer's order and the state of its payment.
    """

    OrderStatus = OrderStatus
    PaymentStatus = PaymentStatus

    order_number = models.CharField(
        max_length=20,
        unique=True,
        help_text="Unique order number for customer reference",
    )

    # Customer information
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
        help_text="Customer who placed the order",
    )
    customer_name = models.CharField(max_length=255, blank=True)
    customer_type = models.CharField(max_length=20, default="retail")
    email = models.EmailField(blank=True, help_text="Contact email for this order")
    phone_number = models.CharField(max_length=20, blank=True)

    # Shipping address, copied from the customer's saved address
    shipping_address = models.ForeignKey(
        "accounts.CustomerAddress",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    shipping_recipient_name = models.CharField(max_length=150, blank=True)
    shipping_street = models.CharField(max_length=255, blank=True)
    shipping_number = models.CharField(max_length=20, blank=True)
    shipping_complement = models.CharField(max_length=100, blank=True)
    shipping_neighborhood = models.CharField(max_length=100, blank=True)
    shipping_city = models.CharField(max_length=100, blank=True)
    shipping_state = models.CharField(max_length=2, blank=True)
    shipping_zip_code = models.CharField(max_length=8, blank=True)
    shipping_method = models.CharField(max_length=50, default="standard")

    # Status
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        help_text="Current order status",
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        help_text="Current payment status",
    )

    # Payment
    payment_external_id = models.CharField(
        max_length=100,
        blank=True,
        db_index=True,
        help_text="Checkout preference id, then the gateway payment id",
    )
    payment_method = models.CharField(max_length=50, blank=True)
    payment_details = models.JSONField(
        default=dict,
        blank=True,
        help_text="Summary of the last payment reported by the gateway",
    )

    # Financial information
    subtotal = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    discount_amount = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    shipping_cost = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    coupon = models.ForeignKey(
        Coupon,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    # Inventory is taken when the payment is approved
    stock_committed = models.BooleanField(default=False)
    # Set when the gateway approved less than the order total
    payment_review_required = models.BooleanField(default=False)

    # Tracking and fulfillment
    tracking_number = models.CharField(max_length=100, blank=True)
    carrier = models.CharField(max_length=100, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True, help_text="Internal notes about the order")
    customer_notes = models.TextField(blank=True)

    objects = OrderManager()

    class Meta:
        db_table = "orders_order"
        ordering: ClassVar[list[str]] = ["-created_at"]
        indexes: ClassVar[list] = [
            models.Index(fields=["status"], name="orders_orde_status_idx"),
            models.Index(fields=["payment_status"], name="orders_orde_paystat_idx"),
            models.Index(fields=["created_at"], name="orders_orde_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Order {self.order_number}"

    def save(self, *args, **kwargs) -> None:
        if not self.order_number:
            self.order_number = self.generate_order_number()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_order_number() -> str:
        """Generate unique order number, e.g. HP-20250115-AB123."""
        while True:
            date_str = timezone.now().strftime("%Y%m%d")
            random_str = "".join(
                random.choices(string.ascii_uppercase + string.digits, k=5),
            )
            order_number = f"HP-{date_str}-{random_str}"
            if not Order.objects.filter(order_number=order_number).exists():
                return order_number

    @property
    def is_paid(self) -> bool:
        """
        Whether the payment was approved.

        Rows written by older releases hold ``paid`` instead of ``approved``;
        both count as paid here and on the status endpoint.
        """
        return PaymentStatus.is_success(self.payment_status)

    @property
    def is_confirmed(self) -> bool:
        return self.status == OrderStatus.CONFIRMED

    @property
    def total_money(self):
        return create_money_from_price(self.total_amount)

    @property
    def short_reference(self) -> str:
        """Last 8 characters of the order id, as shown to customers."""
        return str(self.id)[-8:]

    def get_full_shipping_address(self) -> str:
        """Return formatted shipping address."""
        street = f"{self.shipping_street}, {self.shipping_number}"
        if self.shipping_complement:
            street = f"{street} - {self.shipping_complement}"
        lines = [
            self.shipping_recipient_name,
            street,
            f"{self.shipping_neighborhood} - {self.shipping_city}/{self.shipping_state}",
            f"CEP {self.shipping_zip_code[:5]}-{self.shipping_zip_code[5:]}",
        ]
        return "\n".join(line for line in lines if line.strip())

    def calculate_total(self) -> Decimal:
        """Calculate order total from components."""
        return self.subtotal - self.discount_amount + self.shipping_cost

    def can_transition_to(self, new_status) -> bool:
        return OrderStatusManager.can_transition(self.status, new_status)

    def can_be_cancelled(self) -> bool:
        """Check if order can be cancelled."""
        return self.status in OrderStatusManager.CUSTOMER_CANCELLABLE

    def can_be_shipped(self) -> bool:
        """Check if order can be shipped."""
        return self.can_transition_to(OrderStatus.SHIPPED) and self.is_paid

    def set_payment_status(self, new_status) -> bool:
        """
        Move ``payment_status`` to ``new_status`` if the transition is allowed.

        Returns True when the status changed. The caller saves the order.
        """
        current = self.payment_status
        if current == new_status:
            return False
        if not PaymentStatus.can_transition(current, new_status):
            logger.warning(
                "payment_status_transition_rejected",
                order_id=str(self.id),
                current=current,
                rejected=str(new_status),
            )
            return False

        self.payment_status = new_status
        return True

    @transaction.atomic
    def commit_stock(self) -> bool:
        """
        Take the ordered quantities out of stock, once per order.
        Returns False if the stock had already been committed.
        """
        locked = Order.objects.select_for_update().get(pk=self.pk)
        if locked.stock_committed:
            self.stock_committed = True
            return False

        InventoryManager.commit(self.items.select_related("product"))
        Order.objects.filter(pk=self.pk).update(stock_committed=True)
        self.stock_committed = True
        return True

    @transaction.atomic
    def confirm(self) -> bool:
        """Confirm a paid order. Returns False if it cannot be confirmed."""
        if not self.can_transition_to(OrderStatus.CONFIRMED):
            return False
        self.status = OrderStatus.CONFIRMED
        self.save(update_fields=["status", "updated_at"])
        return True

    @transaction.atomic
    def mark_as_processing(self) -> None:
        if not self.can_transition_to(OrderStatus.PROCESSING):
            err_msg = "Order cannot be processed in current state"
            raise ValueError(err_msg)
        self.status = OrderStatus.PROCESSING
        self.save(update_fields=["status", "updated_at"])

    @transaction.atomic
    def mark_as_shipped(self, tracking_number: str = "", carrier: str = "") -> None:
        """Mark order as shipped and update tracking info."""
        if not self.can_be_shipped():
            err_msg = "Order cannot be shipped in current state"
            raise ValueError(err_msg)

        self.status = OrderStatus.SHIPPED
        self.shipped_at = timezone.now()
        if tracking_number:
            self.tracking_number = tracking_number
        if carrier:
            self.carrier = carrier

        self.save(
            update_fields=[
                "status",
                "shipped_at",
                "tracking_number",
                "carrier",
                "updated_at",
            ],
        )

    @transaction.atomic
    def mark_as_delivered(self) -> None:
        """Mark order as delivered."""
        if not self.can_transition_to(OrderStatus.DELIVERED):
            err_msg = "Order must be shipped before marking as delivered"
            raise ValueError(err_msg)

        self.status = OrderStatus.DELIVERED
        self.delivered_at = timezone.now()
        self.save(update_fields=["status", "delivered_at", "updated_at"])

    @transaction.atomic
    def cancel(self, reason: str = "") -> None:
        """Cancel the order and restore inventory taken for it."""
        if not self.can_be_cancelled():
            err_msg = "Order cannot be cancelled in current state"
            raise ValueError(err_msg)

        if self.stock_committed:
            InventoryManager.release(self.items.select_related("product"))
            self.stock_committed = False

        self.status = OrderStatus.CANCELLED
        self.cancelled_at = timezone.now()
        if reason:
            self.notes = f"Cancelled: {reason}\n{self.notes}".strip()
        self.save(
            update_fields=[
                "status",
                "stock_committed",
                "cancelled_at",
                "notes",
                "updated_at",
            ]
        )
        logger.info("order_cancelled", order_id=str(self.id), reason=reason)


class OrderItem(AuditStampedModelBase):
    """
    Individual items within an order.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
        help_text="Order this item belongs to",
    )

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
        help_text="Product that was ordered",
    )

    # Product details at time of order (for historical accuracy)
    product_name = models.CharField(max_length=255)
    product_sku = models.CharField(max_length=100)

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Price per unit at time of order",
    )
    total_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Total price for this line item",
    )

    class Meta:
        db_table = "orders_order_item"
        ordering: ClassVar[list[str]] = ["created_at"]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.product_name} (Order {self.order.order_number})"

    def save(self, *args, **kwargs) -> None:
        """Calculate total price and populate product details."""
        if self.product_id:
            self.product_name = self.product_name or self.product.name
            self.product_sku = self.product_sku or self.product.sku
        self.total_price = self.unit_price * self.quantity
        super().save(*args, **kwargs)
