# apps/orders/utils.py

from decimal import ROUND_HALF_UP, Decimal
from typing import ClassVar

from django.db import transaction
from django.db.models import F, Value
from django.db.models.functions import Greatest
from django.utils import timezone

from apps.orders.enums import OrderStatus


class CouponError(ValueError):
    """Raised when a coupon cannot be applied to an order."""


class OrderCalculator:
    """Utility class for order calculations."""

    @staticmethod
    def calculate_discount(coupon, subtotal: Decimal) -> Decimal:
        """Discount granted by ``coupon`` on ``subtotal``, rounded to cents."""
        if coupon.type == "percentage":
            discount = subtotal * coupon.value / Decimal("100")
            if coupon.max_discount is not None and discount > coupon.max_discount:
                discount = coupon.max_discount
        elif coupon.type == "fixed":
            discount = min(coupon.value, subtotal)
        else:
            err_msg = "Tipo de cupom inválido"
            raise CouponError(err_msg)

        return discount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @staticmethod
    def calculate_order_totals(
        subtotal: Decimal,
        shipping_cost: Decimal = Decimal("0.00"),
        discount_amount: Decimal = Decimal("0.00"),
    ) -> dict[str, Decimal]:
        """Calculate all order totals."""
        total = subtotal - discount_amount + shipping_cost
        return {
            "subtotal": subtotal,
            "discount_amount": discount_amount,
            "shipping_cost": shipping_cost,
            "total": total,
        }


class CouponValidator:
    """
    Checks a coupon code against an order total for a customer.
    """

    @staticmethod
    def validate(code: str, order_total: Decimal, user):
        """
        Return ``(coupon, discount_amount)`` or raise ``CouponError`` with the
        message shown to the customer.
        """
        from apps.orders.models import Coupon, CouponUsage

        if not code or order_total is None or user is None:
            err_msg = "Dados obrigatórios ausentes"
            raise CouponError(err_msg)

        coupon = Coupon.objects.filter(code=code.strip().upper(), is_active=True).first()
        if coupon is None:
            err_msg = "Cupom não encontrado ou inativo"
            raise CouponError(err_msg)

        now = timezone.now()
        if coupon.start_date and coupon.start_date > now:
            err_msg = "Cupom ainda não está ativo"
            raise CouponError(err_msg)
        if coupon.end_date and coupon.end_date < now:
            err_msg = "Cupom expirado"
            raise CouponError(err_msg)
        if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
            err_msg = "Cupom atingiu o limite de uso"
            raise CouponError(err_msg)
        if coupon.min_order_value is not None and order_total < coupon.min_order_value:
            err_msg = f"Pedido mínimo de R$ {coupon.min_order_value:.2f} para este cupom"
            raise CouponError(err_msg)
        if CouponUsage.objects.filter(coupon=coupon, user=user).exists():
            err_msg = "Cupom já foi utilizado por este cliente"
            raise CouponError(err_msg)

        discount = OrderCalculator.calculate_discount(coupon, order_total)
        return coupon, discount

    @staticmethod
    @transaction.atomic
    def redeem(coupon, user, order, discount_amount: Decimal):
        """Record the use of ``coupon`` by ``user`` on ``order``."""
        from apps.orders.models import Coupon, CouponUsage

        usage = CouponUsage.objects.create(
            coupon=coupon,
            user=user,
            order=order,
            discount_amount=discount_amount,
        )
        Coupon.objects.filter(pk=coupon.pk).update(used_count=F("used_count") + 1)
        return usage


class InventoryManager:
    """Utility class for inventory management."""

    @staticmethod
    def check_availability(lines: list[dict]) -> list[dict]:
        """
        Return one entry per line whose product cannot cover the requested
        quantity. ``lines`` holds ``{"product": Product, "quantity": int}``.
        """
        shortages = []
        for line in lines:
            product = line["product"]
            requested = line["quantity"]
            if product.stock_quantity < requested:
                shortages.append(
                    {
                        "product_id": str(product.id),
                        "product_name": product.name,
                        "requested": requested,
                        "available": product.stock_quantity,
                    },
                )
        return shortages

    @staticmethod
    @transaction.atomic
    def commit(items) -> None:
        """Take order item quantities out of stock."""
        from apps.products.models import Product

        for item in items:
            Product.objects.filter(pk=item.product_id).update(
                stock_quantity=Greatest(F("stock_quantity") - item.quantity, Value(0)),
                updated_at=timezone.now(),
            )

    @staticmethod
    @transaction.atomic
    def release(items) -> None:
        """Put order item quantities back in stock (e.g., when order is cancelled)."""
        from apps.products.models import Product

        for item in items:
            Product.objects.filter(pk=item.product_id).update(
                stock_quantity=F("stock_quantity") + item.quantity,
                updated_at=timezone.now(),
            )


class OrderStatusManager:
    """Utility class for managing order status transitions."""

    # Define allowed status transitions
    ALLOWED_TRANSITIONS: ClassVar = {
        OrderStatus.PENDING: [
            OrderStatus.CONFIRMED,
            OrderStatus.CANCELLED,
        ],
        OrderStatus.CONFIRMED: [
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.CANCELLED,
        ],
        OrderStatus.PROCESSING: [
            OrderStatus.SHIPPED,
            OrderStatus.CANCELLED,
        ],
        OrderStatus.SHIPPED: [
            OrderStatus.DELIVERED,
        ],
        OrderStatus.DELIVERED: [],  # Terminal state
        OrderStatus.CANCELLED: [],  # Terminal state
    }

    # Customers may only cancel before the order is being prepared
    CUSTOMER_CANCELLABLE: ClassVar = [OrderStatus.PENDING, OrderStatus.CONFIRMED]

    @classmethod
    def can_transition(cls, current_status: str, new_status: str) -> bool:
        """Check if status transition is allowed."""
        allowed = cls.ALLOWED_TRANSITIONS.get(current_status, [])
        return new_status in allowed

    @classmethod
    def get_allowed_transitions(cls, current_status: str) -> list[str]:
        """Get list of allowed status transitions from current status."""
        return cls.ALLOWED_TRANSITIONS.get(current_status, [])
