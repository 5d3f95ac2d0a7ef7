# apps/orders/serializers.py

"""
Serializers for the order management system.
Handles checkout order creation, coupons and the order lifecycle.
"""

from decimal import Decimal
from typing import ClassVar

from django.db import transaction
from rest_framework import serializers
from rest_framework.exceptions import NotFound

from apps.accounts.models import CustomerAddress
from apps.core.serializers import BaseModelSerializer, SanitizedCharField
from apps.orders.models import Coupon, Order, OrderItem
from apps.orders.utils import (
    CouponError,
    CouponValidator,
    OrderCalculator,
)
from apps.products.models import Product


class OrderItemSerializer(BaseModelSerializer):
    """
    Serializer for order items with historical product information.
    """

    product_id = serializers.UUIDField(source="product.id", read_only=True)

    class Meta(BaseModelSerializer.Meta):
        model = OrderItem
        fields: ClassVar[list] = [
            *BaseModelSerializer.Meta.fields,
            "product_id",
            "product_name",
            "product_sku",
            "quantity",
            "unit_price",
            "total_price",
        ]
        read_only_fields: ClassVar[list] = fields


class OrderSerializer(BaseModelSerializer):
    """
    Comprehensive serializer for orders with full details.
    """

    items = OrderItemSerializer(many=True, read_only=True)
    shipping_address_text = serializers.SerializerMethodField()
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    payment_status_display = serializers.CharField(
        source="get_payment_status_display",
        read_only=True,
    )
    coupon_code = serializers.CharField(
        source="coupon.code", read_only=True, default=None
    )
    is_paid = serializers.BooleanField(read_only=True)
    can_cancel = serializers.SerializerMethodField()
    can_ship = serializers.SerializerMethodField()

    class Meta(BaseModelSerializer.Meta):
        model = Order
        fields: ClassVar[list] = [
            *BaseModelSerializer.Meta.fields,
            "order_number",
            "user",
            "customer_name",
            "customer_type",
            "email",
            "phone_number",
            "shipping_address",
            "shipping_address_text",
            "shipping_method",
            "status",
            "status_display",
            "payment_status",
            "payment_status_display",
            "payment_external_id",
            "payment_method",
            "subtotal",
            "discount_amount",
            "shipping_cost",
            "total_amount",
            "coupon_code",
            "tracking_number",
            "carrier",
            "shipped_at",
            "delivered_at",
            "customer_notes",
            "items",
            "is_paid",
            "can_cancel",
            "can_ship",
        ]
        read_only_fields: ClassVar[list] = fields

    def get_shipping_address_text(self, obj: Order) -> str:
        return obj.get_full_shipping_address()

    def get_can_cancel(self, obj: Order) -> bool:
        return obj.can_be_cancelled()

    def get_can_ship(self, obj: Order) -> bool:
        return obj.can_be_shipped()


class OrderSummarySerializer(BaseModelSerializer):
    """
    Lightweight serializer for order lists.
    """

    status_display = serializers.CharField(source="get_status_display", read_only=True)
    payment_status_display = serializers.CharField(
        source="get_payment_status_display",
        read_only=True,
    )
    item_count = serializers.SerializerMethodField()

    class Meta(BaseModelSerializer.Meta):
        model = Order
        fields: ClassVar[list] = [
            "id",
            "order_number",
            "customer_name",
            "status",
            "status_display",
            "payment_status",
            "payment_status_display",
            "total_amount",
            "item_count",
            "created_at",
            "shipped_at",
            "delivered_at",
        ]

    def get_item_count(self, obj: Order) -> int:
        """Get total number of items in the order."""
        return sum(item.quantity for item in obj.items.all())


class OrderStatusSerializer(serializers.Serializer):
    """
    Payment and lifecycle status of an order, as polled by the checkout page.
    """

    orderId = serializers.UUIDField(source="id")
    status = serializers.CharField()
    paymentStatus = serializers.CharField(source="payment_status")
    paymentExternalId = serializers.CharField(
        source="payment_external_id", allow_blank=True
    )
    updatedAt = serializers.DateTimeField(source="updated_at")
    isPaid = serializers.BooleanField(source="is_paid")
    isConfirmed = serializers.BooleanField(source="is_confirmed")


class OrderLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    """
    Checkout payload: a saved address, the cart lines and an optional coupon.
    """

    shipping_address_id = serializers.UUIDField()
    shipping_cost = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0.00"),
        default=Decimal("0.00"),
    )
    shipping_method = SanitizedCharField(
        max_length=50, required=False, allow_blank=True
    )
    coupon_code = SanitizedCharField(max_length=50, required=False, allow_blank=True)
    customer_notes = SanitizedCharField(required=False, allow_blank=True)
    items = OrderLineSerializer(many=True, allow_empty=False)

    def validate_shipping_address_id(self, value):
        user = self.context["request"].user
        address = CustomerAddress.objects.filter(
            id=value, user=user, is_active=True
        ).first()
        if address is None:
            raise NotFound("Endereço de entrega não encontrado")
        return address

    def validate_items(self, lines: list[dict]) -> list[dict]:
        """Resolve products, merging repeated lines for the same product."""
        quantities: dict = {}
        for line in lines:
            quantities[line["product_id"]] = (
                quantities.get(line["product_id"], 0) + line["quantity"]
            )

        products = Product.objects.available().in_bulk(list(quantities))
        resolved = []
        for product_id, quantity in quantities.items():
            product = products.get(product_id)
            if product is None:
                raise serializers.ValidationError(
                    f"Produto {product_id} não encontrado ou inativo"
                )
            resolved.append({"product": product, "quantity": quantity})
        return resolved

    @transaction.atomic
    def create_order(self, user) -> Order:
        """Create the order and its items for ``user``."""
        data = self.validated_data
        address = data["shipping_address_id"]

        lines = [
            {
                "product": line["product"],
                "quantity": line["quantity"],
                "unit_price": line["product"].price_for(user),
            }
            for line in data["items"]
        ]
        subtotal = sum(
            (line["unit_price"] * line["quantity"] for line in lines), Decimal("0.00")
        )

        coupon, discount = None, Decimal("0.00")
        if data.get("coupon_code"):
            try:
                coupon, discount = CouponValidator.validate(
                    data["coupon_code"], subtotal, user
                )
            except CouponError:
                # An invalid coupon does not block the checkout
                coupon, discount = None, Decimal("0.00")

        totals = OrderCalculator.calculate_order_totals(
            subtotal,
            shipping_cost=data["shipping_cost"],
            discount_amount=discount,
        )

        order = Order.objects.create(
            user=user,
            customer_name=user.full_name,
            customer_type=user.customer_type,
            email=user.email,
            phone_number=user.phone_number or "",
            shipping_address=address,
            shipping_recipient_name=address.recipient_name or user.full_name,
            shipping_street=address.street,
            shipping_number=address.number,
            shipping_complement=address.complement,
            shipping_neighborhood=address.neighborhood,
            shipping_city=address.city,
            shipping_state=address.state,
            shipping_zip_code=address.zip_code,
            shipping_method=data.get("shipping_method") or "standard",
            payment_method="pix",
            subtotal=totals["subtotal"],
            discount_amount=totals["discount_amount"],
            shipping_cost=totals["shipping_cost"],
            total_amount=totals["total"],
            coupon=coupon,
            customer_notes=data.get("customer_notes", ""),
        )

        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product=line["product"],
                    product_name=line["product"].name,
                    product_sku=line["product"].sku,
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                    total_price=line["unit_price"] * line["quantity"],
                )
                for line in lines
            ]
        )

        if coupon is not None:
            CouponValidator.redeem(coupon, user, order, discount)

        return order


class OrderShipmentSerializer(serializers.Serializer):
    """
    Serializer for shipping orders.
    """

    tracking_number = SanitizedCharField(max_length=100)
    carrier = SanitizedCharField(max_length=100, required=False, allow_blank=True)

    def ship_order(self, order: Order) -> Order:
        """Ship the order with provided tracking information."""
        if not order.can_be_shipped():
            err_msg = "Order cannot be shipped in current state"
            raise serializers.ValidationError(err_msg)

        order.mark_as_shipped(
            tracking_number=self.validated_data["tracking_number"],
            carrier=self.validated_data.get("carrier", ""),
        )
        return order


class OrderCancelSerializer(serializers.Serializer):
    """
    Serializer for cancelling orders.
    """

    reason = SanitizedCharField(required=False, allow_blank=True)

    def cancel_order(self, order: Order) -> Order:
        """Cancel the order with optional reason."""
        if not order.can_be_cancelled():
            err_msg = "Order cannot be cancelled in current state"
            raise serializers.ValidationError(err_msg)

        order.cancel(reason=self.validated_data.get("reason", ""))
        return order


class CouponSerializer(serializers.ModelSerializer):
    class Meta:
        model = Coupon
        fields: ClassVar[list] = [
            "id",
            "code",
            "name",
            "description",
            "type",
            "value",
            "min_order_value",
            "max_discount",
            "end_date",
        ]
        read_only_fields: ClassVar[list] = fields


class CouponValidateSerializer(serializers.Serializer):
    code = SanitizedCharField(max_length=50, required=False, allow_blank=True)
    order_total = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True
    )
