# apps/orders/views.py

"""
Views for the order management system.
Handles checkout order creation, order tracking, coupons and back-office
order actions.
"""

import uuid
from typing import ClassVar

import structlog
from django.db import transaction
from django.db.models import Avg, Count, Sum
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import filters, permissions, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.throttling import StatusPollRateThrottle
from apps.core.utils import quantize_cents
from apps.core.views import BaseViewSet, LoggingMixin
from apps.orders.models import Coupon, Order
from apps.orders.serializers import (
    CouponSerializer,
    CouponValidateSerializer,
    OrderCancelSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    OrderShipmentSerializer,
    OrderStatusSerializer,
    OrderSummarySerializer,
)
from apps.orders.tasks import (
    send_order_confirmation_email_task,
    send_shipping_notification_task,
)
from apps.orders.utils import CouponError, CouponValidator, InventoryManager
from apps.payments.exceptions import GatewayError
from apps.payments.gateway import get_gateway
from apps.payments.services import create_checkout_preference

from .filters import OrderFilter
from .permissions import IsAdminUser, IsOrderOwnerOrAdmin

logger = structlog.get_logger(__name__)


@extend_schema_view(
    list=extend_schema(
        summary="List orders",
        description=(
            "Customers see their own orders; staff see every order. "
            "Filter by status, payment_status and date range."
        ),
        responses={
            200: OrderSummarySerializer(many=True),
            401: OpenApiResponse(description="Authentication required"),
        },
    ),
    retrieve=extend_schema(
        summary="Get order details",
        description="Retrieve detailed information about a specific order.",
        responses={
            200: OrderSerializer,
            401: OpenApiResponse(description="Authentication required"),
            404: OpenApiResponse(description="Order not found"),
        },
    ),
    create=extend_schema(
        summary="Create order",
        description=(
            "Create an order from the checkout cart and register it with the "
            "payment gateway. The returned preference id is the token used "
            "to pay the order."
        ),
        request=OrderCreateSerializer,
        responses={
            201: OpenApiTypes.OBJECT,
            400: OpenApiResponse(description="Invalid input or insufficient stock"),
            401: OpenApiResponse(description="Authentication required"),
            404: OpenApiResponse(description="Shipping address not found"),
            502: OpenApiResponse(description="Payment preference not created"),
        },
    ),
)
@extend_schema(tags=["Orders"])
class OrderViewSet(BaseViewSet):
    """
    ViewSet for managing orders.
    Handles order creation, retrieval, status polling and status updates.
    """

    serializer_class = OrderSerializer
    permission_classes: ClassVar[list] = [
        permissions.IsAuthenticated,
        IsOrderOwnerOrAdmin,
    ]
    http_method_names: ClassVar[list] = ["get", "post", "head", "options"]
    filter_backends: ClassVar[list] = [
        DjangoFilterBackend,
        filters.OrderingFilter,
        filters.SearchFilter,
    ]
    filterset_class = OrderFilter
    search_fields: ClassVar[list] = [
        "order_number",
        "email",
        "customer_name",
    ]
    ordering_fields: ClassVar[list] = [
        "created_at",
        "updated_at",
        "total_amount",
        "status",
    ]
    ordering: ClassVar[list] = ["-created_at"]
    queryset = Order.objects.none()

    def get_queryset(self):
        """Get orders based on user permissions."""
        if getattr(self, "swagger_fake_view", False):
            return Order.objects.none()

        queryset = Order.objects.select_related("user", "coupon").prefetch_related(
            "items__product"
        )
        if self.request.user.is_staff:
            # Admin users can see all orders
            return queryset
        if self.request.user.is_authenticated:
            return queryset.for_user(self.request.user)
        return Order.objects.none()

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        serializer_map = {
            "create": OrderCreateSerializer,
            "list": OrderSummarySerializer,
            "ship": OrderShipmentSerializer,
            "cancel": OrderCancelSerializer,
            "order_status": OrderStatusSerializer,
        }
        return serializer_map.get(self.action, OrderSerializer)

    def create(self, request, *args, **kwargs):
        """Create an order and its payment preference."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        shortages = InventoryManager.check_availability(
            serializer.validated_data["items"]
        )
        if shortages:
            return Response(
                {
                    "error": "Estoque insuficiente para alguns produtos",
                    "validation_errors": {"stock": shortages},
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            with transaction.atomic():
                order = serializer.create_order(request.user)
                preference_id = create_checkout_preference(order, get_gateway())
        except GatewayError as e:
            logger.error(
                "checkout_preference_failed",
                user_id=str(request.user.id),
                error=e.message,
            )
            return Response(
                {"error": "Erro ao criar preferência de pagamento"},
                status=status.HTTP_502_BAD_GATEWAY,
            )

        transaction.on_commit(
            lambda: send_order_confirmation_email_task.delay(str(order.id))
        )
        self.log_action(
            "order_created",
            order_id=str(order.id),
            total_amount=str(order.total_amount),
        )

        return Response(
            {
                "order": OrderSerializer(order, context={"request": request}).data,
                "payment_preference_id": preference_id,
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        responses={
            200: OrderStatusSerializer,
            404: OpenApiResponse(description="Order not found"),
        },
        summary="Order payment status",
        description=(
            "Current order and payment status, polled by the checkout page "
            "while a payment is pending."
        ),
    )
    @action(
        detail=True,
        methods=["get"],
        url_path="status",
        permission_classes=[permissions.AllowAny],
        throttle_classes=[StatusPollRateThrottle],
    )
    def order_status(self, request, pk=None):
        """Return the status projection of an order."""
        order = None
        try:
            order = Order.objects.filter(pk=uuid.UUID(str(pk))).first()
        except ValueError:
            pass

        if order is None:
            return Response(
                {"error": "Order not found"}, status=status.HTTP_404_NOT_FOUND
            )
        return Response(OrderStatusSerializer(order).data)

    @extend_schema(
        request=OrderShipmentSerializer,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(description="Order cannot be shipped"),
            403: OpenApiResponse(description="Admin permission required"),
            404: OpenApiResponse(description="Order not found"),
        },
        summary="Ship order",
        description="Mark order as shipped and add tracking information (admin only).",
    )
    @action(detail=True, methods=["post"], permission_classes=[IsAdminUser])
    def ship(self, request, pk=None):
        """Ship an order with tracking information."""
        order = self.get_object()
        serializer = OrderShipmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.ship_order(order)

        self.log_action(
            "order_shipped",
            order_id=str(order.id),
            tracking_number=order.tracking_number,
            carrier=order.carrier,
        )
        send_shipping_notification_task.delay(str(order.id))
        return Response(OrderSerializer(order, context={"request": request}).data)

    @extend_schema(
        request=OrderCancelSerializer,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(description="Order cannot be cancelled"),
            404: OpenApiResponse(description="Order not found"),
        },
        summary="Cancel order",
        description="Cancel a pending or confirmed order and restore inventory.",
    )
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        """Cancel an order."""
        order = self.get_object()
        serializer = OrderCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.cancel_order(order)

        self.log_action(
            "order_cancelled",
            order_id=str(order.id),
            reason=serializer.validated_data.get("reason", ""),
        )
        return Response(OrderSerializer(order, context={"request": request}).data)

    @extend_schema(
        request=None,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(description="Order cannot be marked as delivered"),
            403: OpenApiResponse(description="Admin permission required"),
            404: OpenApiResponse(description="Order not found"),
        },
        summary="Mark as delivered",
        description="Mark order as delivered (admin only).",
    )
    @action(detail=True, methods=["post"], permission_classes=[IsAdminUser])
    def delivered(self, request, pk=None):
        """Mark order as delivered."""
        order = self.get_object()

        try:
            order.mark_as_delivered()
        except ValueError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        self.log_action("order_delivered", order_id=str(order.id))
        return Response(OrderSerializer(order, context={"request": request}).data)

    @extend_schema(
        responses={
            200: {
                "type": "object",
                "properties": {
                    "total_orders": {"type": "integer"},
                    "status_breakdown": {
                        "type": "object",
                        "additionalProperties": {"type": "integer"},
                    },
                    "payment_status_breakdown": {
                        "type": "object",
                        "additionalProperties": {"type": "integer"},
                    },
                    "total_revenue": {"type": "string"},
                    "average_order_value": {"type": "string"},
                    "recent_orders_30_days": {"type": "integer"},
                    "orders_needing_shipment": {"type": "integer"},
                },
            },
            403: OpenApiResponse(description="Admin permission required"),
        },
        summary="Order statistics",
        description="Get order statistics (admin only).",
    )
    @action(detail=False, methods=["get"], permission_classes=[IsAdminUser])
    def statistics(self, request):
        """Get order statistics."""
        orders = Order.objects.all()

        status_counts = orders.values("status").annotate(count=Count("id"))
        payment_counts = orders.values("payment_status").annotate(count=Count("id"))

        revenue_stats = orders.paid().aggregate(
            total_revenue=Sum("total_amount"),
            average_order_value=Avg("total_amount"),
        )

        return Response(
            {
                "total_orders": orders.count(),
                "status_breakdown": {
                    item["status"]: item["count"] for item in status_counts
                },
                "payment_status_breakdown": {
                    item["payment_status"]: item["count"] for item in payment_counts
                },
                "total_revenue": str(
                    quantize_cents(revenue_stats["total_revenue"] or 0)
                ),
                "average_order_value": str(
                    quantize_cents(revenue_stats["average_order_value"] or 0)
                ),
                "recent_orders_30_days": orders.recent(days=30).count(),
                "orders_needing_shipment": orders.needs_shipping().count(),
            },
        )


@extend_schema(tags=["Coupons"])
class CouponValidateView(LoggingMixin, APIView):
    """
    Checks a coupon code against the current order total.
    """

    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        summary="Available coupons",
        description="Coupons the authenticated customer can still use.",
        responses={200: CouponSerializer(many=True)},
    )
    def get(self, request):
        coupons = Coupon.objects.available().not_used_by(request.user)
        return Response(
            {
                "success": True,
                "coupons": CouponSerializer(coupons, many=True).data,
            }
        )

    @extend_schema(
        summary="Validate coupon",
        request=CouponValidateSerializer,
        responses={200: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        serializer = CouponValidateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"valid": False, "error": "Dados obrigatórios ausentes"})

        try:
            coupon, discount = CouponValidator.validate(
                serializer.validated_data.get("code"),
                serializer.validated_data.get("order_total"),
                request.user,
            )
        except CouponError as e:
            self.log_action("coupon_rejected", reason=str(e))
            return Response({"valid": False, "error": str(e)})

        self.log_action("coupon_validated", coupon=coupon.code)
        return Response(
            {
                "valid": True,
                "discount_amount": str(discount),
                "coupon": CouponSerializer(coupon).data,
            }
        )
