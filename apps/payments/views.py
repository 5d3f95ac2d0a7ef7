# apps/payments/views.py

"""
Payment endpoints: the checkout payment submission and the Mercado Pago
notification receiver.
"""

import structlog
from django.conf import settings
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.throttling import PaymentRateThrottle
from apps.payments.exceptions import PaymentError
from apps.payments.gateway import get_gateway
from apps.payments.serializers import (
    PaymentResponseSerializer,
    PaymentSubmissionSerializer,
)
from apps.payments.services import PaymentProcessor, WebhookHandler

logger = structlog.get_logger(__name__)


@extend_schema(tags=["Payments"])
class ProcessPaymentView(APIView):
    """
    Charges an order with the data collected by the checkout payment form.
    """

    permission_classes = [permissions.AllowAny]
    throttle_classes = [PaymentRateThrottle]

    @extend_schema(
        summary="Payment API liveness",
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        return Response(
            {"status": "ok", "message": "Payment processing API is running"}
        )

    @extend_schema(
        summary="Process payment",
        description=(
            "Create a gateway payment for the order identified by "
            "`preferenceId` (checkout preference id or order id). "
            "`amount` is in cents."
        ),
        request=PaymentSubmissionSerializer,
        responses={
            200: PaymentResponseSerializer,
            400: OpenApiResponse(description="Missing required fields"),
            404: OpenApiResponse(description="Order not found"),
            502: OpenApiResponse(description="Gateway rejected the payment"),
        },
    )
    def post(self, request):
        serializer = PaymentSubmissionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {
                    "success": False,
                    "error": "Invalid request",
                    "errors": serializer.errors,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = serializer.validated_data

        try:
            processor = PaymentProcessor(get_gateway())
            result = processor.process(
                form_data=data.get("formData"),
                additional_data=data.get("additionalData"),
                preference_id=data.get("preferenceId"),
                amount=data.get("amount"),
            )
        except PaymentError as e:
            logger.warning(
                "payment_submission_failed",
                preference_id=data.get("preferenceId"),
                error_type=e.__class__.__name__,
                error=e.message,
            )
            return Response(
                {"success": False, "error": e.message}, status=e.status_code
            )
        except Exception:
            logger.exception(
                "payment_submission_error", preference_id=data.get("preferenceId")
            )
            return Response(
                {"success": False, "error": "Error processing payment"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response({"success": True, "payment": result.to_dict()})


@extend_schema(tags=["Payments"])
class MercadoPagoWebhookView(APIView):
    """
    Receives Mercado Pago notifications and updates the matching order.
    """

    authentication_classes = []
    permission_classes = [permissions.AllowAny]
    throttle_classes = []

    @extend_schema(summary="Webhook liveness", responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        return Response(
            {
                "status": "webhook_endpoint_active",
                "topic": request.query_params.get("topic"),
                "id": request.query_params.get("id"),
                "timestamp": timezone.now().isoformat(),
            }
        )

    @extend_schema(
        summary="Mercado Pago notification",
        request=OpenApiTypes.OBJECT,
        responses={
            200: OpenApiTypes.OBJECT,
            400: OpenApiResponse(description="Notification without payment data"),
            401: OpenApiResponse(description="Invalid signature"),
            404: OpenApiResponse(description="Order not found"),
            502: OpenApiResponse(description="Payment could not be fetched"),
        },
    )
    def post(self, request):
        body = request.data if isinstance(request.data, dict) else {}
        try:
            handler = WebhookHandler(
                get_gateway(), secret=settings.MERCADO_PAGO_WEBHOOK_SECRET
            )
            result = handler.handle(
                body,
                query_params=request.query_params,
                x_signature=request.headers.get("x-signature"),
                x_request_id=request.headers.get("x-request-id"),
            )
        except PaymentError as e:
            logger.warning(
                "webhook_failed",
                error_type=e.__class__.__name__,
                error=e.message,
            )
            return Response({"error": e.message}, status=e.status_code)

        return Response(result)
