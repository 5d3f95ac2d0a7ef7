# apps/shipping/views.py

import structlog
from django.conf import settings
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.shipping.exceptions import ShippingError
from apps.shipping.serializers import (
    ShippingCalculationResponseSerializer,
    ShippingCalculationSerializer,
    ShippingOptionSerializer,
)
from apps.shipping.services import carrier_configured, get_shipping_calculator

logger = structlog.get_logger(__name__)


def failure(error, http_status, **extra):
    return Response(
        {"success": False, "options": [], "error": error, **extra}, status=http_status
    )


@extend_schema(tags=["Shipping"])
class ShippingCalculateView(APIView):
    """Shipping options and prices for a destination ZIP code."""

    permission_classes = [permissions.AllowAny]

    @extend_schema(
        summary="Shipping API status",
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        configured = carrier_configured()
        return Response(
            {
                "status": "ok",
                "message": "API de entrega está funcionando",
                "integration": "Melhor Envio API" if configured else "Mock",
                "sandbox": settings.MELHOR_ENVIO_SANDBOX,
                "store_zip_code": settings.STORE_ZIP_CODE,
                "configured": {
                    "melhor_envio": configured,
                    "store_address": bool(settings.SHIPPING_FROM_ADDRESS.get("name")),
                },
            }
        )

    @extend_schema(
        summary="Calculate shipping",
        description=(
            "Quote shipping from `origin_zip_code` to `destination_zip_code` "
            "for the given packages. Options are sorted by price."
        ),
        request=ShippingCalculationSerializer,
        responses={
            200: ShippingCalculationResponseSerializer,
            400: OpenApiResponse(description="Missing data or invalid CEP"),
        },
    )
    def post(self, request):
        serializer = ShippingCalculationSerializer(data=request.data)
        if not serializer.is_valid():
            return failure(
                "Invalid request",
                status.HTTP_400_BAD_REQUEST,
                errors=serializer.errors,
            )
        if not serializer.has_required_data():
            return failure("Dados obrigatórios ausentes", status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        try:
            options = get_shipping_calculator().calculate(
                data["origin_zip_code"], data["destination_zip_code"], data["items"]
            )
        except ShippingError as e:
            logger.warning(
                "shipping_calculation_failed",
                destination=data["destination_zip_code"],
                error_type=e.__class__.__name__,
                error=e.message,
            )
            return failure(e.message, e.status_code)
        except Exception:
            logger.exception(
                "shipping_calculation_error", destination=data["destination_zip_code"]
            )
            return failure(
                "Erro interno do servidor", status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(
            {
                "success": True,
                "options": ShippingOptionSerializer(
                    [option.to_dict() for option in options], many=True
                ).data,
            }
        )
