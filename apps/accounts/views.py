# apps/accounts/views.py

"""
Account views for the storefront API.
Handles customer registration, the customer's own profile and saved addresses.
"""

from typing import ClassVar

import structlog
from django.utils.translation import gettext_lazy as _
from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import permissions, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.models import CustomerAddress, User
from apps.accounts.serializers import (
    CustomerAddressSerializer,
    UserProfileSerializer,
    UserRegistrationSerializer,
)
from apps.core.throttling import CustomAnonRateThrottle
from apps.core.utils import get_client_ip
from apps.core.views import BaseViewSet

logger = structlog.get_logger(__name__)


class UserRegistrationView(APIView):
    """
    API endpoint for customer registration.

    ### Required Fields:
    - `email`: A valid email address (must be unique)
    - `password`: Password (min 8 characters)
    - `password_confirm`: Must match the password field
    - `first_name`: Customer's first name

    ### Optional Fields:
    - `last_name`, `phone_number`, `cpf_cnpj`
    """

    permission_classes: ClassVar[list[type[permissions.BasePermission]]] = [
        permissions.AllowAny,
    ]
    throttle_classes: ClassVar[list[type[object]]] = [CustomAnonRateThrottle]
    serializer_class = UserRegistrationSerializer

    @extend_schema(
        request=UserRegistrationSerializer,
        responses={
            201: UserProfileSerializer,
            400: OpenApiResponse(description="Validation error"),
        },
        tags=["Accounts"],
    )
    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {
                    "message": _("Registration failed. Please check the errors below."),
                    "errors": serializer.errors,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        user = serializer.save()
        logger.info(
            "user_registered",
            user_id=str(user.id),
            ip_address=get_client_ip(request),
        )
        return Response(
            {
                "message": _("Account created successfully."),
                "user": UserProfileSerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )


@extend_schema(tags=["Accounts"])
class UserProfileViewSet(BaseViewSet):
    """
    The authenticated customer's own profile, served at /accounts/me/.
    """

    serializer_class = UserProfileSerializer
    permission_classes: ClassVar[list[type[permissions.BasePermission]]] = [
        permissions.IsAuthenticated,
    ]
    queryset = User.objects.none()
    http_method_names: ClassVar[list[str]] = ["get", "patch", "put"]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return User.objects.none()
        return User.objects.filter(id=self.request.user.id)

    def get_object(self):
        return self.request.user

    @extend_schema(
        methods=["GET"],
        summary="Get current user profile",
        responses={200: UserProfileSerializer},
    )
    @action(detail=False, methods=["get"])
    def me(self, request):
        serializer = self.get_serializer(request.user)
        return Response(serializer.data)

    @extend_schema(
        methods=["PUT", "PATCH"],
        summary="Update current user profile",
        request=UserProfileSerializer,
        responses={
            200: UserProfileSerializer,
            400: OpenApiResponse(description="Invalid input data"),
        },
    )
    @action(detail=False, methods=["put", "patch"], url_path="me")
    def update_me(self, request):
        user = request.user
        serializer = self.get_serializer(user, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(
                {
                    "message": _("Profile update failed"),
                    "errors": serializer.errors,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer.save()
        logger.info(
            "profile_updated",
            user_id=str(user.id),
            updated_fields=sorted(serializer.validated_data.keys()),
        )
        return Response(
            {"message": _("Profile updated successfully"), "user": serializer.data}
        )


@extend_schema_view(
    list=extend_schema(summary="List saved addresses", tags=["Accounts"]),
    retrieve=extend_schema(summary="Get a saved address", tags=["Accounts"]),
    create=extend_schema(summary="Add an address", tags=["Accounts"]),
    partial_update=extend_schema(summary="Update an address", tags=["Accounts"]),
    update=extend_schema(summary="Replace an address", tags=["Accounts"]),
    destroy=extend_schema(summary="Delete an address", tags=["Accounts"]),
)
class CustomerAddressViewSet(BaseViewSet):
    """
    CRUD for the authenticated customer's delivery addresses.
    Addresses of other customers are never visible.
    """

    serializer_class = CustomerAddressSerializer
    permission_classes: ClassVar[list[type[permissions.BasePermission]]] = [
        permissions.IsAuthenticated,
    ]
    pagination_class = None
    filter_backends: ClassVar[list] = []

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return CustomerAddress.objects.none()
        return CustomerAddress.objects.filter(user=self.request.user)

    def perform_create(self, serializer):
        serializer.save(user=self.request.user)
        self.log_action("address_created", object_id=str(serializer.instance.pk))
