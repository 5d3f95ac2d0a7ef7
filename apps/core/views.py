# apps/core/views.py

"""
Base viewsets with logging, throttling, and common functionality.
Provides a foundation for the API views of the storefront.
"""

import structlog
from rest_framework import viewsets

from apps.core.throttling import CustomAnonRateThrottle, CustomUserRateThrottle
from apps.core.utils import get_client_ip

logger = structlog.get_logger(__name__)


class LoggingMixin:
    """
    Mixin that provides structured logging for viewset actions.
    """

    def log_action(self, action_name, **extra):
        """
        Log an action with context information.
        """
        request = getattr(self, "request", None)
        user = getattr(request, "user", None)
        user_id = str(user.id) if user is not None and user.is_authenticated else None

        logger.info(
            "api_action",
            action=action_name,
            viewset=self.__class__.__name__,
            user_id=user_id,
            ip_address=get_client_ip(request),
            **extra,
        )


class BaseViewSet(LoggingMixin, viewsets.ModelViewSet):
    """
    Base viewset that provides common functionality for all API views.
    Includes logging, throttling and error reporting.
    """

    throttle_classes = [CustomUserRateThrottle, CustomAnonRateThrottle]

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.log_action(
            f"{request.method} {self.action}",
            path=request.path,
            query_params=dict(request.query_params),
        )

    def handle_exception(self, exc):
        """
        Log any exception before DRF turns it into a response.
        """
        logger.warning(
            "api_exception",
            viewset=self.__class__.__name__,
            action=getattr(self, "action", None),
            error_type=exc.__class__.__name__,
            error=str(exc),
        )
        return super().handle_exception(exc)

    def perform_create(self, serializer):
        super().perform_create(serializer)
        self.log_action("create_success", object_id=str(serializer.instance.pk))

    def perform_update(self, serializer):
        super().perform_update(serializer)
        self.log_action("update_success", object_id=str(serializer.instance.pk))

    def perform_destroy(self, instance):
        object_id = str(instance.pk)
        super().perform_destroy(instance)
        self.log_action("destroy_success", object_id=object_id)


class BaseReadOnlyViewSet(LoggingMixin, viewsets.ReadOnlyModelViewSet):
    """
    Base viewset for read-only operations.
    Useful for reference data or public information that shouldn't be modified via API.
    """

    throttle_classes = [CustomUserRateThrottle, CustomAnonRateThrottle]

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        data = response.data if isinstance(response.data, dict) else {}
        self.log_action("readonly_list_success", count=data.get("count"))
        return response

    def retrieve(self, request, *args, **kwargs):
        response = super().retrieve(request, *args, **kwargs)
        self.log_action("readonly_retrieve_success", object_id=kwargs.get("pk"))
        return response
