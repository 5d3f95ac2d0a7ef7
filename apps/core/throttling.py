# apps/core/throttling.py

"""
Custom throttling classes for rate limiting API requests.
"""

import structlog
from rest_framework.throttling import AnonRateThrottle, UserRateThrottle

logger = structlog.get_logger(__name__)


class CustomAnonRateThrottle(AnonRateThrottle):
    """
    Custom throttling for anonymous users.
    More restrictive to prevent abuse.
    """

    scope = "anon"

    def allow_request(self, request, view):
        result = super().allow_request(request, view)
        if not result:
            logger.warning(
                "throttle_blocked",
                scope=self.scope,
                ident=self.get_ident(request),
                view=view.__class__.__name__,
            )
        return result


class CustomUserRateThrottle(UserRateThrottle):
    """
    Custom throttling for authenticated users.
    More permissive than anonymous users.
    """

    scope = "user"

    def allow_request(self, request, view):
        result = super().allow_request(request, view)
        if not result:
            logger.warning(
                "throttle_blocked",
                scope=self.scope,
                user_id=str(getattr(request.user, "id", "")),
                view=view.__class__.__name__,
            )
        return result


class StatusPollRateThrottle(AnonRateThrottle):
    """
    Throttling for the order status endpoint hit by the checkout poller.
    Keyed by client IP whether or not the caller is authenticated.
    """

    scope = "status_poll"

    def get_cache_key(self, request, view):
        return self.cache_format % {"scope": self.scope, "ident": self.get_ident(request)}


class PaymentRateThrottle(AnonRateThrottle):
    """
    Throttling for payment submissions.
    """

    scope = "payment"

    def get_cache_key(self, request, view):
        return self.cache_format % {"scope": self.scope, "ident": self.get_ident(request)}
