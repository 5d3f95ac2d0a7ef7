# storefront_backend/middleware.py

from django.utils.deprecation import MiddlewareMixin

NO_STORE_PREFIXES = ("/api/v1/orders/", "/api/v1/payments/", "/api/v1/webhooks/")


class SecurityHeadersMiddleware(MiddlewareMixin):
    """
    Adds security headers and keeps order and payment responses out of caches.

    The checkout page polls order status; a cached response would hide the
    payment approval from it.
    """

    def process_response(self, request, response):
        response["X-Content-Type-Options"] = "nosniff"
        response["X-Frame-Options"] = "DENY"
        response["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if request.path.startswith(NO_STORE_PREFIXES):
            response["Cache-Control"] = "no-store"

        if "Server" in response:
            del response["Server"]

        return response
