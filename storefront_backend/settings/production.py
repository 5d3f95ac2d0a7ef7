# storefront_backend/settings/production.py

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403

# Core settings
DEBUG = False
ENVIRONMENT = env("ENVIRONMENT", default="production")  # type: ignore # noqa: F405

# Security settings
SECURE_SSL_REDIRECT = True
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_REFERRER_POLICY = "same-origin"
X_FRAME_OPTIONS = "DENY"

# Session settings for production
SESSION_ENGINE = "django.contrib.sessions.backends.cached_db"
SESSION_CACHE_ALIAS = "sessions"
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

# Email settings for production
EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"

# Cache settings for production
CACHES["default"]["OPTIONS"].update(  # noqa: F405
    {
        "SOCKET_CONNECT_TIMEOUT": 5,
        "SOCKET_TIMEOUT": 5,
        "CONNECTION_POOL_KWARGS": {"max_connections": 100},
    }
)

# Add Redis password if provided
redis_password = env("REDIS_PASSWORD", default=None)  # type: ignore # noqa: F405
if redis_password:
    CACHES["default"]["OPTIONS"]["PASSWORD"] = redis_password  # noqa: F405

# Celery settings for production
CELERY_TASK_TRACK_STARTED = True
CELERY_TASK_TIME_LIMIT = 30 * 60  # 30 minutes

# Static files
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"
    },
}
WHITENOISE_MAX_AGE = 31536000  # 1 year cache for static files

# Unsigned gateway notifications are only tolerated outside production
if not MERCADO_PAGO_WEBHOOK_SECRET:  # noqa: F405
    raise ImproperlyConfigured("MERCADO_PAGO_WEBHOOK_SECRET must be set in production")

# Performance optimizations
TEMPLATES[0]["OPTIONS"]["debug"] = False  # noqa: F405

# Logging configuration
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {process:d} {thread:d} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "INFO",
    },
}
