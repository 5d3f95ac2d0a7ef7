# storefront_backend/settings/development.py

from .base import *  # noqa: F403

# Core settings
DEBUG = True
ENVIRONMENT = env("ENVIRONMENT", default="development")  # noqa: F405 # type: ignore

# Email backend for development
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# Session settings for development
CSRF_COOKIE_SECURE = False  # Allow HTTP in development
SESSION_COOKIE_SECURE = False

# CORS settings for development
CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_CREDENTIALS = True

# Enable browsable API
REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] += [  # noqa: F405
    "rest_framework.renderers.BrowsableAPIRenderer",
]

# Celery settings for development
CELERY_TASK_ALWAYS_EAGER = env.bool(  # noqa: F405
    "CELERY_TASK_ALWAYS_EAGER", default=False
)
CELERY_TASK_EAGER_PROPAGATES = True

# Cache settings for development (more permissive timeouts)
CACHES["default"]["OPTIONS"].update(  # noqa: F405
    {
        "SOCKET_CONNECT_TIMEOUT": 10,
        "SOCKET_TIMEOUT": 10,
    }
)
