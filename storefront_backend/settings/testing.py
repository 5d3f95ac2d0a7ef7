# storefront_backend/settings/testing.py

import logging

from .base import *  # noqa

DEBUG = False
TESTING = True

# Disable rate limiting during testing
REST_FRAMEWORK.update(  # noqa: F405
    {
        "DEFAULT_THROTTLE_CLASSES": [],
        "DEFAULT_THROTTLE_RATES": {
            "anon": None,
            "user": None,
            "status_poll": None,
            "payment": None,
        },
        "TEST_REQUEST_DEFAULT_FORMAT": "json",
    }
)

# Use faster password hasher for testing
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Use in-memory SQLite for faster tests
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Disable email sending during tests
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# Disable logging during tests
logging.disable(logging.CRITICAL)

# Disable cache for tests
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.dummy.DummyCache",
    },
    "sessions": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "sessions",
    },
}

# Configure session engine to use cache
SESSION_ENGINE = "django.contrib.sessions.backends.cache"
SESSION_CACHE_ALIAS = "sessions"

# Celery
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

# Payment gateway
MERCADO_PAGO_ACCESS_TOKEN = "TEST-access-token"
MERCADO_PAGO_BASE_URL = "https://api.mercadopago.test"
MERCADO_PAGO_WEBHOOK_SECRET = "test-webhook-secret"
MELHOR_ENVIO_ACCESS_TOKEN = ""
MELHOR_ENVIO_SANDBOX = False
SITE_URL = "https://loja.example.com"
