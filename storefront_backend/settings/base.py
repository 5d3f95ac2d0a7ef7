# storefront_backend/settings/base.py


import os
from datetime import timedelta
from pathlib import Path

import dj_database_url
import environ
import structlog

# Initialize environ
env = environ.Env(
    # Set casting and default values
    SECRET_KEY=(str, "django-insecure-change-me"),
    DEBUG=(bool, False),
    DJANGO_ALLOWED_HOSTS=(list, ["localhost", "127.0.0.1"]),
    DB_ENGINE=(str, "sqlite3"),
    DB_NAME=(str, "storefront"),
    DB_USER=(str, "storefront"),
    DB_PASSWORD=(str, ""),
    DB_HOST=(str, "localhost"),
    DB_PORT=(str, "5432"),
    EMAIL_BACKEND=(str, "django.core.mail.backends.console.EmailBackend"),
    EMAIL_HOST=(str, "localhost"),
    EMAIL_PORT=(int, 587),
    EMAIL_USE_TLS=(bool, True),
    EMAIL_HOST_USER=(str, ""),
    EMAIL_HOST_PASSWORD=(str, ""),
    DEFAULT_FROM_EMAIL=(str, "HP Marcas <contato@hpmarcas.com.br>"),
    SERVER_EMAIL=(str, "servidor@hpmarcas.com.br"),
    SITE_URL=(str, "http://localhost:8000"),
    STORE_NAME=(str, "HP Marcas"),
    STORE_EMAIL_DOMAIN=(str, "hpmarcas.com.br"),
    CORS_ALLOWED_ORIGINS=(list, ["http://localhost:3000"]),
    SESSION_COOKIE_AGE=(int, 1209600),
    REDIS_URL=(str, "redis://127.0.0.1:6379/1"),
    # Mercado Pago
    MERCADO_PAGO_ACCESS_TOKEN=(str, ""),
    MERCADO_PAGO_BASE_URL=(str, "https://api.mercadopago.com"),
    MERCADO_PAGO_TIMEOUT=(float, 5.0),
    MERCADO_PAGO_WEBHOOK_SECRET=(str, ""),
    # Melhor Envio
    MELHOR_ENVIO_ACCESS_TOKEN=(str, ""),
    MELHOR_ENVIO_SANDBOX=(bool, False),
    MELHOR_ENVIO_TIMEOUT=(float, 5.0),
    MELHOR_ENVIO_USER_AGENT=(str, "HPMarcas (contato@hpmarcas.com.br)"),
    STORE_ZIP_CODE=(str, "01310-100"),
    STORE_ADDRESS_FROM_NAME=(str, ""),
    STORE_ADDRESS_FROM_ADDRESS=(str, ""),
    STORE_ADDRESS_FROM_NUMBER=(str, ""),
    STORE_ADDRESS_FROM_DISTRICT=(str, ""),
    STORE_ADDRESS_FROM_CITY=(str, ""),
    STORE_ADDRESS_FROM_STATE_ABBR=(str, ""),
    # Payment reconciliation
    PAYMENT_RECONCILE_AFTER_MINUTES=(int, 10),
    UNPAID_ORDER_TTL_HOURS=(int, 24),
)

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Create necessary directories if they don't exist
directories_to_create = ["logs", "static", "media"]
for directory in directories_to_create:
    (BASE_DIR / directory).mkdir(exist_ok=True)

# Take environment variables from .env file
env_file = BASE_DIR / ".env"
if env_file.exists():
    environ.Env.read_env(env_file)


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env("DEBUG")

ALLOWED_HOSTS = env("DJANGO_ALLOWED_HOSTS")

# Application definition

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "whitenoise.runserver_nostatic",
    "django.contrib.staticfiles",
    # Third-party apps
    "corsheaders",
    "django_filters",
    "django_celery_beat",
    "drf_spectacular",
    "rest_framework",
    "rest_framework_simplejwt",
    "rest_framework_simplejwt.token_blacklist",
    # Local apps
    "apps.core.apps.CoreConfig",
    "apps.accounts.apps.AccountsConfig",
    "apps.products.apps.ProductsConfig",
    "apps.orders.apps.OrdersConfig",
    "apps.payments.apps.PaymentsConfig",
    "apps.shipping.apps.ShippingConfig",
]

# Django Money settings
INSTALLED_APPS += [
    "djmoney",
]

CURRENCIES = ("BRL",)
CURRENCY_CHOICES = [("BRL", "Real brasileiro")]
DEFAULT_CURRENCY = "BRL"

# Format settings for Brazilian Real
DJMONEY_FORMATS = {
    "BRL": {
        "money_format": "R$ %(amt)s",
        "decimal_separator": ",",
        "thousand_separator": ".",
    },
}

# Decimal handling settings
DECIMAL_PLACES = 2
MAX_DIGITS = 10

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",  # CORS Middleware
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "apps.core.middleware.RequestContextMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "storefront_backend.middleware.SecurityHeadersMiddleware",
]

ROOT_URLCONF = "storefront_backend.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "storefront_backend.wsgi.application"


# Helper function for database detection
def get_database_config():
    """Configure database based on environment with proper fallbacks"""
    database_url = os.environ.get("DATABASE_URL")

    if database_url:
        # Production - use DATABASE_URL
        config = dj_database_url.parse(database_url, conn_max_age=600)
        config["OPTIONS"] = config.get("OPTIONS", {})
        if config["ENGINE"].endswith("postgresql"):
            config["OPTIONS"]["sslmode"] = "require"
        return {"default": config}

    db_engine = env("DB_ENGINE")

    if db_engine == "sqlite3":
        return {
            "default": {
                "ENGINE": "django.db.backends.sqlite3",
                "NAME": BASE_DIR / "db.sqlite3",
                "OPTIONS": {},
            }
        }

    # Local PostgreSQL
    return {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": env("DB_NAME"),
            "USER": env("DB_USER"),
            "PASSWORD": env("DB_PASSWORD"),
            "HOST": env("DB_HOST"),
            "PORT": env("DB_PORT"),
            "OPTIONS": {
                "connect_timeout": 60,
                "sslmode": "disable",
            },
        }
    }


# Database Configuration
DATABASES = get_database_config()

# Custom user model
AUTH_USER_MODEL = "accounts.User"

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]


# Internationalization

LANGUAGE_CODE = "pt-br"
TIME_ZONE = "America/Sao_Paulo"
USE_I18N = True
USE_TZ = True


# Static files (CSS, JavaScript, Images)

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
STATICFILES_DIRS = [
    BASE_DIR / "static",
]

# Media files
MEDIA_URL = "/media/"
MEDIA_ROOT = BASE_DIR / "media"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Session settings
SESSION_ENGINE = env.str(
    "SESSION_ENGINE", default="django.contrib.sessions.backends.cache"
)
SESSION_CACHE_ALIAS = "sessions"
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SECURE = env.bool("SESSION_COOKIE_SECURE", default=False)
CSRF_COOKIE_SECURE = env.bool("CSRF_COOKIE_SECURE", default=False)
SESSION_COOKIE_AGE = env.int("SESSION_COOKIE_AGE")

# CSRF settings
CSRF_COOKIE_HTTPONLY = True
CSRF_COOKIE_SAMESITE = "Lax"
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=[])

# Cache settings
CACHES = {
    "default": {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": env("REDIS_URL"),
        "OPTIONS": {
            "CLIENT_CLASS": "django_redis.client.DefaultClient",
            "IGNORE_EXCEPTIONS": True,
        },
        "KEY_PREFIX": "storefront",
    },
    "sessions": {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": env("REDIS_URL"),
        "OPTIONS": {
            "CLIENT_CLASS": "django_redis.client.DefaultClient",
        },
        "KEY_PREFIX": "storefront_sessions",
    },
}

# Celery Configuration
CELERY_BROKER_URL = env("CELERY_BROKER_URL", default="redis://localhost:6379/0")
CELERY_RESULT_BACKEND = env("CELERY_RESULT_BACKEND", default="redis://localhost:6379/0")
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULER = "django_celery_beat.schedulers:DatabaseScheduler"
CELERY_TASK_ALWAYS_EAGER = env.bool("CELERY_TASK_ALWAYS_EAGER", default=False)
CELERY_TASK_EAGER_PROPAGATES = True


# Email Backend Configuration
EMAIL_BACKEND = env("EMAIL_BACKEND")
EMAIL_HOST = env("EMAIL_HOST")
EMAIL_PORT = env.int("EMAIL_PORT")
EMAIL_USE_TLS = env.bool("EMAIL_USE_TLS")
EMAIL_HOST_USER = env("EMAIL_HOST_USER")
EMAIL_HOST_PASSWORD = env("EMAIL_HOST_PASSWORD")
DEFAULT_FROM_EMAIL = env("DEFAULT_FROM_EMAIL")
SERVER_EMAIL = env("SERVER_EMAIL")

# Public URL of the storefront
SITE_URL = env("SITE_URL")

# Site information
STORE_NAME = env("STORE_NAME")
STORE_EMAIL_DOMAIN = env("STORE_EMAIL_DOMAIN")

# Mercado Pago gateway
MERCADO_PAGO_ACCESS_TOKEN = env("MERCADO_PAGO_ACCESS_TOKEN")
MERCADO_PAGO_BASE_URL = env("MERCADO_PAGO_BASE_URL")
MERCADO_PAGO_TIMEOUT = env("MERCADO_PAGO_TIMEOUT")
MERCADO_PAGO_WEBHOOK_SECRET = env("MERCADO_PAGO_WEBHOOK_SECRET")

# Shipping quotes (Melhor Envio; estimated locally without a token)
MELHOR_ENVIO_ACCESS_TOKEN = env("MELHOR_ENVIO_ACCESS_TOKEN")
MELHOR_ENVIO_SANDBOX = env("MELHOR_ENVIO_SANDBOX")
MELHOR_ENVIO_TIMEOUT = env("MELHOR_ENVIO_TIMEOUT")
MELHOR_ENVIO_USER_AGENT = env("MELHOR_ENVIO_USER_AGENT")
STORE_ZIP_CODE = env("STORE_ZIP_CODE")
SHIPPING_FROM_ADDRESS = {
    "name": env("STORE_ADDRESS_FROM_NAME"),
    "address": env("STORE_ADDRESS_FROM_ADDRESS"),
    "number": env("STORE_ADDRESS_FROM_NUMBER"),
    "district": env("STORE_ADDRESS_FROM_DISTRICT"),
    "city": env("STORE_ADDRESS_FROM_CITY"),
    "state_abbr": env("STORE_ADDRESS_FROM_STATE_ABBR"),
    "country_id": "BR",
}
# Added to every paid shipping option, in reais
SHIPPING_MARKUP = "5.00"

# Minimum charge accepted by the gateway, in cents (R$ 5,00)
PAYMENT_MINIMUM_AMOUNT_CENTS = 500

# Payment reconciliation
PAYMENT_RECONCILE_AFTER_MINUTES = env("PAYMENT_RECONCILE_AFTER_MINUTES")
UNPAID_ORDER_TTL_HOURS = env("UNPAID_ORDER_TTL_HOURS")

# Rest Framework Configuration
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_PAGINATION_CLASS": "apps.core.pagination.StandardResultsSetPagination",
    "PAGE_SIZE": 20,
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.SearchFilter",
        "rest_framework.filters.OrderingFilter",
    ],
    "DEFAULT_THROTTLE_CLASSES": [
        "apps.core.throttling.CustomUserRateThrottle",
        "apps.core.throttling.CustomAnonRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": "100/hour",  # 100 requests per hour
        "user": "1000/hour",  # 1000 requests per hour
        "status_poll": "120/min",  # checkout page polls every 5 seconds
        "payment": "20/min",  # payment submissions
    },
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.FormParser",
        "rest_framework.parsers.MultiPartParser",
    ],
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "EXCEPTION_HANDLER": "rest_framework.views.exception_handler",
}


# CORS Configuration
CORS_ALLOWED_ORIGINS = env("CORS_ALLOWED_ORIGINS")

# Allow CORS for all origins in development
if DEBUG:
    CORS_ALLOW_ALL_ORIGINS = True
else:
    CORS_ALLOW_CREDENTIALS = True

# JWT Configuration
SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=240),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=1),
    "ROTATE_REFRESH_TOKENS": True,
    "BLACKLIST_AFTER_ROTATION": True,
    "UPDATE_LAST_LOGIN": True,
    "AUTH_HEADER_TYPES": ("Bearer",),
}

# Swagger/OpenAPI Configuration
SPECTACULAR_SETTINGS = {
    "TITLE": "HP Marcas Storefront API",
    "DESCRIPTION": "Checkout, payment reconciliation and order tracking API",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "SWAGGER_UI_SETTINGS": {
        "deepLinking": True,
        "persistAuthorization": True,
        "displayOperationId": True,
    },
    "COMPONENT_SPLIT_REQUEST": True,
    "SCHEMA_PATH_PREFIX": r"/api/v[0-9]",
}


# Logging Configuration
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {process:d} {thread:d} {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
        "file": {
            "level": "DEBUG",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(BASE_DIR / "logs" / "debug.log"),
            "maxBytes": 1024 * 1024 * 5,  # 5 MB
            "backupCount": 5,
            "formatter": "verbose",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console", "file"],
            "level": "INFO",
            "propagate": True,
        },
        "apps": {
            "handlers": ["console", "file"],
            "level": "DEBUG" if DEBUG else "INFO",
            "propagate": True,
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
}


# Configure structlog to render through the stdlib handlers above
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "event", "logger"]
        ),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)
