# storefront_backend/__init__.py

# Make sure the Celery app is loaded when Django starts so that
# @shared_task uses it.
from storefront_backend.celery import app as celery_app

__all__ = ("celery_app",)
