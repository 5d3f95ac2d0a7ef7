# storefront_backend/celery.py

import os

from celery import Celery

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault(
    "DJANGO_SETTINGS_MODULE", "storefront_backend.settings.production"
)

app = Celery("storefront_backend")

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object("django.conf:settings", namespace="CELERY")

# Load task modules from all registered Django app configs.
app.autodiscover_tasks()

# Windows-specific settings
if os.name == "nt":
    app.conf.worker_pool = "solo"
    app.conf.worker_concurrency = 1

# Configure periodic tasks
app.conf.beat_schedule = {
    # Fallback for gateway notifications that never arrived
    "reconcile-pending-payments": {
        "task": "apps.payments.tasks.reconcile_pending_payments",
        "schedule": 600.0,  # Run every 10 minutes
    },
    "expire-unpaid-orders": {
        "task": "apps.orders.tasks.expire_unpaid_orders",
        "schedule": 3600.0,  # Run every hour
    },
}
