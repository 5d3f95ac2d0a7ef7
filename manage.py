#!/usr/bin/env python
"""Django's command-line utility for administrative tasks."""

import os
import sys


def main():
    """Run administrative tasks."""
    # Default to development, but allow environment variable override
    settings_module = os.environ.get(
        "DJANGO_SETTINGS_MODULE", "storefront_backend.settings.development"
    )
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", settings_module)

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    if len(sys.argv) == 1 and not settings_module.endswith(".development"):
        # Production mode - show help instead of running anything
        print(
            "Production mode: Use specific commands like 'migrate', 'collectstatic', etc."
        )
        execute_from_command_line([sys.argv[0], "help"])
    else:
        execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
