# apps/payments/management/commands/reconcile_payments.py

from django.core.management.base import BaseCommand, CommandError

from apps.payments.exceptions import GatewayError
from apps.payments.gateway import get_gateway
from apps.payments.services import reconcile_pending


class Command(BaseCommand):
    help = "Re-read open payments from Mercado Pago and update their orders"

    def add_arguments(self, parser):
        parser.add_argument(
            "--max", type=int, default=100, help="Maximum orders to check"
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="List the orders that would be checked without calling the gateway",
        )

    def handle(self, *args, **options):
        gateway = None
        if not options["dry_run"]:
            try:
                gateway = get_gateway()
            except GatewayError as e:
                raise CommandError(e.message) from e

        summary = reconcile_pending(
            gateway, limit=options["max"], dry_run=options["dry_run"]
        )

        if not summary["checked"]:
            self.stdout.write(self.style.SUCCESS("No pending payments to reconcile."))
            return

        message = (
            f"Checked {summary['checked']}, updated {summary['updated']}, "
            f"failed {summary['failed']}"
        )
        if summary["failed"]:
            self.stdout.write(self.style.WARNING(message))
        else:
            self.stdout.write(self.style.SUCCESS(message))
