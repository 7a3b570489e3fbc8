"""Management command to check point balances against their history."""

from django.core.management.base import BaseCommand, CommandError

from pointman.exceptions import PointmanError
from pointman.service import LedgerService


class Command(BaseCommand):
    help = "Verify that every point balance equals the sum of its history entries"

    def add_arguments(self, parser):
        parser.add_argument(
            "--customer",
            default=None,
            help="Only reconcile this customer code",
        )

    def handle(self, *args, **options):
        if options["customer"]:
            try:
                results = [LedgerService.reconcile(options["customer"])]
            except PointmanError as exc:
                raise CommandError(str(exc)) from exc
        else:
            results = LedgerService.reconcile_all()

        drifted = [r for r in results if not r.is_consistent]
        for result in drifted:
            self.stderr.write(
                f"{result.customer_code}: balance={result.balance} "
                f"history={result.history_total} drift={result.drift:+d}"
            )

        if drifted:
            raise CommandError(f"{len(drifted)} of {len(results)} balances drifted.")

        self.stdout.write(
            self.style.SUCCESS(f"Reconciled {len(results)} balances.")
        )
