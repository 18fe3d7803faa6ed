from django.core.management.base import BaseCommand

from ledger.services.notices import notify
from ledger.services.reporting import find_balance_mismatches


class Command(BaseCommand):
    help = "Compare every user balance with the user's latest transaction (run every 30 minutes)."

    def handle(self, *args, **options):
        mismatches = find_balance_mismatches()
        for row in mismatches:
            notify(
                "Balance mismatch",
                f"user {row['user_id']}: balance {row['balance']}, "
                f"transactions {row['transactions_balance']}",
            )
        self.stdout.write(f"checked balances, {len(mismatches)} mismatch(es)")
