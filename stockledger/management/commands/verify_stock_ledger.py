"""
Management command to check item stock against the ledger.

Usage:
    python manage.py verify_stock_ledger
    python manage.py verify_stock_ledger --fix
"""

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from stockledger import inventory
from stockledger.models import InventoryItem


class Command(BaseCommand):
    """Verify stock ledger command."""

    help = 'Reports items whose stock differs from their ledger balance'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Recalculate drifted items from the ledger'
        )
        parser.add_argument(
            '--item',
            type=int,
            help='Only check this item id'
        )

    def handle(self, *args, **options):
        item = options.get('item')
        if item is not None and not InventoryItem.objects.filter(pk=item).exists():
            raise CommandError(f'Item {item} does not exist')

        drifts = inventory.verify_ledger(item=item)

        if not drifts:
            self.stdout.write(self.style.SUCCESS('Ledger reconciles: no drift found'))
            return

        for drift in drifts:
            self.stdout.write(
                f'{drift.item_name} (#{drift.item_id}): '
                f'stock={drift.stock} ledger={drift.ledger_balance} '
                f'diff={drift.difference:+d}'
            )

        if not options['fix']:
            self.stdout.write(self.style.WARNING(f'{len(drifts)} item(s) drifted'))
            return

        with transaction.atomic():
            for drift in drifts:
                locked = InventoryItem.objects.select_for_update().get(pk=drift.item_id)
                locked.recalculate()

        self.stdout.write(self.style.SUCCESS(f'{len(drifts)} item(s) recalculated'))
