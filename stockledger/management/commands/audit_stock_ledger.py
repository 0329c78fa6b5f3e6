"""
Management command to compare stock cells with their log.

Usage:
    python manage.py audit_stock_ledger
    python manage.py audit_stock_ledger --fix
"""

from django.core.management.base import BaseCommand

from stockledger.services.ledger import StockLedger


class Command(BaseCommand):
    """Stock ledger audit command."""

    help = 'Report stock cells whose quantity differs from the sum of their log'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Rewrite drifted cells from their log'
        )

    def handle(self, *args, **options):
        drifted = StockLedger().audit(fix=options['fix'])

        for cell, recorded, replayed in drifted:
            self.stdout.write(f'cell {cell.pk} ({cell.key}): {recorded} != log {replayed}')

        if not drifted:
            self.stdout.write(self.style.SUCCESS('Ledger consistent'))
        elif options['fix']:
            self.stdout.write(self.style.SUCCESS(f'{len(drifted)} cell(s) fixed'))
        else:
            self.stdout.write(self.style.WARNING(f'{len(drifted)} cell(s) drifted'))
