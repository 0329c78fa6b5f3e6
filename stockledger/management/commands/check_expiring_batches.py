"""
Management command to raise EXPIRY alerts for batches near their expiry date.

Usage:
    python manage.py check_expiring_batches
    python manage.py check_expiring_batches --dry-run
"""

from datetime import date, timedelta

from django.core.management.base import BaseCommand

from stockledger.conf import stockledger_settings
from stockledger.models import Batch
from stockledger.services.alerts import AlertEvaluator


class Command(BaseCommand):
    """Check expiring batches command."""

    help = 'Create EXPIRY alerts for batches expiring within the warning window'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show how many batches would be checked without creating alerts'
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            window_end = date.today() + timedelta(days=stockledger_settings.EXPIRY_WARNING_DAYS)
            count = Batch.objects.expiring_before(window_end).filter(
                product__track_expiry=True,
            ).count()
            self.stdout.write(f'{count} batch(es) would be checked')
        else:
            created = AlertEvaluator().check_expiring_batches()
            self.stdout.write(
                self.style.SUCCESS(f'{len(created)} expiry alert(s) created')
            )
