"""
Management command to grant entitlements missing for completed purchases.

Usage:
    python manage.py backfill_entitlements --dry-run  # Report only
    python manage.py backfill_entitlements            # Report and grant

A completed purchase whose owner lacks the premium flag or the kit row means
the automatic grant failed and the capture-time backfill never ran (for
example the process died between the two).
"""

from django.core.management.base import BaseCommand

from apps.catalog.exceptions import CatalogServiceError
from apps.catalog.services import find_product
from apps.purchases.models import Purchase, PurchaseStatus
from apps.purchases.services import has_entitlement, ensure_entitlement


class Command(BaseCommand):
    help = 'Grant entitlements missing for completed purchases'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be granted without making changes',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        purchases = (
            Purchase.objects
            .filter(status=PurchaseStatus.COMPLETED)
            .select_related('user')
            .order_by('created_at')
        )

        missing = 0
        granted = 0
        skipped = 0

        for purchase in purchases.iterator():
            try:
                product = find_product(purchase.product_ref, allow_free=True)
            except CatalogServiceError as e:
                skipped += 1
                self.stdout.write(self.style.WARNING(
                    f'  Skipping purchase {purchase.id}: {e.message}'
                ))
                continue

            if has_entitlement(purchase.user, product):
                continue

            missing += 1
            self.stdout.write(
                f'  Missing {product.product_type} {product.product_ref} '
                f'for {purchase.user.email} (order {purchase.provider_order_id})'
            )

            if not dry_run and ensure_entitlement(purchase.user, product):
                granted += 1

        if missing == 0:
            self.stdout.write(self.style.SUCCESS('All completed purchases have their entitlements.'))
        elif dry_run:
            self.stdout.write(self.style.WARNING(
                f'DRY RUN - {missing} entitlement(s) missing, no changes made'
            ))
        else:
            self.stdout.write(self.style.SUCCESS(f'Granted {granted} missing entitlement(s).'))

        if skipped:
            self.stdout.write(self.style.WARNING(f'Skipped {skipped} purchase(s) with unknown products.'))
