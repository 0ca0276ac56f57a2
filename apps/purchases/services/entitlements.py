"""
Entitlement service.

Entitlements are what a completed purchase buys: the ``is_premium`` flag on
the user, or an owned row in ``user_house_kits``. They are normally granted by
the post-save receiver on Purchase; the capture flow verifies afterwards and
backfills whatever is missing, so the receiver is never load-bearing.
"""

import logging
import time
from typing import Optional

from django.conf import settings
from django.db import transaction, DatabaseError
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils import timezone

from apps.accounts.models import User
from apps.catalog.models import UserKit
from apps.catalog.services import Product, find_product
from apps.catalog.exceptions import CatalogServiceError
from apps.purchases.models import Purchase, PurchaseStatus


logger = logging.getLogger(__name__)


def has_entitlement(user: User, product: Product) -> bool:
    """Read the entitlement from the database, ignoring cached instance state."""
    if product.is_premium:
        return User.objects.filter(pk=user.pk, is_premium=True).exists()
    return UserKit.objects.filter(user_id=user.pk, kit_id=product.product_ref).exists()


def ensure_entitlement(user: User, product: Product) -> bool:
    """
    Grant the entitlement if it is missing.

    Both writes are conditional, so concurrent and repeated calls are safe.

    Returns:
        True if this call granted it, False if it was already held
    """
    if product.is_premium:
        updated = User.objects.filter(pk=user.pk, is_premium=False).update(
            is_premium=True,
            premium_granted_at=timezone.now(),
        )
        return updated > 0

    _, created = UserKit.objects.get_or_create(
        user_id=user.pk,
        kit_id=product.product_ref,
        defaults={'is_active': False},
    )
    return created


def verify_entitlement(user: User, product: Product, grace_seconds: Optional[float] = None) -> bool:
    """
    Check the entitlement after a short delay and backfill it if absent.

    Args:
        user: Owner of the purchase
        product: Purchased product
        grace_seconds: Delay before the check; defaults to
            ``PURCHASES_ENTITLEMENT_GRACE_SECONDS``

    Returns:
        True if the entitlement had to be backfilled
    """
    if grace_seconds is None:
        grace_seconds = settings.PURCHASES_ENTITLEMENT_GRACE_SECONDS
    if grace_seconds > 0:
        time.sleep(grace_seconds)

    if has_entitlement(user, product):
        return False

    logger.warning(
        "Entitlement %s missing for user %s after purchase; granting manually",
        product.product_ref, user.pk,
    )
    granted = ensure_entitlement(user, product)
    if granted:
        logger.info("Backfilled entitlement %s for user %s", product.product_ref, user.pk)
    return granted


@receiver(post_save, sender=Purchase, dispatch_uid='grant_entitlement_on_purchase')
def grant_entitlement_on_purchase(sender, instance, created, **kwargs):
    """Grant the entitlement as soon as a completed purchase is inserted."""
    if not created or instance.status != PurchaseStatus.COMPLETED:
        return
    if not getattr(settings, 'PURCHASES_AUTO_GRANT_ENTITLEMENTS', True):
        return

    try:
        product = find_product(instance.product_ref, allow_free=True)
    except CatalogServiceError as exc:
        logger.error("Cannot grant entitlement for purchase %s: %s", instance.pk, exc.message)
        return

    try:
        with transaction.atomic():
            granted = ensure_entitlement(instance.user, product)
    except DatabaseError as exc:
        # The capture flow verifies and backfills afterwards
        logger.error("Automatic entitlement grant failed for purchase %s: %s", instance.pk, exc)
        return

    if granted:
        logger.info(
            "Granted %s to user %s for purchase %s",
            product.product_ref, instance.user_id, instance.pk,
        )
