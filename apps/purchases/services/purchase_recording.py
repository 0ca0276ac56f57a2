"""
Purchase recording service.

Inserts the durable purchase row. The database's partial unique constraints
are the only concurrency guard: a racing duplicate insert is detected from
the IntegrityError and resolved to the row that won.
"""

import logging
from typing import Optional, Tuple

from django.db import transaction, IntegrityError, DatabaseError

from apps.accounts.models import User
from apps.catalog.services import Product
from apps.purchases.models import Purchase, PurchaseStatus, PaymentProvider

from ..exceptions import PersistenceError


logger = logging.getLogger(__name__)


def find_completed_purchase(*, provider_order_id: str, user: Optional[User] = None) -> Optional[Purchase]:
    """
    Return the completed purchase for a provider order.

    With ``user`` the lookup is scoped to that user; without it the order is
    searched across every user.
    """
    queryset = Purchase.objects.filter(
        provider_order_id=provider_order_id,
        status=PurchaseStatus.COMPLETED,
    )
    if user is not None:
        queryset = queryset.filter(user=user)
    return queryset.order_by('created_at').first()


def user_has_completed_purchase(*, user: User, product_ref: str) -> bool:
    """Whether the user already paid for the product."""
    return Purchase.objects.filter(
        user=user,
        product_ref=str(product_ref),
        status=PurchaseStatus.COMPLETED,
    ).exists()


def find_product_purchase(*, user: User, product_ref: str) -> Optional[Purchase]:
    """Return the completed purchase through which the user owns the product."""
    return Purchase.objects.filter(
        user=user,
        product_ref=str(product_ref),
        status=PurchaseStatus.COMPLETED,
    ).order_by('created_at').first()


def _find_conflicting_purchase(user, product, provider_order_id):
    return (
        find_completed_purchase(provider_order_id=provider_order_id, user=user)
        or find_product_purchase(user=user, product_ref=product.product_ref)
    )


def record_purchase(
    *,
    user: User,
    product: Product,
    provider_order_id: str,
    transaction_id: str,
    metadata: Optional[dict] = None,
    currency: str = 'USD',
    price_cents: Optional[int] = None,
) -> Tuple[Purchase, bool]:
    """
    Insert a completed purchase for a fresh capture.

    The insert runs in its own savepoint so a constraint violation leaves the
    caller's transaction usable.

    Args:
        user: Buyer
        product: Product that was paid for
        provider_order_id: PayPal order id
        transaction_id: PayPal capture id
        metadata: Raw capture payload
        currency: ISO currency of the charge
        price_cents: Amount actually charged; defaults to the product price

    Returns:
        Tuple of (purchase, created). ``created`` is False when a concurrent
        request already recorded the order or the product for this user.

    Raises:
        PersistenceError: If the insert failed for any other reason
    """
    try:
        with transaction.atomic():
            purchase = Purchase.objects.create(
                user=user,
                product_type=product.product_type,
                product_ref=product.product_ref,
                price_cents=product.price_cents if price_cents is None else price_cents,
                currency=currency,
                provider=PaymentProvider.PAYPAL,
                provider_order_id=provider_order_id,
                transaction_id=transaction_id or '',
                status=PurchaseStatus.COMPLETED,
                metadata=metadata or {},
            )
    except IntegrityError as exc:
        existing = _find_conflicting_purchase(user, product, provider_order_id)
        if existing is None:
            logger.error(
                "Failed to record purchase of %s for user %s (order %s): %s",
                product.product_ref, user.pk, provider_order_id, exc,
            )
            raise PersistenceError(details=str(exc)) from exc

        if existing.provider_order_id != provider_order_id:
            # A second order for a single-per-user product was captured
            logger.error(
                "Duplicate payment: user %s already owns %s via order %s; "
                "order %s (capture %s) needs a refund review. Payload: %s",
                user.pk, product.product_ref, existing.provider_order_id,
                provider_order_id, transaction_id, metadata,
            )
        else:
            logger.info(
                "Order %s was recorded by a concurrent request (purchase %s)",
                provider_order_id, existing.pk,
            )
        return existing, False
    except DatabaseError as exc:
        logger.error(
            "Database error recording order %s for user %s: %s",
            provider_order_id, user.pk, exc,
        )
        raise PersistenceError(details=str(exc)) from exc

    logger.info(
        "Recorded purchase %s: user %s bought %s (order %s, capture %s)",
        purchase.pk, user.pk, product.product_ref, provider_order_id, transaction_id,
    )
    return purchase, True
