"""
Capture reconciliation service.

Turns a PayPal capture into exactly one completed purchase and one
entitlement, whatever the number of retries, concurrent requests or
provider answers involved.

Flow:
    1. A completed purchase for (user, order) already exists: replay.
    2. Resolve the product.
    3. Capture with PayPal and branch on the result:
       Completed        -> check the order was made for this user, product
                           and price, then record the purchase
       AlreadyCaptured  -> reconcile against existing purchases
       NotCompleted,
       TransportError   -> PaymentFailedError, nothing written
    4. Verify the entitlement and backfill it when missing.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from django.conf import settings

from apps.accounts.models import User
from apps.catalog.exceptions import ProductNotFoundError
from apps.catalog.services import Product, ProductType, find_product
from apps.purchases.models import Purchase

from ..exceptions import OrderMismatchError, PaymentFailedError, ReconciliationAmbiguityError
from ..gateway import (
    PayPalGateway,
    Completed,
    AlreadyCaptured,
    NotCompleted,
    TransportError,
)
from .entitlements import verify_entitlement
from .purchase_recording import find_completed_purchase, find_product_purchase, record_purchase


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureOutcome:
    transaction_id: str
    already_processed: bool
    purchase: Purchase


def _outcome(purchase: Purchase, already_processed: bool) -> CaptureOutcome:
    return CaptureOutcome(
        transaction_id=purchase.transaction_id,
        already_processed=already_processed,
        purchase=purchase,
    )


def _reconcile_existing(user: User, product: Product, provider_order_id: str,
                        raw_payload) -> CaptureOutcome:
    """Resolve an ORDER_ALREADY_CAPTURED answer against local purchases."""
    purchase = find_completed_purchase(provider_order_id=provider_order_id, user=user)
    if purchase is not None:
        logger.info(
            "Order %s already captured and recorded for user %s",
            provider_order_id, user.pk,
        )
        return _outcome(purchase, True)

    purchase = find_completed_purchase(provider_order_id=provider_order_id)
    if purchase is not None:
        logger.warning(
            "Order %s already captured and recorded under user %s, requested by user %s",
            provider_order_id, purchase.user_id, user.pk,
        )
        return _outcome(purchase, True)

    # The order was captured but lost the insert to an earlier order for the same product
    purchase = find_product_purchase(user=user, product_ref=product.product_ref)
    if purchase is not None:
        logger.error(
            "Duplicate payment: order %s already captured while user %s owns %s via order %s; "
            "needs a refund review. Payload: %s",
            provider_order_id, user.pk, product.product_ref,
            purchase.provider_order_id, raw_payload,
        )
        return _outcome(purchase, True)

    logger.critical(
        "Order %s reported captured by PayPal but no purchase is recorded "
        "(requested by user %s). Payload: %s",
        provider_order_id, user.pk, raw_payload,
    )
    raise ReconciliationAmbiguityError(
        details={'orderId': provider_order_id, 'provider': raw_payload},
    )


def _order_mismatches(user: User, product: Product, result: Completed) -> List[str]:
    """Fields in which the captured order differs from what this request is paying for."""
    correlation = result.correlation
    if correlation is None:
        return ['customId']

    mismatches = []
    if str(correlation.get('userId')) != str(user.pk):
        mismatches.append('userId')
    if product.is_premium:
        if correlation.get('productType') != ProductType.PREMIUM or correlation.get('kitId'):
            mismatches.append('productType')
    elif str(correlation.get('kitId')) != product.product_ref:
        mismatches.append('kitId')
    if result.amount_cents is None or result.amount_cents < product.price_cents:
        mismatches.append('amount')
    if result.currency != settings.PAYPAL_CURRENCY:
        mismatches.append('currency')
    return mismatches


def _record_completed(user: User, product: Product, provider_order_id: str,
                      result: Completed) -> CaptureOutcome:
    mismatches = _order_mismatches(user, product, result)
    if mismatches:
        # Funds are captured at this point; nothing is recorded
        logger.error(
            "Order %s captured for user %s does not match %s (%s); needs a refund review. "
            "Payload: %s",
            provider_order_id, user.pk, product.product_ref, ', '.join(mismatches),
            result.raw_payload,
        )
        raise OrderMismatchError(
            details={'orderId': provider_order_id, 'mismatch': mismatches},
        )

    purchase, created = record_purchase(
        user=user,
        product=product,
        provider_order_id=provider_order_id,
        transaction_id=result.transaction_id,
        metadata=result.raw_payload,
        currency=result.currency,
        price_cents=result.amount_cents,
    )
    return _outcome(purchase, not created)


def _verify_for_owner(purchase: Purchase, product: Optional[Product] = None) -> None:
    """Entitlement check for whoever owns the recorded purchase."""
    if product is None or purchase.product_ref != product.product_ref:
        try:
            product = find_product(purchase.product_ref, allow_free=True)
        except ProductNotFoundError:
            logger.warning(
                "Purchase %s refers to missing product %s; entitlement not verified",
                purchase.pk, purchase.product_ref,
            )
            return
    verify_entitlement(purchase.user, product)


def capture_order(*, user: User, provider_order_id: str, product_ref,
                  gateway: PayPalGateway) -> CaptureOutcome:
    """
    Capture an approved PayPal order and make sure it is paid for exactly once.

    Retrying after any failure is safe. A replay of a recorded order answers
    from the database, even if the product was repriced or removed since.

    Args:
        user: Requesting user
        provider_order_id: PayPal order id
        product_ref: ``"premium"`` or a kit id
        gateway: PayPal client

    Returns:
        CaptureOutcome with the transaction id and whether the order had
        already been processed

    Raises:
        ProductNotFoundError: If the product does not exist
        FreeProductError: If the kit is free
        PaymentFailedError: If PayPal did not complete the capture
        OrderMismatchError: If the order was created for another user,
            product or price
        PersistenceError: If the purchase could not be recorded
        ReconciliationAmbiguityError: If PayPal says captured but no
            purchase is recorded anywhere
    """
    existing = find_completed_purchase(provider_order_id=provider_order_id, user=user)
    if existing is not None:
        logger.info(
            "Order %s already processed for user %s; skipping PayPal capture",
            provider_order_id, user.pk,
        )
        _verify_for_owner(existing)
        return _outcome(existing, True)

    product = find_product(product_ref)

    result = gateway.capture_order(provider_order_id)

    if isinstance(result, Completed):
        outcome = _record_completed(user, product, provider_order_id, result)
    elif isinstance(result, AlreadyCaptured):
        outcome = _reconcile_existing(user, product, provider_order_id, result.raw_payload)
    elif isinstance(result, NotCompleted):
        logger.warning(
            "Capture of order %s not completed (status %s): %s",
            provider_order_id, result.provider_status, result.raw_payload,
        )
        raise PaymentFailedError(
            details=result.raw_payload,
            provider_status=result.provider_status,
        )
    elif isinstance(result, TransportError):
        logger.error(
            "Capture of order %s failed: %s (HTTP %s) %s",
            provider_order_id, result.message, result.http_status, result.raw_payload,
        )
        raise PaymentFailedError(
            details=result.raw_payload if result.raw_payload is not None else result.message,
            provider_status=result.http_status and str(result.http_status),
        )
    else:
        raise TypeError(f"Unexpected capture result {result!r}")

    _verify_for_owner(outcome.purchase, product)

    logger.info(
        "Capture of order %s for user %s finished (transaction %s, already processed: %s)",
        provider_order_id, user.pk, outcome.transaction_id, outcome.already_processed,
    )
    return outcome
