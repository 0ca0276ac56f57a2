"""
Order initiation service.

Validates that a product may be bought by the user and creates the matching
PayPal order. Nothing is written locally: the purchase row only exists once
the order is captured.
"""

import logging

from django.conf import settings

from apps.accounts.models import User
from apps.catalog.services import Product, find_product

from ..exceptions import AlreadyOwnedError
from ..gateway import CreatedOrder, PayPalGateway
from .entitlements import has_entitlement
from .purchase_recording import user_has_completed_purchase


logger = logging.getLogger(__name__)


def build_correlation(user: User, product: Product) -> dict:
    """Payload stored in the order's ``custom_id``."""
    if product.is_premium:
        return {'userId': str(user.pk), 'productType': 'premium'}
    return {'userId': str(user.pk), 'kitId': product.product_ref}


def build_redirect_urls(product: Product):
    """Return (return_url, cancel_url) for the PayPal approval page."""
    base_url = settings.PAYPAL_REDIRECT_BASE_URL
    if product.is_premium:
        return_url = base_url
    else:
        return_url = f"{base_url}?kitId={product.product_ref}"
    return return_url, f"{base_url}?cancel=true"


def initiate_order(*, user: User, product_ref, gateway: PayPalGateway) -> CreatedOrder:
    """
    Create a PayPal order for a paid product the user does not own yet.

    Args:
        user: Buyer
        product_ref: ``"premium"`` or a kit id
        gateway: PayPal client

    Returns:
        CreatedOrder with the order id and approval URL

    Raises:
        ProductNotFoundError: If the product does not exist
        FreeProductError: If the kit is free
        AlreadyOwnedError: If the user already paid for or holds the product
        ProviderError: If PayPal refuses or cannot be reached
    """
    product = find_product(product_ref)

    if user_has_completed_purchase(user=user, product_ref=product.product_ref):
        raise AlreadyOwnedError(
            'Premium already purchased' if product.is_premium else 'Kit already purchased'
        )
    if has_entitlement(user, product):
        raise AlreadyOwnedError(
            'Premium already active' if product.is_premium else 'Kit already owned'
        )

    return_url, cancel_url = build_redirect_urls(product)
    order = gateway.create_order(
        amount_cents=product.price_cents,
        description=product.name,
        correlation=build_correlation(user, product),
        return_url=return_url,
        cancel_url=cancel_url,
    )

    logger.info(
        "Created PayPal order %s for user %s (%s, %s cents)",
        order.order_id, user.pk, product.product_ref, product.price_cents,
    )
    return order
