"""
Catalog Services Module
=======================

Resolves product references into purchasable products.

A product reference is either the literal ``"premium"`` (the lifetime premium
upgrade, priced from settings) or the UUID of a house kit.

Example::

    from apps.catalog.services import find_product

    product = find_product(str(kit.id))
    print(product.name, product.price_cents)
"""

from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from django.conf import settings
from django.db.models import QuerySet

from .exceptions import ProductNotFoundError, FreeProductError
from .models import Kit, UserKit


PREMIUM_PRODUCT_REF = 'premium'


class ProductType:
    KIT = 'kit'
    PREMIUM = 'premium'


@dataclass(frozen=True)
class Product:
    """A purchasable product, independent of where it is stored."""

    product_type: str
    product_ref: str
    name: str
    price_cents: int
    description: str = ''
    kit: Optional[Kit] = None

    @property
    def is_premium(self) -> bool:
        return self.product_type == ProductType.PREMIUM


def get_premium_product() -> Product:
    """Return the lifetime premium product."""
    return Product(
        product_type=ProductType.PREMIUM,
        product_ref=PREMIUM_PRODUCT_REF,
        name=settings.PREMIUM_PRODUCT_NAME,
        description=settings.PREMIUM_PRODUCT_NAME,
        price_cents=settings.PREMIUM_PRICE_CENTS,
    )


def find_product(product_ref, allow_free: bool = False) -> Product:
    """
    Look up a paid product by reference.

    Unavailable kits are still returned: an order approved before a kit was
    withdrawn must remain capturable.

    Args:
        product_ref: ``"premium"`` or a kit UUID (str or UUID)
        allow_free: Return free kits too, for resolving products that were
            already paid for

    Returns:
        Product for the reference

    Raises:
        ProductNotFoundError: If the reference matches nothing
        FreeProductError: If the kit costs nothing and allow_free is False
    """
    if str(product_ref) == PREMIUM_PRODUCT_REF:
        return get_premium_product()

    try:
        kit_id = UUID(str(product_ref))
    except ValueError:
        raise ProductNotFoundError(f"Kit {product_ref} not found")

    try:
        kit = Kit.objects.get(id=kit_id)
    except Kit.DoesNotExist:
        raise ProductNotFoundError(f"Kit {product_ref} not found")

    if kit.is_free and not allow_free:
        raise FreeProductError(f"Kit {kit.name} is free")

    return Product(
        product_type=ProductType.KIT,
        product_ref=str(kit.id),
        name=kit.name,
        description=kit.description,
        price_cents=kit.price_cents,
        kit=kit,
    )


def list_kits() -> QuerySet:
    """Return kits currently offered in the shop."""
    return Kit.objects.filter(is_available=True)


def get_owned_kits(user) -> List[UserKit]:
    """Return the user's kit ownership rows, newest unlock first."""
    return list(
        UserKit.objects
        .filter(user=user)
        .select_related('kit')
    )
