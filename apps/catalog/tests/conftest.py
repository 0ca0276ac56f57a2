import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.catalog.models import Kit, KitRarity, UnlockType


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def shopper(db):
    """Create and return a user browsing the shop."""
    return User.objects.create_user(
        email='shopper@example.com',
        password='TestPass123!',
        display_name='Shopper',
    )


@pytest.fixture
def shopper_client(api_client, shopper):
    """Return API client authenticated as shopper."""
    refresh = RefreshToken.for_user(shopper)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def paid_kit(db):
    return Kit.objects.create(
        name='Neon Nights',
        rarity=KitRarity.EPIC,
        unlock_type=UnlockType.PURCHASABLE,
        price_cents=499,
    )


@pytest.fixture
def free_kit(db):
    return Kit.objects.create(
        name='Starter',
        rarity=KitRarity.COMMON,
        unlock_type=UnlockType.FREE,
        price_cents=0,
    )


@pytest.fixture
def retired_kit(db):
    """A paid kit no longer offered in the shop."""
    return Kit.objects.create(
        name='Summer 2024',
        rarity=KitRarity.LEGENDARY,
        price_cents=999,
        is_available=False,
    )
