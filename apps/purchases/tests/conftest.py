import json

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.catalog.models import Kit, KitRarity, UnlockType
from apps.catalog.services import find_product, get_premium_product
from apps.purchases.gateway import CreatedOrder, format_amount, parse_capture_response
from apps.purchases.models import Purchase, PurchaseStatus, ProductType


def correlation_for(user, product_ref):
    """custom_id the order was created with."""
    if str(product_ref) == 'premium':
        return {'userId': str(user.pk), 'productType': 'premium'}
    return {'userId': str(user.pk), 'kitId': str(product_ref)}


def capture_payload(order_id='O1', capture_id='T1', correlation=None, amount_cents=499, currency='USD'):
    """Body PayPal returns for a completed capture."""
    unit = {
        'payments': {'captures': [{
            'id': capture_id,
            'status': 'COMPLETED',
            'amount': {'currency_code': currency, 'value': format_amount(amount_cents)},
        }]},
    }
    if correlation is not None:
        unit['custom_id'] = json.dumps(correlation)
    return {'id': order_id, 'status': 'COMPLETED', 'purchase_units': [unit]}


def completed_capture(user, product_ref, order_id='O1', capture_id='T1', **kwargs):
    """Completed result for an order created by ``user`` for ``product_ref``."""
    payload = capture_payload(order_id, capture_id, correlation_for(user, product_ref), **kwargs)
    return parse_capture_response(201, payload)


class FakeGateway:
    """
    In-memory stand-in for PayPalGateway.

    ``capture_result`` is returned from every capture (or raised, if it is an
    exception). The default capture carries no custom_id, so it only suits
    order creation tests. All calls are recorded for assertions.
    """

    def __init__(self, capture_result=None, order_id='O1'):
        self.capture_result = capture_result or parse_capture_response(201, capture_payload())
        self.order_id = order_id
        self.created_orders = []
        self.captured_orders = []

    @property
    def calls(self):
        return len(self.created_orders) + len(self.captured_orders)

    def create_order(self, *, amount_cents, description, correlation, return_url, cancel_url):
        self.created_orders.append({
            'amount_cents': amount_cents,
            'description': description,
            'correlation': correlation,
            'return_url': return_url,
            'cancel_url': cancel_url,
        })
        return CreatedOrder(
            order_id=self.order_id,
            approval_url=f'https://www.sandbox.paypal.com/checkoutnow?token={self.order_id}',
        )

    def capture_order(self, provider_order_id):
        self.captured_orders.append(provider_order_id)
        if isinstance(self.capture_result, Exception):
            raise self.capture_result
        return self.capture_result


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def buyer(db):
    """Create and return a user who buys products."""
    return User.objects.create_user(
        email='buyer@example.com',
        password='TestPass123!',
        display_name='Buyer',
    )


@pytest.fixture
def other_user(db):
    """Create and return a second user."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        display_name='Other User',
    )


@pytest.fixture
def buyer_client(api_client, buyer):
    """Return API client authenticated as buyer."""
    refresh = RefreshToken.for_user(buyer)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def paid_kit(db):
    """Create a purchasable kit priced at 4.99."""
    return Kit.objects.create(
        name='Neon Nights',
        description='Glowing party kit',
        rarity=KitRarity.EPIC,
        unlock_type=UnlockType.PURCHASABLE,
        price_cents=499,
        color_scheme=['#ff00ff', '#00ffff'],
        items=['neon sign', 'disco ball'],
    )


@pytest.fixture
def free_kit(db):
    """Create a free kit."""
    return Kit.objects.create(
        name='Starter',
        rarity=KitRarity.COMMON,
        unlock_type=UnlockType.FREE,
        price_cents=0,
    )


@pytest.fixture
def kit_product(paid_kit):
    return find_product(str(paid_kit.id))


@pytest.fixture
def premium_product(db):
    return get_premium_product()


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def patched_gateway(monkeypatch, fake_gateway):
    """Route the views' gateway factory to the fake gateway."""
    monkeypatch.setattr('apps.purchases.views.get_gateway', lambda: fake_gateway)
    return fake_gateway


@pytest.fixture
def no_auto_grant(settings):
    """Disable the post-save entitlement grant."""
    settings.PURCHASES_AUTO_GRANT_ENTITLEMENTS = False


@pytest.fixture
def make_purchase(db):
    """Factory for completed purchases."""
    def _make(user, product_ref, order_id='O1', transaction_id='T1', price_cents=499):
        product_type = ProductType.PREMIUM if product_ref == 'premium' else ProductType.KIT
        return Purchase.objects.create(
            user=user,
            product_type=product_type,
            product_ref=str(product_ref),
            price_cents=price_cents,
            provider_order_id=order_id,
            transaction_id=transaction_id,
            status=PurchaseStatus.COMPLETED,
        )
    return _make


@pytest.fixture
def gateway_factory():
    """Build a FakeGateway with a chosen capture result."""
    return FakeGateway


@pytest.fixture
def capture_for():
    """Build a Completed capture for an order made by a user for a product."""
    return completed_capture


@pytest.fixture
def kit_gateway(buyer, paid_kit):
    """Gateway capturing the buyer's order O1 for the paid kit."""
    return FakeGateway(completed_capture(buyer, paid_kit.id))


@pytest.fixture
def premium_gateway(buyer):
    """Gateway capturing the buyer's premium order O1."""
    return FakeGateway(completed_capture(buyer, 'premium'))


@pytest.fixture
def patch_gateway(monkeypatch):
    """Route the views' gateway factory to the given gateway."""
    def _patch(gateway):
        monkeypatch.setattr('apps.purchases.views.get_gateway', lambda: gateway)
        return gateway
    return _patch
