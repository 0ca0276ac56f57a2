"""
PayPal Gateway Client
=====================

Thin, stateless wrapper around the PayPal Orders v2 REST API.

The client performs exactly one HTTP attempt per call; retry policy belongs
to the caller. Capture answers are normalised into a small tagged union so
the capture flow can branch exhaustively instead of poking at PayPal's JSON:

    ``Completed``        order status COMPLETED, carries the capture id
    ``AlreadyCaptured``  UNPROCESSABLE_ENTITY / ORDER_ALREADY_CAPTURED
    ``NotCompleted``     any other answer PayPal gave us
    ``TransportError``   we never got a usable answer (network, 5xx, non-JSON)

Example::

    gateway = PayPalGateway(GatewayConfig.from_settings())
    order = gateway.create_order(
        amount_cents=499,
        description='HouseParty Premium - Lifetime Access',
        correlation={'userId': str(user.id), 'productType': 'premium'},
        return_url='https://api.example.com/api/purchases/paypal/redirect/',
        cancel_url='https://api.example.com/api/purchases/paypal/redirect/?cancel=true',
    )
    result = gateway.capture_order(order.order_id)
"""

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

import requests
from django.conf import settings

from .exceptions import ConfigurationError, ProviderError, ProviderAuthError


logger = logging.getLogger(__name__)

ORDER_ALREADY_CAPTURED = 'ORDER_ALREADY_CAPTURED'


@dataclass(frozen=True)
class GatewayConfig:
    client_id: str
    secret: str
    base_url: str
    timeout: float = 8.0
    brand_name: str = 'HouseParty'
    currency: str = 'USD'

    @classmethod
    def from_settings(cls) -> 'GatewayConfig':
        return cls(
            client_id=settings.PAYPAL_CLIENT_ID,
            secret=settings.PAYPAL_SECRET,
            base_url=settings.PAYPAL_BASE_URL.rstrip('/'),
            timeout=settings.PAYPAL_TIMEOUT_SECONDS,
            brand_name=settings.PAYPAL_BRAND_NAME,
            currency=settings.PAYPAL_CURRENCY,
        )

    @property
    def is_sandbox(self) -> bool:
        return 'sandbox' in self.base_url

    @property
    def checkout_url(self) -> str:
        if self.is_sandbox:
            return 'https://www.sandbox.paypal.com/checkoutnow'
        return 'https://www.paypal.com/checkoutnow'


@dataclass(frozen=True)
class CreatedOrder:
    order_id: str
    approval_url: str
    raw_payload: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Completed:
    """
    Captured order.

    ``correlation`` is the decoded ``custom_id`` the order was created with;
    ``amount_cents`` and ``currency`` are what PayPal actually captured.
    Any of them is None when PayPal did not send it.
    """

    transaction_id: str
    raw_payload: dict = field(default_factory=dict)
    correlation: Optional[dict] = None
    amount_cents: Optional[int] = None
    currency: Optional[str] = None


@dataclass(frozen=True)
class AlreadyCaptured:
    raw_payload: dict = field(default_factory=dict)


@dataclass(frozen=True)
class NotCompleted:
    provider_status: Optional[str]
    raw_payload: dict = field(default_factory=dict)


@dataclass(frozen=True)
class TransportError:
    message: str
    http_status: Optional[int] = None
    raw_payload: Any = None


CaptureResult = Union[Completed, AlreadyCaptured, NotCompleted, TransportError]


def format_amount(amount_cents: int) -> str:
    """Render cents as the two-decimal string PayPal expects (499 -> '4.99')."""
    return f"{Decimal(amount_cents) / Decimal(100):.2f}"


def parse_amount_cents(value) -> Optional[int]:
    """Inverse of format_amount ('4.99' -> 499); None for unreadable values."""
    try:
        cents = Decimal(str(value)) * 100
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not cents.is_finite() or cents != cents.to_integral_value():
        return None
    return int(cents)


def _response_payload(response):
    """Best-effort body for logs and error details."""
    try:
        return response.json()
    except ValueError:
        return response.text


def _is_already_captured(payload: dict) -> bool:
    if payload.get('name') != 'UNPROCESSABLE_ENTITY':
        return False
    return any(
        detail.get('issue') == ORDER_ALREADY_CAPTURED
        for detail in payload.get('details') or []
        if isinstance(detail, dict)
    )


def _first_purchase_unit(payload: dict) -> dict:
    try:
        unit = payload['purchase_units'][0]
    except (KeyError, IndexError, TypeError):
        return {}
    return unit if isinstance(unit, dict) else {}


def _first_capture(payload: dict) -> dict:
    try:
        capture = _first_purchase_unit(payload)['payments']['captures'][0]
    except (KeyError, IndexError, TypeError):
        return {}
    return capture if isinstance(capture, dict) else {}


def _extract_transaction_id(payload: dict) -> Optional[str]:
    """First capture id of the first purchase unit, if PayPal sent one."""
    return _first_capture(payload).get('id')


def _extract_correlation(payload: dict) -> Optional[dict]:
    """Decode the ``custom_id`` set at order creation."""
    custom_id = _first_purchase_unit(payload).get('custom_id') or _first_capture(payload).get('custom_id')
    if not custom_id:
        return None
    try:
        correlation = json.loads(custom_id)
    except (TypeError, ValueError):
        return None
    return correlation if isinstance(correlation, dict) else None


def _extract_amount(payload: dict):
    """Return (amount_cents, currency) of the capture, falling back to the unit amount."""
    amount = _first_capture(payload).get('amount') or _first_purchase_unit(payload).get('amount')
    if not isinstance(amount, dict):
        return None, None
    return parse_amount_cents(amount.get('value')), amount.get('currency_code')


def parse_capture_response(http_status: int, payload: Any) -> CaptureResult:
    """Classify a capture answer into one CaptureResult variant."""
    if not isinstance(payload, dict):
        return TransportError(
            message='Unreadable capture response',
            http_status=http_status,
            raw_payload=payload,
        )

    if _is_already_captured(payload):
        return AlreadyCaptured(raw_payload=payload)

    if http_status >= 500:
        return TransportError(
            message=f'PayPal returned HTTP {http_status}',
            http_status=http_status,
            raw_payload=payload,
        )

    status = payload.get('status')
    if status == 'COMPLETED':
        transaction_id = _extract_transaction_id(payload)
        if not transaction_id:
            # Funds moved; record the purchase anyway and keep the payload
            logger.warning("Completed capture without a capture id: %s", json.dumps(payload))
        amount_cents, currency = _extract_amount(payload)
        return Completed(
            transaction_id=transaction_id or '',
            raw_payload=payload,
            correlation=_extract_correlation(payload),
            amount_cents=amount_cents,
            currency=currency,
        )

    return NotCompleted(provider_status=status or payload.get('name'), raw_payload=payload)


class PayPalGateway:
    """
    PayPal Orders v2 client.

    Construction validates configuration, so a deployment without
    credentials fails before any request is made.

    Methods:
        get_access_token: Client-credentials OAuth token.
        create_order: Create a CAPTURE-intent order.
        capture_order: Capture an approved order.
    """

    def __init__(self, config: GatewayConfig):
        if not config.client_id or not config.secret:
            raise ConfigurationError()
        self.config = config

    @classmethod
    def from_settings(cls) -> 'PayPalGateway':
        return cls(GatewayConfig.from_settings())

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def get_access_token(self) -> str:
        """
        Exchange the client id and secret for a bearer token.

        Raises:
            ProviderAuthError: If PayPal rejects the credentials
            ProviderError: If PayPal cannot be reached
        """
        try:
            response = requests.post(
                self._url('/v1/oauth2/token'),
                auth=(self.config.client_id, self.config.secret),
                headers={'Content-Type': 'application/x-www-form-urlencoded'},
                data={'grant_type': 'client_credentials'},
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            logger.error("PayPal token request failed: %s", exc)
            raise ProviderError('Failed to reach PayPal', details=str(exc)) from exc

        if not response.ok:
            payload = _response_payload(response)
            logger.error("PayPal rejected credentials (HTTP %s): %s", response.status_code, payload)
            raise ProviderAuthError(details=payload)

        try:
            token = response.json()['access_token']
        except (ValueError, KeyError) as exc:
            payload = _response_payload(response)
            logger.error("PayPal token response without access_token: %s", payload)
            raise ProviderAuthError(details=payload) from exc

        logger.debug("PayPal access token obtained")
        return token

    def _headers(self) -> dict:
        return {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.get_access_token()}',
        }

    def create_order(self, *, amount_cents: int, description: str, correlation: dict,
                     return_url: str, cancel_url: str) -> CreatedOrder:
        """
        Create a CAPTURE-intent order and return its id and approval URL.

        ``correlation`` is stored in the purchase unit's ``custom_id`` so the
        order carries the user and product it was created for.

        Raises:
            ProviderAuthError: If the token request is rejected
            ProviderError: On transport failure, non-2xx, or a missing order id
        """
        body = {
            'intent': 'CAPTURE',
            'purchase_units': [
                {
                    'amount': {
                        'currency_code': self.config.currency,
                        'value': format_amount(amount_cents),
                    },
                    'description': description,
                    'custom_id': json.dumps(correlation, separators=(',', ':')),
                },
            ],
            'application_context': {
                'return_url': return_url,
                'cancel_url': cancel_url,
                'brand_name': self.config.brand_name,
                'user_action': 'PAY_NOW',
            },
        }
        headers = self._headers()

        logger.info("Creating PayPal order: %s", json.dumps(body))
        try:
            response = requests.post(
                self._url('/v2/checkout/orders'),
                json=body,
                headers=headers,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            logger.error("PayPal order creation failed: %s", exc)
            raise ProviderError('Failed to create PayPal order', details=str(exc)) from exc

        payload = _response_payload(response)
        logger.info("PayPal order response (HTTP %s): %s", response.status_code, payload)

        if not response.ok:
            raise ProviderError('Failed to create PayPal order', details=payload)
        if not isinstance(payload, dict) or not payload.get('id'):
            raise ProviderError('No order ID returned from PayPal', details=payload)

        order_id = payload['id']
        approval_url = next(
            (link.get('href') for link in payload.get('links') or []
             if isinstance(link, dict) and link.get('rel') == 'approve'),
            None,
        )
        if not approval_url:
            approval_url = f"{self.config.checkout_url}?token={order_id}"

        return CreatedOrder(order_id=order_id, approval_url=approval_url, raw_payload=payload)

    def capture_order(self, provider_order_id: str) -> CaptureResult:
        """
        Capture an approved order.

        Transport problems on the capture call itself come back as
        ``TransportError``; only the token step raises.

        Raises:
            ProviderAuthError: If the token request is rejected
            ProviderError: If the token request cannot reach PayPal
        """
        headers = self._headers()

        logger.info("Capturing PayPal order %s", provider_order_id)
        try:
            response = requests.post(
                self._url(f'/v2/checkout/orders/{provider_order_id}/capture'),
                headers=headers,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            logger.error("PayPal capture of %s failed in transport: %s", provider_order_id, exc)
            return TransportError(message=str(exc))

        payload = _response_payload(response)
        logger.info(
            "PayPal capture response for %s (HTTP %s): %s",
            provider_order_id, response.status_code, payload,
        )
        return parse_capture_response(response.status_code, payload)


def get_gateway() -> PayPalGateway:
    """Gateway configured from Django settings."""
    return PayPalGateway.from_settings()
