import logging
from urllib.parse import urlencode

from django.conf import settings
from django.http import HttpResponseRedirect
from django.views.decorators.http import require_GET
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.models import User
from apps.catalog.exceptions import CatalogServiceError
from apps.catalog.services import PREMIUM_PRODUCT_REF

from .gateway import get_gateway
from .models import Purchase, PurchaseStatus, ProductType
from .serializers import (
    KitOrderInputSerializer,
    KitCaptureInputSerializer,
    PremiumCaptureInputSerializer,
    PayPalRedirectQuerySerializer,
    OrderResponseSerializer,
    CaptureResponseSerializer,
    PurchaseSerializer,
    PremiumStatusSerializer,
)
from .services import (
    initiate_order,
    capture_order,
    PurchasesServiceError,
)


logger = logging.getLogger(__name__)


class PurchasePagination(PageNumberPagination):
    """Custom pagination for purchases."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _error_response(exc):
    """Translate a domain exception into the ``{error, details}`` envelope."""
    if exc.status_code >= 500:
        logger.error("%s: %s (details: %s)", type(exc).__name__, exc.message, exc.details)
    else:
        logger.info("%s: %s", type(exc).__name__, exc.message)

    body = {'error': exc.message}
    if exc.details is not None:
        body['details'] = exc.details
    return Response(body, status=exc.status_code)


def _create_order(request, product_ref):
    try:
        order = initiate_order(
            user=request.user,
            product_ref=product_ref,
            gateway=get_gateway(),
        )
    except (PurchasesServiceError, CatalogServiceError) as e:
        return _error_response(e)

    return Response(OrderResponseSerializer(order).data)


def _capture_order(request, provider_order_id, product_ref):
    try:
        outcome = capture_order(
            user=request.user,
            provider_order_id=provider_order_id,
            product_ref=product_ref,
            gateway=get_gateway(),
        )
    except (PurchasesServiceError, CatalogServiceError) as e:
        return _error_response(e)

    return Response(CaptureResponseSerializer(outcome).data)


@extend_schema(request=KitOrderInputSerializer, responses={200: OrderResponseSerializer})
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_kit_order(request):
    """
    Create a PayPal order for a house kit.

    POST /api/purchases/kits/orders/
    Body: {"kitId": "<uuid>"}
    """
    serializer = KitOrderInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return _create_order(request, str(serializer.validated_data['kitId']))


@extend_schema(request=KitCaptureInputSerializer, responses={200: CaptureResponseSerializer})
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def capture_kit_order(request):
    """
    Capture an approved kit order.

    POST /api/purchases/kits/orders/capture/
    Body: {"orderId": "...", "kitId": "<uuid>"}
    """
    serializer = KitCaptureInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return _capture_order(
        request,
        serializer.validated_data['orderId'],
        str(serializer.validated_data['kitId']),
    )


@extend_schema(request=None, responses={200: OrderResponseSerializer})
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_premium_order(request):
    """
    Create a PayPal order for lifetime premium.

    POST /api/purchases/premium/orders/
    """
    return _create_order(request, PREMIUM_PRODUCT_REF)


@extend_schema(request=PremiumCaptureInputSerializer, responses={200: CaptureResponseSerializer})
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def capture_premium_order(request):
    """
    Capture an approved premium order.

    POST /api/purchases/premium/orders/capture/
    Body: {"orderId": "..."}
    """
    serializer = PremiumCaptureInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return _capture_order(request, serializer.validated_data['orderId'], PREMIUM_PRODUCT_REF)


@extend_schema(responses={200: PurchaseSerializer(many=True)})
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_purchases(request):
    """
    List the current user's purchases, newest first.

    GET /api/purchases/
    """
    queryset = Purchase.objects.filter(user=request.user).order_by('-created_at')
    paginator = PurchasePagination()
    page = paginator.paginate_queryset(queryset, request)
    serializer = PurchaseSerializer(page, many=True)
    return paginator.get_paginated_response(serializer.data)


@extend_schema(responses={200: PremiumStatusSerializer})
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def premium_status(request):
    """
    Get the current user's premium state and the purchase that granted it.

    GET /api/purchases/premium/status/
    """
    user = User.objects.get(pk=request.user.pk)
    purchase = Purchase.objects.filter(
        user=user,
        product_type=ProductType.PREMIUM,
        status=PurchaseStatus.COMPLETED,
    ).first()
    return Response(PremiumStatusSerializer({
        'is_premium': user.is_premium,
        'premium_granted_at': user.premium_granted_at,
        'purchase': purchase,
    }).data)


class DeepLinkRedirect(HttpResponseRedirect):
    """302 to the mobile app's custom URL scheme, never cached."""

    def __init__(self, redirect_to, *args, **kwargs):
        self.allowed_schemes = ['http', 'https', settings.APP_DEEPLINK_SCHEME]
        super().__init__(redirect_to, *args, **kwargs)
        self['Cache-Control'] = 'no-cache, no-store, must-revalidate'
        self['Pragma'] = 'no-cache'
        self['Expires'] = '0'


def build_deeplink(params):
    """Deep link for the PayPal return (or cancel) query parameters."""
    base = f"{settings.APP_DEEPLINK_SCHEME}://paypal/"
    if params.get('cancel'):
        return base + 'cancel'

    query = {key: params[key] for key in ('token', 'kitId') if params.get(key)}
    if query:
        return f"{base}success?{urlencode(query)}"
    return base + 'success'


@require_GET
def paypal_redirect(request):
    """
    Bounce the browser from PayPal's return/cancel URL into the app.

    GET /api/purchases/paypal/redirect/?token=...&kitId=...
    GET /api/purchases/paypal/redirect/?cancel=true
    """
    serializer = PayPalRedirectQuerySerializer(data=request.GET)
    if not serializer.is_valid():
        logger.warning("Unreadable PayPal redirect parameters: %s", serializer.errors)
        return DeepLinkRedirect(build_deeplink({'cancel': 'true'}))

    deeplink = build_deeplink(serializer.validated_data)
    logger.info("PayPal redirect %s -> %s", dict(request.GET.items()), deeplink)
    return DeepLinkRedirect(deeplink)
