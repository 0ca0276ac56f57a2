"""
Purchases app services layer.

Services hold the checkout logic: order creation, capture reconciliation,
purchase recording and entitlement granting. Views only translate requests
and exceptions.
"""

from ..exceptions import (
    PurchasesServiceError,
    ConfigurationError,
    ProviderError,
    ProviderAuthError,
    AlreadyOwnedError,
    PaymentFailedError,
    OrderMismatchError,
    PersistenceError,
    ReconciliationAmbiguityError,
)

from .purchase_recording import (
    record_purchase,
    find_completed_purchase,
    find_product_purchase,
    user_has_completed_purchase,
)

from .entitlements import (
    has_entitlement,
    ensure_entitlement,
    verify_entitlement,
    grant_entitlement_on_purchase,
)

from .order_initiation import (
    initiate_order,
)

from .capture_reconciliation import (
    CaptureOutcome,
    capture_order,
)


__all__ = [
    # Exceptions
    'PurchasesServiceError',
    'ConfigurationError',
    'ProviderError',
    'ProviderAuthError',
    'AlreadyOwnedError',
    'PaymentFailedError',
    'OrderMismatchError',
    'PersistenceError',
    'ReconciliationAmbiguityError',

    # Purchase recording
    'record_purchase',
    'find_completed_purchase',
    'find_product_purchase',
    'user_has_completed_purchase',

    # Entitlements
    'has_entitlement',
    'ensure_entitlement',
    'verify_entitlement',
    'grant_entitlement_on_purchase',

    # Orders and capture
    'initiate_order',
    'CaptureOutcome',
    'capture_order',
]
