"""
Domain exceptions for purchases app.

This module defines the exception hierarchy for checkout and capture errors.
Views translate them into ``{error, details}`` responses using the
``status_code`` each class carries; ``retryable`` tells the client whether
repeating the same request can succeed (transport and persistence failures)
or is pointless (already owned, payment failed).

Exception Hierarchy:
    PurchasesServiceError (base)
    ├── ConfigurationError
    ├── ProviderError
    │   └── ProviderAuthError
    ├── AlreadyOwnedError
    ├── PaymentFailedError
    ├── OrderMismatchError
    ├── PersistenceError
    └── ReconciliationAmbiguityError
"""


class PurchasesServiceError(Exception):
    """Base exception for purchase service errors."""

    status_code = 500
    retryable = False
    default_message = 'Purchase failed'

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ConfigurationError(PurchasesServiceError):
    """PayPal credentials are not configured."""

    status_code = 500
    default_message = 'PayPal credentials not configured'


class ProviderError(PurchasesServiceError):
    """PayPal could not be reached or answered with an error."""

    status_code = 500
    retryable = True
    default_message = 'PayPal request failed'


class ProviderAuthError(ProviderError):
    """PayPal rejected the client credentials."""

    default_message = 'Failed to authenticate with PayPal'


class AlreadyOwnedError(PurchasesServiceError):
    """The user already holds the entitlement the order would sell."""

    status_code = 400
    default_message = 'Product already purchased'


class PaymentFailedError(PurchasesServiceError):
    """PayPal answered the capture but the order is not completed."""

    status_code = 400
    default_message = 'Payment not completed'

    def __init__(self, message=None, details=None, provider_status=None):
        self.provider_status = provider_status
        super().__init__(message, details)


class PersistenceError(PurchasesServiceError):
    """Recording the purchase failed for a reason other than a duplicate."""

    status_code = 500
    retryable = True
    default_message = 'Failed to record purchase'


class ReconciliationAmbiguityError(PurchasesServiceError):
    """PayPal reports the order captured but no local purchase records it."""

    status_code = 400
    retryable = True
    default_message = 'Order already captured but not found in database'


class OrderMismatchError(PurchasesServiceError):
    """The captured order was created for another user, product or amount."""

    status_code = 400
    default_message = 'Order does not match the requested product'
