"""
Domain exceptions for catalog app.

These exceptions represent lookups that cannot produce a purchasable product
and should be caught in views and converted to HTTP responses. Each class
carries the status code the API answers with.

Exception Hierarchy:
    CatalogServiceError (base)
    ├── ProductNotFoundError
    └── FreeProductError
"""


class CatalogServiceError(Exception):
    """Base exception for all catalog service errors."""

    status_code = 400
    retryable = False
    default_message = 'Catalog error'

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ProductNotFoundError(CatalogServiceError):
    """Raised when a product reference matches neither premium nor a kit."""

    status_code = 404
    default_message = 'Product not found'


class FreeProductError(CatalogServiceError):
    """Raised when a paid flow is asked to sell a zero-price kit."""

    status_code = 400
    default_message = 'This kit is free'
