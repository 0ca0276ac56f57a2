"""
Purchases App - PayPal Checkout

This app sells paid products (house kits and lifetime premium) through
PayPal Orders v2 and keeps purchases and entitlements consistent with what
PayPal actually captured.

Key Features:
- Order creation with ownership pre-checks
- Idempotent capture with race-safe purchase recording
- Reconciliation of orders PayPal reports as already captured
- Entitlement verification and backfill after every capture
- Deep-link redirect back into the mobile app after approval

Architecture:
- Models: Purchase
- Gateway: PayPalGateway, CaptureResult variants
- Services: initiate_order, capture_order, record_purchase, entitlements
- Views: function-based API views
- Exceptions: Domain exception hierarchy with HTTP status and retry hints
"""

__version__ = '0.3.0'
