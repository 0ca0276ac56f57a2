from rest_framework import serializers
from .models import Purchase


# =============================================================================
# Input Serializers
# =============================================================================

class KitOrderInputSerializer(serializers.Serializer):
    """
    Validate input for creating a kit order.

    Fields:
        kitId (UUID): Kit to buy
    """

    kitId = serializers.UUIDField()


class KitCaptureInputSerializer(serializers.Serializer):
    """
    Validate input for capturing a kit order.

    Fields:
        orderId (str): PayPal order id returned at creation
        kitId (UUID): Kit the order was created for
    """

    orderId = serializers.CharField(max_length=64)
    kitId = serializers.UUIDField()


class PremiumCaptureInputSerializer(serializers.Serializer):
    """Validate input for capturing a premium order."""

    orderId = serializers.CharField(max_length=64)


class PayPalRedirectQuerySerializer(serializers.Serializer):
    """Query parameters PayPal appends when sending the buyer back."""

    token = serializers.CharField(required=False, allow_blank=True)
    PayerID = serializers.CharField(required=False, allow_blank=True)
    kitId = serializers.CharField(required=False, allow_blank=True)
    cancel = serializers.CharField(required=False, allow_blank=True)


# =============================================================================
# Output Serializers
# =============================================================================

class OrderResponseSerializer(serializers.Serializer):
    orderId = serializers.CharField(source='order_id')
    approvalUrl = serializers.CharField(source='approval_url')


class CaptureResponseSerializer(serializers.Serializer):
    success = serializers.SerializerMethodField()
    transactionId = serializers.CharField(source='transaction_id')
    alreadyProcessed = serializers.BooleanField(source='already_processed')

    def get_success(self, obj) -> bool:
        return True


class PurchaseSerializer(serializers.ModelSerializer):
    """Serializer for the caller's own purchases."""

    price_display = serializers.CharField(source='get_price_display', read_only=True)

    class Meta:
        model = Purchase
        fields = [
            'id',
            'product_type',
            'product_ref',
            'price_cents',
            'currency',
            'price_display',
            'provider',
            'provider_order_id',
            'transaction_id',
            'status',
            'created_at',
        ]
        read_only_fields = fields


class PremiumStatusSerializer(serializers.Serializer):
    isPremium = serializers.BooleanField(source='is_premium')
    premiumGrantedAt = serializers.DateTimeField(source='premium_granted_at', allow_null=True)
    purchase = PurchaseSerializer(allow_null=True)
