from django.db import models
from django.db.models import Q
import uuid


class PurchaseStatus(models.TextChoices):
    COMPLETED = 'completed', 'Completed'
    FAILED = 'failed', 'Failed'


class ProductType(models.TextChoices):
    KIT = 'kit', 'House kit'
    PREMIUM = 'premium', 'Premium'


class PaymentProvider(models.TextChoices):
    PAYPAL = 'paypal', 'PayPal'


class Purchase(models.Model):
    """
    Durable record of a captured payment.

    Rows are append-only. The two partial unique constraints are the
    concurrency guard of the capture flow: two requests racing to record the
    same order (or the same single-per-user product) cannot both insert a
    completed row, and the loser treats the violation as an idempotent
    success.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='purchases'
    )

    # Product: 'premium' or a house kit id
    product_type = models.CharField(max_length=20, choices=ProductType.choices)
    product_ref = models.CharField(max_length=64)

    # Financial details
    price_cents = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, default='USD')

    # Provider references
    provider = models.CharField(
        max_length=20,
        choices=PaymentProvider.choices,
        default=PaymentProvider.PAYPAL
    )
    provider_order_id = models.CharField(max_length=64, db_index=True)
    transaction_id = models.CharField(max_length=64, blank=True)

    status = models.CharField(
        max_length=20,
        choices=PurchaseStatus.choices,
        default=PurchaseStatus.COMPLETED
    )

    # Raw provider capture payload, kept for dispute forensics
    metadata = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'user_purchases'
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'provider_order_id'],
                condition=Q(status='completed'),
                name='uniq_completed_purchase_per_order',
            ),
            models.UniqueConstraint(
                fields=['user', 'product_ref'],
                condition=Q(status='completed'),
                name='uniq_completed_purchase_per_product',
            ),
        ]
        indexes = [
            models.Index(fields=['user', 'status'], name='purchases_user_status_idx'),
            models.Index(fields=['product_type', 'status'], name='purchases_type_status_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user} - {self.product_type}:{self.product_ref} ({self.status})"

    def save(self, *args, **kwargs):
        """Insert only; purchase rows are never rewritten."""
        if not self._state.adding:
            raise ValueError("Purchase records are append-only")
        super().save(*args, **kwargs)

    @property
    def is_completed(self):
        return self.status == PurchaseStatus.COMPLETED

    def get_price_display(self):
        return f"{self.price_cents / 100:.2f} {self.currency}"
