# ==========================================
# apps/catalog/models.py
# ==========================================

from django.db import models
from django.utils import timezone
import uuid


class KitRarity(models.TextChoices):
    COMMON = 'common', 'Common'
    RARE = 'rare', 'Rare'
    EPIC = 'epic', 'Epic'
    LEGENDARY = 'legendary', 'Legendary'
    MYTHIC = 'mythic', 'Mythic'


class UnlockType(models.TextChoices):
    FREE = 'free', 'Free'
    PURCHASABLE = 'purchasable', 'Purchasable'
    CHANCE_BASED = 'chance_based', 'Chance based'


class Kit(models.Model):
    """House kit: a cosmetic bundle players unlock and equip on their houses."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    rarity = models.CharField(max_length=20, choices=KitRarity.choices, default=KitRarity.COMMON)
    unlock_type = models.CharField(max_length=20, choices=UnlockType.choices, default=UnlockType.PURCHASABLE)

    # Price in cents; 0 means the kit is granted for free
    price_cents = models.PositiveIntegerField(default=0)

    color_scheme = models.JSONField(default=list, blank=True)
    items = models.JSONField(default=list, blank=True)

    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'house_kits'
        indexes = [
            models.Index(fields=['is_available', 'price_cents'], name='house_kits_avail_price_idx'),
        ]
        ordering = ['price_cents', 'name']

    def __str__(self):
        return f"{self.name} ({self.price_cents / 100:.2f})"

    @property
    def is_free(self):
        return self.price_cents == 0


class UserKit(models.Model):
    """Kit ownership. Owning a kit does not equip it (``is_active``)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='owned_kits')
    kit = models.ForeignKey(Kit, on_delete=models.CASCADE, related_name='owners')
    is_active = models.BooleanField(default=False)
    unlocked_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'user_house_kits'
        unique_together = [['user', 'kit']]
        indexes = [
            models.Index(fields=['user', 'is_active'], name='user_kits_user_active_idx'),
        ]
        ordering = ['-unlocked_at']

    def __str__(self):
        return f"{self.user} owns {self.kit.name}"
