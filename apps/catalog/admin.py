# ==========================================
# apps/catalog/admin.py
# ==========================================

from django.contrib import admin
from .models import Kit, UserKit


@admin.register(Kit)
class KitAdmin(admin.ModelAdmin):
    """Admin interface for house kits."""

    list_display = ['name', 'rarity', 'unlock_type', 'get_price_display', 'is_available', 'created_at']
    list_filter = ['rarity', 'unlock_type', 'is_available']
    search_fields = ['name', 'description']
    readonly_fields = ['created_at', 'updated_at']

    def get_price_display(self, obj):
        """Display price in dollars."""
        if obj.is_free:
            return 'Free'
        return f"${obj.price_cents / 100:.2f}"
    get_price_display.short_description = 'Price'
    get_price_display.admin_order_field = 'price_cents'


@admin.register(UserKit)
class UserKitAdmin(admin.ModelAdmin):
    """Admin interface for kit ownership."""

    list_display = ['user', 'kit', 'is_active', 'unlocked_at']
    list_filter = ['is_active', 'kit']
    search_fields = ['user__email', 'kit__name']
    raw_id_fields = ['user', 'kit']
    readonly_fields = ['unlocked_at']
