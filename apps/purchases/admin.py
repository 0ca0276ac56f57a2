# ==========================================
# apps/purchases/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import Purchase, PurchaseStatus


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    """
    Read-only admin for purchases.

    Purchase rows are append-only and written by the capture flow; the admin
    is for support lookups by order or transaction id.
    """

    list_display = [
        'user',
        'product_type',
        'product_ref',
        'get_price_display',
        'status_badge',
        'provider_order_id',
        'transaction_id',
        'created_at',
    ]

    list_filter = [
        'status',
        'product_type',
        'provider',
        'created_at',
    ]

    search_fields = [
        'user__email',
        'user__display_name',
        'provider_order_id',
        'transaction_id',
        'product_ref',
    ]

    readonly_fields = [
        'id',
        'user',
        'product_type',
        'product_ref',
        'price_cents',
        'currency',
        'provider',
        'provider_order_id',
        'transaction_id',
        'status',
        'metadata',
        'created_at',
    ]

    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    fieldsets = (
        ('Purchase Information', {
            'fields': (
                'id',
                'user',
                'product_type',
                'product_ref',
                'status',
            )
        }),
        ('Financial Details', {
            'fields': (
                'price_cents',
                'currency',
            )
        }),
        ('Provider', {
            'fields': (
                'provider',
                'provider_order_id',
                'transaction_id',
            )
        }),
        ('Raw Capture Payload', {
            'fields': ('metadata',),
            'classes': ('collapse',),
        }),
        ('Metadata', {
            'fields': ('created_at',),
            'classes': ('collapse',),
        }),
    )

    def get_price_display(self, obj):
        return obj.get_price_display()
    get_price_display.short_description = 'Price'
    get_price_display.admin_order_field = 'price_cents'

    def status_badge(self, obj):
        """Display purchase status as colored badge."""
        colors = {
            PurchaseStatus.COMPLETED: ('#6B8E5E', 'white'),
            PurchaseStatus.FAILED: ('#B85C5C', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def has_add_permission(self, request):
        """Disable manual creation - purchases come from PayPal captures."""
        return False

    def has_change_permission(self, request, obj=None):
        """Disable editing - purchases are append-only."""
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        """Optimize query with select_related."""
        qs = super().get_queryset(request)
        return qs.select_related('user')
