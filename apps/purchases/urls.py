from django.urls import path
from . import views

app_name = 'purchases'

urlpatterns = [
    # GET    /api/purchases/                         - List own purchases
    path('', views.my_purchases, name='purchase-list'),

    # POST   /api/purchases/kits/orders/             - Create kit order
    # POST   /api/purchases/kits/orders/capture/     - Capture kit order
    path('kits/orders/', views.create_kit_order, name='kit-order-create'),
    path('kits/orders/capture/', views.capture_kit_order, name='kit-order-capture'),

    # POST   /api/purchases/premium/orders/          - Create premium order
    # POST   /api/purchases/premium/orders/capture/  - Capture premium order
    # GET    /api/purchases/premium/status/          - Premium state
    path('premium/orders/', views.create_premium_order, name='premium-order-create'),
    path('premium/orders/capture/', views.capture_premium_order, name='premium-order-capture'),
    path('premium/status/', views.premium_status, name='premium-status'),

    # GET    /api/purchases/paypal/redirect/         - PayPal return/cancel bounce
    path('paypal/redirect/', views.paypal_redirect, name='paypal-redirect'),
]
