from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'catalog'

router = DefaultRouter()
router.register(r'kits', views.KitViewSet, basename='kit')

urlpatterns = [
    # GET    /api/catalog/kits/        - List kits in the shop
    # GET    /api/catalog/kits/{id}/   - Get kit details
    # GET    /api/catalog/kits/mine/   - Kits owned by the current user
    path('', include(router.urls)),
]
