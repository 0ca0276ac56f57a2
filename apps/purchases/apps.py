from django.apps import AppConfig


class PurchasesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.purchases'
    label = 'purchases'

    def ready(self):
        # Registers the post-save entitlement grant
        from .services import entitlements  # noqa: F401
