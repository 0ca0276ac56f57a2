from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Current user profile, including entitlement state."""

    display_name = serializers.SerializerMethodField()
    owned_kit_count = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'is_premium',
            'premium_granted_at',
            'owned_kit_count',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()

    def get_owned_kit_count(self, obj):
        return obj.owned_kits.count()
