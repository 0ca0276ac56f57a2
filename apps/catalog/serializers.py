from rest_framework import serializers
from .models import Kit, UserKit


class KitSerializer(serializers.ModelSerializer):
    """Kit as shown in the shop."""

    is_free = serializers.BooleanField(read_only=True)
    owned_by_user = serializers.SerializerMethodField()

    class Meta:
        model = Kit
        fields = [
            'id',
            'name',
            'description',
            'rarity',
            'unlock_type',
            'price_cents',
            'is_free',
            'color_scheme',
            'items',
            'owned_by_user',
        ]
        read_only_fields = fields

    def get_owned_by_user(self, obj):
        """Whether the requesting user already owns the kit."""
        owned_ids = self.context.get('owned_kit_ids')
        if owned_ids is None:
            return None
        return obj.id in owned_ids


class KitMinimalSerializer(serializers.ModelSerializer):
    """Minimal kit info for nested serialization."""

    class Meta:
        model = Kit
        fields = ['id', 'name', 'rarity', 'color_scheme']
        read_only_fields = fields


class UserKitSerializer(serializers.ModelSerializer):
    """Owned kit."""

    kit = KitMinimalSerializer(read_only=True)

    class Meta:
        model = UserKit
        fields = ['id', 'kit', 'is_active', 'unlocked_at']
        read_only_fields = fields
