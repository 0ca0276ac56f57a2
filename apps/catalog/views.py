from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .models import UserKit
from .serializers import KitSerializer, UserKitSerializer
from .services import list_kits, get_owned_kits


class KitViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Shop catalog of house kits.

    list: Get all kits currently offered
    retrieve: Get a specific kit
    mine: Get the kits the current user owns
    """

    serializer_class = KitSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return list_kits()

    def get_serializer_context(self):
        """Mark kits the requesting user already owns."""
        context = super().get_serializer_context()
        context['owned_kit_ids'] = set(
            UserKit.objects
            .filter(user=self.request.user)
            .values_list('kit_id', flat=True)
        )
        return context

    @extend_schema(responses={200: UserKitSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def mine(self, request):
        """
        Get all kits owned by the current user.

        GET /api/catalog/kits/mine/
        """
        serializer = UserKitSerializer(get_owned_kits(request.user), many=True)
        return Response(serializer.data)
