from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from .models import User
from .serializers import UserSerializer


@extend_schema(
    responses={200: UserSerializer},
    description="Get the current authenticated user's profile and entitlements.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current authenticated user profile."""
    # Re-read so entitlements granted during this session are visible
    user = User.objects.get(pk=request.user.pk)
    return Response(UserSerializer(user).data)
