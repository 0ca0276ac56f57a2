from django.http import JsonResponse
from rest_framework import exceptions
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import exception_handler


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    """Liveness probe for the hosting platform."""
    return Response({'status': 'ok'})


def api_exception_handler(exc, context):
    """
    Render framework errors in the API's ``{error, details}`` envelope.

    DRF answers authentication, validation and routing errors with
    ``{"detail": ...}`` or a field-error mapping; the mobile client only
    understands ``{"error": str, "details": any}``.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        response.data = {'error': 'Invalid request', 'details': response.data}
    elif isinstance(response.data, dict) and 'detail' in response.data:
        response.data = {'error': str(response.data['detail'])}
    else:
        response.data = {'error': 'Request failed', 'details': response.data}
    return response


def error_404(request, exception):
    """Custom 404 handler."""
    return JsonResponse({
        'error': 'Not found',
        'status': 404
    }, status=404)


def error_500(request):
    """Custom 500 handler."""
    return JsonResponse({
        'error': 'Internal server error',
        'status': 500
    }, status=500)
