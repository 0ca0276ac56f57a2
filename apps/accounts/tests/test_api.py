import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User
from apps.catalog.models import Kit, UserKit


# =============================================================================
# Token Tests
# =============================================================================

@pytest.mark.django_db
class TestTokenObtain:
    """Tests for POST /api/auth/token/"""

    def test_obtain_token_pair(self, api_client, user):
        """Valid credentials return an access and refresh token."""
        url = reverse('token_obtain_pair')
        response = api_client.post(url, {
            'email': 'testuser@example.com',
            'password': 'TestPass123!',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data
        assert 'refresh' in response.data

    def test_wrong_password(self, api_client, user):
        """Wrong password is rejected in the error envelope."""
        url = reverse('token_obtain_pair')
        response = api_client.post(url, {
            'email': 'testuser@example.com',
            'password': 'WrongPass!',
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert 'error' in response.data

    def test_inactive_user(self, api_client, user_inactive):
        """Inactive users cannot obtain tokens."""
        url = reverse('token_obtain_pair')
        response = api_client.post(url, {
            'email': 'inactive@example.com',
            'password': 'TestPass123!',
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_refresh_token(self, api_client, user):
        """A refresh token yields a new access token."""
        tokens = api_client.post(reverse('token_obtain_pair'), {
            'email': 'testuser@example.com',
            'password': 'TestPass123!',
        }, format='json').data

        response = api_client.post(
            reverse('token_refresh'), {'refresh': tokens['refresh']}, format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data


# =============================================================================
# Current User Tests
# =============================================================================

@pytest.mark.django_db
class TestGetCurrentUser:
    """Tests for GET /api/auth/user/"""

    def test_get_current_user(self, authenticated_client, user):
        """Get current authenticated user profile."""
        url = reverse('users:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email
        assert response.data['display_name'] == user.display_name
        assert response.data['is_premium'] is False
        assert response.data['owned_kit_count'] == 0
        assert 'id' in response.data

    def test_reflects_entitlements_granted_elsewhere(self, authenticated_client, user):
        """Entitlement changes made outside the request are visible."""
        User.objects.filter(pk=user.pk).update(is_premium=True)
        kit = Kit.objects.create(name='Retro', price_cents=299)
        UserKit.objects.create(user=user, kit=kit)

        response = authenticated_client.get(reverse('users:current-user'))

        assert response.data['is_premium'] is True
        assert response.data['owned_kit_count'] == 1

    def test_display_name_falls_back_to_email(self, api_client, db):
        """Users without a display name get their email prefix."""
        from rest_framework_simplejwt.tokens import RefreshToken
        nameless = User.objects.create_user(email='nameless@example.com', password='TestPass123!')
        refresh = RefreshToken.for_user(nameless)
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')

        response = api_client.get(reverse('users:current-user'))

        assert response.data['display_name'] == 'nameless'

    def test_get_current_user_unauthenticated(self, api_client):
        """Cannot get user profile when not authenticated."""
        url = reverse('users:current-user')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert 'error' in response.data


# =============================================================================
# Health Check Tests
# =============================================================================

@pytest.mark.django_db
class TestHealthCheck:
    """Tests for GET /api/health/"""

    def test_health_check_is_public(self, api_client):
        response = api_client.get(reverse('health-check'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'status': 'ok'}
