import pytest
from django.urls import reverse
from rest_framework import status
from apps.catalog.models import UserKit


@pytest.mark.django_db
class TestKitList:
    """Tests for GET /api/catalog/kits/"""

    def test_list_available_kits(self, shopper_client, paid_kit, free_kit, retired_kit):
        response = shopper_client.get(reverse('catalog:kit-list'))

        assert response.status_code == status.HTTP_200_OK
        names = [kit['name'] for kit in response.data]
        assert names == ['Starter', 'Neon Nights']

    def test_marks_owned_kits(self, shopper_client, shopper, paid_kit, free_kit):
        UserKit.objects.create(user=shopper, kit=paid_kit)

        response = shopper_client.get(reverse('catalog:kit-list'))

        owned = {kit['name']: kit['owned_by_user'] for kit in response.data}
        assert owned == {'Starter': False, 'Neon Nights': True}

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('catalog:kit-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestKitDetail:
    """Tests for GET /api/catalog/kits/{id}/"""

    def test_kit_detail(self, shopper_client, paid_kit):
        response = shopper_client.get(reverse('catalog:kit-detail', args=[paid_kit.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['price_cents'] == 499
        assert response.data['is_free'] is False

    def test_retired_kit_not_listed(self, shopper_client, retired_kit):
        response = shopper_client.get(reverse('catalog:kit-detail', args=[retired_kit.id]))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert 'error' in response.data


@pytest.mark.django_db
class TestMyKits:
    """Tests for GET /api/catalog/kits/mine/"""

    def test_owned_kits(self, shopper_client, shopper, paid_kit, retired_kit):
        UserKit.objects.create(user=shopper, kit=retired_kit)

        response = shopper_client.get(reverse('catalog:kit-mine'))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['kit']['name'] == 'Summer 2024'
        assert response.data[0]['is_active'] is False
