import uuid

import pytest

from apps.catalog.exceptions import ProductNotFoundError, FreeProductError
from apps.catalog.models import UserKit
from apps.catalog.services import (
    PREMIUM_PRODUCT_REF,
    ProductType,
    find_product,
    get_premium_product,
    list_kits,
    get_owned_kits,
)


@pytest.mark.django_db
class TestFindProduct:
    """Tests for find_product()."""

    def test_premium(self, settings):
        settings.PREMIUM_PRICE_CENTS = 799

        product = find_product(PREMIUM_PRODUCT_REF)

        assert product.product_type == ProductType.PREMIUM
        assert product.is_premium is True
        assert product.price_cents == 799
        assert product.name == settings.PREMIUM_PRODUCT_NAME

    def test_kit_by_string_or_uuid(self, paid_kit):
        by_string = find_product(str(paid_kit.id))
        by_uuid = find_product(paid_kit.id)

        assert by_string == by_uuid
        assert by_string.product_type == ProductType.KIT
        assert by_string.product_ref == str(paid_kit.id)
        assert by_string.price_cents == 499
        assert by_string.kit == paid_kit

    def test_malformed_id_is_not_found(self):
        with pytest.raises(ProductNotFoundError):
            find_product('kit-42')

    def test_unknown_kit(self):
        with pytest.raises(ProductNotFoundError):
            find_product(str(uuid.uuid4()))

    def test_free_kit(self, free_kit):
        with pytest.raises(FreeProductError) as exc_info:
            find_product(str(free_kit.id))

        assert exc_info.value.status_code == 400

    def test_free_kit_allowed_for_paid_purchases(self, free_kit):
        product = find_product(str(free_kit.id), allow_free=True)

        assert product.price_cents == 0
        assert product.kit == free_kit

    def test_unavailable_kit_still_found(self, retired_kit):
        product = find_product(str(retired_kit.id))

        assert product.price_cents == 999


@pytest.mark.django_db
class TestListings:

    def test_list_kits_excludes_unavailable(self, paid_kit, free_kit, retired_kit):
        kits = list(list_kits())

        assert paid_kit in kits
        assert free_kit in kits
        assert retired_kit not in kits

    def test_get_owned_kits(self, shopper, paid_kit, retired_kit):
        UserKit.objects.create(user=shopper, kit=paid_kit)
        UserKit.objects.create(user=shopper, kit=retired_kit, is_active=True)

        owned = get_owned_kits(shopper)

        assert {row.kit_id for row in owned} == {paid_kit.id, retired_kit.id}

    def test_premium_product_ref(self):
        assert get_premium_product().product_ref == 'premium'
