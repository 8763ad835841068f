"""Product catalog accessor."""

from __future__ import annotations

from decimal import Decimal

import pytest
from portal.services._shared.errors import BackendError, FetchError
from portal.services._shared.ports import CollectingNotifier, Notice, StubPortalBackend
from portal.services.catalog.service import ProductCatalogService

from tests.factories.onboarding import ProductRecordFactory


class TestProductCatalogService:
    @pytest.fixture()
    def notifier(self) -> CollectingNotifier:
        return CollectingNotifier()

    def test_products_keep_upstream_order(self, notifier):
        backend = StubPortalBackend(
            products=[
                ProductRecordFactory(ProductId=3, PricePerUserMonthly="99.50", IsActive=0),
                ProductRecordFactory(ProductId=1, PricePerUserMonthly=None),
            ]
        )

        products = ProductCatalogService(backend, notifier).fetch_products()

        assert [p.product_id for p in products] == [3, 1]
        assert products[0].price_per_user_monthly == Decimal("99.50")
        assert products[0].is_active is False
        assert products[1].price_per_user_monthly == Decimal("0")

    def test_malformed_records_are_skipped(self, notifier):
        backend = StubPortalBackend(
            products=[
                ProductRecordFactory(ProductId=1, PricePerUserMonthly="-5"),
                ProductRecordFactory(ProductId=2),
            ]
        )

        products = ProductCatalogService(backend, notifier).fetch_products()

        assert [p.product_id for p in products] == [2]

    def test_fetch_failure_raises_fetch_error(self, notifier):
        backend = StubPortalBackend()
        backend.products = BackendError("Service unavailable", transient=True)

        with pytest.raises(FetchError, match="Service unavailable"):
            ProductCatalogService(backend, notifier).fetch_products()

    def test_products_or_empty_degrades_and_notifies(self, notifier):
        backend = StubPortalBackend()
        backend.products = BackendError("Service unavailable", transient=True)

        assert ProductCatalogService(backend, notifier).products_or_empty() == []
        assert notifier.notices == [Notice("error", "Service unavailable")]
