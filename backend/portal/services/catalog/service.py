"""
ProductCatalogService
=====================

Fetches the public subscription products shown on the registration form.

Callers that render the form use :meth:`ProductCatalogService.products_or_empty`
so a failed fetch degrades to an empty catalog instead of breaking the form.
Catalog fetches are not retried.
"""

from __future__ import annotations

import logging

from portal.services._shared.base import BaseService, ServiceContext
from portal.services._shared.errors import BackendError, FetchError
from portal.services._shared.ports import Notifier, PortalBackend
from portal.services.catalog.dto import Product

log = logging.getLogger(__name__)


class ProductCatalogService(BaseService):
    """Accessor for the upstream product catalog."""

    def __init__(
        self,
        backend: PortalBackend,
        notifier: Notifier,
        *,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.backend = backend
        self.notifier = notifier

    def fetch_products(self) -> list[Product]:
        """
        Fetch the ordered product catalog.

        Malformed records are skipped with a warning; the upstream order is kept.

        :returns: Products in upstream order.
        :rtype: list[Product]
        :raises FetchError: On transport failure or an unsuccessful envelope.
        """
        try:
            records = self.backend.list_public_products()
        except BackendError as exc:
            raise FetchError(exc.message or "Failed to fetch products. Please try again.") from exc

        products: list[Product] = []
        for record in records or []:
            try:
                products.append(Product.from_payload(record))
            except (TypeError, ValueError):
                log.warning("catalog.skip_record", extra=self.log_extra(op="products"), exc_info=True)
        return products

    def products_or_empty(self) -> list[Product]:
        """
        Fetch the catalog, degrading to ``[]`` and notifying the user on failure.

        :returns: Products, or an empty list when the fetch failed.
        :rtype: list[Product]
        """
        try:
            return self.fetch_products()
        except FetchError as exc:
            log.warning(
                "catalog.fetch_failed: %s", exc.message, extra=self.log_extra(op="products")
            )
            self.notifier.notify("error", exc.message)
            return []
