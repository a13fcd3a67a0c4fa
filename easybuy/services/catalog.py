# easybuy/services/catalog.py
from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import MappingProxyType

import requests
from requests import RequestException
from pydantic import ValidationError as PydanticValidationError

from easybuy.domain.errors import UpstreamError
from easybuy.domain.schemas import ProductRecord, CouponRecord, ShippingRecord
from easybuy.utils.retry import http_retry
from easybuy.utils.settings import CATALOG_PRODUCTS_URL, CATALOG_TIMEOUT
from easybuy.utils.logging import get_logger

logger = get_logger(__name__)


# stale tabele kuponow i dostaw
DEFAULT_COUPONS = {
    "123": CouponRecord(code="折扣20", discount=20),
    "456": CouponRecord(code="折扣100", discount=100),
    "789": CouponRecord(code="折扣200", discount=200),
}

DEFAULT_SHIPPING = {
    "123": ShippingRecord(method="超商", fee=60),
    "456": ShippingRecord(method="宅配", fee=100),
    "789": ShippingRecord(method="自取", fee=0),
}


class CatalogGateway(ABC):
    """Read-only katalog produktow/kuponow/dostaw, None gdy brak rekordu."""

    @abstractmethod
    def lookup_product(self, product_id: str) -> ProductRecord | None:
        ...

    @abstractmethod
    def lookup_coupon(self, coupon_id: str) -> CouponRecord | None:
        ...

    @abstractmethod
    def lookup_shipping(self, shipping_id: str) -> ShippingRecord | None:
        ...


class StaticCatalog(CatalogGateway):
    """
    Katalog w pamieci. Wypelniany raz przy starcie procesu,
    potem tylko odczyt (tabele opakowane w MappingProxyType).
    """

    def __init__(
        self,
        products: Mapping[str, ProductRecord],
        coupons: Mapping[str, CouponRecord] | None = None,
        shipping: Mapping[str, ShippingRecord] | None = None,
    ):
        self._products = MappingProxyType(dict(products))
        self._coupons = MappingProxyType(dict(DEFAULT_COUPONS if coupons is None else coupons))
        self._shipping = MappingProxyType(dict(DEFAULT_SHIPPING if shipping is None else shipping))

    def lookup_product(self, product_id: str) -> ProductRecord | None:
        return self._products.get(str(product_id))

    def lookup_coupon(self, coupon_id: str) -> CouponRecord | None:
        if coupon_id is None:
            return None
        return self._coupons.get(str(coupon_id))

    def lookup_shipping(self, shipping_id: str) -> ShippingRecord | None:
        if shipping_id is None:
            return None
        return self._shipping.get(str(shipping_id))

    def __len__(self) -> int:
        return len(self._products)


class CatalogClient:
    def __init__(self, url: str | None = None, timeout: int | None = None):
        self.url = url or CATALOG_PRODUCTS_URL
        self.timeout = timeout or CATALOG_TIMEOUT

    @http_retry()
    def _get(self) -> dict:
        logger.info(f"CatalogClient GET {self.url}")
        resp = requests.get(self.url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def fetch_products(self) -> dict[str, ProductRecord]:
        """
        Pobiera tabele produktow {productId: {name, imageUrl, price, ...}}.
        Rzuca UpstreamError gdy serwer nie odpowiada po retry albo dane sa niepoprawne.
        """
        try:
            payload = self._get()
        except RequestException as e:
            raise UpstreamError(f"Catalog fetch failed: {e}") from e

        if not isinstance(payload, dict):
            raise UpstreamError("Catalog payload must be an object keyed by productId")

        try:
            return {
                str(product_id): ProductRecord.model_validate(info)
                for product_id, info in payload.items()
            }
        except PydanticValidationError as e:
            raise UpstreamError(f"Malformed catalog payload: {e}") from e


def build_catalog(client: CatalogClient | None = None) -> StaticCatalog:
    """Laduje katalog raz przy starcie. Brak produktow nie blokuje startu serwisu."""
    client = client or CatalogClient()
    try:
        products = client.fetch_products()
        logger.info(f"Catalog loaded: {len(products)} products")
    except UpstreamError as e:
        logger.error(f"Catalog load failed, starting with empty product table: {e}")
        products = {}
    return StaticCatalog(products)
