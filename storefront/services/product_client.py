# storefront/services/product_client.py
import requests
from pydantic import ValidationError
from requests import RequestException

from storefront.domain.errors import GatewayError, ProductNotFoundError
from storefront.domain.schemas import Product
from storefront.utils.retry import http_retry
from storefront.utils.settings import API_URL, API_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or API_URL).rstrip("/")
        self.timeout = timeout or API_TIMEOUT_SECONDS

    @http_retry()
    def _get(self, url: str) -> requests.Response:
        logger.info(f"ProductClient GET {url}")
        return requests.get(url, timeout=self.timeout)

    def fetch_product(self, product_id: str) -> Product:
        url = f"{self.base_url}/products/{product_id}"

        try:
            resp = self._get(url)
        except RequestException as e:
            logger.error(f"Product-service niedostepny ({url}): {e}")
            raise GatewayError(f"Nie mozna pobrac produktu {product_id}") from e

        if resp.status_code == 404:
            raise ProductNotFoundError(str(product_id))

        if not resp.ok:
            logger.error(f"GET {url} zwrocil {resp.status_code}")
            raise GatewayError(
                f"Nie mozna pobrac produktu {product_id}",
                status_code=resp.status_code,
            )

        try:
            return Product.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise GatewayError(f"Niepoprawne dane produktu {product_id}: {e}") from e
