# storefront/services/order_client.py
import requests
from pydantic import ValidationError
from requests import RequestException

from storefront.domain.errors import GatewayError
from storefront.domain.schemas import OrderReceipt, OrderRequest
from storefront.utils.settings import API_URL, API_TIMEOUT_SECONDS, SESSION_COOKIE
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _error_message(resp: requests.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.reason or f"HTTP {resp.status_code}"
    if isinstance(data, dict):
        message = data.get("message") or data.get("error")
        #gateway potrafi zwrocic obiekt zamiast tekstu
        return str(message) if message else f"HTTP {resp.status_code}"
    return f"HTTP {resp.status_code}"


class OrderClient:
    """
    POST /orders do API Gateway.
    Brak retry: za idempotencje i duplikaty odpowiada backend.
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or API_URL).rstrip("/")
        self.timeout = timeout or API_TIMEOUT_SECONDS

    def create_order(
        self,
        order: OrderRequest,
        session_token: str | None = None,
    ) -> OrderReceipt:
        url = f"{self.base_url}/orders"
        logger.info(f"OrderClient POST {url} total={order.total}")

        cookies = {SESSION_COOKIE: session_token} if session_token else None

        try:
            resp = requests.post(
                url,
                json=order.model_dump(mode="json", by_alias=True),
                cookies=cookies,
                timeout=self.timeout,
            )
        except RequestException as e:
            logger.error(f"POST {url} nie powiodl sie: {e}")
            raise GatewayError(f"Brak polaczenia z API: {e}") from e

        if not resp.ok:
            message = _error_message(resp)
            logger.error(f"POST {url} zwrocil {resp.status_code}: {message}")
            raise GatewayError(message, status_code=resp.status_code)

        try:
            return OrderReceipt.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise GatewayError(f"Niepoprawna odpowiedz API zamowien: {e}") from e
