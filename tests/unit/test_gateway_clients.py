"""Testy klientow HTTP API Gateway (requests podmienione przez patch)."""
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest
import requests

from storefront.domain.errors import GatewayError, ProductNotFoundError
from storefront.domain.schemas import OrderItemIn, OrderRequest
from storefront.services.order_client import OrderClient
from storefront.services.product_client import ProductClient


def fake_response(status_code=200, payload=None, reason="OK"):
    resp = Mock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.reason = reason
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


ORDER = OrderRequest(
    items=[OrderItemIn(product_id="A", quantity=2, price=Decimal("100"))],
    total=Decimal("200"),
)


class TestProductClient:

    @patch("storefront.services.product_client.requests.get")
    def test_fetch_product(self, mock_get):
        mock_get.return_value = fake_response(
            payload={"id": 7, "name": "Netflix 1M", "price": 149, "discount": 5, "stock": 3}
        )

        product = ProductClient(base_url="http://gw/api/").fetch_product("7")

        mock_get.assert_called_once_with("http://gw/api/products/7", timeout=ProductClient().timeout)
        assert product.id == "7"
        assert product.price == Decimal("149")
        assert product.discount == Decimal("5")

    @patch("storefront.services.product_client.requests.get")
    def test_missing_product(self, mock_get):
        mock_get.return_value = fake_response(404, {"message": "not found"})

        with pytest.raises(ProductNotFoundError):
            ProductClient(base_url="http://gw").fetch_product("nope")

    @patch("storefront.services.product_client.requests.get")
    def test_server_error_is_gateway_error(self, mock_get):
        mock_get.return_value = fake_response(500, {})

        with pytest.raises(GatewayError) as exc:
            ProductClient(base_url="http://gw").fetch_product("A")
        assert exc.value.status_code == 500
        assert mock_get.call_count == 1

    @patch("storefront.services.product_client.requests.get")
    def test_connection_errors_are_retried(self, mock_get):
        mock_get.side_effect = [
            requests.ConnectionError("reset"),
            fake_response(payload={"id": "A", "name": "x", "price": 1}),
        ]

        product = ProductClient(base_url="http://gw").fetch_product("A")

        assert product.id == "A"
        assert mock_get.call_count == 2

    @patch("storefront.services.product_client.requests.get")
    def test_malformed_product(self, mock_get):
        mock_get.return_value = fake_response(payload={"id": "A"})

        with pytest.raises(GatewayError):
            ProductClient(base_url="http://gw").fetch_product("A")


class TestOrderClient:

    @patch("storefront.services.order_client.requests.post")
    def test_create_order_posts_camel_case_and_session_cookie(self, mock_post):
        mock_post.return_value = fake_response(payload={"transactionId": 9001})

        receipt = OrderClient(base_url="http://gw", timeout=3).create_order(ORDER, session_token="tok")

        assert receipt.transaction_id == "9001"
        mock_post.assert_called_once_with(
            "http://gw/orders",
            json={"items": [{"productId": "A", "quantity": 2, "price": 100.0}], "total": 200.0},
            cookies={"session": "tok"},
            timeout=3,
        )

    @patch("storefront.services.order_client.requests.post")
    def test_error_status_carries_gateway_message(self, mock_post):
        mock_post.return_value = fake_response(400, {"message": "Out of stock"}, reason="Bad Request")

        with pytest.raises(GatewayError) as exc:
            OrderClient(base_url="http://gw").create_order(ORDER)

        assert exc.value.status_code == 400
        assert exc.value.message == "Out of stock"

    @patch("storefront.services.order_client.requests.post")
    def test_non_json_error_body(self, mock_post):
        mock_post.return_value = fake_response(503, ValueError("no json"), reason="Service Unavailable")

        with pytest.raises(GatewayError) as exc:
            OrderClient(base_url="http://gw").create_order(ORDER)

        assert exc.value.message == "Service Unavailable"

    @patch("storefront.services.order_client.requests.post")
    def test_timeout_is_not_retried(self, mock_post):
        mock_post.side_effect = requests.Timeout("slow")

        with pytest.raises(GatewayError) as exc:
            OrderClient(base_url="http://gw").create_order(ORDER)

        assert exc.value.status_code is None
        assert mock_post.call_count == 1

    @patch("storefront.services.order_client.requests.post")
    def test_structured_error_message_becomes_text(self, mock_post):
        mock_post.return_value = fake_response(422, {"message": {"code": "E_STOCK", "items": ["A"]}})

        with pytest.raises(GatewayError) as exc:
            OrderClient(base_url="http://gw").create_order(ORDER)

        assert isinstance(exc.value.message, str)
        assert "E_STOCK" in exc.value.message

    @patch("storefront.services.order_client.requests.post")
    def test_success_without_transaction_id(self, mock_post):
        mock_post.return_value = fake_response(payload={"status": "ok"})

        with pytest.raises(GatewayError):
            OrderClient(base_url="http://gw").create_order(ORDER)
