# storefront/api/deps.py
import re
import uuid
from functools import lru_cache

from fastapi import Cookie, Depends, HTTPException, Response

from storefront.repos.cart_repo import CartBackend, CartRepo, build_backend
from storefront.services.cart_service import CartStore
from storefront.services.checkout_service import CheckoutRegistry
from storefront.services.order_client import OrderClient
from storefront.services.product_client import ProductClient
from storefront.utils.settings import CART_STORAGE_KEY, SESSION_COOKIE, VISITOR_COOKIE

# uuid4().hex, nic innego nie trafia do klucza koszyka
VISITOR_ID_PATTERN = re.compile(r"[0-9a-f]{32}")


@lru_cache
def get_backend() -> CartBackend:
    return build_backend()


@lru_cache
def get_registry() -> CheckoutRegistry:
    return CheckoutRegistry()


def get_product_client() -> ProductClient:
    return ProductClient()


def get_order_client() -> OrderClient:
    return OrderClient()


def get_visitor_id(
    response: Response,
    visitor_id: str | None = Cookie(None, alias=VISITOR_COOKIE),
) -> str:
    #nowy odwiedzajacy (lub cookie w zlym formacie) dostaje nowe id
    if not visitor_id or not VISITOR_ID_PATTERN.fullmatch(visitor_id):
        visitor_id = uuid.uuid4().hex
        response.set_cookie(VISITOR_COOKIE, visitor_id, httponly=True, samesite="lax")
    return visitor_id


def get_cart_store(
    visitor_id: str = Depends(get_visitor_id),
    backend: CartBackend = Depends(get_backend),
) -> CartStore:
    return CartStore(CartRepo(backend, key=f"{CART_STORAGE_KEY}:{visitor_id}"))


def require_session(
    session: str | None = Cookie(None, alias=SESSION_COOKIE),
) -> str:
    """Checkout tylko dla zalogowanych, token nie jest tu weryfikowany."""
    if not session:
        raise HTTPException(status_code=401, detail="Zaloguj sie, aby przejsc do platnosci")
    return session
