# storefront/api/routers/checkout.py
from fastapi import APIRouter, Depends, HTTPException

from storefront.api.deps import (
    get_cart_store,
    get_order_client,
    get_registry,
    get_visitor_id,
    require_session,
)
from storefront.domain.errors import EmptyCartError, InvalidTransitionError
from storefront.domain.schemas import CheckoutOut
from storefront.services.cart_service import CartStore
from storefront.services.checkout_service import (
    CheckoutRegistry,
    CheckoutState,
    start_checkout,
)
from storefront.services.order_client import OrderClient

router = APIRouter(prefix="/checkout", tags=["checkout"])


def _current(registry: CheckoutRegistry, visitor_id: str):
    session = registry.get(visitor_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Brak aktywnej platnosci")
    return session


@router.post("", response_model=CheckoutOut, status_code=201)
def begin_checkout(
    visitor_id: str = Depends(get_visitor_id),
    session_token: str = Depends(require_session),
    store: CartStore = Depends(get_cart_store),
    order_client: OrderClient = Depends(get_order_client),
    registry: CheckoutRegistry = Depends(get_registry),
):
    """
    Start (lub restart) checkoutu: nowy snapshot aktualnego koszyka.
    Poprzednia sesja odwiedzajacego jest porzucana.
    """
    previous = registry.get(visitor_id)
    if previous is not None and previous.state is CheckoutState.AWAITING_PAYMENT:
        raise HTTPException(status_code=409, detail="Platnosc w toku")

    try:
        session = start_checkout(store, order_client, session_token=session_token)
    except EmptyCartError as e:
        raise HTTPException(status_code=400, detail=str(e))

    registry.put(visitor_id, session)
    return session.to_dict()


@router.post("/pay", response_model=CheckoutOut)
def pay(
    visitor_id: str = Depends(get_visitor_id),
    session_token: str = Depends(require_session),
    registry: CheckoutRegistry = Depends(get_registry),
):
    """Wysyla platnosc; status `failed` mozna ponowic tym samym wywolaniem."""
    session = _current(registry, visitor_id)
    session.session_token = session_token
    try:
        session.pay()
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.to_dict()


@router.get("", response_model=CheckoutOut)
def get_checkout(
    visitor_id: str = Depends(get_visitor_id),
    registry: CheckoutRegistry = Depends(get_registry),
):
    return _current(registry, visitor_id).to_dict()


@router.delete("", status_code=204)
def discard_checkout(
    visitor_id: str = Depends(get_visitor_id),
    registry: CheckoutRegistry = Depends(get_registry),
):
    registry.pop(visitor_id)
