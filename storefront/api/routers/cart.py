# storefront/api/routers/cart.py
from fastapi import APIRouter, Depends, HTTPException

from storefront.api.deps import get_cart_store, get_product_client
from storefront.domain.errors import InvalidQuantityError, ProductNotFoundError
from storefront.domain.schemas import CartDetailsOut, CartOut, ItemIn, QuantityIn
from storefront.services.cart_service import CartStore, hydrate_cart
from storefront.services.product_client import ProductClient

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(store: CartStore = Depends(get_cart_store)):
    return store.to_dict()


@router.get("/details", response_model=CartDetailsOut)
def get_cart_details(
    store: CartStore = Depends(get_cart_store),
    product_client: ProductClient = Depends(get_product_client),
):
    """Koszyk z aktualnymi danymi produktow, niedostepne produkty w `missing`."""
    return hydrate_cart(store, product_client)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    store: CartStore = Depends(get_cart_store),
    product_client: ProductClient = Depends(get_product_client),
):
    try:
        #cena i rabat zawsze z katalogu, nie od klienta
        product = product_client.fetch_product(payload.product_id)
        store.add_product(product, payload.quantity)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidQuantityError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return store.to_dict()


@router.put("/items/{product_id}", response_model=CartOut)
def update_item(
    product_id: str,
    payload: QuantityIn,
    store: CartStore = Depends(get_cart_store),
):
    try:
        store.update_quantity(product_id, payload.quantity)
    except InvalidQuantityError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return store.to_dict()


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(product_id: str, store: CartStore = Depends(get_cart_store)):
    store.remove_item(product_id)
    return store.to_dict()


@router.delete("", response_model=CartOut)
def clear_cart(store: CartStore = Depends(get_cart_store)):
    store.clear()
    return store.to_dict()
