from decimal import Decimal
from typing import Any, Dict, List, Tuple

from storefront.domain.errors import GatewayError, InvalidQuantityError
from storefront.domain.pricing import price_detail
from storefront.domain.schemas import CartLine, Product, ProductRef
from storefront.repos.cart_repo import CartRepo
from storefront.services.product_client import ProductClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def parse_quantity(value: Any) -> int:
    """
    Ilosc z formularza moze przyjsc jako string ("3", " 2 ", "2.0").
    Zwraca int, nic nie przycina, niepoprawne wartosci -> InvalidQuantityError.
    """
    if isinstance(value, bool):
        raise InvalidQuantityError(f"Niepoprawna ilosc: {value!r}")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        value = value.strip()
        try:
            return int(value)
        except ValueError:
            pass

    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidQuantityError(f"Niepoprawna ilosc: {value!r}")

    #"2.0" przechodzi, "2.7" nie - ulamkow nie obcinamy
    if not number.is_integer():
        raise InvalidQuantityError(f"Ilosc musi byc liczba calkowita: {value!r}")
    return int(number)


class CartStore:
    """
    Koszyk jednego odwiedzajacego.
    commands (add, remove, update, clear) zmieniaja stan i zapisuja go przez repo
    query (lines, totals) tylko odczyt, liczone za kazdym razem z pozycji
    """

    def __init__(self, repo: CartRepo):
        self.repo = repo
        self._lines: Dict[str, CartLine] = {}

        for line in repo.load():
            self._lines[line.product_id] = line

    #query - odczyt
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines.values())

    snapshot = lines

    def get_line(self, product_id: str) -> CartLine | None:
        return self._lines.get(str(product_id))

    def is_empty(self) -> bool:
        return not self._lines

    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def total_price(self) -> Decimal:
        return sum((line.line_total for line in self._lines.values()), Decimal("0.00"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [
                {
                    "product_id": line.product_id,
                    "name": line.name,
                    "image": line.image,
                    "unit_price": line.unit_price,
                    "quantity": line.quantity,
                    "line_total": line.line_total,
                }
                for line in self._lines.values()
            ],
            "total_items": self.total_items(),
            "total_price": self.total_price(),
        }

    #commands
    def add_item(self, product: ProductRef, quantity: Any = 1) -> CartLine:
        # ilosc < 1 podnosimy do 1, dodanie zawsze dodaje cos do koszyka
        quantity = max(1, parse_quantity(quantity))
        existing = self._lines.get(product.id)

        if existing:
            logger.info(
                f"Produkt {product.id} juz jest w koszyku, zwiekszam ilosc "
                f"z {existing.quantity} do {existing.quantity + quantity}"
            )
            line = existing.model_copy(update={"quantity": existing.quantity + quantity})
        else:
            logger.info(f"Dodaje nowy produkt {product.id} do koszyka")
            line = CartLine(
                product_id=product.id,
                name=product.name,
                image=product.image,
                unit_price=product.price,
                quantity=quantity,
            )

        self._lines[product.id] = line
        self._persist()
        return line

    def add_product(self, product: Product, quantity: Any = 1) -> CartLine:
        """Dodaje produkt z katalogu, cena jednostkowa = cena po rabacie."""
        detail = price_detail(product)
        ref = ProductRef(
            id=product.id,
            name=product.name,
            price=detail.discounted_price,
            image=product.image,
        )
        return self.add_item(ref, quantity)

    def remove_item(self, product_id: str) -> None:
        if self._lines.pop(str(product_id), None) is None:
            return
        logger.info(f"Usunieto produkt {product_id} z koszyka")
        self._persist()

    def update_quantity(self, product_id: str, new_quantity: Any) -> CartLine | None:
        product_id = str(product_id)
        new_quantity = parse_quantity(new_quantity)

        if new_quantity < 1:
            self.remove_item(product_id)
            return None

        existing = self._lines.get(product_id)
        if not existing:
            return None

        line = existing.model_copy(update={"quantity": new_quantity})
        self._lines[product_id] = line
        logger.info(f"Produkt {product_id}: ilosc {existing.quantity} -> {new_quantity}")
        self._persist()
        return line

    def clear(self) -> None:
        self._lines.clear()
        logger.info("Koszyk wyczyszczony")
        self._persist()

    def _persist(self) -> None:
        self.repo.save(list(self._lines.values()))


def hydrate_cart(store: CartStore, product_client: ProductClient) -> Dict[str, Any]:
    """
    Laczy pozycje koszyka z aktualnymi danymi produktow z API.
    Produkt ktorego nie da sie pobrac jest pomijany i trafia do `missing`,
    reszta koszyka renderuje sie normalnie.
    """
    items: List[Dict[str, Any]] = []
    missing: List[str] = []

    for line in store.lines():
        try:
            product = product_client.fetch_product(line.product_id)
        except GatewayError as e:
            logger.warning(f"Pomijam produkt {line.product_id} w widoku koszyka: {e}")
            missing.append(line.product_id)
            continue

        items.append(
            {
                "product": product,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "line_total": line.line_total,
            }
        )

    return {
        "items": items,
        "missing": missing,
        "total_price": sum((i["line_total"] for i in items), Decimal("0.00")),
    }
