import threading
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Tuple

from storefront.domain.errors import EmptyCartError, GatewayError, InvalidTransitionError
from storefront.domain.schemas import CartLine, OrderItemIn, OrderRequest
from storefront.services.cart_service import CartStore
from storefront.services.order_client import OrderClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutState(str, Enum):
    IDLE = "idle"
    AWAITING_PAYMENT = "awaiting_payment"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# stany z ktorych wolno wyslac platnosc
PAYABLE_STATES = {CheckoutState.IDLE, CheckoutState.FAILED}


class CheckoutSession:
    """
    Jedna proba zakupu zawartosci koszyka.

    idle -> awaiting_payment -> succeeded | failed
    failed -> awaiting_payment (ponowienie na tym samym snapshocie)
    succeeded jest stanem koncowym

    Snapshot pozycji jest robiony przy starcie, pozniejsze zmiany koszyka
    nie zmieniaja kwoty sesji.
    """

    def __init__(
        self,
        store: CartStore,
        order_client: OrderClient,
        session_token: str | None = None,
    ):
        snapshot = store.snapshot()
        if not snapshot:
            raise EmptyCartError("Nie mozna rozpoczac platnosci z pustym koszykiem")

        self.store = store
        self.order_client = order_client
        self.session_token = session_token

        self.snapshot_lines: Tuple[CartLine, ...] = snapshot
        self.amount: Decimal = sum(
            (line.line_total for line in snapshot), Decimal("0.00")
        )
        self.state = CheckoutState.IDLE
        self.transaction_id: str | None = None
        self.error: str | None = None
        self.attempts = 0
        self.discarded = False

        self._lock = threading.Lock()

        logger.info(
            f"Checkout start: {len(snapshot)} pozycji, kwota {self.amount}"
        )

    def order_request(self) -> OrderRequest:
        return OrderRequest(
            items=[
                OrderItemIn(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price=line.unit_price,
                )
                for line in self.snapshot_lines
            ],
            total=self.amount,
        )

    def pay(self) -> CheckoutState:
        with self._lock:
            if self.discarded:
                raise InvalidTransitionError("discarded", "pay")
            if self.state not in PAYABLE_STATES:
                raise InvalidTransitionError(self.state.value, "pay")
            self.state = CheckoutState.AWAITING_PAYMENT
            self.error = None
            self.attempts += 1

        logger.info(f"Wysylam platnosc, proba {self.attempts}, kwota {self.amount}")

        try:
            receipt = self.order_client.create_order(
                self.order_request(),
                session_token=self.session_token,
            )
        except GatewayError as e:
            # koszyk zostaje bez zmian, uzytkownik moze ponowic
            self.state = CheckoutState.FAILED
            self.error = e.message
            logger.warning(f"Platnosc nieudana (proba {self.attempts}): {e.message}")
            return self.state
        except Exception as e:
            # kazdy inny blad tez konczy sie stanem failed, sesja nie moze utknac w awaiting_payment
            self.state = CheckoutState.FAILED
            self.error = f"Nieoczekiwany blad platnosci: {e}"
            logger.exception(f"Nieoczekiwany blad platnosci (proba {self.attempts})")
            return self.state

        self.transaction_id = receipt.transaction_id
        self.state = CheckoutState.SUCCEEDED

        if self.discarded:
            # uzytkownik juz wyszedl z checkoutu, koszyka nie ruszamy
            # TODO: zglosic transakcje do rekonsyliacji gdy backend udostepni endpoint anulowania
            logger.warning(
                f"Platnosc {receipt.transaction_id} zakonczona po porzuceniu sesji"
            )
            return self.state

        self.store.clear()

        logger.info(f"Platnosc zakonczona, transakcja {self.transaction_id}")
        return self.state

    def restart(self) -> "CheckoutSession":
        """Nowa sesja na aktualnej zawartosci koszyka (moze juz byc pusty)."""
        if self.state is CheckoutState.AWAITING_PAYMENT:
            raise InvalidTransitionError(self.state.value, "restart")
        self.discarded = True
        return CheckoutSession(self.store, self.order_client, self.session_token)

    def discard(self) -> None:
        if self.state is CheckoutState.AWAITING_PAYMENT:
            # brak sygnalu anulowania do backendu, platnosc moze sie tam dokonczyc
            logger.warning("Porzucono checkout w trakcie oczekiwania na platnosc")
        self.discarded = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "amount": self.amount,
            "items": [
                {
                    "product_id": line.product_id,
                    "name": line.name,
                    "image": line.image,
                    "unit_price": line.unit_price,
                    "quantity": line.quantity,
                    "line_total": line.line_total,
                }
                for line in self.snapshot_lines
            ],
            "transaction_id": self.transaction_id,
            "error": self.error,
            "attempts": self.attempts,
        }


def start_checkout(
    store: CartStore,
    order_client: OrderClient,
    session_token: str | None = None,
) -> CheckoutSession:
    return CheckoutSession(store, order_client, session_token)


class CheckoutRegistry:
    """Aktywna sesja checkoutu per odwiedzajacy (w pamieci procesu)."""

    def __init__(self):
        self._sessions: Dict[str, CheckoutSession] = {}
        self._lock = threading.Lock()

    def get(self, visitor_id: str) -> CheckoutSession | None:
        return self._sessions.get(visitor_id)

    def put(self, visitor_id: str, session: CheckoutSession) -> None:
        with self._lock:
            previous = self._sessions.get(visitor_id)
            if previous is not None and previous is not session:
                previous.discard()
            self._sessions[visitor_id] = session

    def pop(self, visitor_id: str) -> CheckoutSession | None:
        with self._lock:
            session = self._sessions.pop(visitor_id, None)
        if session is not None:
            session.discard()
        return session
