# storefront/domain/errors.py


class StorefrontError(Exception):
    """Bazowy wyjatek domeny koszyka i checkoutu."""


class InvalidQuantityError(StorefrontError, ValueError):
    """Ilosc nie daje sie zinterpretowac jako liczba calkowita."""


class EmptyCartError(StorefrontError):
    """Checkout nie moze wystartowac z pustym koszykiem."""


class InvalidTransitionError(StorefrontError):
    """Niedozwolone przejscie maszyny stanow checkoutu."""

    def __init__(self, current: str, action: str):
        super().__init__(f"Niedozwolona operacja '{action}' w stanie '{current}'")
        self.current = current
        self.action = action


class GatewayError(StorefrontError):
    """
    Blad komunikacji z API Gateway.
    status_code jest None gdy nie bylo odpowiedzi (timeout, brak polaczenia).
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ProductNotFoundError(GatewayError):
    def __init__(self, product_id: str):
        super().__init__(f"Produkt {product_id} nie istnieje", status_code=404)
        self.product_id = product_id
