# storefront/domain/schemas.py
from decimal import Decimal
from typing import Annotated, List

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

# Decimal w JSON jako liczba (gateway i frontend oczekuja number, nie string)
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


class Product(BaseModel):
    """Produkt z katalogu API Gateway (tylko odczyt)."""

    id: str
    name: str
    price: Money = Field(..., ge=0)
    discount: Decimal | None = Field(None, ge=0, le=100, description="Rabat w procentach")
    stock: int = 0
    category: str | None = None
    description: str | None = None
    image: str | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value):
        #gateway zwraca raz int raz string
        return str(value)


class PriceDetail(BaseModel):
    original_price: Money
    discounted_price: Money
    save_amount: Money
    discount_percent: Decimal


class ProductRef(BaseModel):
    """Referencja produktu dodawanego do koszyka, `price` juz po rabacie."""

    id: str
    name: str = ""
    price: Money = Field(..., ge=0)
    image: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value):
        return str(value)


class CartLine(BaseModel):
    """Pozycja koszyka, cena jednostkowa juz po rabacie."""

    product_id: str
    name: str = ""
    image: str | None = None
    unit_price: Money = Field(..., ge=0)
    quantity: int = Field(..., ge=1)

    model_config = ConfigDict(frozen=True)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: str = Field(..., min_length=1, description="ID produktu")
    quantity: int | str = Field(1, description="Ilosc, wartosci < 1 sa podnoszone do 1")


class QuantityIn(BaseModel):
    quantity: int | str


class CartLineOut(BaseModel):
    product_id: str
    name: str
    image: str | None = None
    unit_price: Money
    quantity: int
    line_total: Money


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    items: List[CartLineOut]
    total_items: int
    total_price: Money


class HydratedLineOut(BaseModel):
    product: Product
    quantity: int
    unit_price: Money
    line_total: Money


class CartDetailsOut(BaseModel):
    """Koszyk z danymi produktow; `missing` to ID ktorych nie udalo sie pobrac."""

    items: List[HydratedLineOut]
    missing: List[str]
    total_price: Money


# --- wire format API Gateway (camelCase) ---

class OrderItemIn(BaseModel):
    product_id: str = Field(..., serialization_alias="productId")
    quantity: int = Field(..., ge=1)
    price: Money


class OrderRequest(BaseModel):
    items: List[OrderItemIn]
    total: Money


class OrderReceipt(BaseModel):
    transaction_id: str = Field(..., validation_alias="transactionId")

    model_config = ConfigDict(extra="ignore")

    @field_validator("transaction_id", mode="before")
    @classmethod
    def _transaction_id_as_str(cls, value):
        return str(value) if value is not None else value


class CheckoutOut(BaseModel):
    """Schema dla sesji checkoutu (response)."""

    state: str
    amount: Money
    items: List[CartLineOut]
    transaction_id: str | None = None
    error: str | None = None
    attempts: int = 0
