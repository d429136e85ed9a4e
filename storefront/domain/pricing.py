# storefront/domain/pricing.py
from decimal import Decimal, ROUND_HALF_UP

from storefront.domain.schemas import PriceDetail, Product

CENT = Decimal("0.01")


def price_detail(product: Product) -> PriceDetail:
    """
    Cena po rabacie procentowym.
    Rabat liczony jest raz, przy tworzeniu pozycji koszyka,
    dalej w koszyku trzymamy juz tylko cene po rabacie.
    """
    original = product.price
    percent = product.discount or Decimal("0")
    discounted = (original - original * percent / Decimal("100")).quantize(
        CENT, rounding=ROUND_HALF_UP
    )
    return PriceDetail(
        original_price=original,
        discounted_price=discounted,
        save_amount=original - discounted,
        discount_percent=percent,
    )
