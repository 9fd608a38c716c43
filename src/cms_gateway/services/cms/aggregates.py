"""Derived values computed across car variants.

All functions are pure and process variants in the order the CMS returned
them; "first occurrence" rules depend on that order.
"""

from collections.abc import Iterable

from cms_gateway.schemas.catalog import (
    CarModel,
    CarVariant,
    CatalogItem,
    DetailedCarModel,
    ReviewItem,
    ShowroomOffer,
    ShowroomPricing,
    VariantSummary,
)

# Placeholder until the CMS publishes real market prices.
# TODO: replace with the market price field once it exists on car variants
MARKET_PRICE_OFFSET = 20000


def price_range(prices: Iterable[int]) -> tuple[int, int]:
    """Return ``(min, max)`` of the prices, or ``(0, 0)`` when there are none."""
    values = list(prices)
    if not values:
        return 0, 0
    return min(values), max(values)


def min_positive(values: Iterable[int | None]) -> int:
    """Smallest strictly positive value; zero and missing values mean "not set"."""
    return min((v for v in values if v is not None and v > 0), default=0)


def market_price(price: int) -> int:
    """Market price shown next to a computed price (0 stays 0)."""
    return price + MARKET_PRICE_OFFSET if price > 0 else 0


def collect_showroom_offers(pricings: Iterable[ShowroomPricing]) -> list[ShowroomOffer]:
    """One offer per showroom, keeping its lowest-priced occurrence.

    The down payment and installments come from that same occurrence. Equal
    prices keep the earlier entry. Output is in first-seen order.
    """
    offers: dict[str, ShowroomOffer] = {}
    for pricing in pricings:
        showroom = pricing.showroom
        if showroom is None or not showroom.resource_id:
            continue
        current = offers.get(showroom.resource_id)
        if current is not None and pricing.price >= current.price:
            continue
        offers[showroom.resource_id] = ShowroomOffer(
            id=showroom.resource_id,
            name=showroom.name,
            logo=showroom.logo,
            price=pricing.price,
            minimum_down_payment=pricing.minimum_down_payment,
            minimum_installments=pricing.minimum_installments,
        )
    return list(offers.values())


def unique_links(links: Iterable[str | None]) -> list[str]:
    """Non-empty links without duplicates, in first-seen order."""
    return list(dict.fromkeys(link for link in links if link))


def build_detailed_car_model(
    model: CarModel, variants: list[CarVariant]
) -> DetailedCarModel:
    """Join a car model with its variants.

    Args:
        model: The car model
        variants: Its variants, in upstream order (may be empty)

    Returns:
        The detailed view with price range, showroom offers, reviews and
        catalogs
    """
    price_from, price_to = price_range(v.price for v in variants)
    reviews = unique_links(v.review_link for v in variants)
    catalogs = unique_links(v.brochure_url for v in variants)
    warranty = next((v.warranty for v in variants if v.warranty), "")

    return DetailedCarModel(
        id=model.resource_id,
        title=model.name,
        body_type=model.body_type,
        fuel_type=model.fuel_type,
        slug=model.slug,
        images=model.images,
        price_from=price_from,
        price_to=price_to,
        market_price_from=market_price(price_from),
        market_price_to=market_price(price_to),
        minimum_down_payment=min_positive(v.minimum_down_payment for v in variants),
        minimum_installments=min_positive(v.minimum_installments for v in variants),
        warranty=warranty,
        variants=[
            VariantSummary(
                id=v.resource_id,
                name=v.name,
                year=v.year,
                price=v.price,
                motor=v.primary_specs.motor if v.primary_specs else None,
            )
            for v in variants
        ],
        showrooms=collect_showroom_offers(
            pricing for v in variants for pricing in v.showroom_pricing
        ),
        reviews=[ReviewItem(id=i, url=url) for i, url in enumerate(reviews, start=1)],
        catalogs=[CatalogItem(id=i, url=url) for i, url in enumerate(catalogs, start=1)],
    )
