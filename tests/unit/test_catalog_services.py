"""Tests for the brand, car model and car variant services.

Services run against the scripted CMS through a real CMSClient, so the
tests cover decoding, media URL resolution and caching end to end.
"""

from typing import Any

import pytest

from cms_gateway.core.exceptions import (
    BrandNotFoundError,
    CarModelNotFoundError,
    CarVariantNotFoundError,
    CMSTransportError,
)
from cms_gateway.services.cms import CMSServices
from cms_gateway.services.cms.aggregates import MARKET_PRICE_OFFSET
from cms_gateway.services.cms.base import SIMPLIFIED_PAGE_SIZE
from tests.mocks.cache import InMemoryCache
from tests.mocks.cms import CMSStub
from tests.mocks.cms_responses import (
    BRAND_DATA,
    BRANDS_DATA,
    CAR_MODEL_DATA,
    CAR_MODELS_BY_BRAND_DATA,
    CAR_VARIANT_DATA,
    CAR_VARIANTS_BY_MODEL_DATA,
    VARIANT_PRICES_DATA,
)

UPSTREAM_FAILURE = (500, {"errors": [{"message": "Internal Server Error"}]})


def _variant_prices(variables: dict[str, Any]) -> Any:
    return VARIANT_PRICES_DATA[variables["carModelDocumentId"]]


# =============================================================================
# Brands
# =============================================================================


class TestBrandService:
    """Tests for BrandService."""

    @pytest.mark.asyncio
    async def test_get_simplified(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        cms_stub.graphql["GetBrands"] = BRANDS_DATA

        brands = await cms_services.brands.get_simplified()

        assert [(b.id, b.title) for b in brands] == [
            ("brand-toyota", "Toyota"),
            ("brand-kia", "Kia"),
        ]
        assert brands[0].thumbnail is not None
        assert brands[0].thumbnail.url == "http://cms.test/uploads/toyota_logo.png"
        assert brands[1].thumbnail is None
        assert cms_stub.graphql_calls("GetBrands") == [{"pageSize": SIMPLIFIED_PAGE_SIZE}]

    @pytest.mark.asyncio
    async def test_cached_for_a_day(
        self,
        cms_services: CMSServices,
        cms_stub: CMSStub,
        memory_cache: InMemoryCache,
    ) -> None:
        cms_stub.graphql["GetBrands"] = BRANDS_DATA

        await cms_services.brands.get_simplified()
        await cms_services.brands.get_simplified()

        assert len(cms_stub.graphql_calls("GetBrands")) == 1
        (key,) = memory_cache.ttls
        assert key.startswith("graphql:brands:")
        assert memory_cache.ttls[key] == 24 * 60 * 60

    @pytest.mark.asyncio
    async def test_use_cache_false(
        self,
        cms_services: CMSServices,
        cms_stub: CMSStub,
        memory_cache: InMemoryCache,
    ) -> None:
        cms_stub.graphql["GetBrands"] = BRANDS_DATA

        await cms_services.brands.get_simplified(use_cache=False)
        await cms_services.brands.get_simplified(use_cache=False)

        assert len(cms_stub.graphql_calls("GetBrands")) == 2
        assert memory_cache.store == {}

    @pytest.mark.asyncio
    async def test_get_simplified_by_id(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        cms_stub.graphql["GetBrand"] = BRAND_DATA

        brand = await cms_services.brands.get_simplified_by_id("brand-toyota")

        assert brand.id == "brand-toyota"
        assert brand.title == "Toyota"
        assert cms_stub.graphql_calls("GetBrand") == [{"documentId": "brand-toyota"}]

    @pytest.mark.asyncio
    async def test_get_simplified_by_id_not_found(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        cms_stub.graphql["GetBrand"] = {"brand": None}

        with pytest.raises(BrandNotFoundError) as exc_info:
            await cms_services.brands.get_simplified_by_id("nope")

        assert exc_info.value.resource_id == "nope"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_invalidate_cache_is_scoped_to_the_resource(
        self, cms_services: CMSServices, memory_cache: InMemoryCache
    ) -> None:
        memory_cache.store.update(
            {
                "cms_brands:page:1": b"{}",
                "graphql:brands:abc": b"{}",
                "graphql:showrooms:def": b"{}",
                "cms_car-models": b"{}",
            }
        )

        deleted = await cms_services.brands.invalidate_cache()

        assert deleted == 2
        assert set(memory_cache.store) == {"graphql:showrooms:def", "cms_car-models"}


# =============================================================================
# Car Models
# =============================================================================


class TestCarModelServiceListing:
    """Tests for CarModelService.get_by_brand_id()."""

    @pytest.mark.asyncio
    async def test_models_with_price_ranges(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        cms_stub.graphql["GetCarModelsByBrand"] = CAR_MODELS_BY_BRAND_DATA
        cms_stub.graphql["GetCarVariantPrices"] = _variant_prices

        models = await cms_services.car_models.get_by_brand_id("brand-toyota")

        corolla, camry = models
        assert corolla.id == "model-corolla"
        assert corolla.title == "Corolla"
        assert (corolla.price_from, corolla.price_to) == (100, 500)
        assert corolla.market_price_from == 100 + MARKET_PRICE_OFFSET
        assert corolla.market_price_to == 500 + MARKET_PRICE_OFFSET
        assert corolla.thumbnail is not None
        assert corolla.thumbnail.url == "https://cdn.example.com/thumbnail_corolla.jpg"
        assert (corolla.thumbnail.width, corolla.thumbnail.height) == (245, 138)
        assert corolla.thumbnail.id == "media-car-1"

        assert camry.thumbnail is None
        assert (camry.price_from, camry.price_to) == (0, 0)
        assert (camry.market_price_from, camry.market_price_to) == (0, 0)

        assert cms_stub.graphql_calls("GetCarModelsByBrand") == [
            {"brandDocumentId": "brand-toyota", "pageSize": SIMPLIFIED_PAGE_SIZE}
        ]

    @pytest.mark.asyncio
    async def test_model_without_name_is_listed(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        cms_stub.graphql["GetCarModelsByBrand"] = {
            "carModels": [{"documentId": "model-draft", "Name": None, "Images": None}]
        }
        cms_stub.graphql["GetCarVariantPrices"] = {"carVariants": []}

        models = await cms_services.car_models.get_by_brand_id("brand-toyota")

        assert [(m.id, m.title) for m in models] == [("model-draft", "")]

    @pytest.mark.asyncio
    async def test_failed_price_lookup_yields_zero_prices(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        def prices(variables: dict[str, Any]) -> Any:
            if variables["carModelDocumentId"] == "model-corolla":
                return UPSTREAM_FAILURE
            return _variant_prices(variables)

        cms_stub.graphql["GetCarModelsByBrand"] = CAR_MODELS_BY_BRAND_DATA
        cms_stub.graphql["GetCarVariantPrices"] = prices

        models = await cms_services.car_models.get_by_brand_id("brand-toyota")

        assert [m.id for m in models] == ["model-corolla", "model-camry"]
        assert (models[0].price_from, models[0].price_to) == (0, 0)
        assert models[0].market_price_from == 0

    @pytest.mark.asyncio
    async def test_failed_model_lookup_propagates(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        cms_stub.graphql["GetCarModelsByBrand"] = UPSTREAM_FAILURE

        with pytest.raises(CMSTransportError):
            await cms_services.car_models.get_by_brand_id("brand-toyota")

    @pytest.mark.asyncio
    async def test_brand_without_models(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        cms_stub.graphql["GetCarModelsByBrand"] = {"carModels": []}

        assert await cms_services.car_models.get_by_brand_id("brand-kia") == []
        assert cms_stub.graphql_calls("GetCarVariantPrices") == []


class TestCarModelServiceDetail:
    """Tests for CarModelService.get_detailed_by_id()."""

    @pytest.mark.asyncio
    async def test_joins_model_and_variants(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        cms_stub.graphql["GetCarModel"] = CAR_MODEL_DATA
        cms_stub.graphql["GetCarVariants"] = CAR_VARIANTS_BY_MODEL_DATA

        detailed = await cms_services.car_models.get_detailed_by_id("model-corolla")

        assert detailed.id == "model-corolla"
        assert (detailed.price_from, detailed.price_to) == (1_000_000, 1_500_000)
        assert [(s.id, s.price) for s in detailed.showrooms] == [("S1", 150), ("S2", 180)]
        assert detailed.showrooms[0].logo is not None
        assert detailed.showrooms[0].logo.url == "http://cms.test/uploads/S1.png"
        assert len(detailed.reviews) == 1
        assert detailed.warranty == "3 years / 100,000 km"
        assert cms_stub.graphql_calls("GetCarVariants") == [
            {"carModelDocumentId": "model-corolla", "pageSize": SIMPLIFIED_PAGE_SIZE}
        ]

    @pytest.mark.asyncio
    async def test_not_found(self, cms_services: CMSServices, cms_stub: CMSStub) -> None:
        cms_stub.graphql["GetCarModel"] = {"carModel": None}

        with pytest.raises(CarModelNotFoundError):
            await cms_services.car_models.get_detailed_by_id("missing")

        assert cms_stub.graphql_calls("GetCarVariants") == []

    @pytest.mark.asyncio
    async def test_failed_variant_lookup_yields_empty_aggregates(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        cms_stub.graphql["GetCarModel"] = CAR_MODEL_DATA
        cms_stub.graphql["GetCarVariants"] = UPSTREAM_FAILURE

        detailed = await cms_services.car_models.get_detailed_by_id("model-corolla")

        assert detailed.title == "Corolla"
        assert detailed.variants == []
        assert detailed.showrooms == []
        assert detailed.price_from == 0

    @pytest.mark.asyncio
    async def test_malformed_variants_yield_empty_aggregates(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        cms_stub.graphql["GetCarModel"] = CAR_MODEL_DATA
        cms_stub.graphql["GetCarVariants"] = {"carVariants": "not-a-list"}

        detailed = await cms_services.car_models.get_detailed_by_id("model-corolla")

        assert detailed.variants == []

    def test_shares_the_variant_service(self, cms_services: CMSServices) -> None:
        assert cms_services.car_models.variants is cms_services.car_variants


# =============================================================================
# Car Variants
# =============================================================================


class TestCarVariantService:
    """Tests for CarVariantService."""

    @pytest.mark.asyncio
    async def test_price_range(self, cms_services: CMSServices, cms_stub: CMSStub) -> None:
        cms_stub.graphql["GetCarVariantPrices"] = _variant_prices

        assert await cms_services.car_variants.get_price_range("model-corolla") == (100, 500)
        assert await cms_services.car_variants.get_price_range("model-camry") == (0, 0)

    @pytest.mark.asyncio
    async def test_list_for_model_keeps_cms_order(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        cms_stub.graphql["GetCarVariants"] = CAR_VARIANTS_BY_MODEL_DATA

        variants = await cms_services.car_variants.list_for_model("model-corolla")

        assert [v.resource_id for v in variants] == ["variant-1", "variant-2", "variant-3"]

    @pytest.mark.asyncio
    async def test_get_detailed_by_id(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        cms_stub.graphql["GetCarVariant"] = CAR_VARIANT_DATA

        variant = await cms_services.car_variants.get_detailed_by_id("variant-2")

        assert variant.id == "variant-2"
        assert variant.name == "1.6 Highline"
        assert variant.year == 2024
        assert variant.price == 1_200_000
        assert variant.minimum_down_payment == 150000
        assert variant.minimum_installments == 25000
        assert variant.car_model is not None
        assert variant.car_model.id == "model-corolla"
        assert variant.car_model.title == "Corolla"
        assert len(variant.car_model.images) == 1
        assert variant.specs is not None
        assert variant.specs.transmission == "Automatic"
        assert variant.specs.seats == 5
        assert variant.features == {"Sunroof": True, "Airbags": 6}

    @pytest.mark.asyncio
    async def test_showroom_offers_are_deduplicated(
        self, cms_services: CMSServices, cms_stub: CMSStub
    ) -> None:
        cms_stub.graphql["GetCarVariant"] = CAR_VARIANT_DATA

        variant = await cms_services.car_variants.get_detailed_by_id("variant-2")

        assert len(variant.showrooms) == 1
        offer = variant.showrooms[0]
        assert offer.id == "S1"
        assert offer.price == 1_190_000
        assert offer.minimum_down_payment == 160000
        assert offer.minimum_installments == 27000

    @pytest.mark.asyncio
    async def test_not_found(self, cms_services: CMSServices, cms_stub: CMSStub) -> None:
        cms_stub.graphql["GetCarVariant"] = {"carVariant": None}

        with pytest.raises(CarVariantNotFoundError):
            await cms_services.car_variants.get_detailed_by_id("missing")
