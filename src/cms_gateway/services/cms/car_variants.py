"""Car variant service: price ranges, per-model listings and variant details."""

from pydantic import BaseModel, Field

from cms_gateway.core.exceptions import CarVariantNotFoundError
from cms_gateway.schemas.catalog import CarModelReference, CarVariant, DetailedCarVariant
from cms_gateway.services.cms.aggregates import collect_showroom_offers, price_range
from cms_gateway.services.cms.base import SIMPLIFIED_PAGE_SIZE, ResourceService
from cms_gateway.services.cms.queries import (
    GET_CAR_VARIANT_BY_ID_QUERY,
    GET_CAR_VARIANTS_BY_MODEL_QUERY,
    GET_VARIANT_PRICES_BY_MODEL_QUERY,
)


class _CarVariantsData(BaseModel):
    car_variants: list[CarVariant] = Field(
        default_factory=list, validation_alias="carVariants"
    )


class _CarVariantData(BaseModel):
    car_variant: CarVariant | None = Field(None, validation_alias="carVariant")


class CarVariantService(ResourceService[CarVariant]):
    endpoint = "car-variants"
    cache_ttl = 15 * 60
    model = CarVariant
    not_found_error = CarVariantNotFoundError

    async def get_price_range(
        self, model_id: str, use_cache: bool = True
    ) -> tuple[int, int]:
        """Lowest and highest variant price of a car model.

        Returns:
            ``(price_from, price_to)``; ``(0, 0)`` when the model has no variants
        """
        data = await self._query(
            _CarVariantsData,
            GET_VARIANT_PRICES_BY_MODEL_QUERY,
            {"carModelDocumentId": model_id, "pageSize": SIMPLIFIED_PAGE_SIZE},
            use_cache,
        )
        return price_range(variant.price for variant in data.car_variants)

    async def list_for_model(
        self, model_id: str, use_cache: bool = True
    ) -> list[CarVariant]:
        """Variants of a car model with their showroom pricing, in CMS order."""
        data = await self._query(
            _CarVariantsData,
            GET_CAR_VARIANTS_BY_MODEL_QUERY,
            {"carModelDocumentId": model_id, "pageSize": SIMPLIFIED_PAGE_SIZE},
            use_cache,
        )
        return data.car_variants

    async def get_detailed_by_id(
        self, variant_id: str, use_cache: bool = True
    ) -> DetailedCarVariant:
        """A variant with specs, features and one offer per showroom.

        Raises:
            CarVariantNotFoundError: If the CMS has no variant with this documentId
        """
        data = await self._query(
            _CarVariantData,
            GET_CAR_VARIANT_BY_ID_QUERY,
            {"documentId": variant_id},
            use_cache,
        )
        variant = data.car_variant
        if variant is None:
            raise CarVariantNotFoundError(variant_id)

        car_model = None
        if variant.car_model is not None:
            car_model = CarModelReference(
                id=variant.car_model.resource_id,
                title=variant.car_model.name,
                images=variant.car_model.images,
            )

        return DetailedCarVariant(
            id=variant.resource_id,
            name=variant.name,
            year=variant.year,
            price=variant.price,
            brochure_url=variant.brochure_url,
            review_link=variant.review_link,
            warranty=variant.warranty,
            minimum_down_payment=variant.minimum_down_payment,
            minimum_installments=variant.minimum_installments,
            car_model=car_model,
            specs=variant.primary_specs,
            features=variant.features,
            showrooms=collect_showroom_offers(variant.showroom_pricing),
        )
