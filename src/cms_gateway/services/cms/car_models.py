"""Car model service: brand listings with price ranges and detailed models.

Both views join a primary fetch with variant fetches. The primary fetch is
required; variant data is best effort, so a failed variant fetch yields
zero prices (listing) or an empty variant set (detail) instead of an error.
"""

import asyncio

import structlog
from pydantic import BaseModel, Field

from cms_gateway.core.exceptions import (
    CarModelNotFoundError,
    CMSDeserializationError,
    CMSTransportError,
)
from cms_gateway.schemas.catalog import CarModel, DetailedCarModel, SimpleCarModel
from cms_gateway.services.cms.aggregates import build_detailed_car_model, market_price
from cms_gateway.services.cms.base import SIMPLIFIED_PAGE_SIZE, ResourceService
from cms_gateway.services.cms.car_variants import CarVariantService
from cms_gateway.services.cms.client import CMSClient
from cms_gateway.services.cms.queries import (
    GET_CAR_MODEL_BY_ID_QUERY,
    GET_CAR_MODELS_BY_BRAND_QUERY,
)

logger = structlog.get_logger(__name__)


class _CarModelsData(BaseModel):
    car_models: list[CarModel] = Field(default_factory=list, validation_alias="carModels")


class _CarModelData(BaseModel):
    car_model: CarModel | None = Field(None, validation_alias="carModel")


class CarModelService(ResourceService[CarModel]):
    endpoint = "car-models"
    cache_ttl = 20 * 60
    model = CarModel
    not_found_error = CarModelNotFoundError

    def __init__(
        self, client: CMSClient, variants: CarVariantService | None = None
    ) -> None:
        """Initialize the service.

        Args:
            client: Shared CMS client
            variants: Variant service used for price and variant lookups
        """
        super().__init__(client)
        self.variants = variants or CarVariantService(client)

    async def get_by_brand_id(
        self, brand_id: str, use_cache: bool = True
    ) -> list[SimpleCarModel]:
        """Car models of a brand with their price ranges.

        Variant prices are looked up per model, concurrently. Output keeps the
        CMS order of the models.
        """
        data = await self._query(
            _CarModelsData,
            GET_CAR_MODELS_BY_BRAND_QUERY,
            {"brandDocumentId": brand_id, "pageSize": SIMPLIFIED_PAGE_SIZE},
            use_cache,
        )
        return list(
            await asyncio.gather(
                *(self._with_price_range(model, use_cache) for model in data.car_models)
            )
        )

    async def get_detailed_by_id(
        self, model_id: str, use_cache: bool = True
    ) -> DetailedCarModel:
        """A car model joined with its variants.

        Raises:
            CarModelNotFoundError: If the CMS has no model with this documentId
        """
        data = await self._query(
            _CarModelData, GET_CAR_MODEL_BY_ID_QUERY, {"documentId": model_id}, use_cache
        )
        if data.car_model is None:
            raise CarModelNotFoundError(model_id)

        try:
            variants = await self.variants.list_for_model(model_id, use_cache)
        except (CMSTransportError, CMSDeserializationError) as e:
            logger.warning(
                "cms_variants_unavailable", car_model_id=model_id, error=str(e)
            )
            variants = []

        return build_detailed_car_model(data.car_model, variants)

    async def _with_price_range(
        self, model: CarModel, use_cache: bool
    ) -> SimpleCarModel:
        try:
            price_from, price_to = await self.variants.get_price_range(
                model.resource_id, use_cache
            )
        except (CMSTransportError, CMSDeserializationError) as e:
            logger.warning(
                "cms_price_range_unavailable",
                car_model_id=model.resource_id,
                error=str(e),
            )
            price_from, price_to = 0, 0

        return SimpleCarModel(
            id=model.resource_id,
            title=model.name,
            thumbnail=model.images[0].as_thumbnail() if model.images else None,
            price_from=price_from,
            price_to=price_to,
            market_price_from=market_price(price_from),
            market_price_to=market_price(price_to),
        )
