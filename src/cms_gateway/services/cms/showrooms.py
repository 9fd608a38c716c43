"""Showroom service: listing, profile and the cars a showroom sells."""

import structlog
from pydantic import BaseModel, Field

from cms_gateway.core.exceptions import (
    CMSDeserializationError,
    CMSTransportError,
    ShowroomNotFoundError,
)
from cms_gateway.schemas.catalog import CarVariant
from cms_gateway.schemas.showroom import (
    DetailedShowroom,
    Showroom,
    ShowroomCarVariant,
    ShowroomLocation,
    ShowroomProfile,
    ShowroomSummary,
)
from cms_gateway.services.cms.base import SIMPLIFIED_PAGE_SIZE, ResourceService
from cms_gateway.services.cms.queries import (
    GET_CAR_VARIANTS_BY_SHOWROOM_QUERY,
    GET_SHOWROOM_BY_ID_QUERY,
    GET_SHOWROOMS_QUERY,
)

logger = structlog.get_logger(__name__)


class _ShowroomsData(BaseModel):
    showrooms: list[Showroom] = Field(default_factory=list)


class _ShowroomData(BaseModel):
    showroom: Showroom | None = None


class _CarVariantsData(BaseModel):
    car_variants: list[CarVariant] = Field(
        default_factory=list, validation_alias="carVariants"
    )


class ShowroomService(ResourceService[Showroom]):
    endpoint = "showrooms"
    cache_ttl = 30 * 60
    model = Showroom
    not_found_error = ShowroomNotFoundError

    async def get_listing(self, use_cache: bool = True) -> list[ShowroomSummary]:
        """All showrooms as listing entries."""
        data = await self._query(
            _ShowroomsData,
            GET_SHOWROOMS_QUERY,
            {"pageSize": SIMPLIFIED_PAGE_SIZE},
            use_cache,
        )
        return [
            ShowroomSummary(
                id=showroom.resource_id,
                name=showroom.name,
                description=showroom.description,
                is_verified=showroom.is_verified,
                is_featured=showroom.is_featured,
                logo=showroom.logo,
            )
            for showroom in data.showrooms
        ]

    async def get_profile(
        self, showroom_id: str, use_cache: bool = True
    ) -> ShowroomProfile:
        """Showroom profile with location and contact details.

        Raises:
            ShowroomNotFoundError: If the CMS has no showroom with this documentId
        """
        data = await self._query(
            _ShowroomData,
            GET_SHOWROOM_BY_ID_QUERY,
            {"documentId": showroom_id},
            use_cache,
        )
        showroom = data.showroom
        if showroom is None:
            raise ShowroomNotFoundError(showroom_id)

        location = None
        if showroom.location is not None:
            loc = showroom.location
            location = ShowroomLocation(
                address=loc.address,
                governorate=loc.governorate.name if loc.governorate else None,
                city=loc.city.name if loc.city else None,
                latitude=loc.latitude,
                longitude=loc.longitude,
            )

        return ShowroomProfile(
            id=showroom.resource_id,
            name=showroom.name,
            description=showroom.description,
            is_verified=showroom.is_verified,
            is_featured=showroom.is_featured,
            logo=showroom.logo,
            cover=showroom.cover,
            operating_hours=showroom.operating_hours,
            location=location,
            contact_info=showroom.contact_info,
        )

    async def get_car_variants(
        self, showroom_id: str, use_cache: bool = True
    ) -> list[ShowroomCarVariant]:
        """Variants offered by a showroom, priced by that showroom."""
        data = await self._query(
            _CarVariantsData,
            GET_CAR_VARIANTS_BY_SHOWROOM_QUERY,
            {"showroomDocumentId": showroom_id, "pageSize": SIMPLIFIED_PAGE_SIZE},
            use_cache,
        )
        return [self._to_showroom_variant(variant) for variant in data.car_variants]

    async def get_detailed_by_id(
        self, showroom_id: str, use_cache: bool = True
    ) -> DetailedShowroom:
        """Profile plus available cars.

        The profile is required; if the variant lookup fails the showroom is
        returned with an empty ``available_cars`` list.
        """
        profile = await self.get_profile(showroom_id, use_cache)
        try:
            cars = await self.get_car_variants(showroom_id, use_cache)
        except (CMSTransportError, CMSDeserializationError) as e:
            logger.warning(
                "cms_showroom_variants_unavailable",
                showroom_id=showroom_id,
                error=str(e),
            )
            cars = []
        return DetailedShowroom(**dict(profile), available_cars=cars)

    @staticmethod
    def _to_showroom_variant(variant: CarVariant) -> ShowroomCarVariant:
        # Pricing is pre-filtered to this showroom; keep its cheapest entry
        pricing = min(variant.showroom_pricing, key=lambda p: p.price, default=None)
        return ShowroomCarVariant(
            id=variant.resource_id,
            name=variant.display_name or variant.name,
            images=variant.images,
            price=pricing.price if pricing else 0,
            minimum_down_payment=pricing.minimum_down_payment if pricing else 0,
            minimum_installments=pricing.minimum_installments if pricing else 0,
        )
