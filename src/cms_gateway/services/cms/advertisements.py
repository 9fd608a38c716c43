"""Advertisement banner service."""

from pydantic import BaseModel, Field

from cms_gateway.core.exceptions import AdvertisementNotFoundError
from cms_gateway.schemas.content import Advertisement, AdvertisementData
from cms_gateway.services.cms.base import SIMPLIFIED_PAGE_SIZE, ResourceService
from cms_gateway.services.cms.queries import (
    GET_ADVERTISEMENT_BY_ID_QUERY,
    GET_ADVERTISEMENTS_QUERY,
)


class _AdvertisementsData(BaseModel):
    advertisements: list[Advertisement] = Field(default_factory=list)


class _AdvertisementData(BaseModel):
    advertisement: Advertisement | None = None


class AdvertisementService(ResourceService[Advertisement]):
    endpoint = "advertisements"
    cache_ttl = 10 * 60
    model = Advertisement
    not_found_error = AdvertisementNotFoundError

    async def get_simplified(self, use_cache: bool = True) -> list[AdvertisementData]:
        data = await self._query(
            _AdvertisementsData,
            GET_ADVERTISEMENTS_QUERY,
            {"pageSize": SIMPLIFIED_PAGE_SIZE},
            use_cache,
        )
        return [self._simplify(ad) for ad in data.advertisements]

    async def get_simplified_by_id(
        self, advertisement_id: str, use_cache: bool = True
    ) -> AdvertisementData:
        data = await self._query(
            _AdvertisementData,
            GET_ADVERTISEMENT_BY_ID_QUERY,
            {"documentId": advertisement_id},
            use_cache,
        )
        if data.advertisement is None:
            raise AdvertisementNotFoundError(advertisement_id)
        return self._simplify(data.advertisement)

    @staticmethod
    def _simplify(ad: Advertisement) -> AdvertisementData:
        return AdvertisementData(id=ad.resource_id, action=ad.action, banner=ad.banner)
