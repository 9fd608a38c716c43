"""Governorate service."""

from pydantic import BaseModel, Field

from cms_gateway.core.exceptions import GovernorateNotFoundError
from cms_gateway.schemas.content import CityItem, Governorate, GovernorateWithCities
from cms_gateway.services.cms.base import SIMPLIFIED_PAGE_SIZE, ResourceService
from cms_gateway.services.cms.queries import GET_GOVERNORATES_QUERY


class _GovernoratesData(BaseModel):
    governorates: list[Governorate] = Field(default_factory=list)


class GovernorateService(ResourceService[Governorate]):
    endpoint = "governorates"
    cache_ttl = 24 * 60 * 60
    model = Governorate
    not_found_error = GovernorateNotFoundError

    async def get_with_cities(
        self, use_cache: bool = True
    ) -> list[GovernorateWithCities]:
        """All governorates, each with its cities."""
        data = await self._query(
            _GovernoratesData,
            GET_GOVERNORATES_QUERY,
            {"pageSize": SIMPLIFIED_PAGE_SIZE},
            use_cache,
        )
        return [
            GovernorateWithCities(
                id=governorate.resource_id,
                name=governorate.name,
                cities=[
                    CityItem(id=city.resource_id, name=city.name)
                    for city in governorate.cities
                ],
            )
            for governorate in data.governorates
        ]
