"""Brand service."""

from pydantic import BaseModel, Field

from cms_gateway.core.exceptions import BrandNotFoundError
from cms_gateway.schemas.catalog import Brand, SimpleBrand
from cms_gateway.services.cms.base import SIMPLIFIED_PAGE_SIZE, ResourceService
from cms_gateway.services.cms.queries import GET_BRAND_BY_ID_QUERY, GET_BRANDS_QUERY


class _BrandsData(BaseModel):
    brands: list[Brand] = Field(default_factory=list)


class _BrandData(BaseModel):
    brand: Brand | None = None


class BrandService(ResourceService[Brand]):
    """Car brands.

    Usage:
        ```python
        brands = await BrandService(client).get_simplified()
        ```
    """

    endpoint = "brands"
    cache_ttl = 24 * 60 * 60
    model = Brand
    not_found_error = BrandNotFoundError

    async def get_simplified(self, use_cache: bool = True) -> list[SimpleBrand]:
        """All brands as listing entries."""
        data = await self._query(
            _BrandsData, GET_BRANDS_QUERY, {"pageSize": SIMPLIFIED_PAGE_SIZE}, use_cache
        )
        return [self._simplify(brand) for brand in data.brands]

    async def get_simplified_by_id(
        self, brand_id: str, use_cache: bool = True
    ) -> SimpleBrand:
        """One brand as a listing entry.

        Raises:
            BrandNotFoundError: If the CMS has no brand with this documentId
        """
        data = await self._query(
            _BrandData, GET_BRAND_BY_ID_QUERY, {"documentId": brand_id}, use_cache
        )
        if data.brand is None:
            raise BrandNotFoundError(brand_id)
        return self._simplify(data.brand)

    @staticmethod
    def _simplify(brand: Brand) -> SimpleBrand:
        return SimpleBrand(id=brand.resource_id, title=brand.name, thumbnail=brand.logo)
