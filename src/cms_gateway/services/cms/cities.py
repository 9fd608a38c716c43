"""City service."""

from cms_gateway.core.exceptions import CityNotFoundError
from cms_gateway.schemas.content import City
from cms_gateway.services.cms.base import ResourceService


class CityService(ResourceService[City]):
    endpoint = "cities"
    cache_ttl = 60 * 60
    model = City
    not_found_error = CityNotFoundError
