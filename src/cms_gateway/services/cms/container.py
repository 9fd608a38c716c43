"""All resource services built around one shared CMS client."""

from dataclasses import dataclass

from cms_gateway.services.cms.advertisements import AdvertisementService
from cms_gateway.services.cms.app_version import AppVersionService
from cms_gateway.services.cms.brands import BrandService
from cms_gateway.services.cms.car_models import CarModelService
from cms_gateway.services.cms.car_variants import CarVariantService
from cms_gateway.services.cms.cities import CityService
from cms_gateway.services.cms.client import CMSClient
from cms_gateway.services.cms.governorates import GovernorateService
from cms_gateway.services.cms.showrooms import ShowroomService


@dataclass
class CMSServices:
    """Service bundle stored on ``app.state`` during the app lifespan."""

    client: CMSClient
    brands: BrandService
    car_models: CarModelService
    car_variants: CarVariantService
    showrooms: ShowroomService
    advertisements: AdvertisementService
    governorates: GovernorateService
    cities: CityService
    app_version: AppVersionService

    @classmethod
    def from_client(cls, client: CMSClient) -> "CMSServices":
        car_variants = CarVariantService(client)
        return cls(
            client=client,
            brands=BrandService(client),
            car_models=CarModelService(client, car_variants),
            car_variants=car_variants,
            showrooms=ShowroomService(client),
            advertisements=AdvertisementService(client),
            governorates=GovernorateService(client),
            cities=CityService(client),
            app_version=AppVersionService(client),
        )
