"""FastAPI dependency injection container.

This module provides dependency injection functions for use with FastAPI's
Depends() pattern. The CMS services are built once in the app lifespan and
stored on ``app.state``; tests replace them by assigning ``app.state.cms``.
"""

from typing import Annotated

from fastapi import Depends, Request

from cms_gateway.config import Settings, get_settings
from cms_gateway.services.cms import CMSServices
from cms_gateway.services.cms.advertisements import AdvertisementService
from cms_gateway.services.cms.app_version import AppVersionService
from cms_gateway.services.cms.brands import BrandService
from cms_gateway.services.cms.car_models import CarModelService
from cms_gateway.services.cms.car_variants import CarVariantService
from cms_gateway.services.cms.governorates import GovernorateService
from cms_gateway.services.cms.showrooms import ShowroomService


# ========================================
# Settings Dependencies
# ========================================
def get_settings_from_request(request: Request) -> Settings:
    """Get settings from request state (set during lifespan).

    Falls back to the cached settings when the lifespan has not run.

    Args:
        request: The current request

    Returns:
        Settings: Application settings
    """
    return getattr(request.app.state, "settings", None) or get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_from_request)]


# ========================================
# CMS Dependencies
# ========================================
def get_cms_services(request: Request) -> CMSServices:
    """Get the CMS service bundle created during startup."""
    services = getattr(request.app.state, "cms", None)
    if services is None:
        raise RuntimeError("CMS services not initialized. Is the lifespan running?")
    return services


CMSServicesDep = Annotated[CMSServices, Depends(get_cms_services)]


def get_brand_service(services: CMSServicesDep) -> BrandService:
    return services.brands


def get_car_model_service(services: CMSServicesDep) -> CarModelService:
    return services.car_models


def get_car_variant_service(services: CMSServicesDep) -> CarVariantService:
    return services.car_variants


def get_showroom_service(services: CMSServicesDep) -> ShowroomService:
    return services.showrooms


def get_advertisement_service(services: CMSServicesDep) -> AdvertisementService:
    return services.advertisements


def get_governorate_service(services: CMSServicesDep) -> GovernorateService:
    return services.governorates


def get_app_version_service(services: CMSServicesDep) -> AppVersionService:
    return services.app_version
