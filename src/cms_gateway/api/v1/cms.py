"""CMS content endpoints.

Thin handlers over the resource services: each route maps to one service
call and returns the normalized view. Missing entities surface as 404 and
upstream failures as 502 through the global ``GatewayError`` handler.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from cms_gateway.dependencies import (
    get_advertisement_service,
    get_app_version_service,
    get_brand_service,
    get_car_model_service,
    get_car_variant_service,
    get_governorate_service,
    get_showroom_service,
)
from cms_gateway.schemas.catalog import (
    DetailedCarModel,
    DetailedCarVariant,
    SimpleBrand,
    SimpleCarModel,
)
from cms_gateway.schemas.common import ErrorResponse
from cms_gateway.schemas.content import (
    AdvertisementData,
    ApplicationVersion,
    GovernorateWithCities,
)
from cms_gateway.schemas.showroom import (
    DetailedShowroom,
    ShowroomCarVariant,
    ShowroomSummary,
)
from cms_gateway.services.cms.advertisements import AdvertisementService
from cms_gateway.services.cms.app_version import AppVersionService
from cms_gateway.services.cms.brands import BrandService
from cms_gateway.services.cms.car_models import CarModelService
from cms_gateway.services.cms.car_variants import CarVariantService
from cms_gateway.services.cms.governorates import GovernorateService
from cms_gateway.services.cms.showrooms import ShowroomService

router = APIRouter()

NOT_FOUND_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Entity not found"},
    502: {"model": ErrorResponse, "description": "CMS unavailable"},
}
UPSTREAM_RESPONSES = {
    502: {"model": ErrorResponse, "description": "CMS unavailable"},
}


# =============================================================================
# Brands & Cars
# =============================================================================


@router.get(
    "/brands",
    response_model=list[SimpleBrand],
    summary="List brands",
    responses=UPSTREAM_RESPONSES,
)
async def list_brands(
    brands: Annotated[BrandService, Depends(get_brand_service)],
) -> list[SimpleBrand]:
    return await brands.get_simplified()


@router.get(
    "/brands/{brand_id}",
    response_model=SimpleBrand,
    summary="Get a brand",
    responses=NOT_FOUND_RESPONSES,
)
async def get_brand(
    brand_id: str,
    brands: Annotated[BrandService, Depends(get_brand_service)],
) -> SimpleBrand:
    return await brands.get_simplified_by_id(brand_id)


@router.get(
    "/brands/{brand_id}/cars",
    response_model=list[SimpleCarModel],
    summary="List a brand's car models with price ranges",
    responses=UPSTREAM_RESPONSES,
)
async def list_brand_cars(
    brand_id: str,
    car_models: Annotated[CarModelService, Depends(get_car_model_service)],
) -> list[SimpleCarModel]:
    return await car_models.get_by_brand_id(brand_id)


@router.get(
    "/cars/{car_id}",
    response_model=DetailedCarModel,
    summary="Get a car model with variants, showrooms and documents",
    responses=NOT_FOUND_RESPONSES,
)
async def get_car(
    car_id: str,
    car_models: Annotated[CarModelService, Depends(get_car_model_service)],
) -> DetailedCarModel:
    return await car_models.get_detailed_by_id(car_id)


@router.get(
    "/cars/{car_id}/variants/{variant_id}",
    response_model=DetailedCarVariant,
    summary="Get a car variant",
    responses=NOT_FOUND_RESPONSES,
)
async def get_car_variant(
    car_id: str,
    variant_id: str,
    car_variants: Annotated[CarVariantService, Depends(get_car_variant_service)],
) -> DetailedCarVariant:
    # Variants are addressed by their own documentId; car_id only scopes the URL
    return await car_variants.get_detailed_by_id(variant_id)


# =============================================================================
# Advertisements
# =============================================================================


@router.get(
    "/advertisements",
    response_model=list[AdvertisementData],
    summary="List advertisement banners",
    responses=UPSTREAM_RESPONSES,
)
async def list_advertisements(
    advertisements: Annotated[AdvertisementService, Depends(get_advertisement_service)],
) -> list[AdvertisementData]:
    return await advertisements.get_simplified()


@router.get(
    "/advertisements/{advertisement_id}",
    response_model=AdvertisementData,
    summary="Get an advertisement banner",
    responses=NOT_FOUND_RESPONSES,
)
async def get_advertisement(
    advertisement_id: str,
    advertisements: Annotated[AdvertisementService, Depends(get_advertisement_service)],
) -> AdvertisementData:
    return await advertisements.get_simplified_by_id(advertisement_id)


# =============================================================================
# Showrooms
# =============================================================================


@router.get(
    "/showrooms",
    response_model=list[ShowroomSummary],
    summary="List showrooms",
    responses=UPSTREAM_RESPONSES,
)
async def list_showrooms(
    showrooms: Annotated[ShowroomService, Depends(get_showroom_service)],
) -> list[ShowroomSummary]:
    return await showrooms.get_listing()


@router.get(
    "/showrooms/{showroom_id}",
    response_model=DetailedShowroom,
    summary="Get a showroom profile with its available cars",
    responses=NOT_FOUND_RESPONSES,
)
async def get_showroom(
    showroom_id: str,
    showrooms: Annotated[ShowroomService, Depends(get_showroom_service)],
) -> DetailedShowroom:
    return await showrooms.get_detailed_by_id(showroom_id)


@router.get(
    "/showrooms/{showroom_id}/variants",
    response_model=list[ShowroomCarVariant],
    summary="List the car variants a showroom sells",
    responses=UPSTREAM_RESPONSES,
)
async def list_showroom_variants(
    showroom_id: str,
    showrooms: Annotated[ShowroomService, Depends(get_showroom_service)],
) -> list[ShowroomCarVariant]:
    return await showrooms.get_car_variants(showroom_id)


# =============================================================================
# Reference Data
# =============================================================================


@router.get(
    "/governorates",
    response_model=list[GovernorateWithCities],
    summary="List governorates with their cities",
    responses=UPSTREAM_RESPONSES,
)
async def list_governorates(
    governorates: Annotated[GovernorateService, Depends(get_governorate_service)],
) -> list[GovernorateWithCities]:
    return await governorates.get_with_cities()


@router.get(
    "/app-version",
    response_model=ApplicationVersion,
    response_model_include={"mobile_app_version", "mobile_app_build_number", "web_version"},
    summary="Current mobile and web app versions",
    responses=NOT_FOUND_RESPONSES,
)
async def get_app_version(
    app_version: Annotated[AppVersionService, Depends(get_app_version_service)],
) -> ApplicationVersion:
    return await app_version.get()
