"""Showroom schemas: upstream entity, components and profile views."""

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from cms_gateway.schemas.catalog import CarVariant
from cms_gateway.schemas.common import BaseSchema
from cms_gateway.schemas.content import City, Governorate
from cms_gateway.schemas.media import MediaField
from cms_gateway.schemas.strapi import (
    StrapiDocument,
    as_list,
    empty_if_null,
    unwrap_relation,
)

# =============================================================================
# Components
# =============================================================================


class Location(BaseSchema):
    address: str | None = Field(None, validation_alias="Address")
    governorate: Governorate | None = Field(
        None, validation_alias=AliasChoices("Governorate", "governorate")
    )
    city: City | None = Field(None, validation_alias=AliasChoices("City", "city"))
    latitude: float | None = Field(None, validation_alias="Latitude")
    longitude: float | None = Field(None, validation_alias="Longitude")

    @field_validator("governorate", "city", mode="before")
    @classmethod
    def _unwrap(cls, value: Any) -> Any:
        return unwrap_relation(value)


class ContactInfo(BaseSchema):
    phone: str | None = Field(None, validation_alias="Phone")
    whatsapp: str | None = Field(None, validation_alias="Whatsapp")
    email: str | None = Field(None, validation_alias="Email")
    website_url: str | None = Field(None, validation_alias="WebsiteURL")
    tiktok: str | None = Field(None, validation_alias="Tiktok")
    youtube: str | None = Field(None, validation_alias="Youtube")
    x: str | None = Field(None, validation_alias="X")
    instagram: str | None = Field(None, validation_alias="Instagram")
    facebook: str | None = Field(None, validation_alias="Facebook")


class AvailableCar(BaseSchema):
    car: CarVariant | None = Field(None, validation_alias="Car")
    price: int = Field(0, validation_alias="Price")

    @field_validator("car", mode="before")
    @classmethod
    def _unwrap(cls, value: Any) -> Any:
        return unwrap_relation(value)


# =============================================================================
# Upstream Entity
# =============================================================================


class Showroom(StrapiDocument):
    name: str = Field("", validation_alias="Name")
    description: str | None = Field(None, validation_alias="Description")
    logo: MediaField | None = Field(None, validation_alias="Logo")
    cover: MediaField | None = Field(None, validation_alias="Cover")
    is_verified: bool = Field(False, validation_alias="IsVerified")
    is_featured: bool = Field(False, validation_alias="IsFeatured")
    operating_hours: str | None = Field(None, validation_alias="OperatingHours")
    location: Location | None = Field(None, validation_alias="Location")
    contact_info: ContactInfo | None = Field(None, validation_alias="ContactInfo")
    available_cars: list[AvailableCar] = Field(
        default_factory=list, validation_alias="AvailableCars"
    )

    @field_validator("is_verified", "is_featured", mode="before")
    @classmethod
    def _false_if_null(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("available_cars", mode="before")
    @classmethod
    def _as_list(cls, value: Any) -> Any:
        return as_list(value)

    @field_validator("name", mode="before")
    @classmethod
    def _name_if_null(cls, value: Any) -> Any:
        return empty_if_null(value)


# =============================================================================
# Views
# =============================================================================


class ShowroomSummary(BaseSchema):
    """Showroom listing entry."""

    id: str
    name: str
    description: str | None = None
    is_verified: bool = False
    is_featured: bool = False
    logo: MediaField | None = None


class ShowroomLocation(BaseSchema):
    address: str | None = None
    governorate: str | None = None
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class ShowroomProfile(ShowroomSummary):
    cover: MediaField | None = None
    operating_hours: str | None = None
    location: ShowroomLocation | None = None
    contact_info: ContactInfo | None = None


class ShowroomCarVariant(BaseSchema):
    """A variant sold by one showroom, priced by that showroom."""

    id: str
    name: str
    images: list[MediaField] = Field(default_factory=list)
    price: int = 0
    minimum_down_payment: int = 0
    minimum_installments: int = 0


class DetailedShowroom(ShowroomProfile):
    available_cars: list[ShowroomCarVariant] = Field(default_factory=list)
