"""Content schemas: advertisements, governorates, cities, app version."""

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from cms_gateway.schemas.common import BaseSchema
from cms_gateway.schemas.media import MediaField
from cms_gateway.schemas.strapi import StrapiDocument, as_list


class Advertisement(StrapiDocument):
    action: str = Field("", validation_alias=AliasChoices("Action", "action"))
    banner: MediaField | None = Field(
        None, validation_alias=AliasChoices("Banner", "banner")
    )


class City(StrapiDocument):
    name: str = Field("", validation_alias=AliasChoices("Name", "name"))
    governorate: "Governorate | None" = Field(
        None, validation_alias=AliasChoices("Governorate", "governorate")
    )


class Governorate(StrapiDocument):
    name: str = Field("", validation_alias=AliasChoices("Name", "name"))
    cities: list[City] = Field(
        default_factory=list, validation_alias=AliasChoices("cities", "Cities")
    )

    @field_validator("cities", mode="before")
    @classmethod
    def _cities_list(cls, value: Any) -> Any:
        return as_list(value)


City.model_rebuild()


class ApplicationVersion(StrapiDocument):
    """Current client versions published by the CMS (a singleton)."""

    mobile_app_version: str = Field(
        "", validation_alias=AliasChoices("MobileAppVersion", "mobileAppVersion")
    )
    mobile_app_build_number: int | None = Field(
        None,
        validation_alias=AliasChoices("MobileAppBuildNumber", "mobileAppBuildNumber"),
    )
    web_version: str = Field(
        "", validation_alias=AliasChoices("WebVersion", "webVersion")
    )

    @field_validator("mobile_app_build_number", mode="before")
    @classmethod
    def _blank_build_number(cls, value: Any) -> Any:
        # The CMS stores the build number as text
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("mobile_app_version", "web_version", mode="before")
    @classmethod
    def _empty_if_null(cls, value: Any) -> Any:
        return "" if value is None else value


# =============================================================================
# Views
# =============================================================================


class AdvertisementData(BaseSchema):
    id: str
    action: str
    banner: MediaField | None = None


class CityItem(BaseSchema):
    id: str
    name: str


class GovernorateWithCities(BaseSchema):
    id: str
    name: str
    cities: list[CityItem] = Field(default_factory=list)
