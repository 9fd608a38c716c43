"""Car catalog schemas: brands, car models and car variants.

Upstream entities (``Brand``, ``CarModel``, ``CarVariant``) accept both REST
generations and the GraphQL selection sets; views (``SimpleBrand``,
``SimpleCarModel``, ``DetailedCarModel``, ``DetailedCarVariant``) are the
normalized shapes returned to gateway callers.
"""

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from cms_gateway.schemas.common import BaseSchema
from cms_gateway.schemas.media import MediaField
from cms_gateway.schemas.strapi import StrapiDocument, as_list, empty_if_null


def _zero_if_null(value: Any) -> Any:
    return 0 if value is None else value


# =============================================================================
# Upstream Entities
# =============================================================================


class Brand(StrapiDocument):
    name: str = Field("", validation_alias=AliasChoices("Name", "name"))
    slug: str = Field("", validation_alias=AliasChoices("Slug", "slug"))
    logo: MediaField | None = Field(None, validation_alias=AliasChoices("Logo", "logo"))

    @field_validator("name", "slug", mode="before")
    @classmethod
    def _empty_if_null(cls, value: Any) -> Any:
        return "" if value is None else value


class CarModel(StrapiDocument):
    name: str = Field("", validation_alias="Name")
    body_type: str | None = Field(None, validation_alias="BodyType")
    fuel_type: str | None = Field(None, validation_alias="FuelType")
    slug: str | None = Field(None, validation_alias="Slug")
    brand: Brand | None = Field(None, validation_alias=AliasChoices("Brand", "brand"))
    images: list[MediaField] = Field(default_factory=list, validation_alias="Images")

    @field_validator("images", mode="before")
    @classmethod
    def _images_list(cls, value: Any) -> Any:
        return as_list(value)

    @field_validator("name", mode="before")
    @classmethod
    def _name_if_null(cls, value: Any) -> Any:
        return empty_if_null(value)


class CarSpecs(BaseSchema):
    """Technical specification component of a variant."""

    motor: float | None = Field(None, validation_alias="Motor")
    speed: int | None = Field(None, validation_alias="Speed")
    transmission: str | None = Field(None, validation_alias="Transmission")
    horsepower: int | None = Field(None, validation_alias="Horsepower")
    liter_per_km: float | None = Field(None, validation_alias="LiterPerKM")
    max_speed: int | None = Field(None, validation_alias="MaxSpeed")
    origin: str | None = Field(None, validation_alias="Origin")
    assembled_in: str | None = Field(None, validation_alias="AssembledIn")
    acceleration: float | None = Field(None, validation_alias="Acceleration")
    length_in_mm: int | None = Field(None, validation_alias="LengthInMM")
    width_in_mm: int | None = Field(None, validation_alias="WidthInMM")
    height_in_mm: int | None = Field(None, validation_alias="HeightInMM")
    ground_clearance_in_mm: int | None = Field(None, validation_alias="GroundClearanceInMM")
    wheel_base: int | None = Field(None, validation_alias="WheelBase")
    traction_type: str | None = Field(None, validation_alias="TractionType")
    trunk_size: int | None = Field(None, validation_alias="TrunkSize")
    seats: int | None = Field(None, validation_alias="Seats")


class PricingShowroom(StrapiDocument):
    """Showroom reference embedded in a variant's pricing entry."""

    name: str = Field("", validation_alias="Name")
    logo: MediaField | None = Field(None, validation_alias="Logo")

    @field_validator("name", mode="before")
    @classmethod
    def _name_if_null(cls, value: Any) -> Any:
        return empty_if_null(value)


class ShowroomPricing(BaseSchema):
    """A showroom's offer for one variant.

    Upstream field names carry spelling mistakes (``MinimuDownpayment``,
    ``MinimumInstallements``); the correct spellings are accepted too.
    """

    price: int = Field(0, validation_alias="Price")
    minimum_down_payment: int = Field(
        0, validation_alias=AliasChoices("MinimuDownpayment", "MinimumDownPayment")
    )
    minimum_installments: int = Field(
        0, validation_alias=AliasChoices("MinimumInstallements", "MinimumInstallments")
    )
    showroom: PricingShowroom | None = Field(
        None, validation_alias=AliasChoices("showroom", "Showroom")
    )

    @field_validator("price", "minimum_down_payment", "minimum_installments", mode="before")
    @classmethod
    def _zero_if_null(cls, value: Any) -> Any:
        return _zero_if_null(value)


class CarVariant(StrapiDocument):
    name: str = Field("", validation_alias="Name")
    display_name: str | None = Field(None, validation_alias="DisplayName")
    car_model: CarModel | None = Field(
        None, validation_alias=AliasChoices("CarModel", "car_model")
    )
    price: int = Field(0, validation_alias="Price")
    year: int | None = Field(None, validation_alias="Year")
    images: list[MediaField] = Field(default_factory=list, validation_alias="Images")
    specs: list[CarSpecs] = Field(default_factory=list, validation_alias="Specs")
    features: dict[str, Any] = Field(default_factory=dict, validation_alias="Features")
    brochure_url: str | None = Field(None, validation_alias="BrochureURL")
    review_link: str | None = Field(None, validation_alias="ReviewLink")
    warranty: str | None = Field(None, validation_alias="Warranty")
    minimum_down_payment: int = Field(
        0, validation_alias=AliasChoices("MinimumDownPaymet", "MinimumDownPayment")
    )
    minimum_installments: int = Field(0, validation_alias="MinimumInstallments")
    showroom_pricing: list[ShowroomPricing] = Field(
        default_factory=list, validation_alias="ShowroomPricing"
    )

    @field_validator("images", "specs", "showroom_pricing", mode="before")
    @classmethod
    def _as_list(cls, value: Any) -> Any:
        return as_list(value)

    @field_validator("price", "minimum_down_payment", "minimum_installments", mode="before")
    @classmethod
    def _zero_if_null(cls, value: Any) -> Any:
        return _zero_if_null(value)

    @field_validator("features", mode="before")
    @classmethod
    def _features_object(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator("name", mode="before")
    @classmethod
    def _name_if_null(cls, value: Any) -> Any:
        return empty_if_null(value)

    @property
    def primary_specs(self) -> CarSpecs | None:
        return self.specs[0] if self.specs else None


# =============================================================================
# Views
# =============================================================================


class SimpleBrand(BaseSchema):
    """Brand listing entry."""

    id: str
    title: str
    thumbnail: MediaField | None = None


class SimpleCarModel(BaseSchema):
    """Car model entry of a brand's listing, with its price range."""

    id: str
    title: str
    thumbnail: MediaField | None = None
    price_from: int = 0
    price_to: int = 0
    market_price_from: int = 0
    market_price_to: int = 0


class VariantSummary(BaseSchema):
    id: str
    name: str
    year: int | None = None
    price: int = 0
    motor: float | None = None


class ShowroomOffer(BaseSchema):
    """Best (lowest price) offer of one showroom across a model's variants."""

    id: str
    name: str
    logo: MediaField | None = None
    price: int = 0
    minimum_down_payment: int = 0
    minimum_installments: int = 0


class ReviewItem(BaseSchema):
    id: int
    url: str


class CatalogItem(BaseSchema):
    id: int
    url: str


class DetailedCarModel(BaseSchema):
    """A car model joined with its variants, showroom offers and documents."""

    id: str
    title: str
    body_type: str | None = None
    fuel_type: str | None = None
    slug: str | None = None
    images: list[MediaField] = Field(default_factory=list)
    price_from: int = 0
    price_to: int = 0
    market_price_from: int = 0
    market_price_to: int = 0
    minimum_down_payment: int = 0
    minimum_installments: int = 0
    warranty: str = ""
    variants: list[VariantSummary] = Field(default_factory=list)
    showrooms: list[ShowroomOffer] = Field(default_factory=list)
    reviews: list[ReviewItem] = Field(default_factory=list)
    catalogs: list[CatalogItem] = Field(default_factory=list)


class CarModelReference(BaseSchema):
    id: str
    title: str
    images: list[MediaField] = Field(default_factory=list)


class DetailedCarVariant(BaseSchema):
    """A single variant with specs, features and showroom offers."""

    id: str
    name: str
    year: int | None = None
    price: int = 0
    brochure_url: str | None = None
    review_link: str | None = None
    warranty: str | None = None
    minimum_down_payment: int = 0
    minimum_installments: int = 0
    car_model: CarModelReference | None = None
    specs: CarSpecs | None = None
    features: dict[str, Any] = Field(default_factory=dict)
    showrooms: list[ShowroomOffer] = Field(default_factory=list)
