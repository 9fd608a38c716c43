"""Upstream CMS shapes: query options, envelopes and error payloads.

Two REST schema generations are accepted:

- Strapi 4 wraps every entry as ``{"id": 1, "attributes": {...}}`` and every
  relation/media as ``{"data": ...}``.
- Strapi 5 returns flat entries carrying ``documentId``.

``StrapiDocument`` merges identity and attributes into one flat object so
both generations deserialize into the same model.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cms_gateway.schemas.common import BaseSchema, PaginationMeta

T = TypeVar("T")

_RELATION_WRAPPER_KEYS = frozenset({"data", "meta"})


def flatten_entry(value: Any) -> Any:
    """Merge a Strapi 4 ``{"id", "attributes"}`` entry into one mapping.

    Identity fields win over attribute fields of the same name. Anything
    that is not a wrapped entry is returned unchanged.
    """
    if isinstance(value, dict) and isinstance(value.get("attributes"), dict):
        identity = {k: v for k, v in value.items() if k != "attributes"}
        return {**value["attributes"], **identity}
    return value


def unwrap_relation(value: Any) -> Any:
    """Strip a ``{"data": ...}`` relation wrapper, leaving other values alone."""
    if isinstance(value, dict) and "data" in value and value.keys() <= _RELATION_WRAPPER_KEYS:
        return value["data"]
    return value


def as_list(value: Any) -> Any:
    """Coerce ``None`` to an empty list and a single component to a list of one."""
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    return value


def empty_if_null(value: Any) -> Any:
    """Unset text fields arrive as ``null``; treat them as empty strings."""
    return "" if value is None else value


# =============================================================================
# Query Options
# =============================================================================


class ItemQuery(BaseModel):
    """Options for fetching a single entity or a singleton.

    Attributes:
        populate: Relations to include (e.g., "*" or "Brand,Images")
        locale: Content locale (e.g., "en", "ar")
        fields: Field projection
    """

    model_config = ConfigDict(frozen=True)

    populate: str = ""
    locale: str = ""
    fields: tuple[str, ...] = ()


class CollectionQuery(ItemQuery):
    """Options for fetching a collection.

    Filters are keyed by the full upstream parameter name, e.g.
    ``{"filters[brand][documentId][$eq]": "abc"}``. Sort entries keep
    their order; it is their precedence.
    """

    page: int = Field(0, ge=0)
    page_size: int = Field(0, ge=0)
    filters: dict[str, str] = Field(default_factory=dict)
    sort: tuple[str, ...] = ()

    def with_overrides(self, **changes: Any) -> "CollectionQuery":
        """Return a validated copy with the given fields replaced."""
        return type(self).model_validate({**self.model_dump(), **changes})

    def with_filter(self, key: str, value: str) -> "CollectionQuery":
        """Return a copy with one more filter parameter."""
        return self.with_overrides(filters={**self.filters, key: value})


class CacheOptions(BaseModel):
    """Per-request caching behaviour.

    Attributes:
        enabled: Read from and write to the cache
        ttl: TTL in seconds; None uses the client default
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    ttl: int | None = Field(None, ge=1)


# =============================================================================
# REST Envelopes
# =============================================================================


class StrapiDocument(BaseSchema):
    """Identity and timestamps shared by every CMS entity.

    Subclasses declare their attribute fields; the ``before`` validator
    flattens the Strapi 4 envelope and unwraps relation wrappers so that
    attribute and identity fields share one namespace.
    """

    id: int | None = None
    document_id: str | None = Field(None, validation_alias="documentId")
    created_at: datetime | None = Field(None, validation_alias="createdAt")
    updated_at: datetime | None = Field(None, validation_alias="updatedAt")
    published_at: datetime | None = Field(None, validation_alias="publishedAt")
    locale: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_envelope(cls, data: Any) -> Any:
        data = flatten_entry(data)
        if not isinstance(data, dict):
            return data
        return {key: unwrap_relation(value) for key, value in data.items()}

    @property
    def resource_id(self) -> str:
        """Externally exposed identifier (documentId, else the numeric id)."""
        if self.document_id:
            return self.document_id
        return str(self.id) if self.id is not None else ""


class StrapiMeta(BaseSchema):
    pagination: PaginationMeta | None = None


class StrapiItemEnvelope(BaseModel, Generic[T]):
    """``{"data": {...} | null, "meta": {...}}``"""

    data: T | None = None
    meta: StrapiMeta | None = None


class StrapiCollectionEnvelope(BaseModel, Generic[T]):
    """``{"data": [...], "meta": {"pagination": {...}}}``"""

    data: list[T] = Field(default_factory=list)
    meta: StrapiMeta | None = None


# =============================================================================
# Error Envelopes
# =============================================================================


class StrapiErrorBody(BaseModel):
    status: int | None = None
    name: str = ""
    message: str = ""
    details: dict[str, Any] = Field(default_factory=dict)


class StrapiErrorEnvelope(BaseModel):
    """``{"error": {"status", "name", "message", "details"}}``"""

    error: StrapiErrorBody


class GraphQLErrorItem(BaseModel):
    message: str = ""
    path: list[str | int] | None = None
    extensions: dict[str, Any] | None = None


class GraphQLEnvelope(BaseModel):
    """``{"data": ..., "errors": [...]}``"""

    data: Any = None
    errors: list[GraphQLErrorItem] | None = None
