"""Normalized media references.

Upstream media objects are untyped in places (``formats`` is a free-form
map), so these models are lenient: a wrong-typed sub-field becomes ``None``
instead of failing the surrounding entity.

Relative upload paths are made absolute during validation when the
validation context carries a ``resolve_media_url`` callable::

    MediaField.model_validate(raw, context=client.validation_context)
"""

import math
from typing import Any

from pydantic import Field, ValidationInfo, field_validator, model_validator

from cms_gateway.schemas.common import BaseSchema
from cms_gateway.schemas.strapi import flatten_entry

FORMAT_NAMES = ("thumbnail", "small", "medium", "large")


def _lenient_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return None


def _resolve_url(value: Any, info: ValidationInfo) -> str | None:
    if not isinstance(value, str):
        return None
    resolver = (info.context or {}).get("resolve_media_url")
    return resolver(value) if resolver else value


class MediaFormat(BaseSchema):
    """One size variant of an image."""

    width: int | None = None
    height: int | None = None
    url: str | None = None

    @field_validator("width", "height", mode="before")
    @classmethod
    def _coerce_dimension(cls, value: Any) -> int | None:
        return _lenient_int(value)

    @field_validator("url", mode="before")
    @classmethod
    def _absolute_url(cls, value: Any, info: ValidationInfo) -> str | None:
        return _resolve_url(value, info)


class MediaFormats(BaseSchema):
    thumbnail: MediaFormat | None = None
    small: MediaFormat | None = None
    medium: MediaFormat | None = None
    large: MediaFormat | None = None

    @field_validator(*FORMAT_NAMES, mode="before")
    @classmethod
    def _drop_malformed(cls, value: Any) -> Any:
        if isinstance(value, (dict, MediaFormat)):
            return value
        return None


class MediaField(BaseSchema):
    """An image or file attached to a CMS entity.

    Attributes:
        id: Upstream documentId (numeric id as a string for older entries)
        width: Original width in pixels
        height: Original height in pixels
        url: Absolute URL of the original file
        formats: Size variants, when the CMS generated them
    """

    id: str = ""
    width: int | None = None
    height: int | None = None
    url: str = ""
    formats: MediaFormats | None = Field(None)

    @model_validator(mode="before")
    @classmethod
    def _normalize_identity(cls, data: Any) -> Any:
        data = flatten_entry(data)
        if not isinstance(data, dict):
            return data
        data = dict(data)
        document_id = data.pop("documentId", None)
        if document_id:
            data["id"] = document_id
        elif data.get("id") is not None:
            data["id"] = str(data["id"])
        return data

    @field_validator("width", "height", mode="before")
    @classmethod
    def _coerce_dimension(cls, value: Any) -> int | None:
        return _lenient_int(value)

    @field_validator("url", mode="before")
    @classmethod
    def _absolute_url(cls, value: Any, info: ValidationInfo) -> str:
        return _resolve_url(value, info) or ""

    @field_validator("formats", mode="before")
    @classmethod
    def _formats_object(cls, value: Any) -> Any:
        if isinstance(value, (dict, MediaFormats)):
            return value
        return None

    @property
    def thumbnail_url(self) -> str:
        """Thumbnail URL when generated, else the original URL."""
        if self.formats and self.formats.thumbnail and self.formats.thumbnail.url:
            return self.formats.thumbnail.url
        return self.url

    def as_thumbnail(self) -> "MediaField":
        """The thumbnail format as a media reference of its own.

        Returns ``self`` when no thumbnail was generated.
        """
        thumbnail = self.formats.thumbnail if self.formats else None
        if thumbnail is None or not thumbnail.url:
            return self
        return MediaField(
            id=self.id,
            width=thumbnail.width,
            height=thumbnail.height,
            url=thumbnail.url,
        )
