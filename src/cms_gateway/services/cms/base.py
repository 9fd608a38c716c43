"""Base class for CMS resource services.

A resource service knows one CMS endpoint: its full entity model, its cache
TTL and which ``NotFound`` error to raise. It fetches through the shared
``CMSClient`` and decodes payloads with pydantic, resolving media URLs via
the client's validation context.

Subclasses add the simplified and aggregate views of their resource.
"""

from typing import Any, ClassVar, Generic, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from cms_gateway.core.exceptions import (
    CMSDeserializationError,
    CMSTransportError,
    ResourceNotFoundError,
)
from cms_gateway.schemas.common import CollectionResult
from cms_gateway.schemas.strapi import (
    CacheOptions,
    CollectionQuery,
    ItemQuery,
    StrapiCollectionEnvelope,
    StrapiDocument,
    StrapiItemEnvelope,
)
from cms_gateway.services.cms.client import CMSClient
from cms_gateway.services.cms.keys import graph_scope_pattern, resource_pattern

logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=StrapiDocument)
M = TypeVar("M", bound=BaseModel)

# Upper bound requested by listing views so they load in a single round trip
SIMPLIFIED_PAGE_SIZE = 1000


class ResourceService(Generic[T]):
    """REST access to one CMS collection.

    Class Attributes:
        endpoint: CMS endpoint (e.g., "car-models")
        cache_ttl: Cache TTL in seconds for this resource
        model: Full entity model
        not_found_error: Raised when an entity does not exist
    """

    endpoint: ClassVar[str]
    cache_ttl: ClassVar[int]
    model: type[T]
    not_found_error: ClassVar[type[ResourceNotFoundError]] = ResourceNotFoundError

    def __init__(self, client: CMSClient) -> None:
        self.client = client

    async def get_all(
        self, query: CollectionQuery | None = None, use_cache: bool = True
    ) -> CollectionResult[T]:
        """Fetch a page of the collection.

        Args:
            query: Pagination, filter and sort options
            use_cache: Read from and write to the cache

        Returns:
            Items plus the upstream pagination block
        """
        body = await self.client.fetch_collection(
            self.endpoint, query, self._rest_cache_options(use_cache)
        )
        envelope = self._decode(StrapiCollectionEnvelope[self.model], body)
        pagination = envelope.meta.pagination if envelope.meta else None
        return CollectionResult[self.model](items=envelope.data, pagination=pagination)

    async def get_by_id(
        self,
        resource_id: str,
        query: ItemQuery | None = None,
        use_cache: bool = True,
    ) -> T:
        """Fetch one entity by its identifier.

        Raises:
            ResourceNotFoundError: (the resource's subclass) when the CMS
                returns no entity or answers 404
        """
        try:
            body = await self.client.fetch_item(
                self.endpoint, resource_id, query, self._rest_cache_options(use_cache)
            )
        except CMSTransportError as e:
            if e.upstream_status == 404:
                raise self.not_found_error(resource_id) from e
            raise

        envelope = self._decode(StrapiItemEnvelope[self.model], body)
        if envelope.data is None:
            raise self.not_found_error(resource_id)
        return envelope.data

    async def invalidate_cache(self) -> int:
        """Drop every cached REST and GraphQL payload of this resource."""
        deleted = await self.client.invalidate(resource_pattern(self.endpoint))
        deleted += await self.client.invalidate(graph_scope_pattern(self.endpoint))
        return deleted

    # -------------------------------------------------------------------------
    # Helpers for subclasses
    # -------------------------------------------------------------------------

    async def _query(
        self,
        response_model: type[M],
        query: str,
        variables: dict[str, Any] | None = None,
        use_cache: bool = True,
    ) -> M:
        """Run a GraphQL query cached under this resource and decode ``data``."""
        body = await self.client.execute_graphql(
            query,
            variables,
            CacheOptions(enabled=use_cache, ttl=self.cache_ttl),
            scope=self.endpoint,
        )
        return self._decode(response_model, body)

    def _rest_cache_options(self, use_cache: bool) -> CacheOptions | None:
        return CacheOptions(ttl=self.cache_ttl) if use_cache else None

    def _decode(self, model_type: type[M], body: bytes) -> M:
        try:
            return model_type.model_validate_json(
                body, context=self.client.validation_context
            )
        except ValidationError as e:
            logger.error(
                "cms_decode_failed",
                resource=self.endpoint,
                model=model_type.__name__,
                error_count=e.error_count(),
            )
            raise CMSDeserializationError(
                resource=self.endpoint,
                errors=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e
