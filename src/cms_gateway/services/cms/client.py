"""Transport client for the headless CMS (REST and GraphQL).

The client owns one pooled ``httpx.AsyncClient`` and wraps every fetch in
the same cache-around-fetch flow:

1. Build a deterministic cache key from the request options
2. Return the cached payload on a hit
3. Otherwise call the CMS once (concurrent misses share the call), store
   the payload after a successful response, and return it

Payloads are returned as raw JSON bytes; resource services decode them.

Usage:
    ```python
    client = CMSClient.from_settings(settings, cache)
    body = await client.fetch_collection(
        "car-models",
        CollectionQuery(page=1, page_size=100),
        CacheOptions(ttl=1200),
    )
    data = await client.execute_graphql(GET_BRANDS_QUERY, scope="brands")
    await client.close()
    ```
"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError

from cms_gateway.config import Settings
from cms_gateway.core.exceptions import CacheError, CMSTransportError
from cms_gateway.schemas.strapi import (
    CacheOptions,
    CollectionQuery,
    GraphQLEnvelope,
    ItemQuery,
    StrapiErrorEnvelope,
)
from cms_gateway.services.cache import Cache
from cms_gateway.services.cms.keys import CacheKeyBuilder, graph_query_key

logger = structlog.get_logger(__name__)

_ABSOLUTE_URL_PREFIXES = ("http://", "https://", "//")


@dataclass
class _InFlight:
    """A shared upstream call and the number of callers awaiting it."""

    task: asyncio.Task[bytes]
    waiters: int = 0


class CMSClient:
    """Async client for the CMS REST and GraphQL APIs.

    REST fetches are cached only when ``cache_options`` is given and
    enabled; GraphQL requests are cached unless caching is explicitly
    disabled.
    """

    def __init__(
        self,
        api_url: str,
        graphql_url: str,
        media_base_url: str,
        token: str,
        cache: Cache,
        *,
        default_ttl: int = 86400,
        timeout: float = 10.0,
        max_connections: int = 100,
        max_keepalive_connections: int = 10,
        keepalive_expiry: float = 90.0,
        coalesce: bool = True,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_url: REST base URL (e.g., "http://localhost:1337/api")
            graphql_url: GraphQL endpoint URL
            media_base_url: Base URL prepended to relative media paths
            token: API token sent as a Bearer credential (empty for none)
            cache: Cache backend for upstream payloads
            default_ttl: TTL in seconds when the request does not set one
            timeout: Per-request timeout in seconds
            max_connections: Connection pool size
            max_keepalive_connections: Idle connections kept open
            keepalive_expiry: Seconds an idle connection is kept
            coalesce: Share one upstream call between concurrent cache misses
            http_client: Pre-built HTTP client (tests); used as-is
        """
        self.api_url = api_url.rstrip("/")
        self.graphql_url = graphql_url
        self.media_base_url = media_base_url.rstrip("/")
        self.cache = cache
        self.default_ttl = default_ttl
        self.coalesce = coalesce
        self._token = token
        self._timeout = httpx.Timeout(timeout)
        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
            keepalive_expiry=keepalive_expiry,
        )
        self._client = http_client
        self._owns_client = http_client is None
        self._inflight: dict[str, _InFlight] = {}

    @classmethod
    def from_settings(cls, settings: Settings, cache: Cache) -> "CMSClient":
        """Build a client from application settings."""
        return cls(
            api_url=settings.cms_api_url,
            graphql_url=settings.cms_graphql_url,
            media_base_url=settings.cms_media_base_url,
            token=settings.cms_service_token.get_secret_value(),
            cache=cache,
            default_ttl=settings.cms_default_cache_ttl,
            timeout=settings.cms_request_timeout,
            max_connections=settings.cms_max_connections,
            max_keepalive_connections=settings.cms_max_keepalive_connections,
            keepalive_expiry=settings.cms_keepalive_expiry,
            coalesce=settings.cms_coalesce_requests,
        )

    @property
    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or (self._owns_client and self._client.is_closed):
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=self._limits,
                headers=self._headers,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    # -------------------------------------------------------------------------
    # REST
    # -------------------------------------------------------------------------

    async def fetch_collection(
        self,
        endpoint: str,
        query: CollectionQuery | None = None,
        cache_options: CacheOptions | None = None,
    ) -> bytes:
        """Fetch a collection: ``GET {api_url}/{endpoint}``.

        Args:
            endpoint: Collection endpoint (e.g., "car-models")
            query: Pagination, filter, sort and projection options
            cache_options: Caching behaviour; None disables caching

        Returns:
            Raw response body (a Strapi collection envelope)

        Raises:
            CMSTransportError: On network failure or a non-2xx response
        """
        query = query or CollectionQuery()
        key = CacheKeyBuilder(endpoint).add_collection_query(query).build()
        url = f"{self.api_url}/{endpoint}"
        params = self._collection_params(query)
        return await self._cached(key, cache_options, lambda: self._get(url, params))

    async def fetch_item(
        self,
        endpoint: str,
        resource_id: str,
        query: ItemQuery | None = None,
        cache_options: CacheOptions | None = None,
    ) -> bytes:
        """Fetch one entity: ``GET {api_url}/{endpoint}/{resource_id}``."""
        query = query or ItemQuery()
        key = (
            CacheKeyBuilder(endpoint)
            .add_part(resource_id)
            .add_item_query(query)
            .build()
        )
        url = f"{self.api_url}/{endpoint}/{quote(resource_id, safe='')}"
        params = self._item_params(query)
        return await self._cached(key, cache_options, lambda: self._get(url, params))

    async def fetch_singleton(
        self,
        endpoint: str,
        query: ItemQuery | None = None,
        cache_options: CacheOptions | None = None,
    ) -> bytes:
        """Fetch a single-type entry: ``GET {api_url}/{endpoint}``."""
        query = query or ItemQuery()
        key = CacheKeyBuilder(endpoint).add_item_query(query).build()
        url = f"{self.api_url}/{endpoint}"
        params = self._item_params(query)
        return await self._cached(key, cache_options, lambda: self._get(url, params))

    # -------------------------------------------------------------------------
    # GraphQL
    # -------------------------------------------------------------------------

    async def execute_graphql(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        cache_options: CacheOptions | None = None,
        *,
        scope: str | None = None,
    ) -> bytes:
        """Execute a GraphQL query and return the JSON-encoded ``data`` member.

        Any entry in the response ``errors`` list fails the call, even when
        partial ``data`` is present.

        Args:
            query: GraphQL document
            variables: Query variables
            cache_options: Caching behaviour; None means cache with the default TTL
            scope: Cache key namespace, usually the resource endpoint

        Raises:
            CMSTransportError: On network failure, a non-2xx response, a
                malformed envelope or GraphQL errors
        """
        if cache_options is None:
            cache_options = CacheOptions()
        key = graph_query_key(query, variables, scope)
        return await self._cached(
            key, cache_options, lambda: self._post_graphql(query, variables)
        )

    # -------------------------------------------------------------------------
    # Cache
    # -------------------------------------------------------------------------

    async def invalidate(self, pattern: str | None = None) -> int:
        """Delete cached payloads matching a glob pattern.

        Args:
            pattern: Key pattern (e.g., "cms_brands*"); None clears everything

        Returns:
            Number of keys removed
        """
        pattern = pattern or "*"
        deleted = await self.cache.delete_pattern(pattern)
        logger.info("cms_cache_invalidated", pattern=pattern, deleted=deleted)
        return deleted

    # -------------------------------------------------------------------------
    # Media
    # -------------------------------------------------------------------------

    def resolve_media_url(self, url: str | None) -> str:
        """Make an upload path absolute.

        Examples:
            "/uploads/logo.png" -> "http://localhost:1337/uploads/logo.png"
            "https://cdn.example.com/a.png" -> unchanged
        """
        if not url:
            return ""
        if url.startswith(_ABSOLUTE_URL_PREFIXES):
            return url
        return f"{self.media_base_url}/{url.lstrip('/')}"

    @property
    def validation_context(self) -> dict[str, Any]:
        """Pydantic validation context for models holding media fields."""
        return {"resolve_media_url": self.resolve_media_url}

    # -------------------------------------------------------------------------
    # Private Methods - Caching
    # -------------------------------------------------------------------------

    async def _cached(
        self,
        key: str,
        cache_options: CacheOptions | None,
        fetch: Callable[[], Awaitable[bytes]],
    ) -> bytes:
        if cache_options is None or not cache_options.enabled:
            return await fetch()

        cached = await self._cache_get(key)
        if cached is not None:
            logger.debug("cms_cache_hit", cache_key=key)
            return cached

        logger.debug("cms_cache_miss", cache_key=key)
        ttl = cache_options.ttl or self.default_ttl

        async def fetch_and_store() -> bytes:
            body = await fetch()
            await self._cache_set(key, body, ttl)
            return body

        if not self.coalesce:
            return await fetch_and_store()
        return await self._coalesced(key, fetch_and_store)

    async def _coalesced(
        self, key: str, factory: Callable[[], Awaitable[bytes]]
    ) -> bytes:
        """Run ``factory`` once per key for all concurrent callers.

        A cancelled caller detaches from the shared call; the call itself
        is cancelled only when no caller is left waiting for it.
        """
        flight = self._inflight.get(key)
        if flight is None:
            flight = _InFlight(task=asyncio.ensure_future(factory()))
            self._inflight[key] = flight

            def _forget(_: asyncio.Task[bytes], flight: _InFlight = flight) -> None:
                if self._inflight.get(key) is flight:
                    del self._inflight[key]

            flight.task.add_done_callback(_forget)
        else:
            logger.debug("cms_request_coalesced", cache_key=key)

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                # Later callers must start a fresh call, not join a dying one.
                if self._inflight.get(key) is flight:
                    del self._inflight[key]
                flight.task.cancel()

    async def _cache_get(self, key: str) -> bytes | None:
        try:
            return await self.cache.get(key)
        except CacheError as e:
            logger.warning("cms_cache_read_failed", cache_key=key, error=str(e))
            return None

    async def _cache_set(self, key: str, body: bytes, ttl: int) -> None:
        try:
            await self.cache.set(key, body, ttl)
        except CacheError as e:
            logger.warning("cms_cache_write_failed", cache_key=key, error=str(e))

    # -------------------------------------------------------------------------
    # Private Methods - Transport
    # -------------------------------------------------------------------------

    async def _get(self, url: str, params: list[tuple[str, str]]) -> bytes:
        client = await self._get_client()
        try:
            response = await client.get(url, params=params, headers=self._headers)
        except httpx.RequestError as e:
            logger.error("cms_request_failed", url=url, error=str(e))
            raise CMSTransportError(f"CMS request failed: {e}") from e

        self._raise_for_status(response, url)
        body = response.content
        try:
            json.loads(body)
        except ValueError as e:
            logger.error("cms_request_failed", url=url, error="invalid JSON body")
            raise CMSTransportError(
                "CMS returned an invalid JSON body",
                upstream_status=response.status_code,
            ) from e
        return body

    async def _post_graphql(
        self, query: str, variables: dict[str, Any] | None
    ) -> bytes:
        client = await self._get_client()
        url = self.graphql_url
        try:
            response = await client.post(
                url,
                json={"query": query, "variables": variables or {}},
                headers=self._headers,
            )
        except httpx.RequestError as e:
            logger.error("cms_request_failed", url=url, error=str(e))
            raise CMSTransportError(f"CMS GraphQL request failed: {e}") from e

        self._raise_for_status(response, url)

        try:
            envelope = GraphQLEnvelope.model_validate_json(response.content)
        except ValidationError as e:
            logger.error("cms_request_failed", url=url, error="malformed GraphQL envelope")
            raise CMSTransportError(
                "Malformed GraphQL response from the CMS",
                upstream_status=response.status_code,
            ) from e

        if not {"data", "errors"} & envelope.model_fields_set:
            raise CMSTransportError(
                "GraphQL response has neither data nor errors",
                upstream_status=response.status_code,
            )

        if envelope.errors:
            messages = [error.message for error in envelope.errors]
            logger.warning(
                "cms_graphql_errors",
                errors=messages,
                partial_data=envelope.data is not None,
            )
            raise CMSTransportError(
                f"GraphQL error: {'; '.join(messages)}",
                upstream_status=response.status_code,
                upstream_error={
                    "errors": [e.model_dump(exclude_none=True) for e in envelope.errors]
                },
            )

        return json.dumps(envelope.data, separators=(",", ":")).encode("utf-8")

    def _raise_for_status(self, response: httpx.Response, url: str) -> None:
        if response.is_success:
            return

        upstream_error = self._parse_upstream_error(response.content)
        detail = ""
        if upstream_error and upstream_error.get("message"):
            detail = f": {upstream_error['message']}"

        logger.warning(
            "cms_request_failed",
            url=url,
            status_code=response.status_code,
            upstream_error=upstream_error,
        )
        raise CMSTransportError(
            f"CMS returned HTTP {response.status_code}{detail}",
            upstream_status=response.status_code,
            upstream_error=upstream_error,
        )

    @staticmethod
    def _parse_upstream_error(content: bytes) -> dict[str, Any] | None:
        """Extract the REST error object or the GraphQL error list, if any."""
        try:
            return StrapiErrorEnvelope.model_validate_json(content).error.model_dump()
        except ValidationError:
            pass
        try:
            envelope = GraphQLEnvelope.model_validate_json(content)
        except ValidationError:
            return None
        if not envelope.errors:
            return None
        return {
            "message": "; ".join(e.message for e in envelope.errors),
            "errors": [e.model_dump(exclude_none=True) for e in envelope.errors],
        }

    # -------------------------------------------------------------------------
    # Private Methods - Query Parameters
    # -------------------------------------------------------------------------

    @staticmethod
    def _collection_params(query: CollectionQuery) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if query.page:
            params.append(("pagination[page]", str(query.page)))
        if query.page_size:
            params.append(("pagination[pageSize]", str(query.page_size)))
        if query.populate:
            params.append(("populate", query.populate))
        if query.locale:
            params.append(("locale", query.locale))
        params.extend(sorted(query.filters.items()))
        params.extend(("sort", value) for value in query.sort)
        params.extend(("fields", value) for value in query.fields)
        return params

    @staticmethod
    def _item_params(query: ItemQuery) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if query.populate:
            params.append(("populate", query.populate))
        if query.locale:
            params.append(("locale", query.locale))
        params.extend(("fields", value) for value in query.fields)
        return params
