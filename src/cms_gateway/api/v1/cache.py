"""Cache administration endpoints."""

import hmac
from typing import Annotated

from fastapi import APIRouter, Header, Query

from cms_gateway.core.exceptions import InvalidCacheSecretError
from cms_gateway.core.logging import get_logger
from cms_gateway.dependencies import CMSServicesDep, SettingsDep
from cms_gateway.schemas.common import CacheInvalidationResponse, ErrorResponse
from cms_gateway.services.cms.keys import graph_scope_pattern

logger = get_logger(__name__)

router = APIRouter()

# Every GraphQL payload; REST payloads are invalidated per resource
DEFAULT_INVALIDATION_PATTERN = graph_scope_pattern()


@router.post(
    "/invalidate/cms",
    response_model=CacheInvalidationResponse,
    summary="Invalidate cached CMS payloads",
    description=(
        "Deletes cached CMS payloads matching `pattern` (default: all GraphQL "
        "payloads). Requires the cache secret in the `X-Cache-Secret-Key` "
        "header or the `secret` query parameter."
    ),
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid secret"},
        503: {"model": ErrorResponse, "description": "Cache backend unavailable"},
    },
)
async def invalidate_cms_cache(
    services: CMSServicesDep,
    settings: SettingsDep,
    pattern: Annotated[str | None, Query(description="Key glob pattern")] = None,
    secret: Annotated[str | None, Query(description="Cache secret key")] = None,
    x_cache_secret_key: Annotated[str | None, Header()] = None,
) -> CacheInvalidationResponse:
    expected = settings.cache_secret_key.get_secret_value()
    provided = x_cache_secret_key or secret or ""

    # An unset secret disables the endpoint
    if not expected or not hmac.compare_digest(provided.encode(), expected.encode()):
        raise InvalidCacheSecretError()

    pattern = pattern or DEFAULT_INVALIDATION_PATTERN
    deleted = await services.client.invalidate(pattern)
    logger.info("cms_cache_invalidation_requested", pattern=pattern, deleted=deleted)

    return CacheInvalidationResponse(pattern=pattern, deleted=deleted)
