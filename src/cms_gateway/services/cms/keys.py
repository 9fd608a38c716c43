"""Deterministic cache keys for CMS requests.

REST keys are readable and built from the request options::

    CacheKeyBuilder("car-models").add_collection_query(query).build()
    # -> 'cms_car-models:page:1:pageSize:1000:populate:*:filters:{"filters[brand][id][$eq]":"7"}'

GraphQL keys hash the query document together with its variables::

    graph_query_key(GET_BRANDS_QUERY, None, scope="brands")
    # -> "graphql:brands:3f1c...e9"

Maps are encoded with sorted keys so that equal options always produce
the same key, independent of insertion order.
"""

import hashlib
import json
from dataclasses import dataclass, replace
from typing import Any

from cms_gateway.schemas.strapi import CollectionQuery, ItemQuery

REST_KEY_PREFIX = "cms_"
GRAPHQL_KEY_PREFIX = "graphql:"


def canonical_json(value: Any) -> str:
    """Compact JSON with sorted object keys."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


@dataclass(frozen=True)
class CacheKeyBuilder:
    """Immutable builder for REST cache keys.

    Every ``add_*`` call returns a new builder; empty parts are skipped so
    unset options never show up in the key.
    """

    resource: str
    parts: tuple[str, ...] = ()

    def add_part(self, part: str) -> "CacheKeyBuilder":
        if not part:
            return self
        return replace(self, parts=(*self.parts, part))

    def add_collection_query(self, query: CollectionQuery | None) -> "CacheKeyBuilder":
        if query is None:
            return self
        builder = self
        if query.page:
            builder = builder.add_part(f"page:{query.page}")
        if query.page_size:
            builder = builder.add_part(f"pageSize:{query.page_size}")
        if query.populate:
            builder = builder.add_part(f"populate:{query.populate}")
        if query.locale:
            builder = builder.add_part(f"locale:{query.locale}")
        if query.sort:
            # Sort entries are a precedence list; order is significant
            builder = builder.add_part(f"sort:{canonical_json(list(query.sort))}")
        if query.filters:
            builder = builder.add_part(f"filters:{canonical_json(query.filters)}")
        if query.fields:
            builder = builder.add_part(f"fields:{canonical_json(sorted(query.fields))}")
        return builder

    def add_item_query(self, query: ItemQuery | None) -> "CacheKeyBuilder":
        if query is None:
            return self
        builder = self
        if query.populate:
            builder = builder.add_part(f"populate:{query.populate}")
        if query.locale:
            builder = builder.add_part(f"locale:{query.locale}")
        if query.fields:
            builder = builder.add_part(f"fields:{canonical_json(sorted(query.fields))}")
        return builder

    def build(self) -> str:
        return REST_KEY_PREFIX + self.resource + "".join(f":{p}" for p in self.parts)


def graph_query_key(
    query: str,
    variables: dict[str, Any] | None = None,
    scope: str | None = None,
) -> str:
    """Cache key for a GraphQL request.

    Args:
        query: GraphQL document
        variables: Query variables (None and {} are equivalent)
        scope: Optional namespace, usually the resource endpoint

    Returns:
        ``graphql:[scope:]<sha256 hex>``
    """
    payload = f"{query}\n{canonical_json(variables or {})}"
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    if scope:
        return f"{GRAPHQL_KEY_PREFIX}{scope}:{digest}"
    return f"{GRAPHQL_KEY_PREFIX}{digest}"


def resource_pattern(resource: str) -> str:
    """Glob matching every REST key of one resource."""
    return f"{REST_KEY_PREFIX}{resource}*"


def graph_scope_pattern(scope: str | None = None) -> str:
    """Glob matching every GraphQL key of one scope (all scopes when None)."""
    if scope:
        return f"{GRAPHQL_KEY_PREFIX}{scope}:*"
    return f"{GRAPHQL_KEY_PREFIX}*"
