"""Application version service (a CMS single type)."""

from cms_gateway.core.exceptions import AppVersionNotFoundError, CMSTransportError
from cms_gateway.schemas.content import ApplicationVersion
from cms_gateway.schemas.strapi import ItemQuery, StrapiItemEnvelope
from cms_gateway.services.cms.base import ResourceService


class AppVersionService(ResourceService[ApplicationVersion]):
    endpoint = "application-version"
    cache_ttl = 5 * 60
    model = ApplicationVersion
    not_found_error = AppVersionNotFoundError

    async def get(
        self, query: ItemQuery | None = None, use_cache: bool = True
    ) -> ApplicationVersion:
        """Current mobile and web versions.

        Raises:
            AppVersionNotFoundError: If the single type has not been published
        """
        try:
            body = await self.client.fetch_singleton(
                self.endpoint, query, self._rest_cache_options(use_cache)
            )
        except CMSTransportError as e:
            if e.upstream_status == 404:
                raise AppVersionNotFoundError() from e
            raise

        envelope = self._decode(StrapiItemEnvelope[ApplicationVersion], body)
        if envelope.data is None:
            raise AppVersionNotFoundError()
        return envelope.data
