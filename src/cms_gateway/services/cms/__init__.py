"""CMS access layer: transport client, cache keys and resource services."""

from cms_gateway.services.cms.client import CMSClient
from cms_gateway.services.cms.container import CMSServices

__all__ = ["CMSClient", "CMSServices"]
