"""Services for CMS access and caching."""
