"""CMS Gateway - normalized, cached access to the headless CMS."""

__version__ = "0.1.0"
