"""CRM dashboard backend: GoHighLevel sync proxy and record filtering."""

__version__ = "0.1.0"
