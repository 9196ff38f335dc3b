"""Catalog store integration for catalog-admin.

This package provides the catalog store REST API client.
"""

from .client import CatalogClient, create_http_client

__all__ = ["CatalogClient", "create_http_client"]
