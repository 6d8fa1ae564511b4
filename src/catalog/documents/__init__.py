"""PDF document generation for the exported product catalog."""

from src.catalog.documents.renderer import CATALOG_MEDIA_TYPE, render_catalog

__all__ = ["CATALOG_MEDIA_TYPE", "render_catalog"]
