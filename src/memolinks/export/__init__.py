"""Static export of a rendered workspace."""

from .site import FORMATS, SiteExporter

__all__ = ["FORMATS", "SiteExporter"]
