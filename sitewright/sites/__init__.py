"""Managed site configuration."""

from sitewright.sites.models import SiteConfig, SiteCredentials, SiteInput, SiteSummary, SiteUpdate
from sitewright.sites.store import SiteStore

__all__ = ["SiteConfig", "SiteCredentials", "SiteInput", "SiteStore", "SiteSummary", "SiteUpdate"]
