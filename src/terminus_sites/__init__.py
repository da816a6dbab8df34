"""terminus-sites: site status reporting for the Terminus hosting-platform CLI.

This package provides:
- SiteRepository: the user's sites, cached locally, with environment lookups
- SiteFilters / apply_filters: team, organization, name and owner filters
- resolve_targets: --env selector validation and (site, environment) pairs
- collect_status: site rows and environment rows as an immutable report
- The ``terminus sites status`` click command (terminus_sites.cli)

Example:
    >>> from terminus_sites.filters import SiteFilters, apply_filters
    >>> apply_filters(sites, SiteFilters(org="all"), current_user_id="me-uuid")
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__: list[str] = ["__version__"]
