"""Environment selection for the status report.

The --env selector is validated once against the whole filtered site set;
afterwards sites that lack the requested environment are skipped silently.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import NamedTuple

import structlog

from terminus_sites.errors import InvalidEnvironmentError
from terminus_sites.schemas.site import Environment, Site

logger = structlog.get_logger(__name__)

ALL_ENVIRONMENTS = "all"

EnvironmentLister = Callable[[Site], Sequence[Environment]]


class StatusTarget(NamedTuple):
    """A (site, environment id) pair to inspect."""

    site: Site
    environment: str


def validate_selector(
    sites: Iterable[Site],
    selector: str,
    list_environments: EnvironmentLister,
) -> None:
    """Check that ``selector`` is "all" or an environment of at least one site.

    Raises:
        InvalidEnvironmentError: If no site has an environment with that id.
    """
    if selector == ALL_ENVIRONMENTS:
        return
    for site in sites:
        if any(env.id == selector for env in list_environments(site)):
            return
    raise InvalidEnvironmentError(selector)


def resolve_targets(
    sites: Sequence[Site],
    selector: str,
    list_environments: EnvironmentLister,
) -> tuple[StatusTarget, ...]:
    """Expand sites into the (site, environment) pairs to report on.

    Args:
        sites: Filtered sites, in display order.
        selector: "all" or a specific environment id.
        list_environments: Returns a site's environments in API order.

    Returns:
        Pairs in site order, then environment order.

    Raises:
        InvalidEnvironmentError: If a specific selector matches no site.
    """
    validate_selector(sites, selector, list_environments)

    targets: list[StatusTarget] = []
    for site in sites:
        env_ids = [env.id for env in list_environments(site)]
        if selector == ALL_ENVIRONMENTS:
            targets.extend(StatusTarget(site, env_id) for env_id in env_ids)
        elif selector in env_ids:
            targets.append(StatusTarget(site, selector))
        else:
            logger.debug("environment_absent", site=site.name, environment=selector)
    return tuple(targets)


__all__: list[str] = [
    "ALL_ENVIRONMENTS",
    "EnvironmentLister",
    "StatusTarget",
    "resolve_targets",
    "validate_selector",
]
