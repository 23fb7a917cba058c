"""Selection of the most specialized bootstrap variant.

Variants are discovered through the ``server_bootstrap.variants`` entry
point group, in the order the installed distributions report them.
Selection is a left-to-right fold starting from the community variant:
a candidate replaces the current winner only if it is more specialized
than that winner. When installed variants specialize the baseline in
unrelated directions, the result depends on discovery order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from importlib.metadata import entry_points

from server_bootstrap.bootstrap.variants import COMMUNITY_VARIANT, BootstrapVariant

logger = logging.getLogger(__name__)

VARIANT_ENTRY_POINT_GROUP = "server_bootstrap.variants"


def discover_variants(
    entry_point_group: str = VARIANT_ENTRY_POINT_GROUP,
) -> list[BootstrapVariant]:
    """Discover variants from Python entry points.

    An entry point may reference a ``BootstrapVariant`` or a zero-argument
    callable returning one. Entry points that fail to load, or do not
    produce a variant, are skipped with a warning.

    Args:
        entry_point_group: Entry point group name.

    Returns:
        Variants in discovery order.
    """
    discovered: list[BootstrapVariant] = []

    for ep in entry_points(group=entry_point_group):
        try:
            obj = ep.load()
            variant = obj if isinstance(obj, BootstrapVariant) else obj()
        except Exception as e:
            logger.warning("Failed to load bootstrap variant '%s': %s", ep.name, e)
            continue
        if not isinstance(variant, BootstrapVariant):
            logger.warning(
                "Entry point '%s' did not produce a BootstrapVariant (got %s)",
                ep.name,
                type(variant).__name__,
            )
            continue
        discovered.append(variant)
        logger.debug("Discovered bootstrap variant: %s", variant.name)

    return discovered


def select_variant(
    candidates: Iterable[BootstrapVariant],
    baseline: BootstrapVariant = COMMUNITY_VARIANT,
) -> BootstrapVariant:
    """Pick the winner of a pairwise "more specialized" fold.

    Args:
        candidates: Discovered variants, in discovery order.
        baseline: Starting winner, returned when nothing beats it.

    Returns:
        The selected variant. Never None.
    """
    winner = baseline
    for candidate in candidates:
        if candidate.is_more_specialized_than(winner):
            logger.debug(
                "Variant %s is more specialized than %s", candidate.name, winner.name
            )
            winner = candidate
    return winner


def load_most_specialized_variant(
    entry_point_group: str = VARIANT_ENTRY_POINT_GROUP,
) -> BootstrapVariant:
    """Discover installed variants and select the most specialized one."""
    variant = select_variant(discover_variants(entry_point_group))
    logger.info("Selected bootstrap variant: %s", variant.name)
    return variant
