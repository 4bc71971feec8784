"""Ceiling extraction from cloud layer lists."""

from collections.abc import Iterable

from flightcat.models.weather import CEILING_COVERS, CloudLayer


def ceiling(clouds: Iterable[CloudLayer] | None) -> int | None:
    """Base of the first BKN/OVC/OVX layer, scanning in list order.

    Layers are expected lowest-first, as the provider delivers them.
    FEW and SCT never form a ceiling.
    """
    if not clouds:
        return None
    for layer in clouds:
        if layer.cover in CEILING_COVERS:
            return layer.base
    return None


def lowest_cloud_base(clouds: Iterable[CloudLayer] | None) -> int | None:
    """Lowest reported base of any layer regardless of cover. Display only."""
    if not clouds:
        return None
    bases = [layer.base for layer in clouds if layer.base is not None]
    return min(bases) if bases else None
