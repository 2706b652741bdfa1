"""
Map capability.

Whether the host can show an interactive map is decided once at startup and
passed to sessions; nothing re-detects it per call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from nearshop.config.settings import Settings
from nearshop.core.geo import GeoPoint


@dataclass(frozen=True)
class MapRegion:
    """Visible map window: a center plus latitude/longitude spans in degrees."""

    center: GeoPoint
    lat_delta: float
    lng_delta: float


class MapCapability:
    available: ClassVar[bool] = False

    def initial_region(self, reference: GeoPoint | None) -> MapRegion | None:
        raise NotImplementedError


@dataclass(frozen=True)
class MapCapable(MapCapability):
    default_center: GeoPoint
    region_delta: float = 0.01
    available: ClassVar[bool] = True

    def initial_region(self, reference: GeoPoint | None) -> MapRegion:
        """Center on the current reference point, else on the default center."""
        return MapRegion(
            center=reference if reference is not None else self.default_center,
            lat_delta=self.region_delta,
            lng_delta=self.region_delta,
        )


@dataclass(frozen=True)
class MapUnavailable(MapCapability):
    reason: str
    available: ClassVar[bool] = False

    def initial_region(self, reference: GeoPoint | None) -> None:
        return None


def select_map_capability(settings: Settings) -> MapCapability:
    """Pick the capability variant from configuration (call once at startup)."""
    cfg = settings.map
    if not cfg.enabled:
        return MapUnavailable(reason=cfg.unavailable_message)
    return MapCapable(
        default_center=GeoPoint(lat=cfg.default_center.lat, lng=cfg.default_center.lng),
        region_delta=cfg.region_delta,
    )
