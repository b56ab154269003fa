"""
Radar view helpers: auto-zoom, blip placement and distance labels.

The radar is drawn heading-up: the user sits at the centre, straight up is
the direction the device faces, and the target blip sits at its bearing
relative to that, scaled by distance and zoom.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import math

from .types import signed_diff

RADAR_RADIUS_PX = 120.0
MAX_DISTANCE_KM = 2.0
MIN_ZOOM = 0.3
MAX_ZOOM = 5.0
ZOOM_STEP = 0.5

# (upper distance bound in km, zoom)
_AUTO_ZOOM = ((0.5, 3.0), (1.0, 2.0), (3.0, 1.0), (5.0, 0.7))


@dataclass(frozen=True)
class RadarBlip:
    x: float
    y: float
    visible: bool


def zoom_for_distance(distance_km: float) -> float:
    """Auto-zoom level for a distance: closer targets get magnified."""
    for bound, zoom in _AUTO_ZOOM:
        if distance_km < bound:
            return zoom
    return 0.5


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def zoom_in(zoom: float) -> float:
    return clamp_zoom(zoom + ZOOM_STEP)


def zoom_out(zoom: float) -> float:
    return clamp_zoom(zoom - ZOOM_STEP)


def radar_position(bearing_deg: Optional[float], heading_deg: Optional[float],
                   distance_km: Optional[float], zoom: float = 1.0,
                   radius_px: float = RADAR_RADIUS_PX,
                   max_distance_km: float = MAX_DISTANCE_KM) -> RadarBlip:
    """
    Screen offset of the target blip from the radar centre.

    Args:
        bearing_deg (Optional[float]): Bearing to target.
        heading_deg (Optional[float]): Device heading.
        distance_km (Optional[float]): Distance to target.
        zoom (float, optional): Zoom factor. Defaults to 1.0.
        radius_px (float, optional): Radar radius in pixels. Defaults to 120.
        max_distance_km (float, optional): Distance drawn at the rim before zoom. Defaults to 2.

    Returns:
        RadarBlip: Pixel offset with y growing downwards; invisible until all
            three inputs are known.
    """
    if bearing_deg is None or heading_deg is None or distance_km is None:
        return RadarBlip(0.0, 0.0, False)
    relative = signed_diff(bearing_deg, heading_deg)
    r = min(distance_km / max_distance_km, 1.0) * zoom * radius_px
    # 0 deg points up the screen
    a = math.radians(relative - 90.0)
    return RadarBlip(math.cos(a) * r, math.sin(a) * r, True)


def format_distance(distance_km: Optional[float]) -> str:
    """Distance label: metres below 1 km, kilometres with two decimals above."""
    if distance_km is None:
        return "calculating..."
    if distance_km < 1.0:
        return f"{distance_km * 1000:.0f}m"
    return f"{distance_km:.2f}km"
