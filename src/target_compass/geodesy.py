from __future__ import annotations
from typing import Sequence, Tuple, Union
import math

import numpy as np

# Geo stack
try:
    from pyproj import Geod
except Exception as e:
    raise ImportError(
        "target_compass.geodesy requires pyproj. "
        "Install with: pip install target-compass"
    ) from e

from .types import GeoPoint, canonical

Number = Union[int, float]
EARTH_RADIUS_KM = 6371.0
_WGS84 = Geod(ellps="WGS84")


def same_point(a: GeoPoint, b: GeoPoint) -> bool:
    """
    Whether two GeoPoints name the same place: longitudes are compared mod 360
    and any longitude matches at a pole.
    """
    if a.lat_deg != b.lat_deg:
        return False
    return abs(a.lat_deg) == 90.0 or canonical(a.lon_deg - b.lon_deg) == 0.0


def bearing_deg(origin: GeoPoint, target: GeoPoint) -> float:
    """
    Initial great-circle bearing from origin to target on a spherical Earth.

    Args:
        origin (GeoPoint): Start point.
        target (GeoPoint): End point.

    Returns:
        float: Bearing in degrees clockwise from true north, [0, 360).
            Coincident points have no defined bearing and return 0.0.
    """
    if same_point(origin, target):
        return 0.0
    phi1 = math.radians(origin.lat_deg); phi2 = math.radians(target.lat_deg)
    dlon = math.radians(target.lon_deg - origin.lon_deg)
    y = math.sin(dlon) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlon)
    return canonical(math.degrees(math.atan2(y, x)))


def distance_km(origin: GeoPoint, target: GeoPoint) -> float:
    """
    Great-circle distance using the Haversine formula (R = 6371 km).

    Args:
        origin (GeoPoint): Start point.
        target (GeoPoint): End point.

    Returns:
        float: Distance in kilometres, >= 0.
    """
    if same_point(origin, target):
        return 0.0
    phi1 = math.radians(origin.lat_deg); phi2 = math.radians(target.lat_deg)
    dphi = phi2 - phi1
    dlon = math.radians(target.lon_deg - origin.lon_deg)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlon / 2) ** 2
    # rounding can push a slightly outside [0, 1] near antipodes
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_KM * 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))


def geodesic_inverse(origin: GeoPoint, target: GeoPoint) -> Tuple[float, float]:
    """
    Bearing and distance on the WGS84 ellipsoid, for cross-checking the
    spherical results.

    Args:
        origin (GeoPoint): Start point.
        target (GeoPoint): End point.

    Returns:
        Tuple[float, float]:
            bearing_deg (float): Forward azimuth in [0, 360), 0.0 for coincident points.
            distance_km (float): Ellipsoidal distance in kilometres.
    """
    if same_point(origin, target):
        return 0.0, 0.0
    az, _back, dist_m = _WGS84.inv(origin.lon_deg, origin.lat_deg, target.lon_deg, target.lat_deg)
    return canonical(az), dist_m / 1000.0


def _as_array(x: Union[Number, Sequence[Number]]) -> np.ndarray:
    return np.atleast_1d(np.asarray(x, dtype=float))


def _same_mask(lats: np.ndarray, lons: np.ndarray, target: GeoPoint) -> np.ndarray:
    same_lon = (np.mod(lons - target.lon_deg, 360.0) == 0.0) | (np.abs(lats) == 90.0)
    return (lats == target.lat_deg) & same_lon


def bearings_deg(
    lat: Union[Number, Sequence[Number]],
    lon: Union[Number, Sequence[Number]],
    target: GeoPoint,
) -> np.ndarray:
    """
    Vectorised bearing_deg from each recorded fix to a single target.

    Args:
        lat (Union[Number, Sequence[Number]]): Latitude(s) in degrees.
        lon (Union[Number, Sequence[Number]]): Longitude(s) in degrees.
        target (GeoPoint): Common end point.

    Returns:
        np.ndarray: Bearings in [0, 360); 0.0 where a fix coincides with the target.
    """
    lats = _as_array(lat); lons = _as_array(lon)
    if lats.shape != lons.shape:
        raise ValueError("lat and lon must have the same length")
    phi1 = np.radians(lats); phi2 = math.radians(target.lat_deg)
    dlon = np.radians(target.lon_deg - lons)
    y = np.sin(dlon) * math.cos(phi2)
    x = np.cos(phi1) * math.sin(phi2) - np.sin(phi1) * math.cos(phi2) * np.cos(dlon)
    out = np.mod(np.degrees(np.arctan2(y, x)), 360.0)
    out = np.where(out >= 360.0, 0.0, out)
    return np.where(_same_mask(lats, lons, target), 0.0, out)


def distances_km(
    lat: Union[Number, Sequence[Number]],
    lon: Union[Number, Sequence[Number]],
    target: GeoPoint,
) -> np.ndarray:
    """
    Vectorised distance_km from each recorded fix to a single target.

    Returns:
        np.ndarray: Distances in kilometres.
    """
    lats = _as_array(lat); lons = _as_array(lon)
    if lats.shape != lons.shape:
        raise ValueError("lat and lon must have the same length")
    phi1 = np.radians(lats); phi2 = math.radians(target.lat_deg)
    dphi = phi2 - phi1
    dlon = np.radians(target.lon_deg - lons)
    a = np.sin(dphi / 2) ** 2 + np.cos(phi1) * math.cos(phi2) * np.sin(dlon / 2) ** 2
    a = np.clip(a, 0.0, 1.0)
    out = EARTH_RADIUS_KM * 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))
    return np.where(_same_mask(lats, lons, target), 0.0, out)
