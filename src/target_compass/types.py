from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import math


class CoordinateError(ValueError):
    """Raised when a latitude/longitude pair falls outside its valid range."""


def canonical(deg: float) -> float:
    """
    Normalizes an angle to the range [0, 360).

    Args:
        deg (float): Angle in degrees, any sign or magnitude.

    Returns:
        float: Equivalent angle in [0, 360).
    """
    c = math.fmod(deg, 360.0)  # exact, keeps the sign of deg
    if c < 0.0:
        c += 360.0
    # tiny negatives round up to exactly 360.0
    return 0.0 if c >= 360.0 else c


def signed_diff(a: float, b: float) -> float:
    """
    Shortest rotation that takes angle b onto angle a.

    Args:
        a (float): Target angle in degrees.
        b (float): Starting angle in degrees.

    Returns:
        float: Signed difference in (-180, 180]; positive means clockwise.
    """
    d = canonical(a - b)
    return d - 360.0 if d > 180.0 else d


@dataclass(frozen=True)
class GeoPoint:
    """
    A WGS84 position.

    Attributes:
        lat_deg (float): Latitude in degrees, [-90, 90].
        lon_deg (float): Longitude in degrees, [-180, 180].
    """
    lat_deg: float
    lon_deg: float

    @classmethod
    def validated(cls, lat_deg: float, lon_deg: float) -> "GeoPoint":
        """
        Builds a GeoPoint from untrusted input (user entry, sensor fix).

        Raises:
            CoordinateError: If either value is NaN or out of range.
        """
        try:
            lat = float(lat_deg); lon = float(lon_deg)
        except (TypeError, ValueError) as e:
            raise CoordinateError(f"not a coordinate pair: {lat_deg!r}, {lon_deg!r}") from e
        if math.isnan(lat) or not -90.0 <= lat <= 90.0:
            raise CoordinateError(f"latitude out of range [-90, 90]: {lat_deg!r}")
        if math.isnan(lon) or not -180.0 <= lon <= 180.0:
            raise CoordinateError(f"longitude out of range [-180, 180]: {lon_deg!r}")
        return cls(lat, lon)


# Hannam-dong, Seoul
DEFAULT_TARGET = GeoPoint(37.5547, 126.9708)


@dataclass(frozen=True)
class NavigationSnapshot:
    """
    Navigation state derived from one (user, target, heading) triple.

    Attributes:
        bearing_deg (float): Great-circle bearing from user to target, [0, 360).
        distance_km (float): Great-circle distance in kilometres.
        rotation_deg (float): Clockwise turn from heading to face the target, [0, 360).
        aligned (bool): Whether the device points at the target within tolerance.
        arrived (bool): Whether the user is within the arrival radius.
    """
    bearing_deg: float
    distance_km: float
    rotation_deg: float
    aligned: bool
    arrived: bool

    @property
    def heading_error_deg(self) -> float:
        """Signed turn in (-180, 180] still needed to face the target."""
        return signed_diff(self.rotation_deg, 0.0)


class FeedbackKind(Enum):
    SILENT = 0
    SEARCHING = 1
    ARRIVED = 2


@dataclass(frozen=True)
class FeedbackLevel:
    """
    Feedback category plus intensity, consumed by the audio/visual sinks.

    Attributes:
        kind (FeedbackKind): Category.
        intensity (float): 0 for SILENT, (0, 1] for SEARCHING, 1 for ARRIVED.
    """
    kind: FeedbackKind
    intensity: float = 0.0

    @classmethod
    def silent(cls) -> "FeedbackLevel":
        return cls(FeedbackKind.SILENT, 0.0)

    @classmethod
    def searching(cls, intensity: float) -> "FeedbackLevel":
        if not 0.0 < intensity <= 1.0:
            raise ValueError(f"searching intensity must be in (0, 1]: {intensity}")
        return cls(FeedbackKind.SEARCHING, intensity)

    @classmethod
    def arrived(cls) -> "FeedbackLevel":
        return cls(FeedbackKind.ARRIVED, 1.0)
