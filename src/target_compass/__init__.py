from .types import (GeoPoint, NavigationSnapshot, FeedbackKind, FeedbackLevel,
                    CoordinateError, DEFAULT_TARGET, canonical, signed_diff)
from .geodesy import bearing_deg, distance_km, geodesic_inverse, bearings_deg, distances_km
from .heading import FilterState, HeadingFilter, HeadingFilterConfig, update
from .navigation import Navigator, NavigatorConfig, derive
from .feedback import FeedbackPolicy, GainRamp, map_feedback, target_volume
from .sensors import (HeadingSource, QuaternionSource, CompassHeadingSource,
                      OrientationAlphaSource, select_source, quaternion_to_heading)
from .radar import RadarBlip, radar_position, zoom_for_distance, format_distance
from .config import ConfigError, SessionConfig, load_config, parse_config
__all__ = [
    "GeoPoint","NavigationSnapshot","FeedbackKind","FeedbackLevel",
    "CoordinateError","DEFAULT_TARGET","canonical","signed_diff",
    "bearing_deg","distance_km","geodesic_inverse","bearings_deg","distances_km",
    "FilterState","HeadingFilter","HeadingFilterConfig","update",
    "Navigator","NavigatorConfig","derive",
    "FeedbackPolicy","GainRamp","map_feedback","target_volume",
    "HeadingSource","QuaternionSource","CompassHeadingSource",
    "OrientationAlphaSource","select_source","quaternion_to_heading",
    "RadarBlip","radar_position","zoom_for_distance","format_distance",
    "ConfigError","SessionConfig","load_config","parse_config",
]
