"""
YAML configuration for a navigation session.

Example::

    heading:
      alpha: 0.25
      outlier_deg: 60
      warmup_samples: 10
    navigation:
      align_threshold_deg: 15
      arrive_threshold_km: 0.05
    feedback:
      searching_intensity: 0.09
      arrived_volume: 0.55
    target:
      lat: 37.5547
      lon: 126.9708

Every section is optional; missing ones keep their defaults.
"""
from __future__ import annotations
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Union
import logging
import math

import yaml

from .feedback import FeedbackPolicy
from .heading import HeadingFilterConfig
from .navigation import Navigator, NavigatorConfig
from .types import DEFAULT_TARGET, CoordinateError, GeoPoint

log = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised for malformed or out-of-range configuration values."""


@dataclass
class SessionConfig:
    """
    Everything needed to start a Navigator.

    Attributes:
        heading (HeadingFilterConfig): Heading smoother tuning.
        navigation (NavigatorConfig): Alignment and arrival thresholds.
        feedback (FeedbackPolicy): Feedback intensities.
        target (GeoPoint): Destination.
    """
    heading: HeadingFilterConfig = field(default_factory=HeadingFilterConfig)
    navigation: NavigatorConfig = field(default_factory=NavigatorConfig)
    feedback: FeedbackPolicy = field(default_factory=FeedbackPolicy)
    target: GeoPoint = DEFAULT_TARGET

    def make_navigator(self) -> Navigator:
        return Navigator(self.target, self.navigation, self.heading, self.feedback)


def _section(raw: Dict[str, Any], name: str, cls):
    sec = raw.get(name)
    if sec is None:
        log.warning(f"[CONFIG] Missing section: {name}; using defaults")
        return cls()
    if not isinstance(sec, dict):
        raise ConfigError(f"section '{name}' must be a mapping, got {type(sec).__name__}")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(sec) - known)
    if unknown:
        log.info(f"[CONFIG] Ignoring unknown keys in {name}: {unknown}")
    defaults = cls()
    kwargs = {key: _coerce(name, key, value, getattr(defaults, key))
              for key, value in sec.items() if key in known}
    try:
        return cls(**kwargs)
    except ValueError as e:
        raise ConfigError(f"{name}: {e}") from e


def _coerce(name: str, key: str, value: Any, default: Any):
    """Checks one value against the type of its default; no lossy conversions."""
    bad = ConfigError(f"{name}.{key}: cannot use {value!r}")
    # bool is an int subclass, so test it first
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise bad
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise bad
    try:
        finite = math.isfinite(value)
    except OverflowError:
        finite = False
    if not finite:
        raise bad
    if isinstance(default, int):
        if isinstance(value, float) and not value.is_integer():
            raise bad
        return int(value)
    return float(value)


def _validate(cfg: SessionConfig):
    h, n = cfg.heading, cfg.navigation
    if not 0.0 < h.alpha <= 1.0:
        raise ConfigError(f"heading.alpha must be in (0, 1]: {h.alpha}")
    if h.outlier_deg <= 0.0 or h.outlier_deg > 180.0:
        raise ConfigError(f"heading.outlier_deg must be in (0, 180]: {h.outlier_deg}")
    if h.warmup_samples < 0:
        raise ConfigError(f"heading.warmup_samples must be >= 0: {h.warmup_samples}")
    if n.align_threshold_deg < 0.0:
        raise ConfigError(f"navigation.align_threshold_deg must be >= 0: {n.align_threshold_deg}")
    if n.arrive_threshold_km < 0.0:
        raise ConfigError(f"navigation.arrive_threshold_km must be >= 0: {n.arrive_threshold_km}")


def parse_config(raw: Dict[str, Any]) -> SessionConfig:
    """
    Builds a SessionConfig from an already-loaded mapping.

    Raises:
        ConfigError: On wrong types or out-of-range values.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("configuration root must be a mapping")
    cfg = SessionConfig(
        heading=_section(raw, "heading", HeadingFilterConfig),
        navigation=_section(raw, "navigation", NavigatorConfig),
        feedback=_section(raw, "feedback", FeedbackPolicy),
    )
    tgt = raw.get("target")
    if tgt is None:
        log.info("[CONFIG] No target given; using default target")
    else:
        try:
            cfg.target = GeoPoint.validated(tgt["lat"], tgt["lon"])
        except (KeyError, TypeError) as e:
            raise ConfigError("target needs 'lat' and 'lon'") from e
        except CoordinateError as e:
            raise ConfigError(f"target: {e}") from e
    _validate(cfg)
    return cfg


def load_config(path: Union[str, Path]) -> SessionConfig:
    """
    Reads a YAML configuration file.

    Args:
        path (Union[str, Path]): File to read.

    Returns:
        SessionConfig: Parsed and validated configuration.

    Raises:
        ConfigError: If the YAML is malformed or a value is invalid.
    """
    with open(path, "r") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"cannot parse {path}: {e}") from e
    return parse_config(raw)
