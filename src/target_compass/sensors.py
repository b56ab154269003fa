"""
Heading acquisition: turns raw orientation events into one compass heading.

Browsers and phones report orientation in different shapes. An event here is
a plain mapping carrying whichever of these keys the platform provides:

- ``quaternion``: absolute orientation (x, y, z, w) in the east-north-up frame
- ``webkitCompassHeading``: iOS compass heading, clockwise from north
- ``alpha``: device-orientation alpha, counter-clockwise from the reference

Each HeadingSource handles one of them. The modality is picked once when the
session starts (select_source) and kept; there is no mid-session failover.
"""
from __future__ import annotations
from typing import Mapping, Optional, Sequence
import logging
import math

import numpy as np

from .types import canonical

log = logging.getLogger(__name__)


def _finite(value) -> Optional[float]:
    if value is None:
        return None
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    return v if math.isfinite(v) else None


def quaternion_to_heading(q: Sequence[float]) -> float:
    """
    Compass heading of the device's top edge for an ENU orientation quaternion.

    Args:
        q (Sequence[float]): Quaternion as (x, y, z, w); need not be normalised.

    Returns:
        float: Heading in degrees clockwise from north, [0, 360).

    Raises:
        ValueError: If q is not four finite numbers or has zero length.
    """
    q = np.asarray(q, dtype=float)
    if q.shape != (4,) or not np.all(np.isfinite(q)):
        raise ValueError(f"expected four finite components, got {q!r}")
    norm = np.linalg.norm(q)
    if norm == 0.0:
        raise ValueError("zero-length quaternion")
    x, y, z, w = q / norm
    # yaw is counter-clockwise about up; compass heading runs clockwise
    yaw = np.arctan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (y * y + z * z))
    return canonical(-float(np.degrees(yaw)))


class HeadingSource:
    """Base class for one orientation modality."""
    name = "base"
    key = ""

    def supports(self, event: Mapping) -> bool:
        return event.get(self.key) is not None

    def heading(self, event: Mapping) -> Optional[float]:
        """Heading in [0, 360), or None when the event carries nothing usable."""
        raise NotImplementedError


class QuaternionSource(HeadingSource):
    name = "absolute-orientation"
    key = "quaternion"

    def heading(self, event: Mapping) -> Optional[float]:
        q = event.get(self.key)
        if q is None:
            return None
        try:
            return quaternion_to_heading(q)
        except (TypeError, ValueError) as e:
            log.debug(f"[SENSOR] dropped quaternion {q!r}: {e}")
            return None


class CompassHeadingSource(HeadingSource):
    name = "compass"
    key = "webkitCompassHeading"

    def heading(self, event: Mapping) -> Optional[float]:
        h = _finite(event.get(self.key))
        if h is None:
            log.debug(f"[SENSOR] dropped compass heading {event.get(self.key)!r}")
            return None
        return canonical(h)


class OrientationAlphaSource(HeadingSource):
    name = "device-orientation"
    key = "alpha"

    def heading(self, event: Mapping) -> Optional[float]:
        a = _finite(event.get(self.key))
        if a is None:
            log.debug(f"[SENSOR] dropped alpha {event.get(self.key)!r}")
            return None
        return canonical(360.0 - a)


DEFAULT_SOURCES = (QuaternionSource(), CompassHeadingSource(), OrientationAlphaSource())


def select_source(event: Mapping, sources: Sequence[HeadingSource] = DEFAULT_SOURCES) -> Optional[HeadingSource]:
    """
    Picks the first modality, in preference order, that the event supports.

    Args:
        event (Mapping): First orientation event of the session.
        sources (Sequence[HeadingSource], optional): Candidates, best first.

    Returns:
        Optional[HeadingSource]: The chosen source, or None if no modality matches.
    """
    for src in sources:
        if src.supports(event):
            log.info(f"[SENSOR] using {src.name} heading")
            return src
    return None
