from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import logging

from .feedback import DEFAULT_POLICY, FeedbackPolicy, map_feedback
from .geodesy import bearing_deg, distance_km
from .heading import HeadingFilter, HeadingFilterConfig
from .types import DEFAULT_TARGET, FeedbackLevel, GeoPoint, NavigationSnapshot, canonical, signed_diff

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigatorConfig:
    """
    Configuration parameters for the Navigator.

    Attributes:
        align_threshold_deg (float): Max |heading error| still counted as aligned (inclusive).
        arrive_threshold_km (float): Distance below which the target counts as reached (exclusive).
    """
    align_threshold_deg: float = 15.0
    arrive_threshold_km: float = 0.05


def derive(user: GeoPoint, target: GeoPoint, heading: float,
           align_threshold_deg: float = 15.0,
           arrive_threshold_km: float = 0.05) -> NavigationSnapshot:
    """
    Computes the full navigation state for one user position and heading.

    Args:
        user (GeoPoint): Current position.
        target (GeoPoint): Destination.
        heading (float): Filtered device heading, [0, 360).
        align_threshold_deg (float, optional): Alignment tolerance. Defaults to 15.
        arrive_threshold_km (float, optional): Arrival radius. Defaults to 0.05.

    Returns:
        NavigationSnapshot: Bearing, distance, clockwise rotation to target,
            alignment and arrival flags.
    """
    bearing = bearing_deg(user, target)
    dist = distance_km(user, target)
    err = signed_diff(bearing, heading)
    return NavigationSnapshot(
        bearing_deg=bearing,
        distance_km=dist,
        rotation_deg=canonical(err),
        aligned=abs(err) <= align_threshold_deg,
        arrived=dist < arrive_threshold_km,
    )


class Navigator:
    """
    One navigation session: a target, the latest fix and a heading filter.

    Position and heading arrive as two independent streams. Each accepted
    sample rebuilds the snapshot and feedback from scratch; a sample older
    than the last one applied from the same stream is dropped.

    Attributes:
        target (GeoPoint): Destination.
        cfg (NavigatorConfig): Thresholds.
        policy (FeedbackPolicy): Feedback intensities.
        heading_filter (HeadingFilter): Smoother for raw headings.
        position (Optional[GeoPoint]): Last applied fix, None until the first one.
    """
    def __init__(self, target: GeoPoint = DEFAULT_TARGET,
                 cfg: NavigatorConfig = NavigatorConfig(),
                 heading_cfg: HeadingFilterConfig = HeadingFilterConfig(),
                 policy: FeedbackPolicy = DEFAULT_POLICY):
        self.target = target; self.cfg = cfg; self.policy = policy
        self.heading_filter = HeadingFilter(heading_cfg)
        self.position: Optional[GeoPoint] = None
        self._position_ts: Optional[float] = None
        self._heading_ts: Optional[float] = None
        self._snapshot: Optional[NavigationSnapshot] = None
        self._feedback: Optional[FeedbackLevel] = None

    # ---------- Inputs ----------
    def update_position(self, lat_deg: float, lon_deg: float,
                        timestamp: Optional[float] = None) -> Optional[NavigationSnapshot]:
        """
        Applies a position fix.

        Args:
            lat_deg (float): Latitude in degrees, already validated.
            lon_deg (float): Longitude in degrees, already validated.
            timestamp (Optional[float], optional): Fix time; stale fixes are dropped.

        Returns:
            Optional[NavigationSnapshot]: The current snapshot, None while no heading is known.
        """
        if self._stale(timestamp, self._position_ts):
            log.debug(f"[NAV] dropped stale fix at t={timestamp} (last {self._position_ts})")
            return self._snapshot
        if timestamp is not None:
            self._position_ts = timestamp
        self.position = GeoPoint(lat_deg, lon_deg)
        return self._recompute()

    def update_heading(self, raw_deg: float,
                       timestamp: Optional[float] = None) -> Optional[NavigationSnapshot]:
        """
        Feeds one raw heading sample through the filter.

        Args:
            raw_deg (float): Heading in degrees from the acquisition layer.
            timestamp (Optional[float], optional): Sample time; stale samples are dropped.

        Returns:
            Optional[NavigationSnapshot]: The current snapshot, None while no fix is known.
        """
        if self._stale(timestamp, self._heading_ts):
            log.debug(f"[NAV] dropped stale heading at t={timestamp} (last {self._heading_ts})")
            return self._snapshot
        if timestamp is not None:
            self._heading_ts = timestamp
        self.heading_filter.update(raw_deg)
        return self._recompute()

    def set_target(self, target: GeoPoint) -> Optional[NavigationSnapshot]:
        """Moves the destination; the heading filter keeps its history."""
        log.info(f"[NAV] target set to ({target.lat_deg:.5f}, {target.lon_deg:.5f})")
        self.target = target
        return self._recompute()

    def reset(self):
        """Ends the session: drops filter history, fix and snapshot."""
        self.heading_filter.reset()
        self.position = None
        self._position_ts = self._heading_ts = None
        self._snapshot = self._feedback = None

    # ---------- Outputs ----------
    @property
    def heading(self) -> Optional[float]:
        return self.heading_filter.heading

    @property
    def snapshot(self) -> Optional[NavigationSnapshot]:
        return self._snapshot

    @property
    def feedback(self) -> Optional[FeedbackLevel]:
        return self._feedback

    # ---------- Helpers ----------
    @staticmethod
    def _stale(ts: Optional[float], last: Optional[float]) -> bool:
        return ts is not None and last is not None and ts < last

    def _recompute(self) -> Optional[NavigationSnapshot]:
        heading = self.heading_filter.heading
        if self.position is None or heading is None:
            self._snapshot = self._feedback = None
            return None
        snap = derive(self.position, self.target, heading,
                      self.cfg.align_threshold_deg, self.cfg.arrive_threshold_km)
        fb = map_feedback(snap, self.policy)
        if self._feedback is not None and fb.kind is not self._feedback.kind:
            log.debug(f"[NAV] feedback {self._feedback.kind.name} -> {fb.kind.name} "
                      f"(d={snap.distance_km:.3f} km, err={snap.heading_error_deg:+.1f})")
        self._snapshot, self._feedback = snap, fb
        return snap
