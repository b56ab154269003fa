from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .types import FeedbackKind, FeedbackLevel, NavigationSnapshot


@dataclass(frozen=True)
class FeedbackPolicy:
    """
    Intensities used by the audio/visual actuation layer.

    Attributes:
        searching_intensity (float): Level emitted while off course.
        arrived_volume (float): Reference volume for the arrival signal.
        scale_by_error (bool): Grow the searching level with angular error
            instead of using the fixed level.
        max_searching_intensity (float): Ceiling when scale_by_error is on.
    """
    searching_intensity: float = 0.09
    arrived_volume: float = 0.55
    scale_by_error: bool = False
    max_searching_intensity: float = 0.3

    def __post_init__(self):
        # NaN fails every comparison below, so it is rejected too
        if not 0.0 < self.searching_intensity <= 1.0:
            raise ValueError(f"searching_intensity must be in (0, 1]: {self.searching_intensity}")
        if not 0.0 < self.max_searching_intensity <= 1.0:
            raise ValueError(f"max_searching_intensity must be in (0, 1]: {self.max_searching_intensity}")
        if not 0.0 <= self.arrived_volume <= 1.0:
            raise ValueError(f"arrived_volume must be in [0, 1]: {self.arrived_volume}")


DEFAULT_POLICY = FeedbackPolicy()


def map_feedback(snap: NavigationSnapshot, policy: FeedbackPolicy = DEFAULT_POLICY) -> FeedbackLevel:
    """
    Maps a snapshot to a feedback category. Arrival wins over misalignment,
    misalignment wins over on-course.

    The fixed searching level is the default on purpose; scale_by_error gives
    a level that rises from searching_intensity at 0° error to
    max_searching_intensity at 180°.

    Stateless: callers driving sound or animation should ramp between levels
    (see GainRamp), since the level can flip on every sample near a threshold.
    """
    if snap.arrived:
        return FeedbackLevel.arrived()
    if not snap.aligned:
        intensity = policy.searching_intensity
        if policy.scale_by_error:
            frac = min(1.0, abs(snap.heading_error_deg) / 180.0)
            top = max(policy.max_searching_intensity, policy.searching_intensity)
            intensity = policy.searching_intensity + (top - policy.searching_intensity) * frac
        return FeedbackLevel.searching(min(1.0, intensity))
    return FeedbackLevel.silent()


def target_volume(level: Optional[FeedbackLevel], policy: FeedbackPolicy = DEFAULT_POLICY) -> float:
    """Output volume for a level; None (no snapshot yet) is silence."""
    if level is None or level.kind is FeedbackKind.SILENT:
        return 0.0
    if level.kind is FeedbackKind.ARRIVED:
        return policy.arrived_volume
    return level.intensity


class GainRamp:
    """
    Exponential gain ramp applied at the audio sink so that level changes
    fade instead of clicking.

    Attributes:
        rate (float): Fraction of the remaining gap closed per step, (0, 1].
        gain (float): Current output gain.
    """
    def __init__(self, rate: float = 0.2, gain: float = 0.0):
        if not 0.0 < rate <= 1.0:
            raise ValueError(f"rate must be in (0, 1]: {rate}")
        self.rate = rate
        self.gain = gain

    def step(self, target: float) -> float:
        self.gain += self.rate * (target - self.gain)
        # snap once inaudibly close
        if abs(target - self.gain) < 1e-4:
            self.gain = target
        return self.gain
