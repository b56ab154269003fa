from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Optional, Tuple
import logging

from .types import canonical, signed_diff

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeadingFilterConfig:
    """
    Tuning for the heading smoother.

    Attributes:
        alpha (float): EMA gain in (0, 1]; higher follows the sensor faster.
        outlier_deg (float): Jumps larger than this are treated as glitches once warm.
        warmup_samples (int): Samples accepted unconditionally while locking on.
    """
    alpha: float = 0.25
    outlier_deg: float = 60.0
    warmup_samples: int = 10


@dataclass(frozen=True)
class FilterState:
    """
    Smoother memory. None for last_smoothed means no sample has been seen.

    Attributes:
        last_smoothed (Optional[float]): Last published heading in [0, 360).
        sample_count (int): Samples consumed, rejected ones included.
        rejected_count (int): Samples dropped as outliers.
    """
    last_smoothed: Optional[float] = None
    sample_count: int = 0
    rejected_count: int = 0

    @property
    def initialized(self) -> bool:
        return self.last_smoothed is not None


def update(raw: float, state: FilterState,
           cfg: HeadingFilterConfig = HeadingFilterConfig()) -> Tuple[float, FilterState]:
    """
    Feeds one raw heading through the smoother.

    Args:
        raw (float): Heading in degrees, [0, 360). Must not be NaN.
        state (FilterState): Current smoother state; never mutated.
        cfg (HeadingFilterConfig, optional): Tuning. Defaults to HeadingFilterConfig().

    Returns:
        Tuple[float, FilterState]:
            smoothed (float): Published heading in [0, 360).
            new_state (FilterState): State to pass to the next call.
    """
    if state.last_smoothed is None:
        raw = canonical(raw)
        return raw, FilterState(last_smoothed=raw, sample_count=1)

    prev = state.last_smoothed
    delta = signed_diff(raw, prev)
    if abs(delta) > cfg.outlier_deg and state.sample_count > cfg.warmup_samples:
        log.debug(f"[HEADING] rejected {raw:.1f} (jump {delta:+.1f} from {prev:.1f})")
        return prev, replace(state, sample_count=state.sample_count + 1,
                             rejected_count=state.rejected_count + 1)

    smoothed = canonical(prev + cfg.alpha * delta)
    return smoothed, replace(state, last_smoothed=smoothed, sample_count=state.sample_count + 1)


class HeadingFilter:
    """
    Owns the FilterState of one sensor session.

    Callers with more than one heading source must serialise calls to
    update(); the filter does no locking.

    Attributes:
        cfg (HeadingFilterConfig): Tuning.
        state (FilterState): Current smoother state.
    """
    def __init__(self, cfg: HeadingFilterConfig = HeadingFilterConfig()):
        self.cfg = cfg
        self.state = FilterState()

    def update(self, raw: float) -> float:
        """Smooths one sample and returns the published heading."""
        smoothed, self.state = update(raw, self.state, self.cfg)
        return smoothed

    @property
    def heading(self) -> Optional[float]:
        return self.state.last_smoothed

    def reset(self):
        """Forgets all history; the next sample is taken as-is."""
        if self.state.initialized:
            log.info(f"[HEADING] reset after {self.state.sample_count} samples ({self.state.rejected_count} rejected)")
        self.state = FilterState()
