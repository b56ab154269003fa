"""Tests for snapshot derivation and the navigation session."""

from __future__ import annotations

import dataclasses
import math

import pytest

from target_compass.feedback import FeedbackPolicy
from target_compass.geodesy import EARTH_RADIUS_KM, distance_km
from target_compass.heading import HeadingFilterConfig
from target_compass.navigation import Navigator, NavigatorConfig, derive
from target_compass.types import FeedbackKind, GeoPoint

USER = GeoPoint(37.5000, 127.0000)
TARGET = GeoPoint(37.5547, 126.9708)
ORIGIN = GeoPoint(0.0, 0.0)
EAST = GeoPoint(0.0, 1.0)    # bearing exactly 90 from ORIGIN
NORTH = GeoPoint(1.0, 0.0)   # bearing exactly 0 from ORIGIN


def north_of(point: GeoPoint, km: float) -> GeoPoint:
    return GeoPoint(point.lat_deg + math.degrees(km / EARTH_RADIUS_KM), point.lon_deg)


class TestDerive:
    """Snapshot fields for a single input triple."""

    def test_seoul_scenario(self) -> None:
        snap = derive(USER, TARGET, 0.0)
        assert snap.bearing_deg == pytest.approx(337.0, abs=0.5)
        assert snap.distance_km == pytest.approx(6.6, abs=0.1)
        assert snap.rotation_deg == pytest.approx(snap.bearing_deg)
        assert not snap.aligned
        assert not snap.arrived

    def test_rotation_is_clockwise_from_heading(self) -> None:
        snap = derive(ORIGIN, EAST, 100.0)
        assert snap.rotation_deg == pytest.approx(350.0)
        assert snap.heading_error_deg == pytest.approx(-10.0)

    @pytest.mark.parametrize("heading, aligned", [
        (75.1, True),    # error 14.9
        (75.0, True),    # error 15.0, inclusive
        (74.9, False),   # error 15.1
        (104.9, True),
        (105.1, False),
    ])
    def test_alignment_boundary(self, heading, aligned) -> None:
        assert derive(ORIGIN, EAST, heading).aligned is aligned

    def test_alignment_uses_shortest_turn(self) -> None:
        snap = derive(ORIGIN, NORTH, 359.0)
        assert snap.aligned
        assert snap.rotation_deg == pytest.approx(1.0)
        snap = derive(ORIGIN, NORTH, 358.0, align_threshold_deg=1.0)
        assert not snap.aligned

    def test_arrival_boundary(self) -> None:
        assert derive(USER, north_of(USER, 0.0499), 0.0).arrived
        assert not derive(USER, north_of(USER, 0.0501), 0.0).arrived

    def test_arrival_threshold_is_exclusive(self) -> None:
        t = north_of(USER, 0.03)
        d = distance_km(USER, t)
        assert not derive(USER, t, 0.0, arrive_threshold_km=d).arrived
        assert derive(USER, t, 0.0, arrive_threshold_km=d + 1e-9).arrived

    def test_arrival_does_not_imply_alignment(self) -> None:
        snap = derive(USER, north_of(USER, 0.01), 180.0)
        assert snap.arrived and not snap.aligned

    def test_standing_on_target(self) -> None:
        snap = derive(USER, USER, 30.0)
        assert snap.bearing_deg == 0.0
        assert snap.distance_km == 0.0
        assert snap.rotation_deg == pytest.approx(330.0)
        assert snap.arrived

    def test_snapshot_is_immutable(self) -> None:
        snap = derive(USER, TARGET, 0.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            snap.aligned = True


class TestNavigator:
    """Session wiring: two input streams, one snapshot."""

    def test_no_snapshot_until_both_streams_report(self) -> None:
        nav = Navigator(TARGET)
        assert nav.update_heading(10.0) is None
        assert nav.snapshot is None and nav.feedback is None
        snap = nav.update_position(USER.lat_deg, USER.lon_deg)
        assert snap is not None
        assert nav.snapshot is snap
        assert nav.feedback.kind is FeedbackKind.SEARCHING

    def test_position_without_heading(self) -> None:
        nav = Navigator(TARGET)
        assert nav.update_position(USER.lat_deg, USER.lon_deg) is None
        assert nav.position == USER

    def test_snapshot_replaced_on_every_update(self) -> None:
        nav = Navigator(TARGET)
        nav.update_position(USER.lat_deg, USER.lon_deg)
        first = nav.update_heading(0.0)
        second = nav.update_heading(0.0)
        assert first is not second
        assert first == second

    def test_heading_goes_through_filter(self) -> None:
        nav = Navigator(TARGET, heading_cfg=HeadingFilterConfig(alpha=0.5))
        nav.update_position(USER.lat_deg, USER.lon_deg)
        nav.update_heading(300.0)
        nav.update_heading(320.0)
        assert nav.heading == pytest.approx(310.0)

    def test_stale_samples_are_dropped(self) -> None:
        nav = Navigator(TARGET)
        nav.update_position(USER.lat_deg, USER.lon_deg, timestamp=10.0)
        nav.update_heading(100.0, timestamp=5.0)
        snap = nav.update_heading(200.0, timestamp=4.0)
        assert nav.heading == 100.0
        assert snap is nav.snapshot
        nav.update_position(0.0, 0.0, timestamp=9.0)
        assert nav.position == USER

    def test_streams_are_ordered_independently(self) -> None:
        nav = Navigator(TARGET)
        nav.update_position(USER.lat_deg, USER.lon_deg, timestamp=100.0)
        assert nav.update_heading(10.0, timestamp=1.0) is not None

    def test_arrival_beats_misalignment(self) -> None:
        nav = Navigator(north_of(USER, 0.01))
        nav.update_position(USER.lat_deg, USER.lon_deg)
        nav.update_heading(180.0)
        assert nav.snapshot.arrived and not nav.snapshot.aligned
        assert nav.feedback.kind is FeedbackKind.ARRIVED

    def test_set_target_keeps_heading(self) -> None:
        nav = Navigator(TARGET)
        nav.update_position(0.0, 0.0)
        nav.update_heading(90.0)
        snap = nav.set_target(EAST)
        assert snap.aligned
        assert nav.heading == 90.0

    def test_reset_discards_everything(self) -> None:
        nav = Navigator(TARGET)
        nav.update_position(USER.lat_deg, USER.lon_deg, timestamp=50.0)
        nav.update_heading(45.0, timestamp=50.0)
        nav.reset()
        assert nav.snapshot is None and nav.feedback is None
        assert nav.position is None and nav.heading is None
        # timestamps are forgotten too
        nav.update_position(USER.lat_deg, USER.lon_deg, timestamp=1.0)
        assert nav.update_heading(270.0, timestamp=1.0).rotation_deg == pytest.approx(67.0, abs=0.5)

    def test_thresholds_and_policy_are_used(self) -> None:
        nav = Navigator(TARGET, cfg=NavigatorConfig(align_threshold_deg=90.0),
                        policy=FeedbackPolicy(searching_intensity=0.2))
        nav.update_position(USER.lat_deg, USER.lon_deg)
        nav.update_heading(0.0)
        assert nav.snapshot.aligned
        assert nav.feedback.kind is FeedbackKind.SILENT
        nav.update_heading(0.0)
        nav.set_target(GeoPoint(37.4, 127.0))
        assert nav.feedback.intensity == pytest.approx(0.2)
