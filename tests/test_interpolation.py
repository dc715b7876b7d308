"""Tests for keyframe interpolation."""

import numpy as np
import pytest

from springforming.model.interpolation import (
    interpolate,
    interpolate_many,
    profile_position_range,
    profile_time_range,
)
from springforming.model.process import Keyframe


KEYFRAMES = (
    Keyframe(0.0, 0.0),
    Keyframe(1.0, 10.0),
    Keyframe(3.0, 30.0),
    Keyframe(4.0, 30.0),
    Keyframe(5.0, 0.0),
)


class TestInterpolate:

    def test_empty_keyframes_return_zero(self):
        assert interpolate((), 1.0) == 0.0

    @pytest.mark.parametrize("eps", [1e-9, 0.5, 100.0])
    def test_clamped_outside_range(self, eps):
        assert interpolate(KEYFRAMES, KEYFRAMES[0].time - eps) == KEYFRAMES[0].position
        assert interpolate(KEYFRAMES, KEYFRAMES[-1].time + eps) == KEYFRAMES[-1].position

    def test_exact_at_knots(self):
        for k in KEYFRAMES:
            assert interpolate(KEYFRAMES, k.time) == k.position

    def test_linear_between_knots(self):
        assert interpolate(KEYFRAMES, 0.5) == pytest.approx(5.0)
        assert interpolate(KEYFRAMES, 2.0) == pytest.approx(20.0)
        assert interpolate(KEYFRAMES, 3.5) == pytest.approx(30.0)
        assert interpolate(KEYFRAMES, 4.75) == pytest.approx(7.5)

    def test_single_keyframe(self):
        kfs = (Keyframe(2.0, 7.0),)
        assert interpolate(kfs, 0.0) == 7.0
        assert interpolate(kfs, 2.0) == 7.0
        assert interpolate(kfs, 9.0) == 7.0

    def test_repeated_time_jumps_to_later_keyframe(self):
        kfs = (Keyframe(0.0, 0.0), Keyframe(1.0, 10.0), Keyframe(1.0, 20.0), Keyframe(2.0, 30.0))
        assert interpolate(kfs, 0.5) == pytest.approx(5.0)
        assert interpolate(kfs, 1.0) == 20.0
        assert interpolate(kfs, 1.5) == pytest.approx(25.0)

    def test_repeated_first_time_clamps_to_first_keyframe(self):
        kfs = (Keyframe(0.0, 0.0), Keyframe(0.0, 5.0), Keyframe(1.0, 10.0))
        assert interpolate(kfs, 0.0) == 0.0
        assert interpolate_many(kfs, [0.0, 0.5]).tolist() == pytest.approx([0.0, 7.5])


class TestHelpers:

    def test_interpolate_many_matches_scalar(self):
        times = np.linspace(-1.0, 6.0, 29)
        values = interpolate_many(KEYFRAMES, times)
        assert values.shape == times.shape
        for t, v in zip(times, values):
            assert v == pytest.approx(interpolate(KEYFRAMES, float(t)))

    def test_ranges(self):
        assert profile_time_range(KEYFRAMES) == (0.0, 5.0)
        assert profile_position_range(KEYFRAMES) == (0.0, 30.0)

    def test_ranges_of_empty_profile(self):
        assert profile_time_range(()) == (0.0, 0.0)
        assert profile_position_range(()) == (0.0, 0.0)
