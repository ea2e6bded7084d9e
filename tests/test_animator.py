"""Tests for easing, per-layer curves and the layer animator state machine."""

import numpy as np
import pytest

from snapdust.core import (
    AnimationClock, AnimationInProgressError, AnimationStatus, BezierCurve,
    EASING_FUNCTIONS, LayerAnimator, SnapConfigError, Vec2,
    ease_out, get_easing, layer_interval, layer_offset, layer_opacity, layer_progress, linear,
)
from snapdust.core.utils import ZERO


class TestEasing:
    def test_ease_out_endpoints_are_exact(self):
        assert ease_out(0.0) == 0.0
        assert ease_out(1.0) == 1.0

    def test_ease_out_is_monotonic(self):
        values = [ease_out(t) for t in np.linspace(0, 1, 41)]
        assert all(b >= a for a, b in zip(values, values[1:]))

    def test_ease_out_is_ahead_of_linear(self):
        assert ease_out(0.5) > 0.5

    def test_bezier_clamps_outside_range(self):
        curve = BezierCurve(0.0, 0.0, 0.58, 1.0)
        assert curve(-0.5) == 0.0
        assert curve(1.5) == 1.0

    def test_unknown_easing(self):
        with pytest.raises(ValueError):
            get_easing("wobble")

    @pytest.mark.parametrize("name", sorted(EASING_FUNCTIONS))
    def test_every_registered_curve_spans_zero_to_one(self, name):
        curve = get_easing(name)
        assert curve(0.0) == 0.0
        assert curve(1.0) == 1.0

    def test_linear_curve_drives_layer_progress(self):
        assert layer_progress(0.4, 0.1, 0.7, linear) == pytest.approx(0.5)


class TestIntervals:
    def test_four_layer_schedule(self):
        expected = [(0.0, 0.6), (0.1, 0.7), (0.2, 0.8), (0.3, 0.9)]
        for i, (start, end) in enumerate(expected):
            assert layer_interval(i, 4) == pytest.approx((start, end))

    def test_single_layer(self):
        assert layer_interval(0, 1) == pytest.approx((0.0, 0.6))

    def test_last_layer_does_not_reach_one(self):
        _, end = layer_interval(15, 16)
        assert end == pytest.approx(1 - 0.4 / 16)

    def test_progress_outside_window(self):
        assert layer_progress(0.05, 0.1, 0.7) == 0.0
        assert layer_progress(0.75, 0.1, 0.7) == 1.0


class TestLayerCurves:
    def test_opacity_bounds(self):
        assert layer_opacity(0.0) == 1.0
        assert layer_opacity(1.0) == pytest.approx(0.0, abs=1e-12)

    def test_opacity_decreases(self):
        values = [layer_opacity(p) for p in np.linspace(0, 1, 21)]
        assert all(b <= a for a, b in zip(values, values[1:]))
        assert all(0.0 <= v <= 1.0 for v in values)

    def test_offset_endpoints(self):
        offset, dislocation = Vec2(64, -32), Vec2(64, 32)
        assert layer_offset(0.0, offset, dislocation, 0.5) == ZERO
        assert layer_offset(1.0, offset, dislocation, 0.5) == Vec2(96, -16)

    def test_offset_with_negative_random(self):
        end = layer_offset(1.0, Vec2(100, 100), Vec2(10, 10), -1.0)
        assert end == Vec2(90, 90)


class TestClock:
    def test_rejects_non_positive_duration(self):
        with pytest.raises(SnapConfigError):
            AnimationClock(0)

    def test_cannot_run_backwards(self):
        clock = AnimationClock(100)
        with pytest.raises(ValueError):
            clock.advance(-1)

    def test_value_saturates(self):
        clock = AnimationClock(100)
        assert clock.advance(250) == 1.0
        assert clock.is_finished

    def test_seek_only_moves_forward(self):
        clock = AnimationClock(100)
        clock.seek(0.5)
        assert clock.seek(0.2) == 0.5


class TestLayerAnimator:
    def test_starts_idle(self):
        animator = LayerAnimator()
        assert animator.status is AnimationStatus.IDLE
        assert animator.layer_states() == []
        with pytest.raises(IndexError):
            animator.layer_state(0)

    def test_start_requires_layers(self):
        with pytest.raises(ValueError):
            LayerAnimator().start(None)

    def test_first_frame_is_intact(self, layer_set):
        animator = LayerAnimator()
        animator.start(layer_set)

        states = animator.layer_states()
        assert [s.index for s in states] == [0, 1, 2, 3]
        assert all(s.opacity == 1.0 for s in states)
        assert all(s.translation == ZERO for s in states)

    def test_layers_leave_in_order(self, layer_set):
        animator = LayerAnimator(duration_ms=1000)
        animator.start(layer_set)
        animator.advance(650)

        first, last = animator.layer_state(0), animator.layer_state(3)
        assert first.progress == 1.0
        assert 0.0 < last.progress < 1.0
        assert first.opacity < last.opacity

    def test_runs_to_completion_once(self, layer_set, snapped):
        animator = LayerAnimator(duration_ms=500, on_complete=snapped)
        animator.start(layer_set)

        while animator.is_running:
            animator.advance(16)

        assert animator.is_completed
        assert animator.value == 1.0
        assert len(snapped.calls) == 1

        animator.advance(100)
        animator.seek(1.0)
        assert len(snapped.calls) == 1

    def test_start_while_running_raises(self, layer_set):
        animator = LayerAnimator()
        animator.start(layer_set)
        with pytest.raises(AnimationInProgressError):
            animator.start(layer_set)

    def test_start_when_completed_raises(self, layer_set):
        animator = LayerAnimator(duration_ms=100)
        animator.start(layer_set)
        animator.advance(100)
        with pytest.raises(AnimationInProgressError):
            animator.start(layer_set)

    def test_reset_returns_to_idle_without_notifying(self, layer_set, snapped):
        animator = LayerAnimator(duration_ms=100, on_complete=snapped)
        animator.start(layer_set)
        animator.advance(50)
        animator.reset()

        assert animator.is_idle
        assert animator.value == 0.0
        assert animator.layer_set is None
        assert snapped.calls == []

        animator.start(layer_set)
        assert animator.is_running

    def test_reset_when_idle_is_noop(self):
        animator = LayerAnimator()
        animator.reset()
        assert animator.is_idle

    def test_advance_while_idle_does_nothing(self):
        animator = LayerAnimator(duration_ms=100)
        assert animator.advance(500) == 0.0
        assert animator.is_idle

    def test_negative_advance_rejected(self, layer_set):
        animator = LayerAnimator()
        animator.start(layer_set)
        with pytest.raises(ValueError):
            animator.advance(-5)

    def test_state_carries_layer_image(self, layer_set):
        animator = LayerAnimator()
        animator.start(layer_set)
        assert animator.layer_state(2).image is layer_set[2].pixels
