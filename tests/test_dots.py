"""Tests for DotField and projection."""

import pytest
import numpy as np

from flowgen.core import FlowConfig, DotField, Frame, Trial, project, velocity_profile


class TestDotFieldInit:
    def test_population_in_volume(self):
        cfg = FlowConfig(num_dots=2000)
        field = DotField(cfg, np.random.default_rng(0))

        assert len(field) == 2000
        assert field.xyz.shape == (2000, 3)
        assert np.all((field.xyz[:, :2] >= cfg.min_val) & (field.xyz[:, :2] <= cfg.max_val))
        assert np.all((field.xyz[:, 2] >= cfg.clip_near) & (field.xyz[:, 2] <= cfg.clip_far))

    def test_draw_order_x_then_y_then_z(self):
        cfg = FlowConfig(num_dots=50)
        field = DotField(cfg, np.random.default_rng(7))

        rng = np.random.default_rng(7)
        x = rng.uniform(-1.0, 1.0, 50)
        y = rng.uniform(-1.0, 1.0, 50)
        z = rng.uniform(0.05, 1.5, 50)
        assert np.array_equal(field.xyz, np.stack([x, y, z], axis=1))

    def test_reseed_changes_positions(self):
        field = DotField(FlowConfig(num_dots=100), np.random.default_rng(1))
        before = field.xyz.copy()
        field.reseed()
        assert not np.array_equal(before, field.xyz)


class TestDotFieldMotion:
    @pytest.fixture
    def field(self):
        field = DotField(FlowConfig(num_dots=3), np.random.default_rng(0))
        field.xyz[:] = [[0.1, 0.2, 0.5], [-0.3, 0.4, 1.0], [0.0, 0.0, 0.8]]
        return field

    def test_translation_moves_opposite(self, field):
        before = field.xyz.copy()
        field.move(0.01, -0.02, 0.03, 0.0, 0.0, 0.0)
        np.testing.assert_allclose(field.xyz - before, np.tile([-0.01, 0.02, -0.03], (3, 1)))

    def test_rotation_cross_coupling(self, field):
        x, y, z = field.xyz.T.copy()
        u, v, w, a, b, c = 0.01, 0.02, -0.01, 0.05, -0.04, 0.03
        field.move(u, v, w, a, b, c)

        np.testing.assert_allclose(field.xyz[:, 0], x - u - b * z + c * y)
        np.testing.assert_allclose(field.xyz[:, 1], y - v - c * x + a * z)
        np.testing.assert_allclose(field.xyz[:, 2], z - w - a * y + b * x)


class TestRecycling:
    def test_depth_wrap(self):
        cfg = FlowConfig(num_dots=5)
        field = DotField(cfg, np.random.default_rng(0))
        field.xyz[:, 2] = [1.6, 0.01, 1.5, 0.05, 0.7]

        wrapped = field.wrap_depth()

        assert field.xyz[:, 2].tolist() == [0.05, 1.5, 1.5, 0.05, 0.7]
        assert wrapped.tolist() == [True, True, False, False, False]

    def test_evict_outside_frustum(self):
        cfg = FlowConfig(num_dots=4)
        field = DotField(cfg, np.random.default_rng(0))
        field.xyz[:] = [
            [0.1, 0.1, 0.5],   # inside
            [0.9, 0.1, 0.5],   # |x| > z
            [0.1, -0.6, 0.5],  # |y| > z
            [0.5, 0.5, 0.5],   # on the boundary, kept
        ]

        evicted = field.evict(heading_w=1.0)

        assert evicted.tolist() == [False, True, True, False]
        assert field.xyz[0].tolist() == [0.1, 0.1, 0.5]
        assert field.xyz[3].tolist() == [0.5, 0.5, 0.5]
        assert np.all(field.xyz[evicted, 2] == cfg.clip_far)
        assert np.all(np.abs(field.xyz[evicted, :2]) <= 1.0)

    def test_evict_backward_motion_spawns_near(self):
        cfg = FlowConfig(num_dots=2)
        field = DotField(cfg, np.random.default_rng(0))
        field.xyz[:] = [[0.9, 0.0, 0.2], [0.0, 0.0, 0.2]]

        evicted = field.evict(heading_w=-0.5)

        assert evicted.tolist() == [True, False]
        assert field.xyz[0, 2] == cfg.clip_near

    def test_evict_zero_heading_spawns_far(self):
        cfg = FlowConfig(num_dots=1)
        field = DotField(cfg, np.random.default_rng(0))
        field.xyz[:] = [[0.9, 0.0, 0.2]]
        field.evict(heading_w=0.0)
        assert field.xyz[0, 2] == cfg.clip_far

    def test_no_recycling_is_noop(self):
        cfg = FlowConfig(num_dots=2)
        field = DotField(cfg, np.random.default_rng(0))
        field.xyz[:] = [[0.1, 0.1, 1.0], [-0.2, 0.3, 0.9]]
        before = field.xyz.copy()

        evicted = field.step((0.0,) * 6, heading_w=0.0)

        assert not evicted.any()
        assert np.array_equal(field.xyz, before)

    def test_depth_window_holds_every_frame(self):
        cfg = FlowConfig(num_frames=60, num_dots=500)
        field = DotField(cfg, np.random.default_rng(3))
        trial = Trial((0.2, -0.1, 3.0), (0.5, -0.4, 0.3))
        profile = velocity_profile(trial, cfg.num_frames)

        for idx in range(cfg.num_frames):
            field.step(profile.at(idx), trial.W)
            z = field.xyz[:, 2]
            assert np.all((z >= cfg.clip_near) & (z <= cfg.clip_far))
            assert len(field) == cfg.num_dots

    def test_zero_velocity_evicts_only_initial_misses(self):
        cfg = FlowConfig(num_frames=20, num_dots=4000)
        field = DotField(cfg, np.random.default_rng(11))
        expected = field.outside_view()

        first = field.step((0.0,) * 6, heading_w=0.0)
        assert np.array_equal(first, expected)
        # P(outside) = 1 - E[min(z, 1)^2] for z ~ U[0.05, 1.5], about 0.425
        assert 0.38 < first.mean() < 0.47

        for _ in range(cfg.num_frames - 1):
            assert not field.step((0.0,) * 6, heading_w=0.0).any()

    def test_lateral_translation_shifts_left(self):
        # U = 1 over 10 frames: every dot that is not respawned moves by -u
        cfg = FlowConfig(num_frames=10, num_dots=5)
        field = DotField(cfg, np.random.default_rng(5))
        trial = Trial((1.0, 0.0, 0.0), (0.0, 0.0, 0.0))
        profile = velocity_profile(trial, cfg.num_frames)

        total_shift = 0.0
        for idx in range(cfg.num_frames):
            before = field.xyz.copy()
            evicted = field.step(profile.at(idx), trial.W)
            kept = ~evicted
            u = profile.at(idx)[0]
            np.testing.assert_allclose(field.xyz[kept, 0], before[kept, 0] - u)
            np.testing.assert_allclose(field.xyz[kept, 1:], before[kept, 1:])
            total_shift -= u
        assert total_shift == pytest.approx(-1.0)


class TestProjection:
    def test_view_distance_fixed_point(self):
        cfg = FlowConfig()
        pts = project(np.array([[0.0, 0.0, cfg.view_dist]]), cfg.star_size, cfg.view_dist)
        assert pts[0, 2] == cfg.star_size ** 2

    def test_divide_by_depth(self):
        pts = project(np.array([[0.2, -0.1, 0.5], [1.0, 1.0, 2.0]]), star_size=8.0, view_dist=0.33)
        np.testing.assert_allclose(pts[:, 0], [0.4, 0.5])
        np.testing.assert_allclose(pts[:, 1], [-0.2, 0.5])
        np.testing.assert_allclose(pts[:, 2], (8.0 * 0.33 / np.array([0.5, 2.0])) ** 2)

    def test_inverse_square_falloff(self):
        pts = project(np.array([[0.0, 0.0, 0.2], [0.0, 0.0, 0.4]]), star_size=8.0, view_dist=0.33)
        assert pts[0, 2] == pytest.approx(4 * pts[1, 2])

    def test_field_projection_in_unit_square(self):
        cfg = FlowConfig(num_dots=1000)
        field = DotField(cfg, np.random.default_rng(2))
        field.step((0.0, 0.0, 0.01, 0.0, 0.0, 0.0), heading_w=0.5)
        pts = field.project()
        assert np.all(np.abs(pts[:, :2]) <= 1.0)


class TestFrame:
    def test_accessors(self):
        pts = np.array([[0.1, 0.2, 3.0], [-0.1, 0.0, 5.0]])
        frame = Frame(index=0, points=pts, recycled=1)

        assert len(frame) == 2
        assert frame.x.tolist() == [0.1, -0.1]
        assert frame.y.tolist() == [0.2, 0.0]
        assert frame.size.tolist() == [3.0, 5.0]
        assert list(frame) == [(0.1, 0.2, 3.0), (-0.1, 0.0, 5.0)]
