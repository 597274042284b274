"""Tests for coordinate warps."""

import numpy as np

from crtscope.render.warp import barrel_warp, wave_warp


class TestBarrelWarp:
    def test_zero_curvature_identity(self):
        u = np.linspace(0, 1, 11)
        wu, wv, inside = barrel_warp(u, u, 0.0)
        assert wu is u and wv is u
        assert inside.all()

    def test_center_fixed(self):
        wu, wv, inside = barrel_warp(np.array(0.5), np.array(0.5), 0.3)
        assert wu == 0.5 and wv == 0.5
        assert inside

    def test_pushes_outward(self):
        wu, wv, _ = barrel_warp(np.array([0.8]), np.array([0.5]), 0.2)
        assert wu[0] > 0.8
        assert wv[0] == 0.5

    def test_corners_fall_outside(self):
        u = np.array([0.02, 0.5, 0.98])
        v = np.array([0.02, 0.5, 0.02])
        _, _, inside = barrel_warp(u, v, 0.5)
        np.testing.assert_array_equal(inside, [False, True, False])

    def test_symmetric(self):
        u = np.linspace(0, 1, 21)
        wu, _, _ = barrel_warp(u, np.full_like(u, 0.3), 0.15)
        np.testing.assert_allclose(wu + wu[::-1], 1.0)


class TestWaveWarp:
    def test_zero_amplitude_identity(self):
        u = np.linspace(0, 1, 5)
        wu, wv = wave_warp(u, u, 0.0, 10.0, 1.0, 3.0)
        assert wu is u and wv is u

    def test_displacement_bounded(self):
        u, v = np.meshgrid(np.linspace(0, 1, 30), np.linspace(0, 1, 20))
        wu, wv = wave_warp(u, v, 0.01, 25.0, 2.0, 1.3)
        assert np.abs(wu - u).max() <= 0.01 + 1e-12
        assert np.abs(wv - v).max() <= 0.01 + 1e-12

    def test_v_uses_displaced_u(self):
        u, v = np.array([0.3]), np.array([0.6])
        amp, freq, phase = 0.05, 8.0, 0.7
        wu, wv = wave_warp(u, v, amp, freq, 1.0, phase)
        expected_u = 0.3 + np.sin(0.6 * freq + phase) * amp
        np.testing.assert_allclose(wu, expected_u)
        np.testing.assert_allclose(wv, 0.6 + np.cos(expected_u * freq + phase) * amp)

    def test_animates_with_time(self):
        u, v = np.array([0.3]), np.array([0.6])
        a, _ = wave_warp(u, v, 0.05, 8.0, 1.0, 0.0)
        b, _ = wave_warp(u, v, 0.05, 8.0, 1.0, 1.0)
        assert a[0] != b[0]
