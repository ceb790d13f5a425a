"""Unit tests for the radiance estimator and render loop.

Tests cover:
- Sky gradient
- Bounce limit and absorption
- Material dispatch (mirror reflection)
- Row-by-row rendering, PPM streaming and progress callbacks
"""

import io

import numpy as np
import pytest


class TestSky:
    def test_sky_straight_ahead(self):
        from mcray.core.integrator import sample_sky

        assert sample_sky((0.0, 0.0, -1.0)) == pytest.approx((0.75, 0.85, 1.0), abs=1e-6)

    def test_sky_up_is_blue_down_is_white(self):
        from mcray.core.integrator import sample_sky

        assert sample_sky((0.0, 1.0, 0.0)) == pytest.approx((0.5, 0.7, 1.0), abs=1e-6)
        assert sample_sky((0.0, -1.0, 0.0)) == pytest.approx((1.0, 1.0, 1.0), abs=1e-6)

    def test_sky_ignores_direction_length(self):
        from mcray.core.integrator import sample_sky

        assert sample_sky((0.0, 0.0, -7.0)) == pytest.approx(sample_sky((0.0, 0.0, -1.0)))


class TestTrace:
    def test_depth_zero_is_black(self):
        from mcray.core.integrator import trace

        assert trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 0) == (0.0, 0.0, 0.0)

    def test_empty_scene_returns_sky(self):
        from mcray.core.integrator import trace
        from mcray.scene.manager import SceneManager

        SceneManager()
        assert trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 5) == pytest.approx(
            (0.75, 0.85, 1.0), abs=1e-6
        )

    def test_single_bounce_exhausts_budget(self):
        """With depth 1 a hit cannot reach the sky."""
        from mcray.core.integrator import trace
        from mcray.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))

        assert trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 1) == (0.0, 0.0, 0.0)

    def test_enclosed_camera_is_black(self):
        """Inside a closed diffuse sphere no path escapes."""
        from mcray.core.integrator import trace
        from mcray.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, 0.0), 10.0, (0.9, 0.9, 0.9))

        assert trace((0.0, 0.0, 0.0), (0.3, 0.2, -1.0), 10) == (0.0, 0.0, 0.0)

    def test_mirror_reflects_sky_behind(self):
        from mcray.core.integrator import trace
        from mcray.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, -1.0), 0.5, (0.8, 0.8, 0.8), 0.0)

        color = trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 5)
        assert color == pytest.approx((0.8 * 0.75, 0.8 * 0.85, 0.8 * 1.0), abs=1e-5)

    def test_diffuse_bounded_by_albedo(self):
        from mcray.core.integrator import trace
        from mcray.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))

        for _ in range(20):
            color = trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 50)
            assert all(0.0 <= c <= 0.5 + 1e-6 for c in color)


class TestRender:
    @staticmethod
    def _small_scene():
        from mcray.camera.thin_lens import Camera
        from mcray.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        camera = Camera(aspect_ratio=2.0, image_width=16, samples_per_pixel=2, max_depth=4)
        return scene, camera

    def test_render_shape_and_range(self):
        from mcray.core.integrator import render

        scene, camera = self._small_scene()
        image = render(scene, camera)

        assert image.shape == (8, 16, 3)
        assert image.dtype == np.float32
        assert np.isfinite(image).all()
        assert image.min() >= 0.0
        assert image.max() <= 1.0 + 1e-6

    def test_render_streams_ppm(self):
        from mcray.core.integrator import render

        scene, camera = self._small_scene()
        out = io.StringIO()
        render(scene, camera, out=out)

        lines = out.getvalue().splitlines()
        assert lines[:3] == ["P3", "16 8", "255"]
        assert len(lines) == 3 + 16 * 8

    def test_render_reports_progress(self):
        from mcray.core.integrator import render

        scene, camera = self._small_scene()
        calls = []
        render(scene, camera, callback=lambda done, total: calls.append((done, total)))

        assert calls == [(row, 8) for row in range(1, 9)]

    def test_render_activates_given_scene(self):
        """Rendering an inactive scene re-uploads it first."""
        from mcray.core.integrator import render
        from mcray.scene.manager import SceneManager

        scene, camera = self._small_scene()
        other = SceneManager()
        other.add_lambertian_sphere((0.0, 0.0, -1.0), 100.0, (0.0, 0.0, 0.0))

        image = render(scene, camera)
        assert scene.is_active
        # Corners see sky, not the black sphere
        assert image[0, 0].max() > 0.3

    def test_too_wide_rejected(self):
        from mcray.core.integrator import MAX_IMAGE_WIDTH, render

        scene, camera = self._small_scene()
        camera.image_width = MAX_IMAGE_WIDTH + 1
        with pytest.raises(ValueError):
            render(scene, camera)

    def test_sink_errors_propagate(self):
        from mcray.core.integrator import render

        class BrokenSink(io.StringIO):
            def write(self, s):
                raise OSError("disk full")

        scene, camera = self._small_scene()
        with pytest.raises(OSError):
            render(scene, camera, out=BrokenSink())

    def test_camera_render_delegates(self):
        scene, camera = self._small_scene()
        image = camera.render(scene)
        assert image.shape == (8, 16, 3)


class TestEndToEnd:
    def test_sphere_darkens_center_pixel(self):
        """A diffuse sphere in front of the camera is darker than open sky."""
        from mcray.camera.thin_lens import Camera
        from mcray.core.integrator import render
        from mcray.scene.manager import SceneManager

        camera = Camera(
            aspect_ratio=1.0,
            image_width=11,
            samples_per_pixel=1,
            max_depth=1,
            lookfrom=(0.0, 0.0, 0.0),
            lookat=(0.0, 0.0, -1.0),
        )

        empty = SceneManager()
        sky_image = render(empty, camera)

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        sphere_image = render(scene, camera)

        assert sphere_image[5, 5].sum() < sky_image[5, 5].sum()

    def test_render_pixel(self):
        from mcray.camera.thin_lens import Camera, setup_camera
        from mcray.core.integrator import render_pixel
        from mcray.scene.manager import SceneManager

        SceneManager()
        setup_camera(Camera(image_width=11))
        color = render_pixel(5, 5, samples=4, depth=3)
        assert color == pytest.approx((0.75, 0.85, 1.0), abs=0.05)

        with pytest.raises(ValueError):
            render_pixel(0, 0, samples=0)
