"""Unit tests for scanline progress reporting."""

import io

import pytest


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestFormatEta:
    @pytest.mark.parametrize(
        "seconds, expected",
        [(0, "0m 0s"), (59.4, "0m 59s"), (61, "1m 1s"), (3600, "60m 0s"), (-5, "0m 0s")],
    )
    def test_format(self, seconds, expected):
        from mcray.core.progress import format_eta

        assert format_eta(seconds) == expected


class TestProgressReporter:
    def test_first_update_written(self):
        from mcray.core.progress import ProgressReporter

        clock = FakeClock()
        stream = io.StringIO()
        reporter = ProgressReporter(stream, clock=clock)

        clock.now += 2.0
        reporter(1, 10)
        assert stream.getvalue() == "\rScanlines remaining: 9 | Estimated time left: 0m 18s"

    def test_updates_throttled(self):
        from mcray.core.progress import ProgressReporter

        clock = FakeClock()
        stream = io.StringIO()
        reporter = ProgressReporter(stream, min_interval=1.0, clock=clock)

        clock.now += 1.0
        reporter(1, 100)
        clock.now += 0.5
        reporter(2, 100)
        clock.now += 0.6
        reporter(3, 100)

        assert reporter.update_count == 2
        assert "remaining: 98" not in stream.getvalue()
        assert "remaining: 97" in stream.getvalue()

    def test_silent_during_first_interval(self):
        from mcray.core.progress import ProgressReporter

        clock = FakeClock()
        stream = io.StringIO()
        reporter = ProgressReporter(stream, min_interval=1.0, clock=clock)

        reporter(1, 10)
        clock.now += 0.9
        reporter(2, 10)
        assert reporter.update_count == 0
        assert stream.getvalue() == ""

        clock.now += 0.1
        reporter(3, 10)
        assert reporter.update_count == 1
        assert "Scanlines remaining: 7" in stream.getvalue()

    def test_finish(self):
        from mcray.core.progress import ProgressReporter

        clock = FakeClock()
        stream = io.StringIO()
        reporter = ProgressReporter(stream, clock=clock)

        clock.now += 12.5
        elapsed = reporter.finish()
        assert elapsed == pytest.approx(12.5)
        assert "Done." in stream.getvalue()
        assert stream.getvalue().endswith("\n")

    def test_as_render_callback(self):
        from mcray.camera.thin_lens import Camera
        from mcray.core.integrator import render
        from mcray.core.progress import ProgressReporter
        from mcray.scene.manager import SceneManager

        stream = io.StringIO()
        reporter = ProgressReporter(stream, min_interval=0.0)
        render(SceneManager(), Camera(image_width=4, samples_per_pixel=1), callback=reporter)

        assert reporter.update_count == 4
        assert "Scanlines remaining: 0" in stream.getvalue()
