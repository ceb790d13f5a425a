"""Unit tests for image encoding, export and preview display.

Tests cover:
- Gamma encoding and byte quantization
- PPM color lines and streaming writer
- PNG and PPM file export
- Display conversion
- RMSE comparison
"""

import io

import numpy as np
import pytest


class TestEncoding:
    def test_linear_to_gamma(self):
        from mcray.preview.export import linear_to_gamma

        values = linear_to_gamma([0.25, 1.0, 0.0, -0.5])
        assert values == pytest.approx([0.5, 1.0, 0.0, 0.0])

    def test_linear_to_gamma_nan_is_zero(self):
        from mcray.preview.export import linear_to_gamma

        assert linear_to_gamma(np.nan) == 0.0

    def test_color_to_bytes(self):
        from mcray.preview.export import color_to_bytes

        result = color_to_bytes([[0.0, 1.0, 0.25], [4.0, -1.0, 0.5]])
        assert result.dtype == np.uint8
        assert result.tolist() == [[0, 255, 128], [255, 0, 181]]

    def test_write_color_black_and_white(self):
        from mcray.preview.export import write_color

        out = io.StringIO()
        write_color(out, (0.0, 0.0, 0.0))
        write_color(out, (1.0, 1.0, 1.0))
        assert out.getvalue() == "0 0 0\n255 255 255\n"


class TestPPMWriter:
    def test_header_and_rows(self):
        from mcray.preview.export import PPMWriter

        out = io.StringIO()
        writer = PPMWriter(out, 2, 2)
        assert out.getvalue() == "P3\n2 2\n255\n"

        writer.write_row(np.zeros((2, 3)))
        writer.write_row(np.ones((2, 3)))
        assert writer.complete
        assert out.getvalue().splitlines()[3:] == [
            "0 0 0",
            "0 0 0",
            "255 255 255",
            "255 255 255",
        ]

    def test_too_many_rows(self):
        from mcray.preview.export import PPMWriter

        writer = PPMWriter(io.StringIO(), 1, 1)
        writer.write_row(np.zeros((1, 3)))
        with pytest.raises(ValueError):
            writer.write_row(np.zeros((1, 3)))

    def test_wrong_row_width(self):
        from mcray.preview.export import PPMWriter

        writer = PPMWriter(io.StringIO(), 3, 1)
        with pytest.raises(ValueError):
            writer.write_row(np.zeros((2, 3)))
        assert writer.rows_written == 0

    def test_invalid_size(self):
        from mcray.preview.export import PPMWriter

        with pytest.raises(ValueError):
            PPMWriter(io.StringIO(), 0, 5)

    def test_write_ppm(self):
        from mcray.preview.export import write_ppm

        out = io.StringIO()
        write_ppm(np.full((3, 4, 3), 0.25, dtype=np.float32), out)
        lines = out.getvalue().splitlines()
        assert lines[:3] == ["P3", "4 3", "255"]
        assert lines[3:] == ["128 128 128"] * 12


class TestFileExport:
    def test_save_png(self, tmp_path):
        from PIL import Image as PILImage

        from mcray.preview.export import save_image

        image = np.zeros((4, 6, 3), dtype=np.float32)
        image[:, :, 0] = 1.0
        path = save_image(image, tmp_path / "out.png")

        with PILImage.open(path) as loaded:
            assert loaded.size == (6, 4)
            assert loaded.getpixel((0, 0)) == (255, 0, 0)

    def test_save_ppm(self, tmp_path):
        from mcray.preview.export import save_image

        path = save_image(np.ones((2, 2, 3)), tmp_path / "out.ppm")
        assert path.read_text().startswith("P3\n2 2\n255\n255 255 255\n")

    def test_unsupported_suffix(self, tmp_path):
        from mcray.preview.export import save_image

        with pytest.raises(ValueError):
            save_image(np.ones((2, 2, 3)), tmp_path / "out.jpg")


class TestDisplay:
    def test_to_display(self):
        from mcray.preview.display import to_display

        result = to_display(np.array([[[0.25, 4.0, -1.0]]]))
        assert result.dtype == np.float32
        assert result[0, 0].tolist() == pytest.approx([0.5, 1.0, 0.0])

    def test_show_preview_non_blocking(self):
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from mcray.preview.display import show_preview

        show_preview(np.zeros((4, 8, 3)), block=False)
        assert plt.gcf().axes[0].get_title() == "Render Preview - 8x4"
        plt.close("all")


class TestRMSE:
    def test_identical(self):
        from mcray.preview.export import compute_rmse

        a = np.random.default_rng(0).random((4, 4, 3))
        assert compute_rmse(a, a) == 0.0

    def test_known_value(self):
        from mcray.preview.export import compute_rmse

        assert compute_rmse(np.zeros((2, 2, 3)), np.ones((2, 2, 3))) == pytest.approx(1.0)

    def test_shape_mismatch(self):
        from mcray.preview.export import compute_rmse

        with pytest.raises(ValueError):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((2, 3, 3)))
