"""Image export utilities for rendered images.

This module turns linear RGB radiance into 8-bit output and writes it to
files or text streams.

Supported formats:
    - Plain PPM (P3), streamed one row at a time
    - PNG (8-bit via Pillow)

Both formats use the same encoding: gamma 2 (square root), then each channel
is clamped to [0, 0.999] and scaled by 256, so 0 maps to 0 and 1 maps to 255.

Example:
    >>> from mcray.preview.export import save_image
    >>> image = camera.render(scene)
    >>> save_image(image, "output/image.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from mcray.core.interval import INTENSITY

PPM_SUFFIXES = (".ppm",)
PNG_SUFFIXES = (".png",)


def linear_to_gamma(linear: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Gamma-2 encode linear values.

    Non-positive (and NaN) inputs map to 0.

    Args:
        linear: Scalar or array of linear channel values.

    Returns:
        Array of the same shape with sqrt applied to positive entries.
    """
    values = np.asarray(linear, dtype=np.float64)
    positive = values > 0.0
    return np.where(positive, np.sqrt(np.where(positive, values, 0.0)), 0.0)


def color_to_bytes(colors: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Convert linear colors to 8-bit channel values.

    Args:
        colors: Linear values of any shape (typically (..., 3)).

    Returns:
        uint8 array of the same shape.
    """
    gamma = linear_to_gamma(colors)
    clamped = np.clip(gamma, INTENSITY[0], INTENSITY[1])
    return np.floor(256.0 * clamped).astype(np.uint8)


def write_color(out: TextIO, color: npt.ArrayLike) -> None:
    """Write one linear RGB color as a "R G B" PPM line."""
    r, g, b = color_to_bytes(color)
    out.write(f"{r} {g} {b}\n")


class PPMWriter:
    """Streaming plain-PPM (P3) writer.

    The header is written on construction; rows follow top to bottom.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        rows_written: Number of rows written so far.
    """

    def __init__(self, out: TextIO, width: int, height: int) -> None:
        if width < 1 or height < 1:
            raise ValueError(f"Invalid image size: {width}x{height}")
        self._out = out
        self.width = width
        self.height = height
        self.rows_written = 0
        out.write(f"P3\n{width} {height}\n255\n")

    @property
    def complete(self) -> bool:
        return self.rows_written == self.height

    def write_row(self, pixels: npt.ArrayLike) -> None:
        """Write one row of linear RGB pixels.

        Args:
            pixels: Array of shape (width, 3).

        Raises:
            ValueError: If the row has the wrong shape or the image already
                has all of its rows.
        """
        if self.rows_written >= self.height:
            raise ValueError(f"PPM image already has all {self.height} rows")

        data = color_to_bytes(pixels)
        if data.shape != (self.width, 3):
            raise ValueError(f"Expected row of shape ({self.width}, 3), got {data.shape}")

        self._out.write("".join(f"{r} {g} {b}\n" for r, g, b in data))
        self.rows_written += 1


def write_ppm(image: npt.NDArray[np.floating], out: TextIO) -> None:
    """Write a whole linear image of shape (H, W, 3) as plain PPM."""
    height, width = image.shape[:2]
    writer = PPMWriter(out, width, height)
    for row in image:
        writer.write_row(row)


def save_png_from_array(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a linear image of shape (H, W, 3) as an 8-bit PNG."""
    image_uint8 = color_to_bytes(image)
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def save_image(image: npt.NDArray[np.floating], filepath: str | Path) -> Path:
    """Save a linear image, choosing the format from the file suffix.

    Returns:
        The path written.

    Raises:
        ValueError: If the suffix is neither .ppm nor .png.
        OSError: If the file cannot be written.
    """
    path = Path(filepath)
    suffix = path.suffix.lower()
    if suffix in PPM_SUFFIXES:
        with open(path, "w", encoding="ascii") as f:
            write_ppm(image, f)
    elif suffix in PNG_SUFFIXES:
        save_png_from_array(image, path)
    else:
        raise ValueError(f"Unsupported image format: {path.suffix!r} (use .ppm or .png)")
    return path


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
