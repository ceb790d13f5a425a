"""Matplotlib-based preview display for rendered images.

The preview uses the same gamma-2 encoding as the file exporters, so what is
shown on screen matches what ends up in the PPM or PNG.

Example:
    >>> from mcray.preview.display import show_preview
    >>> image = camera.render(scene)
    >>> show_preview(image, title="Spheres")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from mcray.preview.export import linear_to_gamma


def to_display(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float32]:
    """Gamma-encode a linear image and clamp it to [0, 1] for display.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        Display-ready float32 image.
    """
    result = np.clip(linear_to_gamma(image), 0.0, 1.0)
    return result.astype(np.float32)


def show_preview(
    image: npt.NDArray[np.floating],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> None:
    """Display a rendered image as a Matplotlib figure.

    Args:
        image: Linear image array of shape (H, W, 3).
        title: Custom title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = to_display(image)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        height, width = image.shape[:2]
        title = f"Render Preview - {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
