"""Preview module for output and visualization.

Components:
    export: Gamma encoding, streaming PPM writer and PNG export
    display: Matplotlib-based preview display

Example:
    >>> from mcray.preview import save_image, show_preview
    >>> image = camera.render(scene)
    >>> save_image(image, "output/image.png")
    >>> show_preview(image)
"""

from mcray.preview.display import show_preview, to_display
from mcray.preview.export import (
    PPMWriter,
    color_to_bytes,
    compute_rmse,
    linear_to_gamma,
    save_image,
    save_png_from_array,
    write_color,
    write_ppm,
)

__all__ = [
    # Display functions
    "show_preview",
    "to_display",
    # Export functions
    "PPMWriter",
    "linear_to_gamma",
    "color_to_bytes",
    "write_color",
    "write_ppm",
    "save_png_from_array",
    "save_image",
    "compute_rmse",
]
