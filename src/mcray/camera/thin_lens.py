"""Thin-lens camera model with depth of field.

This module implements the camera used to generate primary rays. The camera
supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios
- Jittered sampling for anti-aliasing
- Defocus blur through a disk-shaped lens aperture

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits at the focus distance in front of the camera. Pixel (0, 0)
is the upper-left pixel; columns grow to the right and rows grow downward.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from mcray.camera.thin_lens import Camera, setup_camera, get_ray
    >>>
    >>> camera = Camera(
    ...     aspect_ratio=16.0 / 9.0,
    ...     image_width=400,
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vfov=20.0,
    ...     aperture=0.6,
    ... )
    >>> basis = setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0, 0)  # Jittered ray through the upper-left pixel
"""

import math
from dataclasses import asdict, dataclass, fields
from typing import Any

import numpy as np
import taichi as ti
import taichi.math as tm

from mcray.core.ray import Ray, make_ray, random_in_unit_disk, sample_unit_square, vec3

# Smallest focus distance accepted; closer values are clamped
MIN_FOCUS_DIST = 1e-3

# Field of view is kept strictly inside (0, 180) degrees
MIN_VFOV = 1e-3
MAX_VFOV = 180.0 - 1e-3

# Below this length a basis vector counts as degenerate
_DEGENERATE_EPS = 1e-8


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class Camera:
    """Configuration for a thin-lens camera.

    Attributes:
        aspect_ratio: Ideal width divided by height of the output image.
        image_width: Rendered image width in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of ray bounces.
        vfov: Vertical field of view in degrees.
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation.
        aperture: Defocus cone angle in degrees at the focus plane.
            0 gives a pinhole camera with everything in focus.
        focus_dist: Distance from lookfrom to the plane of perfect focus.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0
    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    aperture: float = 0.0
    focus_dist: float = 10.0

    def render(self, scene, out=None, callback=None) -> np.ndarray:
        """Render scene from this camera.

        Args:
            scene: The SceneManager to render.
            out: Optional text stream that receives the image as PPM.
            callback: Optional callable invoked as callback(rows_done, total_rows).

        Returns:
            Linear RGB image as a float32 array of shape (height, width, 3).
        """
        from mcray.core.integrator import render

        return render(scene, self, out=out, callback=callback)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in ("lookfrom", "lookat", "vup"):
            data[key] = list(data[key])
        return data


def camera_from_dict(data: dict[str, Any]) -> Camera:
    """Build a Camera from a plain dictionary (as stored in a scene config).

    Missing keys take the Camera defaults.

    Raises:
        ValueError: If the dictionary contains unknown keys or a vector
            with the wrong number of components.
    """
    known = {f.name for f in fields(Camera)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown camera settings: {sorted(unknown)}")

    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key in ("lookfrom", "lookat", "vup"):
            if len(value) != 3:
                raise ValueError(f"Camera {key} needs 3 components, got {value!r}")
            kwargs[key] = (float(value[0]), float(value[1]), float(value[2]))
        elif key in ("image_width", "samples_per_pixel", "max_depth"):
            kwargs[key] = int(value)
        else:
            kwargs[key] = float(value)
    return Camera(**kwargs)


@dataclass(frozen=True)
class ViewportBasis:
    """Derived camera geometry, ready for ray generation.

    All vectors are world-space (x, y, z) tuples.
    """

    image_width: int
    image_height: int
    samples_per_pixel: int
    max_depth: int
    pixel_samples_scale: float
    center: tuple[float, float, float]
    u: tuple[float, float, float]
    v: tuple[float, float, float]
    w: tuple[float, float, float]
    pixel_delta_u: tuple[float, float, float]
    pixel_delta_v: tuple[float, float, float]
    pixel00_loc: tuple[float, float, float]
    defocus_disk_u: tuple[float, float, float]
    defocus_disk_v: tuple[float, float, float]
    defocus_radius: float


def _as_tuple(a: np.ndarray) -> tuple[float, float, float]:
    return (float(a[0]), float(a[1]), float(a[2]))


def _fallback_axis(w: np.ndarray) -> np.ndarray:
    """An up vector that is not parallel to w."""
    if abs(w[1]) < 0.9:
        return np.array([0.0, 1.0, 0.0])
    return np.array([1.0, 0.0, 0.0])


def compute_viewport(camera: Camera) -> ViewportBasis:
    """Derive the viewport geometry for a camera configuration.

    Non-positive aspect ratio, width and sample count are replaced with 1;
    a negative bounce limit becomes 0. If lookfrom equals lookat the camera
    looks down -z, and if vup is parallel to the view direction another up
    axis is substituted.

    The viewport width is deliberately scaled by the realized pixel ratio
    image_width / image_height rather than by aspect_ratio, so pixels stay
    square when the image height is truncated to an integer.

    Args:
        camera: Camera configuration.

    Returns:
        The derived ViewportBasis.
    """
    aspect_ratio = camera.aspect_ratio if camera.aspect_ratio > 0.0 else 1.0
    image_width = max(1, int(camera.image_width))
    image_height = max(1, int(image_width / aspect_ratio))
    samples_per_pixel = max(1, int(camera.samples_per_pixel))
    max_depth = max(0, int(camera.max_depth))
    focus_dist = max(float(camera.focus_dist), MIN_FOCUS_DIST)
    vfov = min(max(float(camera.vfov), MIN_VFOV), MAX_VFOV)
    aperture = max(float(camera.aperture), 0.0)

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    # w points from lookat toward lookfrom (backward)
    w = lookfrom - lookat
    w_len = np.linalg.norm(w)
    if w_len < _DEGENERATE_EPS:
        w = np.array([0.0, 0.0, 1.0])
    else:
        w = w / w_len

    u = np.cross(vup, w)
    u_len = np.linalg.norm(u)
    if u_len < _DEGENERATE_EPS:
        u = np.cross(_fallback_axis(w), w)
        u_len = np.linalg.norm(u)
    u = u / u_len

    v = np.cross(w, u)

    # Viewport dimensions at the focus plane
    h = math.tan(math.radians(vfov) / 2.0)
    viewport_height = 2.0 * h * focus_dist
    # Realized pixel ratio, not aspect_ratio, keeps pixels square
    viewport_width = viewport_height * (image_width / image_height)

    # Vectors across the horizontal and down the vertical viewport edges
    viewport_u = viewport_width * u
    viewport_v = viewport_height * -v

    pixel_delta_u = viewport_u / image_width
    pixel_delta_v = viewport_v / image_height

    viewport_upper_left = lookfrom - focus_dist * w - viewport_u / 2.0 - viewport_v / 2.0
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    defocus_radius = focus_dist * math.tan(math.radians(aperture / 2.0))

    return ViewportBasis(
        image_width=image_width,
        image_height=image_height,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        pixel_samples_scale=1.0 / samples_per_pixel,
        center=_as_tuple(lookfrom),
        u=_as_tuple(u),
        v=_as_tuple(v),
        w=_as_tuple(w),
        pixel_delta_u=_as_tuple(pixel_delta_u),
        pixel_delta_v=_as_tuple(pixel_delta_v),
        pixel00_loc=_as_tuple(pixel00_loc),
        defocus_disk_u=_as_tuple(u * defocus_radius),
        defocus_disk_v=_as_tuple(v * defocus_radius),
        defocus_radius=defocus_radius,
    )


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

_pixel00_loc = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f32, shape=())

_defocus_disk_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_radius = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> ViewportBasis:
    """Initialize camera state from configuration.

    Computes the viewport geometry and writes it into the camera fields.
    This must be called before any kernel that uses get_ray().

    Args:
        camera: Camera configuration.

    Returns:
        The ViewportBasis that was uploaded.
    """
    basis = compute_viewport(camera)

    _camera_center[None] = basis.center
    _camera_u[None] = basis.u
    _camera_v[None] = basis.v
    _camera_w[None] = basis.w
    _pixel00_loc[None] = basis.pixel00_loc
    _pixel_delta_u[None] = basis.pixel_delta_u
    _pixel_delta_v[None] = basis.pixel_delta_v
    _defocus_disk_u[None] = basis.defocus_disk_u
    _defocus_disk_v[None] = basis.defocus_disk_v
    _defocus_radius[None] = basis.defocus_radius

    return basis


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def defocus_disk_sample() -> vec3:
    """Random point on the camera's defocus disk."""
    p = random_in_unit_disk()
    return _camera_center[None] + p.x * _defocus_disk_u[None] + p.y * _defocus_disk_v[None]


@ti.func
def get_ray(col: ti.i32, row: ti.i32) -> Ray:
    """Generate a jittered camera ray for pixel (col, row).

    The target point is offset by a random amount in [-0.5, 0.5) along both
    pixel axes. With a positive aperture the origin is sampled on the
    defocus disk; otherwise it is the camera center.

    Args:
        col: Pixel column (0 = left).
        row: Pixel row (0 = top).

    Returns:
        A Ray whose direction runs from the origin to the sampled point on
        the viewport. The direction is not normalized.
    """
    offset = sample_unit_square()
    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(col, ti.f32) + offset.x) * _pixel_delta_u[None]
        + (ti.cast(row, ti.f32) + offset.y) * _pixel_delta_v[None]
    )

    origin = _camera_center[None]
    if _defocus_radius[None] > 0.0:
        origin = defocus_disk_sample()

    return make_ray(origin, pixel_sample - origin)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, Any]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with center, u, v, w, pixel00, pixel_delta_u,
        pixel_delta_v and defocus_radius as read back from the fields.
    """

    def read(f) -> tuple[float, float, float]:
        vec = f[None]
        return (float(vec[0]), float(vec[1]), float(vec[2]))

    return {
        "center": read(_camera_center),
        "u": read(_camera_u),
        "v": read(_camera_v),
        "w": read(_camera_w),
        "pixel00": read(_pixel00_loc),
        "pixel_delta_u": read(_pixel_delta_u),
        "pixel_delta_v": read(_pixel_delta_v),
        "defocus_radius": float(_defocus_radius[None]),
    }
