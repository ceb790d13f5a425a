"""Monte Carlo radiance estimator and scanline render loop.

This module implements the rendering kernel: for every pixel it averages
several jittered camera samples, and each sample follows a path through the
scene, bouncing off surfaces according to their material until it escapes
to the sky, is absorbed, or runs out of bounces.

The recursive estimator

    color(ray, depth) = 0                               if depth <= 0
                      = sky(ray)                        if ray misses
                      = 0                               if absorbed
                      = attenuation * color(scattered, depth - 1)

is evaluated iteratively by carrying the product of attenuations along the
path (the throughput).

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Vertical white-to-blue sky gradient as the only light source
    - Rows rendered top to bottom, pixels left to right, in a fixed order so
      a seeded run is reproducible
    - Optional streaming of finished rows to a PPM sink

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, random_seed=42)
    >>> from mcray.core.integrator import render
    >>> from mcray.scene.spheres import create_spheres_scene
    >>>
    >>> scene, camera = create_spheres_scene(seed=42)
    >>> camera.image_width = 200
    >>> with open("image.ppm", "w") as f:
    ...     image = render(scene, camera, out=f)
"""

from collections.abc import Callable
from typing import TextIO

import numpy as np
import taichi as ti
import taichi.math as tm

from mcray.camera.thin_lens import Camera, get_ray, setup_camera
from mcray.core.interval import make_interval
from mcray.core.ray import Ray, make_ray
from mcray.materials.dielectric import scatter_dielectric_by_id
from mcray.materials.lambertian import scatter_lambertian_by_id
from mcray.materials.metal import scatter_metal_by_id
from mcray.preview.export import PPMWriter
from mcray.scene.intersection import intersect_scene
from mcray.scene.manager import (
    MaterialType,
    SceneManager,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# Progress callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min skips hits right at the ray origin (shadow acne)
T_MIN = 0.001
T_MAX = tm.inf

# Row buffer is preallocated to avoid kernel recompilation
MAX_IMAGE_WIDTH = 4096

# Sky gradient endpoints
SKY_WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)

_row_buffer = ti.Vector.field(3, dtype=ti.f32, shape=MAX_IMAGE_WIDTH)
_query_result = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Background
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background radiance for a ray that escapes the scene.

    Blends white and light blue by the height of the unit direction:
    straight down is white, straight up is blue.
    """
    unit_direction = tm.normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * SKY_WHITE + a * SKY_BLUE


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The surface normal (normalized, facing toward ray).
        front_face: 1 if hit front face, 0 if back face.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_ray(ray: Ray, depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace. Its direction need not be normalized.
        depth: Remaining bounce budget. 0 or less returns black.

    Returns:
        The estimated radiance (RGB) for this path sample.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray.origin
    direction = ray.direction

    # Taichi doesn't support break in ti.func loops
    active = 1

    for _ in range(depth):
        if active == 1:
            rec = intersect_scene(make_ray(origin, direction), make_interval(T_MIN, T_MAX))

            if rec.hit == 0:
                color = throughput * sky_color(direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, direction, rec.normal, rec.front_face
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered_direction

    # Running out of bounces leaves color black
    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_row(
    row: ti.i32,
    width: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    pixel_samples_scale: ti.f32,
):
    """Render one scanline into the row buffer, left to right."""
    ti.loop_config(serialize=True)
    for col in range(width):
        pixel_color = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            pixel_color += trace_ray(get_ray(col, row), max_depth)
        _row_buffer[col] = pixel_samples_scale * pixel_color


@ti.kernel
def _trace_kernel(origin: vec3, direction: vec3, depth: ti.i32):
    for _ in range(1):
        _query_result[None] = trace_ray(make_ray(origin, direction), depth)


@ti.kernel
def _sky_kernel(direction: vec3):
    _query_result[None] = sky_color(direction)


@ti.kernel
def _pixel_kernel(col: ti.i32, row: ti.i32, samples: ti.i32, depth: ti.i32):
    for _ in range(1):
        pixel_color = vec3(0.0, 0.0, 0.0)
        for _s in range(samples):
            pixel_color += trace_ray(get_ray(col, row), depth)
        _query_result[None] = pixel_color / ti.cast(samples, ti.f32)


def _read_query_result() -> tuple[float, float, float]:
    color = _query_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Public Rendering API
# =============================================================================


def trace(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int,
) -> tuple[float, float, float]:
    """Trace a single ray through the currently uploaded scene.

    Python-callable wrapper for testing; production rendering goes
    through render().

    Returns:
        Tuple of (R, G, B) radiance values.
    """
    _trace_kernel(vec3(*origin), vec3(*direction), depth)
    return _read_query_result()


def sample_sky(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Evaluate the background for a direction."""
    _sky_kernel(vec3(*direction))
    return _read_query_result()


def render_pixel(col: int, row: int, samples: int = 1, depth: int = 10) -> tuple[float, float, float]:
    """Average several samples for one pixel of the current camera.

    setup_camera() must have been called first.

    Raises:
        ValueError: If samples is not positive.
    """
    if samples < 1:
        raise ValueError(f"samples must be positive, got {samples}")
    _pixel_kernel(col, row, samples, depth)
    return _read_query_result()


def render(
    scene: SceneManager,
    camera: Camera,
    out: TextIO | None = None,
    callback: ProgressCallback | None = None,
) -> np.ndarray:
    """Render a scene through a camera.

    The scene is uploaded to the device and the camera is set up, then rows
    are rendered from top to bottom. Each finished row is written to out as
    PPM text when a sink is given, and callback(rows_done, total_rows) is
    invoked after every row.

    Args:
        scene: The scene to render.
        camera: The camera configuration.
        out: Optional text stream receiving the image in plain PPM format.
        callback: Optional progress callback.

    Returns:
        Linear RGB image as a float32 array of shape (height, width, 3).

    Raises:
        ValueError: If the image is wider than MAX_IMAGE_WIDTH.
        OSError: If writing to out fails.
    """
    scene.activate()
    basis = setup_camera(camera)

    width = basis.image_width
    height = basis.image_height
    if width > MAX_IMAGE_WIDTH:
        raise ValueError(
            f"Image width ({width}) exceeds maximum supported ({MAX_IMAGE_WIDTH})"
        )

    writer = PPMWriter(out, width, height) if out is not None else None
    image = np.zeros((height, width, 3), dtype=np.float32)

    for row in range(height):
        _render_row(
            row,
            width,
            basis.samples_per_pixel,
            basis.max_depth,
            basis.pixel_samples_scale,
        )
        pixels = _row_buffer.to_numpy()[:width]
        image[row] = pixels

        if writer is not None:
            writer.write_row(pixels)
        if callback is not None:
            callback(row + 1, height)

    return image
