"""Monte Carlo ray tracer built on Taichi.

This package renders scenes of spheres with physically motivated materials
by averaging many jittered camera rays per pixel, with support for:
- Lambertian, metal and dielectric materials
- Thin-lens camera with depth of field
- Streaming plain PPM output and PNG export

Subpackages:
    core: Ray and interval utilities, the radiance estimator and render loop
    geometry: Sphere primitive and hit records
    materials: Scattering models and their registries
    scene: Scene storage, the scene manager and the demo scene
    camera: Camera configuration and primary ray generation
    preview: Image encoding, export and preview display
"""

__version__ = "0.1.0"
