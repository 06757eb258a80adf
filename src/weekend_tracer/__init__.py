"""Monte Carlo path tracer built on Taichi.

This package renders spheres made of diffuse, metal and glass materials
through a thin-lens camera, accumulating jittered samples per pixel.

Subpackages:
    core: Ray and vector utilities, the path tracing integrator and the
        progressive rendering loop
    geometry: Sphere primitive and hit records
    materials: Lambertian, metal and dielectric scattering plus the
        material table
    scene: Sphere storage, the scene manager and preset scenes
    camera: Thin-lens camera with depth of field
    output: Color quantisation and image files

Modules that declare Taichi fields must be imported after ``ti.init``.
"""

__version__ = "0.1.0"
