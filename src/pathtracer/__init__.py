"""Offline Monte Carlo path tracer built on Taichi.

The package renders scenes of spheres with Lambertian, metal and dielectric
surfaces into plain-text PPM images:
- Thin-lens camera with anti-aliasing jitter and depth of field
- Analytic ray-sphere intersection over a linearly scanned scene
- Iterative path evaluation with a bounded bounce count
- Reproducible sampling through explicit, seeded random streams

Subpackages:
    core: Ray and vector utilities, intervals, random streams, the path
        evaluator and the row-by-row renderer
    geometry: Sphere primitive and hit records
    materials: Scattering models (Lambertian, metal, dielectric)
    scene: Device-side scene storage, the host-side Scene and scene builders
    camera: Thin-lens camera model with ray generation
    output: PPM encoding

Taichi must be initialized with ``ti.init`` before importing modules that
declare fields (camera, scene, sampling, integrator, renderer).
"""

__version__ = "0.1.0"
