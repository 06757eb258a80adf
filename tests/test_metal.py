"""Unit tests for the Metal material module.

Tests cover:
- Perfect specular reflection (fuzz=0)
- Fuzzy reflection stays within the fuzz ball
- Absorption when the scattered ray points into the surface
- Attenuation equals the albedo
- Material registry operations and fuzz clamping
"""

import math

import pytest
import taichi as ti


def _make_metal_runner(n=1):
    """Fields plus a kernel scattering n rays off a metal with normal +y."""
    from weekend_tracer.core.ray import Ray
    from weekend_tracer.geometry.sphere import HitRecord
    from weekend_tracer.materials.metal import scatter_metal

    directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
    attenuations = ti.Vector.field(3, dtype=ti.f32, shape=n)
    flags = ti.field(dtype=ti.i32, shape=n)

    @ti.kernel
    def run_kernel(albedo: ti.math.vec3, fuzz: ti.f32, incident: ti.math.vec3):
        for i in range(n):
            ray_in = Ray(origin=ti.math.vec3(0.0, 1.0, 0.0) - incident, direction=incident)
            rec = HitRecord(
                hit=1,
                t=1.0,
                point=ti.math.vec3(0.0, 0.0, 0.0),
                normal=ti.math.vec3(0.0, 1.0, 0.0),
                front_face=1,
                material_id=0,
            )
            scattered, attenuation, did_scatter = scatter_metal(albedo, fuzz, ray_in, rec)
            directions[i] = scattered.direction
            attenuations[i] = attenuation
            flags[i] = did_scatter

    def run(albedo=(1.0, 1.0, 1.0), fuzz=0.0, incident=(0.0, -1.0, 0.0)):
        run_kernel(ti.math.vec3(*albedo), fuzz, ti.math.vec3(*incident))
        return directions.to_numpy(), attenuations.to_numpy(), flags.to_numpy()

    return run


class TestPerfectReflection:
    """Tests for perfect specular reflection (fuzz=0)."""

    def test_normal_incidence_reflects_straight_back(self):
        run = _make_metal_runner()
        directions, _, flags = run(incident=(0.0, -1.0, 0.0))

        d = directions[0]
        assert abs(d[0]) < 1e-6
        assert abs(d[1] - 1.0) < 1e-6
        assert abs(d[2]) < 1e-6
        assert flags[0] == 1

    def test_45_degrees(self):
        run = _make_metal_runner()
        directions, _, flags = run(incident=(1.0, -1.0, 0.0))

        d = directions[0]
        s = 1.0 / math.sqrt(2.0)
        assert abs(d[0] - s) < 1e-5
        assert abs(d[1] - s) < 1e-5
        assert abs(d[2]) < 1e-5
        assert flags[0] == 1

    def test_attenuation_is_albedo(self):
        run = _make_metal_runner()
        _, attenuations, _ = run(albedo=(0.9, 0.6, 0.2))

        a = attenuations[0]
        assert abs(a[0] - 0.9) < 1e-6
        assert abs(a[1] - 0.6) < 1e-6
        assert abs(a[2] - 0.2) < 1e-6

    def test_reflection_into_surface_is_absorbed(self):
        """A ray arriving from below the normal reflects into the surface."""
        run = _make_metal_runner()
        _, _, flags = run(incident=(0.0, 1.0, 0.0))
        assert flags[0] == 0


class TestFuzzyReflection:
    """Tests for fuzzy reflection (fuzz > 0)."""

    N = 2048

    def test_perturbation_bounded_by_fuzz(self):
        run = _make_metal_runner(self.N)
        fuzz = 0.3
        directions, _, _ = run(fuzz=fuzz, incident=(0.0, -1.0, 0.0))

        offsets = directions - [0.0, 1.0, 0.0]
        distances = (offsets**2).sum(axis=1) ** 0.5
        assert (distances < fuzz + 1e-5).all()
        assert distances.max() > 0.0

    def test_grazing_fuzzy_rays_sometimes_absorbed(self):
        """Near-grazing incidence with full fuzz pushes some rays below."""
        run = _make_metal_runner(self.N)
        directions, attenuations, flags = run(
            albedo=(0.7, 0.7, 0.7), fuzz=1.0, incident=(1.0, -0.05, 0.0)
        )

        absorbed = flags == 0
        assert absorbed.any()
        assert (~absorbed).any()
        # Every surviving ray leaves above the surface
        assert (directions[~absorbed][:, 1] > 0.0).all()
        # Never amplifies light
        assert (attenuations <= 0.7 + 1e-6).all()


class TestMetalRegistry:
    """Tests for the metal material registry."""

    def test_add_and_count(self):
        from weekend_tracer.materials.metal import (
            add_metal_material,
            get_metal_material_count,
            metal_fuzzes,
        )

        assert add_metal_material((0.8, 0.8, 0.8), fuzz=0.25) == 0
        assert add_metal_material((0.8, 0.6, 0.2)) == 1
        assert get_metal_material_count() == 2
        assert abs(metal_fuzzes[0] - 0.25) < 1e-6
        assert metal_fuzzes[1] == 0.0

    @pytest.mark.parametrize(
        "fuzz,expected",
        [(-0.5, 0.0), (0.0, 0.0), (0.4, 0.4), (1.0, 1.0), (3.0, 1.0)],
    )
    def test_clamp_fuzz(self, fuzz, expected):
        from weekend_tracer.materials.metal import clamp_fuzz

        assert clamp_fuzz(fuzz) == expected

    def test_add_clamps_fuzz(self):
        from weekend_tracer.materials.metal import add_metal_material, metal_fuzzes

        idx = add_metal_material((0.5, 0.5, 0.5), fuzz=2.5)
        assert metal_fuzzes[idx] == 1.0

    def test_invalid_albedo_rejected(self):
        from weekend_tracer.materials.metal import add_metal_material

        with pytest.raises(ValueError):
            add_metal_material((0.5, 1.5, 0.5), fuzz=0.0)

    def test_clear(self):
        from weekend_tracer.materials.metal import (
            add_metal_material,
            clear_metal_materials,
            get_metal_material_count,
        )

        add_metal_material((0.5, 0.5, 0.5))
        clear_metal_materials()
        assert get_metal_material_count() == 0
