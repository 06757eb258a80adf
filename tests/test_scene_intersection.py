"""Tests for scene-level sphere storage and closest-hit queries."""

import pytest
import taichi as ti


def _make_scene_runner():
    """Fields plus a kernel that intersects one ray with the whole scene."""
    from weekend_tracer.core.ray import Ray
    from weekend_tracer.scene.intersection import intersect_scene

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def run_kernel(origin: ti.math.vec3, direction: ti.math.vec3, t_min: ti.f32, t_max: ti.f32):
        rec = intersect_scene(Ray(origin=origin, direction=direction), t_min, t_max)
        hit[None] = rec.hit
        t_val[None] = rec.t
        material_id[None] = rec.material_id

    def run(origin, direction, t_min=0.001, t_max=1e10):
        run_kernel(ti.math.vec3(*origin), ti.math.vec3(*direction), t_min, t_max)
        return int(hit[None]), float(t_val[None]), int(material_id[None])

    return run


class TestSphereStorage:
    """Tests for adding and clearing spheres."""

    def test_add_sphere_returns_index(self):
        from weekend_tracer.scene.intersection import add_sphere, get_sphere_count

        assert add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0) == 0
        assert add_sphere((1.0, 0.0, -1.0), 0.5, material_id=1) == 1
        assert get_sphere_count() == 2

    def test_clear_scene(self):
        from weekend_tracer.scene.intersection import add_sphere, clear_scene, get_sphere_count

        add_sphere((0.0, 0.0, -1.0), 0.5)
        clear_scene()
        assert get_sphere_count() == 0

    def test_zero_radius_rejected(self):
        from weekend_tracer.scene.intersection import add_sphere

        with pytest.raises(ValueError, match="non-zero"):
            add_sphere((0.0, 0.0, 0.0), 0.0)

    def test_negative_radius_accepted(self):
        from weekend_tracer.scene.intersection import add_sphere, get_sphere_count

        add_sphere((0.0, 0.0, -1.0), -0.4)
        assert get_sphere_count() == 1

    def test_capacity_exceeded(self):
        from weekend_tracer.scene.intersection import MAX_SPHERES, add_sphere

        for i in range(MAX_SPHERES):
            add_sphere((float(i), 0.0, 0.0), 0.1)
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            add_sphere((0.0, 0.0, 0.0), 0.1)


class TestIntersectScene:
    """Tests for the closest-hit linear scan."""

    def test_empty_scene_misses(self):
        run = _make_scene_runner()
        hit, _, material_id = run((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0
        assert material_id == -1

    @pytest.mark.parametrize("near_first", [True, False])
    def test_nearest_hit_regardless_of_order(self, near_first):
        """Two overlapping spheres along one ray: the nearer one wins."""
        from weekend_tracer.scene.intersection import add_sphere

        near = ((0.0, 0.0, -2.0), 0.5, 1)
        far = ((0.0, 0.0, -2.6), 0.5, 2)
        for center, radius, mat in (near, far) if near_first else (far, near):
            add_sphere(center, radius, material_id=mat)

        run = _make_scene_runner()
        hit, t, material_id = run((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit == 1
        assert abs(t - 1.5) < 1e-5
        assert material_id == 1

    def test_t_max_limits_scene_hits(self):
        from weekend_tracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0, material_id=3)
        run = _make_scene_runner()

        hit, _, _ = run((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=3.0)
        assert hit == 0

        hit, t, material_id = run((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=10.0)
        assert hit == 1
        assert abs(t - 4.0) < 1e-5
        assert material_id == 3

    def test_hollow_shell_hits_outer_surface_first(self):
        """Outer radius 0.5 and inner radius -0.4 around the same center."""
        from weekend_tracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -1.0), -0.4, material_id=0)
        add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
        run = _make_scene_runner()

        hit, t, _ = run((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 0.5) < 1e-5
