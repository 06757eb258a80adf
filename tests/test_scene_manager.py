"""Unit tests for the SceneManager.

Tests cover:
- Material registration (Lambertian, Metal, Dielectric)
- Shared materials across spheres
- Sphere addition and validation
- Scene serialization (get_config, from_config)
- Scene clearing
"""

import pytest


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from weekend_tracer.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestMaterialRegistration:
    """Tests for material registration."""

    def test_ids_are_sequential_across_types(self, fresh_scene):
        from weekend_tracer.materials.material import MaterialType

        id0 = fresh_scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
        id1 = fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        id2 = fresh_scene.add_dielectric_material(ior=1.5)
        id3 = fresh_scene.add_lambertian_material(albedo=(0.1, 0.8, 0.1))

        assert (id0, id1, id2, id3) == (0, 1, 2, 3)
        assert fresh_scene.num_materials == 4

        info = fresh_scene.get_material_info(id3)
        assert info.material_type == MaterialType.LAMBERTIAN
        assert info.type_index == 1
        assert info.params == {"albedo": (0.1, 0.8, 0.1)}

    def test_metal_params_store_clamped_fuzz(self, fresh_scene):
        mat_id = fresh_scene.add_metal_material(albedo=(0.5, 0.5, 0.5), fuzz=4.0)
        assert fresh_scene.get_material_info(mat_id).params["fuzz"] == 1.0

    def test_dielectric_default_ior(self, fresh_scene):
        mat_id = fresh_scene.add_dielectric_material()
        assert fresh_scene.get_material_info(mat_id).params == {"ior": 1.5}

    def test_unknown_material_info(self, fresh_scene):
        with pytest.raises(ValueError, match="Unknown material ID"):
            fresh_scene.get_material_info(0)

    def test_invalid_material_params_propagate(self, fresh_scene):
        with pytest.raises(ValueError):
            fresh_scene.add_lambertian_material(albedo=(2.0, 0.0, 0.0))
        with pytest.raises(ValueError):
            fresh_scene.add_dielectric_material(ior=0.0)
        assert fresh_scene.num_materials == 0


class TestSpheres:
    """Tests for adding spheres."""

    def test_shared_material(self, fresh_scene):
        from weekend_tracer.scene.intersection import get_sphere_count, sphere_material_ids

        glass = fresh_scene.add_dielectric_material(ior=1.5)
        fresh_scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
        fresh_scene.add_sphere((-1.0, 0.0, -1.0), -0.4, glass)

        assert fresh_scene.num_spheres == 2
        assert get_sphere_count() == 2
        assert sphere_material_ids[0] == glass
        assert sphere_material_ids[1] == glass
        assert fresh_scene.spheres[1].radius == -0.4

    def test_unknown_material_rejected(self, fresh_scene):
        with pytest.raises(ValueError, match="Unknown material ID"):
            fresh_scene.add_sphere((0.0, 0.0, 0.0), 1.0, 0)

    def test_zero_radius_rejected(self, fresh_scene):
        mat = fresh_scene.add_lambertian_material((0.5, 0.5, 0.5))
        with pytest.raises(ValueError):
            fresh_scene.add_sphere((0.0, 0.0, 0.0), 0.0, mat)
        assert fresh_scene.num_spheres == 0


class TestClear:
    """Tests for clearing the scene."""

    def test_clear_resets_everything(self, fresh_scene):
        from weekend_tracer.materials.lambertian import get_lambertian_material_count
        from weekend_tracer.materials.material import get_material_count
        from weekend_tracer.scene.intersection import get_sphere_count

        mat = fresh_scene.add_lambertian_material((0.5, 0.5, 0.5))
        fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, mat)
        fresh_scene.clear()

        assert fresh_scene.num_spheres == 0
        assert fresh_scene.num_materials == 0
        assert get_sphere_count() == 0
        assert get_material_count() == 0
        assert get_lambertian_material_count() == 0

    def test_new_manager_replaces_previous_scene(self):
        from weekend_tracer.scene.intersection import get_sphere_count
        from weekend_tracer.scene.manager import SceneManager

        first = SceneManager()
        mat = first.add_lambertian_material((0.5, 0.5, 0.5))
        first.add_sphere((0.0, 0.0, -1.0), 0.5, mat)

        second = SceneManager()
        assert second.num_spheres == 0
        assert get_sphere_count() == 0


class TestSerialization:
    """Tests for get_config and from_config."""

    def test_round_trip(self, fresh_scene):
        from weekend_tracer.scene.manager import SceneManager

        ground = fresh_scene.add_lambertian_material((0.8, 0.8, 0.0))
        gold = fresh_scene.add_metal_material((0.8, 0.6, 0.2), fuzz=0.3)
        glass = fresh_scene.add_dielectric_material(1.5)
        fresh_scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
        fresh_scene.add_sphere((1.0, 0.0, -1.0), 0.5, gold)
        fresh_scene.add_sphere((-1.0, 0.0, -1.0), -0.4, glass)

        config = fresh_scene.get_config()
        assert config.materials[1] == {"type": "metal", "albedo": (0.8, 0.6, 0.2), "fuzz": 0.3}
        assert config.spheres[2] == {"center": (-1.0, 0.0, -1.0), "radius": -0.4, "material_id": 2}

        rebuilt = SceneManager.from_config(config)
        assert rebuilt.get_config() == config
        assert rebuilt.num_spheres == 3
        assert rebuilt.num_materials == 3

    def test_unknown_material_type(self):
        from weekend_tracer.scene.manager import SceneConfig, SceneManager

        config = SceneConfig(materials=[{"type": "plasma"}])
        with pytest.raises(ValueError, match="Unknown material type"):
            SceneManager.from_config(config)

    def test_repr(self, fresh_scene):
        assert repr(fresh_scene) == "SceneManager(spheres=0, materials=0)"
