"""Unified scene manager for coordinating spheres and materials.

This module provides a high-level scene-building API on top of the sphere
storage and the material registries. It keeps a Python-side record of every
material and sphere so a scene can be inspected, serialised into a
``SceneConfig`` and rebuilt from one.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> glass = scene.add_dielectric_material(ior=1.5)
    >>> scene.add_sphere(center=(-1, 0, -1), radius=0.5, material_id=glass)
    >>> scene.add_sphere(center=(-1, 0, -1), radius=-0.4, material_id=glass)
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from weekend_tracer.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from weekend_tracer.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from weekend_tracer.materials.material import (
    MaterialType,
    clear_material_table,
    register_material,
)
from weekend_tracer.materials.metal import (
    add_metal_material,
    clamp_fuzz,
    clear_metal_materials,
)
from weekend_tracer.scene.intersection import add_sphere, clear_scene

logger = logging.getLogger(__name__)


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material (Lambertian, Metal, Dielectric).
        type_index: The index within the type-specific material array.
        params: The material parameters as stored (fuzz already clamped).
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere (negative for hollow shells).
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Serialisable description of a scene.

    Attributes:
        materials: List of material configurations, in material ID order.
            Each has a "type" key ("lambertian", "metal" or "dielectric")
            plus that type's parameters.
        spheres: List of sphere configurations with "center", "radius" and
            "material_id" keys.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Unified scene manager coordinating spheres and materials.

    The scene storage is module-level Taichi fields, so only one scene is
    live at a time: constructing a SceneManager clears whatever was there.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
        >>> gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> scene.add_sphere((0, -100.5, -1), 100.0, ground)
        >>> scene.add_sphere((1, 0, -1), 0.5, gold)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_material_table()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres and materials)."""
        self._clear_all()
        logger.debug("Scene cleared")

    # =========================================================================
    # Material Management
    # =========================================================================

    def _track_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        material_id = register_material(material_type, type_index)
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        logger.debug("Added %s material %d: %s", material_type.name.lower(), material_id, params)
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian (diffuse) material to the scene.

        Args:
            albedo: The diffuse reflectance color as (R, G, B) tuple.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_lambertian_material(albedo)
        return self._track_material(
            MaterialType.LAMBERTIAN, type_index, {"albedo": tuple(albedo)}
        )

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metal (specular reflective) material to the scene.

        Args:
            albedo: The reflective color as (R, G, B) tuple.
            fuzz: Reflection perturbation radius, clamped to [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_metal_material(albedo, fuzz)
        return self._track_material(
            MaterialType.METAL,
            type_index,
            {"albedo": tuple(albedo), "fuzz": clamp_fuzz(fuzz)},
        )

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Add a dielectric (glass/water) material to the scene.

        Args:
            ior: Index of refraction. Default is 1.5 (typical glass).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the index of refraction is not positive.
        """
        type_index = add_dielectric_material(ior)
        return self._track_material(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def get_material_info(self, material_id: int) -> MaterialInfo:
        """Get information about a material.

        Raises:
            ValueError: If the material ID is not registered.
        """
        if not 0 <= material_id < len(self.materials):
            raise ValueError(f"Unknown material ID {material_id}")
        return self.materials[material_id]

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere that references an existing material.

        Args:
            center: The center of the sphere.
            radius: The radius. A negative radius keeps the same surface but
                flips the normal inward, for hollow shells.
            material_id: A unified material ID returned by an add_*_material
                method.

        Returns:
            The index of the sphere in scene storage.

        Raises:
            ValueError: If the material ID is unknown or the radius is zero.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        if not 0 <= material_id < len(self.materials):
            raise ValueError(
                f"Unknown material ID {material_id}; add the material before the sphere."
            )

        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=tuple(center),
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    @property
    def num_spheres(self) -> int:
        """Number of spheres in the scene."""
        return len(self.spheres)

    @property
    def num_materials(self) -> int:
        """Number of materials in the scene."""
        return len(self.materials)

    # =========================================================================
    # Serialisation
    # =========================================================================

    def get_config(self) -> SceneConfig:
        """Describe the current scene as a SceneConfig."""
        config = SceneConfig()
        for info in self.materials:
            config.materials.append({"type": info.material_type.name.lower(), **info.params})
        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": sphere.center,
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )
        return config

    @classmethod
    def from_config(cls, config: SceneConfig) -> "SceneManager":
        """Build a scene from a SceneConfig.

        Raises:
            ValueError: If a material type is unknown or a sphere references
                an unknown material.
        """
        scene = cls()
        for material in config.materials:
            kind = material.get("type")
            if kind == "lambertian":
                scene.add_lambertian_material(material["albedo"])
            elif kind == "metal":
                scene.add_metal_material(material["albedo"], material.get("fuzz", 0.0))
            elif kind == "dielectric":
                scene.add_dielectric_material(material.get("ior", 1.5))
            else:
                raise ValueError(f"Unknown material type: {kind!r}")
        for sphere in config.spheres:
            scene.add_sphere(sphere["center"], sphere["radius"], sphere["material_id"])
        logger.info(
            "Built scene with %d spheres and %d materials",
            scene.num_spheres,
            scene.num_materials,
        )
        return scene

    def __repr__(self) -> str:
        return f"SceneManager(spheres={self.num_spheres}, materials={self.num_materials})"
