"""Unit tests for the SceneManager.

Tests cover:
- Material registration (Lambertian, Metal)
- Material type tracking and lookup
- Sphere addition with materials
- Convenience methods (add_*_sphere)
- Scene serialization (to_config, from_config, JSON files)
- Scene clearing
- Demo scene construction
"""

import json

import pytest
import taichi as ti


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from raykernel.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestMaterialRegistration:
    """Tests for material registration."""

    def test_add_lambertian_material(self, fresh_scene):
        """Test adding a Lambertian material."""
        mat_id = fresh_scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
        assert mat_id == 0
        assert fresh_scene.get_material_count() == 1

    def test_add_metal_material(self, fresh_scene):
        """Test adding a metal material."""
        mat_id = fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        assert mat_id == 0
        assert fresh_scene.get_material_count() == 1

    def test_add_multiple_materials(self, fresh_scene):
        """Test material IDs are shared across types."""
        id0 = fresh_scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
        id1 = fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2))
        id2 = fresh_scene.add_lambertian_material(albedo=(0.1, 0.8, 0.1))

        assert (id0, id1, id2) == (0, 1, 2)
        assert fresh_scene.get_material_count() == 3

    def test_material_validation_albedo(self, fresh_scene):
        """Test invalid albedo raises ValueError and registers nothing."""
        with pytest.raises(ValueError):
            fresh_scene.add_lambertian_material(albedo=(1.5, 0.5, 0.5))
        with pytest.raises(ValueError):
            fresh_scene.add_metal_material(albedo=(0.5, -0.1, 0.5))
        assert fresh_scene.get_material_count() == 0

    def test_material_validation_fuzz(self, fresh_scene):
        """Test invalid fuzz raises ValueError."""
        with pytest.raises(ValueError):
            fresh_scene.add_metal_material(albedo=(0.5, 0.5, 0.5), fuzz=2.0)

    def test_get_material_type_python(self, fresh_scene):
        """Test Python-side material type lookup."""
        from raykernel.scene.manager import MaterialType

        lam = fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        met = fresh_scene.add_metal_material(albedo=(0.5, 0.5, 0.5))

        assert fresh_scene.get_material_type_python(lam) == MaterialType.LAMBERTIAN
        assert fresh_scene.get_material_type_python(met) == MaterialType.METAL
        assert fresh_scene.get_material_type_python(99) is None

    def test_get_material_info(self, fresh_scene):
        """Test material info records type-local index and parameters."""
        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        met = fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.5)

        info = fresh_scene.get_material_info(met)
        assert info is not None
        assert info.material_id == 1
        assert info.type_index == 0
        assert info.params == {"albedo": (0.8, 0.6, 0.2), "fuzz": 0.5}
        assert fresh_scene.get_material_info(-1) is None

    def test_get_material_type_in_kernel(self, fresh_scene):
        """Test kernel-side type and index lookup, including unknown IDs."""
        from raykernel.scene.manager import (
            UNKNOWN_MATERIAL_TYPE,
            MaterialType,
            get_material_type,
            get_material_type_index,
        )

        fresh_scene.add_metal_material(albedo=(0.5, 0.5, 0.5))
        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        fresh_scene.add_metal_material(albedo=(0.5, 0.5, 0.5))

        types = ti.field(dtype=ti.i32, shape=5)
        indices = ti.field(dtype=ti.i32, shape=5)

        @ti.kernel
        def test_kernel():
            for i in range(5):
                # IDs -1 .. 3, where -1 and 3 are unregistered
                types[i] = get_material_type(i - 1)
                indices[i] = get_material_type_index(i - 1)

        test_kernel()
        assert types.to_numpy().tolist() == [
            UNKNOWN_MATERIAL_TYPE,
            int(MaterialType.METAL),
            int(MaterialType.LAMBERTIAN),
            int(MaterialType.METAL),
            UNKNOWN_MATERIAL_TYPE,
        ]
        assert indices.to_numpy().tolist() == [-1, 0, 0, 1, -1]


class TestSphereManagement:
    """Tests for adding spheres."""

    def test_add_sphere_with_material(self, fresh_scene):
        """Test adding a sphere that refers to a material."""
        mat_id = fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        idx = fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, mat_id)
        assert idx == 0
        assert fresh_scene.get_sphere_count() == 1
        assert fresh_scene.spheres[0].material_id == mat_id

    def test_add_sphere_invalid_material(self, fresh_scene):
        """Test referring to an unregistered material raises ValueError."""
        with pytest.raises(ValueError):
            fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, 0)

        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        with pytest.raises(ValueError):
            fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, 1)
        with pytest.raises(ValueError):
            fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, -1)
        assert fresh_scene.get_sphere_count() == 0

    def test_add_sphere_invalid_radius(self, fresh_scene):
        """Test non-positive radius raises ValueError."""
        mat_id = fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        with pytest.raises(ValueError):
            fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.0, mat_id)
        with pytest.raises(ValueError):
            fresh_scene.add_sphere((0.0, 0.0, -1.0), -1.0, mat_id)

    def test_add_lambertian_sphere(self, fresh_scene):
        """Test the Lambertian sphere convenience method."""
        from raykernel.scene.manager import MaterialType

        sphere_idx, mat_id = fresh_scene.add_lambertian_sphere(
            (0.0, 0.0, -1.0), 0.5, (0.7, 0.3, 0.3)
        )
        assert sphere_idx == 0
        assert mat_id == 0
        assert fresh_scene.get_material_type_python(mat_id) == MaterialType.LAMBERTIAN

    def test_add_metal_sphere(self, fresh_scene):
        """Test the metal sphere convenience method."""
        from raykernel.scene.manager import MaterialType

        fresh_scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, (0.8, 0.8, 0.0))
        sphere_idx, mat_id = fresh_scene.add_metal_sphere(
            (1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), fuzz=1.0
        )
        assert sphere_idx == 1
        assert mat_id == 1
        assert fresh_scene.get_material_type_python(mat_id) == MaterialType.METAL

    def test_clear_scene(self, fresh_scene):
        """Test clearing removes spheres and materials."""
        fresh_scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        fresh_scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        fresh_scene.clear()

        assert fresh_scene.get_sphere_count() == 0
        assert fresh_scene.get_material_count() == 0
        assert fresh_scene.materials == []
        assert fresh_scene.spheres == []

    def test_capacity_methods(self, fresh_scene):
        """Test capacity reporting."""
        from raykernel.scene.intersection import MAX_SPHERES
        from raykernel.scene.manager import MAX_MATERIALS

        assert fresh_scene.get_max_spheres() == MAX_SPHERES
        assert fresh_scene.get_max_materials() == MAX_MATERIALS


class TestSceneSerialization:
    """Tests for configuration round-trips."""

    def _build(self, scene):
        matte = scene.add_lambertian_material(albedo=(0.7, 0.3, 0.3))
        gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=1.0)
        scene.add_sphere((0.0, 0.0, -1.0), 0.5, matte)
        scene.add_sphere((1.0, 0.0, -1.0), 0.5, gold)

    def test_to_config(self, fresh_scene):
        """Test exporting materials and spheres."""
        self._build(fresh_scene)
        config = fresh_scene.to_config()

        assert config.materials == [
            {"type": "lambertian", "albedo": [0.7, 0.3, 0.3]},
            {"type": "metal", "albedo": [0.8, 0.6, 0.2], "fuzz": 1.0},
        ]
        assert config.spheres == [
            {"center": [0.0, 0.0, -1.0], "radius": 0.5, "material_id": 0},
            {"center": [1.0, 0.0, -1.0], "radius": 0.5, "material_id": 1},
        ]

    def test_from_config(self, fresh_scene):
        """Test loading replaces the current scene."""
        from raykernel.scene.manager import MaterialType, SceneConfig

        fresh_scene.add_lambertian_sphere((5.0, 5.0, 5.0), 1.0, (0.1, 0.1, 0.1))

        config = SceneConfig(
            materials=[
                {"type": "metal", "albedo": [0.8, 0.8, 0.8], "fuzz": 0.3},
                {"type": "Lambertian", "albedo": [0.5, 0.5, 0.5]},
            ],
            spheres=[
                {"center": [0, 0, -1], "radius": 0.5, "material_id": 1},
                {"center": [-1, 0, -1], "radius": 0.5, "material_id": 0},
            ],
        )
        fresh_scene.from_config(config)

        assert fresh_scene.get_material_count() == 2
        assert fresh_scene.get_sphere_count() == 2
        assert fresh_scene.get_material_type_python(0) == MaterialType.METAL
        assert fresh_scene.get_material_type_python(1) == MaterialType.LAMBERTIAN
        assert fresh_scene.spheres[1].center == (-1.0, 0.0, -1.0)

    def test_to_dict_from_dict(self, fresh_scene):
        """Test a dictionary round-trip reproduces the configuration."""
        from raykernel.scene.manager import SceneManager

        self._build(fresh_scene)
        data = fresh_scene.to_dict()

        other = SceneManager()
        other.from_dict(data)
        assert other.to_dict() == data

    def test_json_round_trip(self, fresh_scene, tmp_path):
        """Test saving to and loading from a JSON file."""
        self._build(fresh_scene)
        path = tmp_path / "scene.json"
        fresh_scene.save_json(path)

        saved = json.loads(path.read_text())
        assert len(saved["materials"]) == 2
        assert len(saved["spheres"]) == 2

        expected = fresh_scene.to_dict()
        fresh_scene.clear()
        fresh_scene.load_json(path)
        assert fresh_scene.to_dict() == expected

    def test_from_config_invalid_material_type(self, fresh_scene):
        """Test an unknown material type raises ValueError."""
        with pytest.raises(ValueError, match="Unknown material type"):
            fresh_scene.from_dict({"materials": [{"type": "glass", "ior": 1.5}]})

    def test_from_config_invalid_material_reference(self, fresh_scene):
        """Test a sphere referring to a missing material raises ValueError."""
        with pytest.raises(ValueError, match="Invalid material_id"):
            fresh_scene.from_dict(
                {
                    "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
                    "spheres": [{"center": [0, 0, -1], "radius": 0.5, "material_id": 3}],
                }
            )


class TestDemoScene:
    """Tests for the demo scene builder."""

    def test_create_demo_scene(self):
        """Test the demo scene has four spheres with the expected materials."""
        from raykernel.scene.demo import create_demo_scene
        from raykernel.scene.manager import MaterialType

        scene, camera = create_demo_scene(aspect_ratio=2.0)

        assert scene.get_sphere_count() == 4
        assert scene.get_material_count() == 4
        types = [scene.get_material_type_python(i) for i in range(4)]
        assert types == [
            MaterialType.LAMBERTIAN,
            MaterialType.LAMBERTIAN,
            MaterialType.METAL,
            MaterialType.METAL,
        ]
        assert scene.spheres[0].radius == 100.0
        assert camera.aspect_ratio == 2.0
        assert camera.lookat == (0.0, 0.0, -1.0)

    def test_custom_params(self):
        """Test demo scene parameters are applied."""
        from raykernel.scene.demo import DemoSceneParams, create_demo_scene

        params = DemoSceneParams(right_metal_fuzz=0.0, center_color=(0.1, 0.2, 0.3))
        scene, _ = create_demo_scene(params)

        assert scene.materials[1].params["albedo"] == (0.1, 0.2, 0.3)
        assert scene.materials[3].params["fuzz"] == 0.0
