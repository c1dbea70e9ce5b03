"""
Tests for planet configuration objects.

Tests cover:
- PlanetDescriptor defaults, validation and derived geometry
- JSON / dict round trips
- MesherOptions coercion
- PlanetInfo helpers
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from terrain_common.config import (
    PlanetDescriptor,
    PlanetInfo,
    MesherOptions,
    NoiseMapping,
    GridAnchor,
    TriangulationMode,
    OrientationMode,
    DEFAULT_DESCRIPTOR,
)


# ============== PlanetDescriptor Tests ==============

class TestPlanetDescriptor:
    """Test descriptor defaults and validation."""

    def test_default_values(self):
        """Defaults match the reference planet asset."""
        d = PlanetDescriptor()

        assert d.radius == 200.0
        assert d.resolution == 48
        assert d.noise_scale == 0.15
        assert d.noise_octaves == 3
        assert d.terrain_height_scale == 15.0
        assert d.world_center == (500.0, 500.0, 500.0)
        assert d.world_size == 1000.0
        assert d.noise_mapping is NoiseMapping.SPHERICAL
        assert d.grid_anchor is GridAnchor.CENTERED

    def test_voxel_size(self):
        d = PlanetDescriptor(resolution=4, world_size=40.0)
        assert d.voxel_size == 10.0

    @pytest.mark.parametrize("kwargs", [
        {"resolution": 1},
        {"resolution": 0},
        {"world_size": 0.0},
        {"world_size": -5.0},
        {"radius": -1.0},
        {"noise_octaves": -1},
        {"noise_scale": -0.1},
        {"world_center": (0.0, 0.0)},
        {"world_center": (0.0, float("nan"), 0.0)},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            PlanetDescriptor(**kwargs)

    def test_minimum_resolution_allowed(self):
        d = PlanetDescriptor(resolution=2)
        assert d.resolution == 2

    def test_enum_coercion_from_strings(self):
        d = PlanetDescriptor(noise_mapping="planar", grid_anchor="corner")
        assert d.noise_mapping is NoiseMapping.PLANAR
        assert d.grid_anchor is GridAnchor.CORNER

    def test_world_center_coerced_to_tuple(self):
        d = PlanetDescriptor(world_center=[1, 2, 3])
        assert d.world_center == (1.0, 2.0, 3.0)

    def test_is_immutable(self):
        d = PlanetDescriptor()
        with pytest.raises(AttributeError):
            d.radius = 5.0


class TestGridPlacement:
    """Test grid origin / local center for both anchors."""

    def test_centered_anchor(self):
        d = PlanetDescriptor(world_center=(100.0, -50.0, 7.0), world_size=40.0)

        np.testing.assert_allclose(d.grid_origin, [80.0, -70.0, -13.0])
        np.testing.assert_allclose(d.local_center, [20.0, 20.0, 20.0])

    def test_corner_anchor(self):
        d = PlanetDescriptor(world_center=(10.0, 20.0, 30.0), grid_anchor=GridAnchor.CORNER)

        np.testing.assert_allclose(d.grid_origin, [0.0, 0.0, 0.0])
        np.testing.assert_allclose(d.local_center, [10.0, 20.0, 30.0])

    def test_anchors_agree_when_center_is_half_extent(self):
        """The reference asset centers the planet in its world cube."""
        centered = PlanetDescriptor()
        corner = PlanetDescriptor(grid_anchor=GridAnchor.CORNER)

        np.testing.assert_allclose(centered.grid_origin, corner.grid_origin)
        np.testing.assert_allclose(centered.local_center, corner.local_center)

    def test_spawn_position(self):
        d = PlanetDescriptor(radius=200.0, terrain_height_scale=15.0, spawn_margin=5.0)
        np.testing.assert_allclose(d.spawn_position, [500.0, 720.0, 500.0])


class TestDescriptorSerialization:
    """Test dict / JSON round trips."""

    def test_dict_round_trip(self):
        d = PlanetDescriptor(radius=12.5, noise_mapping="planar", world_center=(1, 2, 3))
        assert PlanetDescriptor.from_dict(d.to_dict()) == d

    def test_to_dict_is_json_friendly(self):
        data = PlanetDescriptor().to_dict()
        assert data["noise_mapping"] == "spherical"
        assert data["grid_anchor"] == "centered"
        assert data["world_center"] == [500.0, 500.0, 500.0]

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError, match="Unknown"):
            PlanetDescriptor.from_dict({"radius": 10.0, "gravity": 9.8})

    def test_json_round_trip(self, tmp_path):
        d = PlanetDescriptor(radius=30.0, resolution=16, noise_seed=7)
        path = tmp_path / "configs" / "planet.json"

        d.save(path)
        loaded = PlanetDescriptor.from_json(path)

        assert loaded == d

    def test_default_descriptor(self):
        assert DEFAULT_DESCRIPTOR == PlanetDescriptor()


# ============== MesherOptions Tests ==============

class TestMesherOptions:
    """Test meshing options."""

    def test_defaults(self):
        options = MesherOptions()
        assert options.triangulation is TriangulationMode.FAN
        assert options.orientation is OrientationMode.PLANET_CENTER
        assert options.min_edge_length == 0.01
        assert options.workers == 1

    def test_string_coercion(self):
        options = MesherOptions(triangulation="both", orientation="cube_center")
        assert options.triangulation is TriangulationMode.BOTH
        assert options.orientation is OrientationMode.CUBE_CENTER

    def test_invalid_workers(self):
        with pytest.raises(ValueError):
            MesherOptions(workers=0)

    def test_invalid_mode(self):
        with pytest.raises(ValueError):
            MesherOptions(triangulation="spiral")

    def test_to_dict(self):
        d = MesherOptions(triangulation="canonical", workers=3).to_dict()
        assert d["triangulation"] == "canonical"
        assert d["workers"] == 3


# ============== PlanetInfo Tests ==============

class TestPlanetInfo:
    """Test planet summary helpers."""

    @pytest.fixture
    def info(self):
        return PlanetInfo.from_descriptor(
            PlanetDescriptor(radius=100.0, world_center=(10.0, 0.0, 0.0), terrain_height_scale=0.0)
        )

    def test_from_descriptor(self, info):
        np.testing.assert_allclose(info.center, [10.0, 0.0, 0.0])
        assert info.radius == 100.0
        np.testing.assert_allclose(info.spawn_position, [10.0, 105.0, 0.0])

    def test_local_up(self, info):
        np.testing.assert_allclose(info.local_up([10.0, 0.0, 50.0]), [0.0, 0.0, 1.0])

    def test_local_up_at_center_is_zero(self, info):
        np.testing.assert_allclose(info.local_up(info.center), [0.0, 0.0, 0.0])

    def test_altitude(self, info):
        assert info.altitude([10.0, 130.0, 0.0]) == pytest.approx(30.0)
        assert info.altitude([10.0, 0.0, 0.0]) == pytest.approx(-100.0)

    def test_spawn_is_above_terrain(self, info):
        assert info.altitude(info.spawn_position) > 0

    def test_to_dict(self, info):
        data = info.to_dict()
        assert data["radius"] == 100.0
        assert data["center"] == [10.0, 0.0, 0.0]
        assert len(data["spawn_position"]) == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
