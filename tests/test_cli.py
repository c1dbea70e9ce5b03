"""
Tests for the planet-generator command line.
"""

import json

import pytest
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from terrain_common.config import PlanetDescriptor
from planet_generator.cli import build_parser, resolve_descriptor, main


TINY_ARGS = [
    "--radius", "10",
    "--resolution", "4",
    "--world-size", "40",
    "--noise-octaves", "0",
    "--center", "0", "0", "0",
]


class TestResolveDescriptor:
    """Test config file + flag merging."""

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert resolve_descriptor(args) == PlanetDescriptor()

    def test_flags_override(self):
        args = build_parser().parse_args(TINY_ARGS + ["--anchor", "corner", "--seed", "4"])
        d = resolve_descriptor(args)

        assert d.radius == 10.0
        assert d.resolution == 4
        assert d.world_center == (0.0, 0.0, 0.0)
        assert d.grid_anchor.value == "corner"
        assert d.noise_seed == 4

    def test_config_file_with_override(self, tmp_path):
        path = tmp_path / "planet.json"
        PlanetDescriptor(radius=33.0, resolution=10, noise_seed=2).save(path)

        args = build_parser().parse_args(["--config", str(path), "--resolution", "12"])
        d = resolve_descriptor(args)

        assert d.radius == 33.0
        assert d.noise_seed == 2
        assert d.resolution == 12


class TestMain:
    """Test the entry point."""

    def test_writes_summary(self, tmp_path):
        summary_path = tmp_path / "out" / "summary.json"
        assert main(TINY_ARGS + ["--summary", str(summary_path)]) == 0

        with open(summary_path) as f:
            summary = json.load(f)

        assert summary["mesh"]["n_faces"] == 24
        assert summary["outward_fraction"] == 1.0
        assert summary["descriptor"]["radius"] == 10.0
        assert summary["options"]["triangulation"] == "fan"
        assert summary["planet"]["spawn_position"] == [0.0, 30.0, 0.0]

    def test_prints_summary(self, capsys):
        assert main(TINY_ARGS + ["--mode", "quad", "--workers", "2"]) == 0

        summary = json.loads(capsys.readouterr().out)
        assert summary["options"]["triangulation"] == "quad"
        assert summary["options"]["workers"] == 2

    @pytest.mark.parametrize("argv", [
        ["--resolution", "1"],
        ["--world-size", "0"],
        ["--workers", "0"],
    ])
    def test_invalid_configuration(self, argv):
        assert main(argv) == 1

    def test_missing_config_file(self, tmp_path):
        assert main(["--config", str(tmp_path / "missing.json")]) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
