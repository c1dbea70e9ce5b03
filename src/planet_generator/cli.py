#!/usr/bin/env python3
"""
Planet Generator - Command line entry point

Generate a planet mesh and report its statistics. The mesh itself is not
written anywhere; --summary saves a JSON report.

Usage:
    planet-generator --radius 200 --resolution 48 --mode fan
    planet-generator --config planet.json --summary outputs/summary.json -v
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from terrain_common.config import (
    DEFAULT_DESCRIPTOR,
    GridAnchor,
    MesherOptions,
    NoiseMapping,
    OrientationMode,
    PlanetDescriptor,
    TriangulationMode,
)
from terrain_common.mesh_ops import compute_mesh_stats, outward_fraction, radial_stats

from .build import build_planet

logger = logging.getLogger(__name__)

# CLI flag -> descriptor field
DESCRIPTOR_FLAGS = {
    "radius": "radius",
    "resolution": "resolution",
    "noise_scale": "noise_scale",
    "noise_octaves": "noise_octaves",
    "height_scale": "terrain_height_scale",
    "seed": "noise_seed",
    "noise_mapping": "noise_mapping",
    "center": "world_center",
    "world_size": "world_size",
    "anchor": "grid_anchor",
    "spawn_margin": "spawn_margin",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Planet Generator - Build a planet surface mesh from a density field"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Planet descriptor JSON file"
    )
    parser.add_argument("--radius", type=float, help="Base sphere radius")
    parser.add_argument("--resolution", "-r", type=int, help="Grid samples per axis")
    parser.add_argument("--noise-scale", type=float, help="Base noise frequency")
    parser.add_argument("--noise-octaves", type=int, help="Number of noise octaves")
    parser.add_argument("--height-scale", type=float, help="Terrain height multiplier")
    parser.add_argument("--seed", type=int, help="Noise seed")
    parser.add_argument(
        "--noise-mapping",
        choices=[m.value for m in NoiseMapping],
        help="Direction to noise coordinate mapping"
    )
    parser.add_argument(
        "--center",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        help="World-space planet center"
    )
    parser.add_argument("--world-size", type=float, help="Physical extent of the sampled cube")
    parser.add_argument(
        "--anchor",
        choices=[a.value for a in GridAnchor],
        help="Grid placement in world space"
    )
    parser.add_argument("--spawn-margin", type=float, help="Spawn clearance above terrain")
    parser.add_argument(
        "--mode", "-m",
        choices=[m.value for m in TriangulationMode],
        default=TriangulationMode.FAN.value,
        help="Triangulation mode"
    )
    parser.add_argument(
        "--orientation",
        choices=[o.value for o in OrientationMode],
        default=OrientationMode.PLANET_CENTER.value,
        help="Normal orientation reference"
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=1,
        help="Worker threads for sampling and meshing"
    )
    parser.add_argument(
        "--summary", "-o",
        type=Path,
        help="Write a JSON summary to this path"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )
    return parser


def resolve_descriptor(args: argparse.Namespace) -> PlanetDescriptor:
    """Descriptor from --config (or defaults) with command line overrides applied."""
    if args.config:
        settings = PlanetDescriptor.from_json(args.config).to_dict()
    else:
        settings = DEFAULT_DESCRIPTOR.to_dict()

    for flag, name in DESCRIPTOR_FLAGS.items():
        value = getattr(args, flag)
        if value is not None:
            settings[name] = value
    return PlanetDescriptor.from_dict(settings)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        descriptor = resolve_descriptor(args)
        options = MesherOptions(
            triangulation=TriangulationMode(args.mode),
            orientation=OrientationMode(args.orientation),
            workers=args.workers,
        )
    except (ValueError, OSError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    mesh, info = build_planet(descriptor, options)

    summary = {
        "timestamp": datetime.now().isoformat(),
        "descriptor": descriptor.to_dict(),
        "options": options.to_dict(),
        "planet": info.to_dict(),
        "mesh": compute_mesh_stats(mesh),
        "radial": radial_stats(mesh, info.center),
        "outward_fraction": outward_fraction(mesh, info.center),
    }

    if args.summary:
        args.summary.parent.mkdir(parents=True, exist_ok=True)
        with open(args.summary, 'w') as f:
            json.dump(summary, f, indent=2)
        logger.info(f"Summary saved to: {args.summary}")
    else:
        print(json.dumps(summary, indent=2))

    logger.info(f"\n{'=' * 60}")
    logger.info(f"COMPLETE: {summary['mesh']['n_vertices']} vertices, {summary['mesh']['n_faces']} triangles")
    logger.info(f"{'=' * 60}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
