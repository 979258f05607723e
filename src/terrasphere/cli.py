"""terrasphere command-line interface."""

from __future__ import annotations

import argparse
import json
import logging
import math
from typing import List, Optional, Tuple

from .config import DEFAULT_LIGHT_DIR, DEFAULT_OCEAN_FRACTION, REFERENCE_SUBDIVISIONS, TerrainConfig, load_config
from .normals import light_from_angles
from .projection import preview_height, winkel_size, wrap_pi
from .seeds import parse_seed, random_seed
from .session import TerrainSession

logger = logging.getLogger(__name__)


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--seed", help="Integer seed in [0, 2147483647]; random when omitted")
    parser.add_argument(
        "--ocean", type=float, default=DEFAULT_OCEAN_FRACTION * 100.0,
        help="Ocean coverage in percent (default 71)",
    )
    parser.add_argument(
        "--reference-subdivisions", type=int, default=None,
        help=f"Icosphere level of the shared elevation distribution (default {REFERENCE_SUBDIVISIONS})",
    )
    parser.add_argument("--config", dest="config_path", help="JSON file of terrain constant overrides")
    parser.add_argument("-v", "--verbose", action="store_true")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="terrasphere — procedural planet terrain")
    sub = parser.add_subparsers(dest="command", required=True)

    stats = sub.add_parser("stats", help="Print elevation statistics of a terrain mesh")
    _add_common(stats)
    stats.add_argument("--subdivisions", type=int, default=6)
    stats.add_argument("--json", action="store_true", help="Print stats as JSON")

    globe = sub.add_parser("globe", help="Render the 3-D globe to PNG")
    _add_common(globe)
    globe.add_argument("--subdivisions", type=int, default=5)
    globe.add_argument("--out", dest="output_path", default="exports/globe.png")
    globe.add_argument("--elev", type=float, default=20.0)
    globe.add_argument("--azim", type=float, default=-60.0)
    globe.add_argument("--dpi", type=int, default=150)
    _add_light(globe)

    flatmap = sub.add_parser("flatmap", help="Render an equirectangular map to PNG")
    _add_common(flatmap)
    flatmap.add_argument("--height", type=int, default=600)
    flatmap.add_argument("--lambda0", type=float, default=0.0, help="Centre longitude in degrees")
    _add_light(flatmap)
    flatmap.add_argument("--out", dest="output_path", default="exports/flatmap.png")

    winkel = sub.add_parser("winkel", help="Render a Winkel Tripel map to PNG")
    _add_common(winkel)
    winkel.add_argument("--height", type=int, default=600)
    winkel.add_argument("--lambda0", type=float, default=0.0, help="Centre longitude in degrees")
    winkel.add_argument("--preview", action="store_true", help="Render at drag-preview resolution")
    winkel.add_argument(
        "--drag", type=float, default=0.0,
        help="Horizontal drag in output pixels applied after --lambda0 (right pans west)",
    )
    _add_light(winkel)
    winkel.add_argument("--out", dest="output_path", default="exports/winkel.png")

    export = sub.add_parser("export", help="Export the terrain mesh as JSON")
    _add_common(export)
    export.add_argument("--subdivisions", type=int, default=5)
    export.add_argument("--out", dest="output_path", default="exports/terrain.json")
    export.add_argument("--indent", type=int, default=None)
    export.add_argument("--no-normals", action="store_true")
    export.add_argument("--no-colours", action="store_true")

    return parser


def _ocean_fraction(percent: float) -> float:
    if not 0.0 <= percent <= 100.0:
        raise ValueError(f"--ocean must be a percentage in [0, 100], got {percent}")
    return percent / 100.0


def _session(args) -> TerrainSession:
    seed = parse_seed(args.seed) if args.seed is not None else random_seed()
    config: Optional[TerrainConfig] = load_config(args.config_path) if args.config_path else None
    print(f"Seed {seed}")
    return TerrainSession(seed, reference_subdivisions=args.reference_subdivisions, config=config)


def _add_light(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--light-azimuth", type=float, default=None, help="Light azimuth in degrees")
    parser.add_argument("--light-altitude", type=float, default=None, help="Light altitude in degrees")


def _light_dir(args) -> Tuple[float, float, float]:
    if args.light_azimuth is None and args.light_altitude is None:
        return DEFAULT_LIGHT_DIR
    azimuth = 0.0 if args.light_azimuth is None else args.light_azimuth
    altitude = 45.0 if args.light_altitude is None else args.light_altitude
    return light_from_angles(azimuth, altitude)


def _log_progress(label: str, done: int, total: int) -> None:
    if done == total:
        logger.debug("%s: %d/%d", label, done, total)


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        ocean = _ocean_fraction(args.ocean)
        session = _session(args)

        if args.command == "stats":
            _cmd_stats(session, ocean, args)
        elif args.command == "globe":
            _cmd_globe(session, ocean, args)
        elif args.command == "flatmap":
            _cmd_flatmap(session, ocean, args)
        elif args.command == "winkel":
            _cmd_winkel(session, ocean, args)
        elif args.command == "export":
            _cmd_export(session, ocean, args)
    except (ValueError, OSError) as exc:
        print(f"error: {exc}")
        raise SystemExit(1)


def _cmd_stats(session: TerrainSession, ocean: float, args) -> None:
    mesh = session.build_globe(ocean, args.subdivisions)
    stats = mesh.stats.as_dict()
    if args.json:
        print(json.dumps(stats, indent=2))
        return
    for key, value in stats.items():
        if isinstance(value, float):
            print(f"  {key}: {value:.4f}")
        else:
            print(f"  {key}: {value}")


def _cmd_globe(session: TerrainSession, ocean: float, args) -> None:
    from .globe_render import render_globe_3d

    mesh = session.build_globe(ocean, args.subdivisions)
    out = render_globe_3d(
        mesh, args.output_path, elev=args.elev, azim=args.azim, dpi=args.dpi, light_dir=_light_dir(args),
    )
    print(f"Saved {out}")


def _cmd_flatmap(session: TerrainSession, ocean: float, args) -> None:
    from .map_render import save_png

    image = session.render_flat_map(
        ocean,
        args.height,
        lambda0=wrap_pi(math.radians(args.lambda0)),
        progress=_log_progress,
        light_dir=_light_dir(args),
    )
    out = save_png(image, args.output_path)
    print(f"Saved {out} ({image.shape[1]}x{image.shape[0]})")


def _cmd_winkel(session: TerrainSession, ocean: float, args) -> None:
    from .map_render import save_png

    height = preview_height(args.height) if args.preview else args.height
    session.lambda0 = wrap_pi(math.radians(args.lambda0))
    if args.drag:
        session.pan(args.drag, winkel_size(height)[0])
    image = session.render_winkel(ocean, height, progress=_log_progress, light_dir=_light_dir(args))
    out = save_png(image, args.output_path)
    print(f"Saved {out} ({image.shape[1]}x{image.shape[0]})")


def _cmd_export(session: TerrainSession, ocean: float, args) -> None:
    from .export import export_terrain_json

    mesh = session.build_globe(ocean, args.subdivisions)
    out = export_terrain_json(
        mesh,
        args.output_path,
        include_normals=not args.no_normals,
        include_colours=not args.no_colours,
        indent=args.indent,
    )
    print(f"Saved {out}")


if __name__ == "__main__":
    main()
