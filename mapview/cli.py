"""
Command-line interface for the mapview package.

Provides argparse-based CLI with subcommands for turning raster and vector
files into standalone interactive HTML maps and slide comparisons.

Usage:
    mapview view dem.tif --output dem.html
    mapview view meuse.gpkg --zcol zinc lead          # writes output/meuse.html
    mapview slide before.tif after.tif --output change.html
    mapview basemap --output empty.html --map-types CartoDB.Positron
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .api import map_view
from .config import Config, get_default_config
from .constants import MAP_PROVIDERS
from .data import open_raster, open_vector
from .exceptions import MapviewError
from .logging_config import setup_logging
from .slideview import slide_view

RASTER_SUFFIXES = {".tif", ".tiff", ".img", ".vrt", ".asc", ".nc", ".jp2"}


def verbosity_from_args(args: argparse.Namespace) -> int:
    """Map --silent / --quiet / --verbose onto ``setup_logging`` verbosity (first match wins)."""
    for flag, verbosity in (("silent", -2), ("quiet", -1), ("verbose", 1)):
        if getattr(args, flag, False):
            return verbosity
    return 0


def _add_console_options(p: argparse.ArgumentParser, subcommand: bool = False) -> None:
    """Logging and console options.

    Added to the main parser and to every subparser, so ``mapview -v view ..``
    and ``mapview view .. -v`` both work. Subparser copies leave the attribute
    unset when the flag is absent, keeping what the main parser already parsed.
    """
    extra = {"default": argparse.SUPPRESS} if subcommand else {}
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug messages (projection handling, sampling, dispatch)",
        **extra
    )
    p.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log warnings and errors",
        **extra
    )
    p.add_argument(
        "--silent",
        action="store_true",
        help="Only print the path of the written HTML file",
        **extra
    )
    p.add_argument(
        "--log-file",
        type=str,
        help="Append the full debug log to this file",
        **extra
    )


def validate_map_type(name: str) -> str:
    """
    Validate a basemap provider name.

    Raises:
        argparse.ArgumentTypeError: If the provider is unknown
    """
    if name not in MAP_PROVIDERS:
        available = ", ".join(MAP_PROVIDERS.keys())
        raise argparse.ArgumentTypeError(
            f"Invalid map type: {name}. Available map types: {available}"
        )
    return name


def load_config(config_path: Optional[str]) -> Config:
    """
    Load configuration from file, or the defaults when no path is given.

    Exits with status 1 if the file cannot be loaded or is invalid.
    """
    if config_path is None:
        return get_default_config()

    try:
        config = Config.load_from_file(Path(config_path))
        config.validate()
        return config
    except Exception as e:
        print(f"Error loading config from {config_path}: {e}", file=sys.stderr)
        sys.exit(1)


def is_raster_path(path: Path) -> bool:
    """Whether ``path`` is read as a raster (by file extension)."""
    return path.suffix.lower() in RASTER_SUFFIXES


def _cli_print(args: argparse.Namespace, *values: object, **kwargs) -> None:
    """Print unless --silent was provided."""
    if getattr(args, "silent", False):
        return
    print(*values, **kwargs)


def _report(args: argparse.Namespace, what: str, output_path: Path) -> None:
    if getattr(args, "silent", False):
        print(str(output_path))
    else:
        print(f"Success! {what} saved to: {output_path}")


def resolve_output(args: argparse.Namespace, config: Config, default_name: str) -> Path:
    """Output path from --output, or ``default_name`` inside the config's output directory."""
    if args.output:
        return Path(args.output)
    config.ensure_directories()
    return config.output_dir / default_name


def cmd_view(args: argparse.Namespace) -> int:
    """Handle 'view' subcommand."""
    _cli_print(args, f"Creating map for {args.path}")

    try:
        config = load_config(args.config)
        path = Path(args.path)

        options = {"config": config, "verbose": args.verbose}
        if args.map_types:
            options["map_types"] = args.map_types
        if args.no_legend:
            options["legend"] = False
        if args.layer_name:
            options["layer_name"] = args.layer_name

        if is_raster_path(path):
            obj = open_raster(path)
            if args.maxpixels:
                options["maxpixels"] = args.maxpixels
        else:
            obj = open_vector(path)
            if args.zcol:
                options["zcol"] = args.zcol
            if args.burst:
                options["burst"] = True

        mv = map_view(obj, **options)
        output_path = mv.save(resolve_output(args, config, f"{path.stem}.html"))
        _report(args, "Map", output_path)
        return 0

    except (MapviewError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


def cmd_slide(args: argparse.Namespace) -> int:
    """Handle 'slide' subcommand."""
    _cli_print(args, f"Creating slide view: {args.first} | {args.second}")

    try:
        images = []
        for name in (args.first, args.second):
            path = Path(name)
            images.append(open_raster(path) if is_raster_path(path) else path)

        sv = slide_view(images[0], images[1], maxpixels=args.maxpixels)
        output_path = sv.save(args.output)
        _report(args, "Slide view", output_path)
        return 0

    except (MapviewError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


def cmd_basemap(args: argparse.Namespace) -> int:
    """Handle 'basemap' subcommand."""
    try:
        config = load_config(args.config)
        options = {"config": config, "easter_egg": args.easter_egg}
        if args.map_types:
            options["map_types"] = args.map_types

        mv = map_view(None, **options)
        output_path = mv.save(resolve_output(args, config, "basemap.html"))
        _report(args, "Map", output_path)
        return 0

    except MapviewError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="mapview",
        description="Create interactive web maps from raster and vector files",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    _add_console_options(parser)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # ========================================================================
    # view subcommand
    # ========================================================================
    parser_view = subparsers.add_parser(
        "view",
        help="Draw a raster or vector file on an interactive map"
    )
    _add_console_options(parser_view, subcommand=True)
    parser_view.add_argument(
        "path",
        type=str,
        help="Raster (GeoTIFF, ...) or vector (GeoPackage, Shapefile, GeoJSON, ...) file"
    )
    parser_view.add_argument(
        "--output",
        type=str,
        help="Output HTML file path (default: <output_dir>/<file stem>.html)"
    )
    parser_view.add_argument(
        "--zcol",
        type=str,
        nargs="+",
        help="Attribute column(s) to show (vector files; implies --burst)"
    )
    parser_view.add_argument(
        "--burst",
        action="store_true",
        help="One layer per attribute column (vector files)"
    )
    parser_view.add_argument(
        "--map-types",
        type=validate_map_type,
        nargs="+",
        help="Basemap providers (default: OpenStreetMap Esri.WorldImagery)"
    )
    parser_view.add_argument(
        "--maxpixels",
        type=int,
        help="Maximum number of raster cells drawn (raster files)"
    )
    parser_view.add_argument(
        "--layer-name",
        type=str,
        help="Name of the layer in the layers control"
    )
    parser_view.add_argument(
        "--no-legend",
        action="store_true",
        help="Do not add legends"
    )
    parser_view.add_argument(
        "--config",
        type=str,
        help="Config file path (YAML/JSON)"
    )
    parser_view.set_defaults(func=cmd_view)

    # ========================================================================
    # slide subcommand
    # ========================================================================
    parser_slide = subparsers.add_parser(
        "slide",
        help="Compare two rasters or PNG images with a slider"
    )
    _add_console_options(parser_slide, subcommand=True)
    parser_slide.add_argument(
        "first",
        type=str,
        help="First raster or PNG file"
    )
    parser_slide.add_argument(
        "second",
        type=str,
        help="Second raster or PNG file (same kind as the first)"
    )
    parser_slide.add_argument(
        "--output",
        type=str,
        required=True,
        help="Output HTML file path"
    )
    parser_slide.add_argument(
        "--maxpixels",
        type=int,
        default=Config().maxpixels,
        help="Maximum number of raster cells per image (default: 500000)"
    )
    parser_slide.set_defaults(func=cmd_slide)

    # ========================================================================
    # basemap subcommand
    # ========================================================================
    parser_basemap = subparsers.add_parser(
        "basemap",
        help="Create a map with basemaps only"
    )
    _add_console_options(parser_basemap, subcommand=True)
    parser_basemap.add_argument(
        "--output",
        type=str,
        help="Output HTML file path (default: <output_dir>/basemap.html)"
    )
    parser_basemap.add_argument(
        "--map-types",
        type=validate_map_type,
        nargs="+",
        help="Basemap providers (default: OpenStreetMap Esri.WorldImagery)"
    )
    parser_basemap.add_argument(
        "--easter-egg",
        action="store_true",
        help=argparse.SUPPRESS
    )
    parser_basemap.add_argument(
        "--config",
        type=str,
        help="Config file path (YAML/JSON)"
    )
    parser_basemap.set_defaults(func=cmd_basemap)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the mapview command line; returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    setup_logging(verbosity=verbosity_from_args(args), log_file=args.log_file)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
