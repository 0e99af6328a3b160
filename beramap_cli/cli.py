"""
BeraMap CLI - Main entry point.

Loads a GeoJSON file into a headless GeometryEngine and reports on it:
statistics and per-geometry metrics, a normalized export, or a raster
preview.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import cv2

from beramap_events.logging import LogEvent, create_logger
from beramap_geo import EngineConfig, FrameSurface, GeometryEngine, InMemorySurface
from beramap_geo.geometry import GeometryKind, format_area, format_distance

logger = create_logger("cli")


def load_geojson(path: str) -> Dict[str, Any]:
    """
    Load a GeoJSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not valid JSON
    """
    geojson_path = Path(path)

    if not geojson_path.exists():
        raise FileNotFoundError(f"GeoJSON file not found: {path}")

    try:
        with open(geojson_path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}")


def load_config(path: Optional[str]) -> EngineConfig:
    if path is None:
        return EngineConfig()

    config = EngineConfig.from_yaml(path)
    logger.info(
        event=LogEvent.CONFIG_LOADED,
        message=f"Config loaded from {path}",
        metadata={'debug': config.debug, 'max_history_size': config.max_history_size}
    )
    return config


def describe(engine: GeometryEngine, uuids: List[str]) -> List[Dict[str, Any]]:
    """Per-geometry metrics, human-readable values included."""
    rows = []
    for uuid in uuids:
        record = engine.get_geometry(uuid)
        if record is None:
            continue
        row = {'uuid': uuid, 'kind': record.kind.value, 'properties': record.properties}

        metadata = engine.get_metadata(uuid)
        if metadata is not None:
            row['metrics'] = metadata.to_dict()
            row['metrics'].pop('style', None)
            if metadata.length:
                row['length'] = format_distance(metadata.length)
            if metadata.area:
                row['area'] = format_area(metadata.area)
        rows.append(row)
    return rows


def label_for(engine: GeometryEngine, uuid: str) -> Optional[str]:
    metadata = engine.get_metadata(uuid)
    if metadata is None:
        return None
    if metadata.area:
        return format_area(metadata.area)
    if metadata.length:
        return format_distance(metadata.length)
    return None


def cmd_summary(args, config: EngineConfig) -> None:
    engine = GeometryEngine(InMemorySurface(), config=config)
    uuids = engine.add_geometries(load_geojson(args.file))

    stats = engine.stats()
    stats.pop('events', None)
    print(json.dumps({'stats': stats, 'geometries': describe(engine, uuids)}, indent=2, default=str))


def cmd_export(args, config: EngineConfig) -> None:
    engine = GeometryEngine(InMemorySurface(), config=config)
    engine.add_geometries(load_geojson(args.file))

    collection = engine.export_geojson(include_metadata=args.include_metadata, kind=args.type)
    print(json.dumps(collection, indent=2, default=str))


def cmd_preview(args, config: EngineConfig) -> None:
    surface = FrameSurface(width=args.width, height=args.height, center=config.center)
    engine = GeometryEngine(surface, config=config)
    uuids = engine.add_geometries(load_geojson(args.file), fit_bounds=True)

    labels = {}
    if not args.no_labels:
        for uuid in uuids:
            record = engine.get_geometry(uuid)
            text = label_for(engine, uuid)
            if record is not None and record.drawable is not None and text:
                labels[record.drawable.id] = text

    frame = surface.render_frame(labels=labels)
    if not cv2.imwrite(args.output, frame):
        raise ValueError(f"Could not write image to {args.output}")
    print(f"Preview written to {args.output} ({len(uuids)} geometries)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="beramap",
        description="BeraMap CLI - Inspect GeoJSON files with the geometry engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Counts, bounds and per-geometry metrics
  beramap summary areas.geojson

  # Export with internal identity/type/metadata properties
  beramap export areas.geojson --include-metadata

  # Only the circles
  beramap export areas.geojson --type Circle

  # Raster preview
  beramap preview areas.geojson preview.png --width 1600 --height 900

  # Custom styles / renderer heuristics
  beramap --config config/engine.yaml preview areas.geojson preview.png
"""
    )

    # Global arguments
    parser.add_argument(
        "--config",
        default=None,
        help="Engine config YAML (default: built-in defaults)"
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    summary = subparsers.add_parser('summary', help='Print stats and per-geometry metrics as JSON')
    summary.add_argument('file', help='GeoJSON Feature or FeatureCollection')

    export = subparsers.add_parser('export', help='Print the stored geometries as a FeatureCollection')
    export.add_argument('file', help='GeoJSON Feature or FeatureCollection')
    export.add_argument('--include-metadata', action='store_true',
                        help='Add _beramap_uuid/_beramap_type/_beramap_metadata properties')
    export.add_argument('--type', choices=[k.value for k in GeometryKind], default=None,
                        help='Only export this geometry kind')

    preview = subparsers.add_parser('preview', help='Render the geometries to an image')
    preview.add_argument('file', help='GeoJSON Feature or FeatureCollection')
    preview.add_argument('output', help='Output image path (e.g. preview.png)')
    preview.add_argument('--width', type=int, default=1280, help='Image width (default: 1280)')
    preview.add_argument('--height', type=int, default=720, help='Image height (default: 720)')
    preview.add_argument('--no-labels', action='store_true', help='Do not draw length/area labels')

    return parser


COMMANDS = {
    'summary': cmd_summary,
    'export': cmd_export,
    'preview': cmd_preview,
}


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config(args.config)
        COMMANDS[args.command](args, config)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
