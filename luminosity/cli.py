"""
Command-line interface for the luminosity tools.
"""

import argparse
import json
import os
import sys
from typing import Any, List, Optional

from .catalog import Catalog
from .config import AppConfig, load_config
from .errors import LuminosityError
from .filesystem import find_catalogs, format_size
from .logging_setup import EventLogger, setup_logging, get_logger
from .preview_extractor import PreviewExtractor
from .sidecars import delete_sidecars

logger = get_logger(__name__)
events = EventLogger(logger)

# Errors that make a single catalog unusable without stopping a batch
CATALOG_ERRORS = (LuminosityError, OSError)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="luminosity",
        description="Operate on Lightroom catalogs"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--config",
        help="Path to configuration JSON file"
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    stats = commands.add_parser("stats", help="Generate catalog statistics")
    stats.add_argument(
        "paths",
        nargs="+",
        metavar="PATH",
        help="Paths to process, which can be .lrcat files or directories"
    )
    stats.add_argument(
        "-o", "--outfile",
        help="Path to output file (default: stats.json)"
    )
    stats.add_argument(
        "-c", "--per-catalog",
        action="store_true",
        help="Output a summary .json file for each catalog, in addition to the merged output"
    )
    stats.add_argument(
        "-p", "--pretty-print",
        action="store_true",
        help="Format the JSON output indented for human readability"
    )
    stats.set_defaults(handler=cmd_stats)

    sidecars = commands.add_parser("sidecars", help="Report on and purge sidecar files")
    sidecar_commands = sidecars.add_subparsers(dest="sidecar_command", metavar="ACTION")
    sidecar_commands.required = True

    summary = sidecar_commands.add_parser("summary", help="List sidecar stats")
    summary.add_argument("catalogs", nargs="+", metavar="CATALOG", help="Catalogs to process")
    summary.set_defaults(handler=cmd_sidecars_summary)

    listing = sidecar_commands.add_parser("list", help="List all sidecar file paths")
    listing.add_argument("catalogs", nargs="+", metavar="CATALOG", help="Catalogs to process")
    listing.set_defaults(handler=cmd_sidecars_list)

    delete = sidecar_commands.add_parser("delete", help="Delete all sidecar files")
    delete.add_argument("catalogs", nargs="+", metavar="CATALOG", help="Catalogs to process")
    delete.add_argument(
        "--delete-missing-originals",
        action="store_true",
        help="Delete sidecar even if the original is missing"
    )
    delete.set_defaults(handler=cmd_sidecars_delete)

    sunburst = commands.add_parser("sunburst", help="Generate stats for rendering sunburst graphs")
    sunburst.add_argument("catalog", metavar="CATALOG", help="Catalog to process")
    sunburst.add_argument(
        "-o", "--outfile",
        help="Path to output file (default: sunburst.json)"
    )
    sunburst.add_argument(
        "-p", "--pretty-print",
        action="store_true",
        help="Format the JSON output indented for human readability"
    )
    sunburst.set_defaults(handler=cmd_sunburst)

    extract = commands.add_parser("extract", help="Extract cached previews from a catalog")
    extract.add_argument("catalog", metavar="PATH", help="Catalog to extract previews from")
    extract.add_argument(
        "-o", "--output-dir",
        help="Directory to write extracted previews to (default: previews)"
    )
    extract.add_argument(
        "--verify",
        action="store_true",
        help="Decode every preview before writing it"
    )
    extract.set_defaults(handler=cmd_extract)

    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    return build_parser().parse_args(argv)


def process_arguments(args: argparse.Namespace, config: AppConfig) -> AppConfig:
    """
    Override config values from command-line arguments.
    """
    if args.verbose:
        config.debug_mode = True
        config.log_level = "DEBUG"
    if getattr(args, 'pretty_print', False):
        config.pretty_print = True
    if getattr(args, 'verify', False):
        config.verify_previews = True
    if getattr(args, 'output_dir', None):
        config.preview_output_dir = args.output_dir
    if getattr(args, 'outfile', None):
        if args.command == "sunburst":
            config.sunburst_outfile = args.outfile
        else:
            config.stats_outfile = args.outfile
    return config


def write_json(path: str, data: Any, pretty_print: bool = False) -> None:
    """Write data to a JSON file."""
    events.debug("Writing JSON", action="write", file=path)
    with open(path, 'w') as f:
        if pretty_print:
            json.dump(data, f, indent=2)
        else:
            json.dump(data, f)


def open_catalog(path: str, config: AppConfig) -> Optional[Catalog]:
    """Open a catalog, logging and returning None on failure."""
    try:
        return Catalog.open(path, config, events)
    except CATALOG_ERRORS as e:
        events.warning("Error opening catalog, skipping", action="catalog_open",
                       catalog=path, error=e)
        return None


def log_complete(processed: int, failed: int) -> None:
    events.info("Complete", action="status", status="complete",
                catalogs_processed=processed, catalogs_failed=failed)


def cmd_stats(args: argparse.Namespace, config: AppConfig) -> int:
    merged = Catalog(config, events)
    catalog_paths = find_catalogs(args.paths, recursive=True, events=events)
    processed = 0
    failed = 0

    for path in catalog_paths:
        catalog = open_catalog(path, config)
        if catalog is None:
            failed += 1
            continue

        with catalog:
            try:
                catalog.load()
            except CATALOG_ERRORS as e:
                events.warning("Error loading catalog, skipping", action="catalog_load",
                               catalog=path, error=e)
                failed += 1
                continue

            if args.per_catalog:
                js_path = os.path.basename(path).replace(".lrcat", ".json", 1)
                write_json(js_path, catalog.to_dict(), config.pretty_print)

            processed += 1
            events.info("Processed catalog", action="process_catalog", path=path, status="ok")
            merged.merge(catalog)

    write_json(config.stats_outfile, merged.to_dict(), config.pretty_print)

    log_complete(processed, failed)
    return 0


def cmd_sidecars_summary(args: argparse.Namespace, config: AppConfig) -> int:
    processed = 0
    failed = 0

    for path in args.catalogs:
        catalog = open_catalog(path, config)
        if catalog is None:
            failed += 1
            continue
        with catalog:
            try:
                info = catalog.get_sidecar_file_stats()
            except CATALOG_ERRORS as e:
                events.error("Error getting sidecar file stats", action="sidecar_stats",
                             catalog=path, error=e)
                failed += 1
                continue

        print(f"Sidecar Summary for {path}")
        print(f"  Count:             {info.count}")
        print(f"  Total Size:        {format_size(info.total_size_bytes)}")
        print(f"  Missing Sidecars:  {info.missing_sidecar_count}")
        print(f"  Missing Originals: {info.missing_original_count}")
        processed += 1

    log_complete(processed, failed)
    return 0


def cmd_sidecars_list(args: argparse.Namespace, config: AppConfig) -> int:
    processed = 0
    failed = 0

    for path in args.catalogs:
        catalog = open_catalog(path, config)
        if catalog is None:
            failed += 1
            continue
        with catalog:
            try:
                records = catalog.get_sidecars()
            except CATALOG_ERRORS as e:
                events.error("Error listing sidecars", action="sidecar_list",
                             catalog=path, error=e)
                failed += 1
                continue
        for record in records:
            print(record.sidecar_path)
        processed += 1

    log_complete(processed, failed)
    return 0


def cmd_sidecars_delete(args: argparse.Namespace, config: AppConfig) -> int:
    processed = 0
    failed = 0

    for path in args.catalogs:
        catalog = open_catalog(path, config)
        if catalog is None:
            failed += 1
            continue
        with catalog:
            try:
                records = catalog.get_sidecars()
            except CATALOG_ERRORS as e:
                events.error("Error listing sidecars", action="sidecar_delete",
                             catalog=path, error=e)
                failed += 1
                continue

        result = delete_sidecars(records, args.delete_missing_originals, events)
        print(f"Done: {path}")
        print(f"   Total:   {result.total}")
        print(f"   Deleted: {result.deleted}")
        print(f"   Skipped: {result.skipped}")
        print(f"   Missing: {result.missing}")
        print(f"   Errors:  {result.errors}")
        processed += 1

    log_complete(processed, failed)
    return 0


def cmd_sunburst(args: argparse.Namespace, config: AppConfig) -> int:
    catalog = open_catalog(args.catalog, config)
    if catalog is None:
        return 1
    with catalog:
        try:
            data = catalog.get_sunburst_stats()
        except CATALOG_ERRORS as e:
            events.error("Error getting sunburst stats", action="sunburst_stats",
                         catalog=args.catalog, error=e)
            return 1
    write_json(config.sunburst_outfile, data, config.pretty_print)
    return 0


def cmd_extract(args: argparse.Namespace, config: AppConfig) -> int:
    catalog = open_catalog(args.catalog, config)
    if catalog is None:
        return 1
    with catalog:
        extractor = PreviewExtractor(catalog, config.preview_output_dir, config, events)
        try:
            stats = extractor.run()
        except CATALOG_ERRORS as e:
            events.error("Error extracting previews", action="extract",
                         catalog=args.catalog, error=e)
            return 1

    logger.info("Extraction complete")
    logger.info(f"Total images: {stats['total_images']}")
    logger.info(f"Extracted: {stats['extracted_images']}")
    logger.info(f"No cached preview: {stats['missing_previews']}")
    logger.info(f"Failed: {stats['failed_images']}")
    logger.info(f"Total time: {stats['total_time']:.1f} seconds")
    return 0


def run_cli(argv: Optional[List[str]] = None) -> int:
    """
    Run the command-line interface.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    config = None
    try:
        args = parse_arguments(argv)

        config = load_config(args.config) if args.config else AppConfig()
        config = process_arguments(args, config)

        setup_logging(config)

        return args.handler(args, config)

    except Exception as e:
        logger.error(f"Command failed: {str(e)}")
        if config is not None and config.debug_mode:
            import traceback
            logger.error(f"Traceback: {traceback.format_exc()}")
        return 1


def main() -> None:
    sys.exit(run_cli())
