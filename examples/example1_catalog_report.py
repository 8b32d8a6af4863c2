#!/usr/bin/env python3
"""
Example 1: Catalog Report

This example shows how to use the library directly: open a catalog, print
its most used cameras and lenses, and look up the cached preview of one
photo.
"""

import argparse
import sys
from pathlib import Path

# Add the parent directory to sys.path to import the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from luminosity.catalog import Catalog
from luminosity.config import AppConfig
from luminosity.errors import LuminosityError
from luminosity.filesystem import format_size
from luminosity.logging_setup import setup_logging


def catalog_report_example():
    """Catalog report example."""
    parser = argparse.ArgumentParser(description="Catalog report example for luminosity")
    parser.add_argument("catalog_path", help="Path to Lightroom catalog (.lrcat file)")
    parser.add_argument("--top", type=int, default=5, help="Number of entries to show per list")
    parser.add_argument("--preview", type=int, help="Photo id to look up a cached preview for")
    args = parser.parse_args()

    config = AppConfig(load_collections=True)
    setup_logging(config)

    try:
        catalog = Catalog.open(args.catalog_path, config)
    except (LuminosityError, FileNotFoundError) as e:
        print(f"Error: {str(e)}")
        return 1

    with catalog:
        catalog.load()
        stats = catalog.stats

        print(f"Catalog: {args.catalog_path}")
        print(f"Photos: {len(catalog.photos)}")
        print(f"Collections: {len(catalog.collections)}")

        for title, dist in (("Cameras", stats.by_camera),
                            ("Lenses", stats.by_lens),
                            ("Keywords", stats.by_keyword)):
            print(f"\n{title}:")
            for entry in dist[:args.top]:
                print(f"  {entry.count:6d}  {entry.label}")

        if stats.by_date:
            print(f"\nFirst day: {stats.by_date[0].label}")
            print(f"Last day:  {stats.by_date[-1].label}")

        if args.preview is not None:
            try:
                data = catalog.get_preview(args.preview)
            except (LuminosityError, IOError) as e:
                print(f"\nNo preview for photo {args.preview}: {str(e)}")
            else:
                print(f"\nPreview for photo {args.preview}: {format_size(len(data))}")

    return 0


if __name__ == "__main__":
    sys.exit(catalog_report_example())
