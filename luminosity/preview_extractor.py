"""
Extract cached preview images from a catalog to JPEG files.
"""

import io
import os
import time
from typing import Any, Dict, Iterable, Optional

from PIL import Image
from tqdm import tqdm

from .catalog import Catalog
from .config import AppConfig
from .errors import LuminosityError, NotFound
from .logging_setup import EventLogger, get_logger
from .photos import PhotoRecord

logger = get_logger(__name__)

JPEG_SOI = b'\xFF\xD8\xFF'


def is_jpeg_header(header: bytes) -> bool:
    """Check if the given bytes start with a JPEG start-of-image marker."""
    return header[0:3] == JPEG_SOI


def get_image_dimensions(data: bytes) -> Dict[str, Any]:
    """
    Decode JPEG data and report its size.

    Raises:
        ValueError: If the data is not a decodable image
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return {
                'width': img.width,
                'height': img.height,
                'format': img.format,
                'mode': img.mode,
            }
    except (OSError, Image.DecompressionBombError) as e:
        raise ValueError(f"Preview is not a valid image: {str(e)}")


class PreviewExtractor:
    """Class to write the best cached preview of each photo to disk."""

    def __init__(self, catalog: Catalog, output_dir: str, config: Optional[AppConfig] = None,
                 events: Optional[EventLogger] = None):
        """
        Args:
            catalog: An open catalog
            output_dir: Directory to write <baseName>.jpg files to
            config: Application configuration
            events: Structured event logger
        """
        self.catalog = catalog
        self.output_dir = output_dir
        self.config = config or catalog.config
        self.events = events or EventLogger(logger)
        self.stats = {
            'total_images': 0,
            'extracted_images': 0,
            'missing_previews': 0,
            'failed_images': 0,
        }
        self._used_names = set()

    def output_path(self, photo: PhotoRecord) -> str:
        """
        File to write a photo's preview to. Photos sharing a base name
        get their id appended so no preview overwrites another.
        """
        name = photo.base_name or str(photo.id)
        if name in self._used_names:
            name = f"{name} ({photo.id})"
        self._used_names.add(name)
        return os.path.join(self.output_dir, f"{name}.jpg")

    def extract_photo(self, photo: PhotoRecord) -> Optional[str]:
        """
        Write one photo's preview. Returns the file written, or None when
        the photo has no usable preview.
        """
        try:
            data = self.catalog.get_preview(photo.id)
        except NotFound:
            self.events.info("No cached preview", action="extract", status="not_found",
                             image=photo.id, name=photo.base_name)
            self.stats['missing_previews'] += 1
            return None
        except (LuminosityError, OSError) as e:
            self.events.warning("Error reading preview", action="extract", status="error",
                                image=photo.id, name=photo.base_name, error=e)
            self.stats['failed_images'] += 1
            return None

        if self.config.verify_previews:
            try:
                info = get_image_dimensions(data)
            except ValueError as e:
                self.events.warning("Invalid preview data", action="extract", status="invalid",
                                    image=photo.id, error=e)
                self.stats['failed_images'] += 1
                return None
            self.events.debug("Verified preview", action="extract", image=photo.id,
                              width=info['width'], height=info['height'])
        elif not is_jpeg_header(data):
            self.events.warning("Preview does not start with a JPEG marker", action="extract",
                                status="not_jpeg", image=photo.id)

        path = self.output_path(photo)
        try:
            with open(path, 'wb') as f:
                f.write(data)
        except OSError as e:
            self.events.error("Error writing preview", action="extract", status="error",
                              path=path, error=e)
            self.stats['failed_images'] += 1
            return None

        self.stats['extracted_images'] += 1
        return path

    def run(self, photos: Optional[Iterable[PhotoRecord]] = None) -> Dict[str, Any]:
        """
        Extract previews for the given photos (every photo in the catalog
        by default) and return the run statistics.

        Raises:
            Unavailable: If the catalog has no previews directory
        """
        # Fail early when there is no preview cache at all
        self.catalog.previews()
        os.makedirs(self.output_dir, exist_ok=True)

        if photos is None:
            photos = self.catalog.get_photos()
        photos = list(photos)
        self.stats['total_images'] = len(photos)

        start_time = time.time()
        for photo in tqdm(photos, desc="Extracting previews", unit="photo",
                          disable=not self.config.show_progress):
            self.extract_photo(photo)

        self.stats['total_time'] = time.time() - start_time
        return self.stats
