"""
Preview cache database lookups.

Lightroom keeps the cached previews for a catalog in a sibling
"<catalog name> Previews.lrdata" directory, with an index in
previews.db mapping each image to the .lrprev container holding its
preview pyramid.
"""

import os
import sqlite3
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional

from .catalog_db import connect_readonly
from .config import AppConfig
from .errors import NotFound, QueryError, Unavailable
from .logging_setup import EventLogger, get_logger
from .preview_file import PreviewFile

logger = get_logger(__name__)

CATALOG_EXTENSION = ".lrcat"
PREVIEWS_DIR_SUFFIX = " Previews.lrdata"
PREVIEWS_DB_NAME = "previews.db"

PHOTO_CACHE_INFO_QUERY = """
SELECT   ice.imageId,
         ice.uuid,
         ice.digest,
         max(pl.level)
FROM     ImageCacheEntry ice
         INNER JOIN PyramidLevel pl
                 ON pl.uuid = ice.uuid
WHERE    ice.imageId = ?
GROUP BY ice.imageId, ice.uuid, ice.digest
ORDER BY max(pl.level) DESC
"""


def previews_root_path(catalog_path: str) -> str:
    """
    Path of the previews directory belonging to a catalog, e.g.
    "/photos/Main.lrcat" -> "/photos/Main Previews.lrdata".
    """
    catalog_dir, file_name = os.path.split(catalog_path)
    if file_name.endswith(CATALOG_EXTENSION):
        file_name = file_name[:-len(CATALOG_EXTENSION)]
    return os.path.join(catalog_dir, file_name + PREVIEWS_DIR_SUFFIX)


@dataclass
class PhotoCacheInfo:
    """Location of the cached preview pyramid for one image."""
    id: int
    uuid: str
    digest: str
    max_level: int

    def path(self, previews_root: str) -> str:
        """Absolute path of the .lrprev container for this image."""
        return os.path.join(
            previews_root,
            self.uuid[0],
            self.uuid[0:4],
            f"{self.uuid}-{self.digest}.lrprev")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class CatalogPreviews:
    """Class to handle lookups in a catalog's preview cache."""

    def __init__(self, catalog_path: str, config: Optional[AppConfig] = None,
                 events: Optional[EventLogger] = None):
        """
        Open the preview cache database of a catalog.

        Args:
            catalog_path: Path to the Lightroom catalog file
            config: Application configuration
            events: Structured event logger

        Raises:
            Unavailable: If the catalog has no previews directory
            OpenError: If previews.db cannot be opened
        """
        self.catalog_path = catalog_path
        self.config = config or AppConfig()
        self.events = events or EventLogger(logger)
        self.root = previews_root_path(catalog_path)

        if not os.path.isdir(self.root):
            raise Unavailable(f"No previews directory for catalog: {self.root}")
        if not os.path.exists(self.db_path):
            raise Unavailable(f"No preview database in {self.root}")

        self._conn = connect_readonly(self.db_path, self.config.db_busy_timeout)

        self.events.debug("Opened preview database", action="previews_open", path=self.db_path)

    @property
    def db_path(self) -> str:
        return os.path.join(self.root, PREVIEWS_DB_NAME)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def get_photo_cache_info(self, photo_id: int) -> PhotoCacheInfo:
        """
        Look up the preview cache entry of an image.

        Raises:
            NotFound: If the image has no cached preview
            QueryError: If the lookup fails
        """
        if self._conn is None:
            raise QueryError("Preview database is closed")
        try:
            row = self._conn.execute(PHOTO_CACHE_INFO_QUERY, (photo_id,)).fetchone()
        except sqlite3.Error as e:
            self.events.debug("Executed query", action="query", label="get_photo_cache_info",
                              status="error", error=e)
            raise QueryError(f"Failed to look up preview for image {photo_id}: {str(e)}")

        self.events.debug("Executed query", action="query", label="get_photo_cache_info",
                          status="ok", image=photo_id)
        if row is None:
            raise NotFound(f"No cached preview for image {photo_id}")

        image_id, uuid, digest, max_level = row
        return PhotoCacheInfo(id=image_id, uuid=uuid, digest=digest, max_level=max_level)

    def preview_path(self, info: PhotoCacheInfo) -> str:
        return info.path(self.root)

    def get_preview(self, photo_id: int) -> bytes:
        """
        Return the JPEG data of the highest resolution preview cached
        for an image.

        Raises:
            NotFound: If the image has no cached preview
            CorruptFormat: If the container cannot be parsed
            IOError: If the container is missing or truncated
        """
        info = self.get_photo_cache_info(photo_id)
        path = self.preview_path(info)
        with PreviewFile(path) as preview:
            header = preview.largest()
            data = preview.read_data(header)
        self.events.debug("Read preview", action="read_preview", image=photo_id,
                          path=path, section=header.name, size=len(data))
        return data
