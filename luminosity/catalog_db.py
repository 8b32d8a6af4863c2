"""
Database interaction with a Lightroom catalog.
"""

import os
import sqlite3
from contextlib import contextmanager, closing
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .collection_tree import COLLECTIONS_QUERY, COLLECTION_TREE_QUERY, Collection, CollectionTree
from .config import AppConfig
from .distribution import (
    DistributionConvertor,
    DistributionList,
    aperture_convertor,
    convert_distribution,
    exposure_time_convertor,
    format_label,
)
from .apex import format_fnumber, shutter_speed_to_exposure_time
from .errors import OpenError, QueryError
from .logging_setup import EventLogger, get_logger
from .named_objects import NamedObjectList
from .photos import PHOTO_RECORD_FROM, PHOTO_RECORD_ORDER_BY, PHOTO_RECORD_SELECT, PhotoRecord
from .sidecars import SIDECAR_COLUMNS, SIDECAR_FROM, SidecarFileRecord

logger = get_logger(__name__)

LENSES_QUERY = "SELECT id_local, value FROM AgInternedExifLens"

CAMERAS_QUERY = "SELECT id_local, value FROM AgInternedExifCameraModel"

DATE_DISTRIBUTION_QUERY = """
SELECT   0,
         date(captureTime),
         count(*)
FROM     Adobe_images
GROUP BY date(captureTime)
ORDER BY date(captureTime)
"""

LENS_DISTRIBUTION_QUERY = """
SELECT    LensRef.id_local      AS id,
          LensRef.value         AS name,
          count(LensRef.value)  AS count
FROM      Adobe_images               image
JOIN      AgHarvestedExifMetadata    metadata   ON       image.id_local = metadata.image
LEFT JOIN AgInternedExifLens         LensRef    ON     LensRef.id_local = metadata.lensRef
WHERE     LensRef.id_local IS NOT NULL
GROUP BY  LensRef.id_local
ORDER BY  count DESC, name
"""

CAMERA_DISTRIBUTION_QUERY = """
SELECT    Camera.id_local       AS id,
          Camera.value          AS name,
          count(Camera.value)   AS count
FROM      Adobe_images               image
JOIN      AgHarvestedExifMetadata    metadata   ON      image.id_local = metadata.image
LEFT JOIN AgInternedExifCameraModel  Camera     ON     Camera.id_local = metadata.cameraModelRef
WHERE     Camera.id_local IS NOT NULL
GROUP BY  Camera.id_local
ORDER BY  count DESC, name
"""

FOCAL_LENGTH_DISTRIBUTION_QUERY = """
SELECT   min(id_local)     AS id,
         focalLength       AS name,
         count(id_local)   AS count
FROM     AgHarvestedExifMetadata
WHERE    focalLength IS NOT NULL
GROUP BY focalLength
ORDER BY count DESC, focalLength
"""

APERTURE_DISTRIBUTION_QUERY = """
SELECT   aperture,
         count(aperture)
FROM     AgHarvestedExifMetadata
WHERE    aperture IS NOT NULL
GROUP BY aperture
ORDER BY aperture
"""

EXPOSURE_TIME_DISTRIBUTION_QUERY = """
SELECT   shutterSpeed,
         count(shutterSpeed)
FROM     AgHarvestedExifMetadata
WHERE    shutterSpeed IS NOT NULL
GROUP BY shutterSpeed
ORDER BY shutterSpeed
"""

EDIT_COUNT_DISTRIBUTION_QUERY = """
SELECT   0,
         steps,
         count(*)
FROM     (SELECT    image.id_local          AS id,
                    count(history.id_local) AS steps
          FROM      Adobe_images image
          LEFT JOIN Adobe_libraryImageDevelopHistoryStep history
                 ON history.image = image.id_local
          GROUP BY  image.id_local)
GROUP BY steps
ORDER BY steps
"""

KEYWORD_DISTRIBUTION_QUERY = """
SELECT   keyword.id_local     AS id,
         keyword.name         AS name,
         count(ki.image)      AS count
FROM     AgLibraryKeyword      keyword
JOIN     AgLibraryKeywordImage ki       ON ki.tag = keyword.id_local
WHERE    keyword.name IS NOT NULL
GROUP BY keyword.id_local
ORDER BY count DESC, name
"""

SUNBURST_QUERY = """
SELECT    count(*)           AS count,
          Camera.value       AS camera,
          Lens.value         AS lens,
          exif.aperture      AS aperture,
          exif.focalLength   AS focalLength,
          exif.shutterSpeed  AS shutterSpeed
FROM      Adobe_images              image
JOIN      AgHarvestedExifMetadata   exif      ON  image.id_local  = exif.image
LEFT JOIN AgInternedExifLens        Lens      ON  Lens.id_local   = exif.lensRef
LEFT JOIN AgInternedExifCameraModel Camera    ON  Camera.id_local = exif.cameraModelRef
WHERE     Camera.value IS NOT NULL AND Lens.value IS NOT NULL
GROUP BY  Camera.value, Lens.value, exif.aperture, exif.focalLength, exif.shutterSpeed
ORDER BY  camera, lens, aperture, focalLength, shutterSpeed, count
"""


def connect_readonly(path: str, busy_timeout_ms: int) -> sqlite3.Connection:
    """
    Open a SQLite database read-only and make sure it really is one.

    Raises:
        OpenError: If the file cannot be opened as a database
    """
    uri = Path(os.path.abspath(path)).as_uri() + "?mode=ro"
    conn = None
    try:
        conn = sqlite3.connect(uri, uri=True, timeout=busy_timeout_ms / 1000.0)
        conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
        return conn
    except sqlite3.Error as e:
        if conn is not None:
            conn.close()
        raise OpenError(f"Failed to open database {path}: {str(e)}")


class CatalogDatabase:
    """Class to handle queries against a Lightroom catalog database."""

    def __init__(self, catalog_path: str, config: Optional[AppConfig] = None,
                 events: Optional[EventLogger] = None):
        """
        Open the catalog database read-only. The connection is held until
        close() is called; Lightroom refuses to open a catalog that is
        held open elsewhere, so always close it (or use `with`).

        Args:
            catalog_path: Path to the Lightroom catalog file
            config: Application configuration
            events: Structured event logger

        Raises:
            FileNotFoundError: If the catalog file doesn't exist
            OpenError: If the catalog cannot be opened
        """
        if not os.path.exists(catalog_path):
            raise FileNotFoundError(f"Lightroom catalog not found: {catalog_path}")

        self.catalog_path = catalog_path
        self.config = config or AppConfig()
        self.events = events or EventLogger(logger)
        self._conn: Optional[sqlite3.Connection] = connect_readonly(
            catalog_path, self.config.db_busy_timeout)

        self.events.debug("Opened catalog", action="catalog_open", path=catalog_path, status="ok")

    @property
    def closed(self) -> bool:
        return self._conn is None

    def close(self) -> None:
        """Close the database connection. Safe to call more than once."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self.events.debug("Closed catalog", action="catalog_close", path=self.catalog_path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @contextmanager
    def cursor(self, label: str) -> Iterator[sqlite3.Cursor]:
        """
        Cursor on the catalog connection, closed on exit. SQLite errors
        are logged with the query label and raised as QueryError.
        """
        if self._conn is None:
            raise QueryError(f"Catalog is closed: {self.catalog_path}")
        try:
            with closing(self._conn.cursor()) as cursor:
                yield cursor
        except sqlite3.Error as e:
            self.events.debug("Executed query", action="query", label=label,
                              status="error", error=e)
            raise QueryError(f"Query {label} failed on {self.catalog_path}: {str(e)}")
        self.events.debug("Executed query", action="query", label=label, status="ok")

    def query(self, label: str, sql: str, params: Sequence[Any] = ()) -> List[Tuple]:
        with self.cursor(label) as cursor:
            cursor.execute(sql, params)
            return cursor.fetchall()

    def query_row(self, label: str, sql: str, params: Sequence[Any] = ()) -> Optional[Tuple]:
        with self.cursor(label) as cursor:
            cursor.execute(sql, params)
            return cursor.fetchone()

    # ------------------------------------------------------------------
    # Named objects

    def query_named_objects(self, label: str, sql: str) -> NamedObjectList:
        objects = NamedObjectList.from_rows(self.query(label, sql))
        self.events.debug("Converted named objects", action="convert_named_objects", label=label, count=len(objects))
        return objects

    def get_lenses(self) -> NamedObjectList:
        return self.query_named_objects("get_lenses", LENSES_QUERY)

    def get_cameras(self) -> NamedObjectList:
        return self.query_named_objects("get_cameras", CAMERAS_QUERY)

    # ------------------------------------------------------------------
    # Distributions

    def query_distribution(self, label: str, sql: str,
                           convertor: Optional[DistributionConvertor] = None) -> DistributionList:
        return convert_distribution(self.query(label, sql), convertor)

    def get_photo_counts_by_date(self) -> DistributionList:
        return self.query_distribution("photo_counts_by_date", DATE_DISTRIBUTION_QUERY)

    def get_camera_distribution(self) -> DistributionList:
        return self.query_distribution("camera_distribution", CAMERA_DISTRIBUTION_QUERY)

    def get_lens_distribution(self) -> DistributionList:
        return self.query_distribution("lens_distribution", LENS_DISTRIBUTION_QUERY)

    def get_focal_length_distribution(self) -> DistributionList:
        return self.query_distribution("focal_length_distribution", FOCAL_LENGTH_DISTRIBUTION_QUERY)

    def get_aperture_distribution(self) -> DistributionList:
        return self.query_distribution("aperture_distribution", APERTURE_DISTRIBUTION_QUERY,
                                       aperture_convertor)

    def get_exposure_time_distribution(self) -> DistributionList:
        return self.query_distribution("exposure_time_distribution", EXPOSURE_TIME_DISTRIBUTION_QUERY,
                                       exposure_time_convertor)

    def get_edit_count_distribution(self) -> DistributionList:
        return self.query_distribution("edit_count_distribution", EDIT_COUNT_DISTRIBUTION_QUERY)

    def get_keyword_distribution(self) -> DistributionList:
        return self.query_distribution("keyword_distribution", KEYWORD_DISTRIBUTION_QUERY)

    # ------------------------------------------------------------------
    # Photos

    def get_photo_count(self) -> int:
        row = self.query_row("get_photo_count", "SELECT count(*) " + PHOTO_RECORD_FROM)
        return row[0] if row else 0

    def get_photos(self) -> List[PhotoRecord]:
        rows = self.query("get_photos",
                          PHOTO_RECORD_SELECT + PHOTO_RECORD_FROM + PHOTO_RECORD_ORDER_BY)
        return [PhotoRecord.from_row(row) for row in rows]

    # ------------------------------------------------------------------
    # Collections

    def get_collections(self) -> List[Collection]:
        return [Collection.from_row(row) for row in self.query("get_collections", COLLECTIONS_QUERY)]

    def get_collection_tree(self) -> CollectionTree:
        rows = self.query("get_collection_tree", COLLECTION_TREE_QUERY)
        return CollectionTree(Collection.from_row(row) for row in rows)

    # ------------------------------------------------------------------
    # Sidecars

    def get_sidecar_count(self) -> int:
        row = self.query_row("get_sidecar_count", "SELECT count(*) " + SIDECAR_FROM)
        return row[0] if row else 0

    def get_sidecars(self) -> List[SidecarFileRecord]:
        rows = self.query("get_sidecars", SIDECAR_COLUMNS + SIDECAR_FROM)
        return [SidecarFileRecord.from_row(row) for row in rows]

    # ------------------------------------------------------------------
    # Sunburst

    def get_sunburst_stats(self) -> List[Dict[str, Any]]:
        """
        Photo counts grouped by camera, lens, aperture, focal length and
        exposure time, as flat records for hierarchical charting.
        """
        records = []
        for count, camera, lens, aperture, focal_length, shutter in self.query(
                "sunburst_stats", SUNBURST_QUERY):
            records.append({
                'count': count,
                'camera': camera,
                'lens': lens,
                'aperture': None if aperture is None else format_fnumber(float(aperture)),
                'focal_length': format_label(focal_length) if focal_length is not None else None,
                'exposure': None if shutter is None else shutter_speed_to_exposure_time(float(shutter)),
            })
        return records
