"""
A Lightroom catalog and everything extracted from it, and the merging
of several catalogs into fleet-wide totals.
"""

from typing import Any, Callable, Dict, List, Optional

from .catalog_db import CatalogDatabase
from .collection_tree import Collection, CollectionTree
from .config import AppConfig
from .logging_setup import EventLogger, get_logger
from .named_objects import NamedObjectList
from .photos import PhotoRecord
from .preview_db import CatalogPreviews
from .sidecars import SidecarFileRecord, SidecarFileStats, get_sidecar_file_stats
from .stats import Stats

logger = get_logger(__name__)


class Catalog:
    """
    A Lightroom catalog and the data loaded from it.

    A catalog created without a path has no database and serves as the
    target for merging loaded catalogs. `paths` only holds more than
    one entry after merging.

    Every accessor queries the database once and caches the result.
    A catalog is not thread safe; callers must serialize access.
    """

    def __init__(self, config: Optional[AppConfig] = None,
                 events: Optional[EventLogger] = None):
        self.config = config or AppConfig()
        self.events = events or EventLogger(logger)
        self.db: Optional[CatalogDatabase] = None
        self.paths: List[str] = []
        self.lenses: Optional[NamedObjectList] = None
        self.cameras: Optional[NamedObjectList] = None
        self.stats: Optional[Stats] = None
        self.photos: Optional[List[PhotoRecord]] = None
        self.collections: Optional[List[Collection]] = None
        self.collection_tree: Optional[CollectionTree] = None
        self._previews: Optional[CatalogPreviews] = None

    @classmethod
    def open(cls, path: str, config: Optional[AppConfig] = None,
             events: Optional[EventLogger] = None) -> 'Catalog':
        """
        Open a catalog without loading anything from it.

        Raises:
            FileNotFoundError: If the catalog file doesn't exist
            OpenError: If the catalog cannot be opened
        """
        catalog = cls(config, events)
        catalog.db = CatalogDatabase(path, catalog.config, catalog.events)
        catalog.paths = [path]
        return catalog

    @property
    def path(self) -> Optional[str]:
        return self.db.catalog_path if self.db is not None else None

    def close(self) -> None:
        """Release the catalog and preview database connections."""
        if self._previews is not None:
            self._previews.close()
            self._previews = None
        if self.db is not None:
            self.db.close()
            self.db = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def load(self) -> 'Catalog':
        """
        Retrieve lenses, cameras, statistics and summary records for
        every photo (plus collections when configured). Any failure is
        raised and leaves the catalog unfit for use.
        """
        self.get_lenses()
        self.get_cameras()
        self.get_stats()
        self.get_photos()
        if self.config.load_collections:
            self.get_collections()
        return self

    def merge(self, other: Optional['Catalog']) -> None:
        """
        Merge the loaded contents of another catalog into this one.
        Counts are summed, lenses and cameras stay unique by name, and
        paths, photos and collections are appended as they are.
        """
        if other is None:
            return
        if other.paths:
            self.paths.extend(other.paths)
        if other.stats is not None:
            self.get_stats().merge(other.stats)
        if other.cameras is not None:
            self.cameras = (self.cameras or NamedObjectList()).merge(other.cameras)
        if other.lenses is not None:
            self.lenses = (self.lenses or NamedObjectList()).merge(other.lenses)
        if other.photos is not None:
            self.photos = (self.photos or []) + other.photos
        if other.collections is not None:
            self.collections = (self.collections or []) + other.collections

    def get_lenses(self) -> NamedObjectList:
        """Every lens name Lightroom extracted from EXIF metadata."""
        if self.lenses is None:
            self.lenses = self.db.get_lenses() if self.db is not None else NamedObjectList()
        return self.lenses

    def get_cameras(self) -> NamedObjectList:
        """Every camera name Lightroom extracted from EXIF metadata."""
        if self.cameras is None:
            self.cameras = self.db.get_cameras() if self.db is not None else NamedObjectList()
        return self.cameras

    def get_stats(self) -> Stats:
        if self.stats is not None:
            return self.stats
        stats = Stats()
        if self.db is not None:
            stats.by_date = self.db.get_photo_counts_by_date()
            stats.by_camera = self.db.get_camera_distribution()
            stats.by_lens = self.db.get_lens_distribution()
            stats.by_focal_length = self.db.get_focal_length_distribution()
            stats.by_aperture = self.db.get_aperture_distribution()
            stats.by_exposure_time = self.db.get_exposure_time_distribution()
            stats.by_edit_count = self.db.get_edit_count_distribution()
            stats.by_keyword = self.db.get_keyword_distribution()
        self.stats = stats
        return self.stats

    def get_photos(self) -> List[PhotoRecord]:
        if self.photos is None:
            self.photos = self.db.get_photos() if self.db is not None else []
        return self.photos

    def get_photo_count(self) -> int:
        if self.db is None:
            return len(self.photos or [])
        return self.db.get_photo_count()

    def for_each_photo(self, handler: Callable[[PhotoRecord], Any]) -> None:
        """Call handler on every photo; an exception from it stops the iteration."""
        for photo in self.get_photos():
            handler(photo)

    def get_collections(self) -> List[Collection]:
        """
        Collections that hold photos: no collection groups and no system
        collections such as the Quick Collection.
        """
        if self.collections is None:
            self.collections = self.db.get_collections() if self.db is not None else []
        return self.collections

    def get_collection_tree(self) -> CollectionTree:
        """All collections, grouped under a synthetic root."""
        if self.collection_tree is None:
            self.collection_tree = (self.db.get_collection_tree()
                                    if self.db is not None else CollectionTree())
        return self.collection_tree

    def get_sidecars(self) -> List[SidecarFileRecord]:
        return self.db.get_sidecars() if self.db is not None else []

    def get_sidecar_file_stats(self) -> SidecarFileStats:
        return get_sidecar_file_stats(self.get_sidecars())

    def get_sunburst_stats(self) -> List[Dict[str, Any]]:
        return self.db.get_sunburst_stats() if self.db is not None else []

    def previews(self) -> CatalogPreviews:
        """
        The catalog's preview cache, opened on first use.

        Raises:
            Unavailable: If the catalog has no previews directory
            OpenError: If the preview database cannot be opened
        """
        if self._previews is None:
            if self.path is None:
                raise ValueError("Catalog has no database to find previews for")
            self._previews = CatalogPreviews(self.path, self.config, self.events)
        return self._previews

    def get_preview(self, photo_id: int) -> bytes:
        """JPEG data of the best cached preview of a photo."""
        return self.previews().get_preview(photo_id)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'paths': list(self.paths),
            'lenses': self.lenses.to_list() if self.lenses is not None else None,
            'cameras': self.cameras.to_list() if self.cameras is not None else None,
            'photos': [photo.to_dict() for photo in self.photos] if self.photos is not None else None,
            'stats': self.stats.to_dict() if self.stats is not None else None,
        }
        if self.collections is not None:
            result['collections'] = [collection.to_dict() for collection in self.collections]
        return result
