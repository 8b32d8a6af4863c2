"""
Builders for small synthetic catalogs, preview databases and .lrprev files.
"""

import io
import os
import sqlite3
import struct
from typing import Iterable, Optional, Sequence, Tuple

from PIL import Image

CATALOG_SCHEMA = """
CREATE TABLE AgInternedExifLens (id_local INTEGER PRIMARY KEY, value TEXT);
CREATE TABLE AgInternedExifCameraModel (id_local INTEGER PRIMARY KEY, value TEXT);
CREATE TABLE AgInternedIptcCreator (id_local INTEGER PRIMARY KEY, value TEXT);
CREATE TABLE AgLibraryRootFolder (id_local INTEGER PRIMARY KEY, absolutePath TEXT);
CREATE TABLE AgLibraryFolder (id_local INTEGER PRIMARY KEY, pathFromRoot TEXT, rootFolder INTEGER);
CREATE TABLE AgLibraryFile (
    id_local INTEGER PRIMARY KEY, id_global TEXT, baseName TEXT, extension TEXT,
    folder INTEGER, sidecarExtensions TEXT, importHash TEXT);
CREATE TABLE Adobe_images (
    id_local INTEGER PRIMARY KEY, id_global TEXT, rootFile INTEGER, fileFormat TEXT,
    fileHeight INTEGER, fileWidth INTEGER, orientation TEXT, captureTime TEXT,
    rating INTEGER, colorLabels TEXT, pick INTEGER);
CREATE TABLE AgHarvestedExifMetadata (
    id_local INTEGER PRIMARY KEY, image INTEGER, dateDay INTEGER, dateMonth INTEGER,
    dateYear INTEGER, flashFired INTEGER, isoSpeedRating INTEGER, shutterSpeed REAL,
    focalLength REAL, aperture REAL, hasGPS INTEGER, gpsLatitude REAL, gpsLongitude REAL,
    lensRef INTEGER, cameraModelRef INTEGER);
CREATE TABLE AgLibraryIPTC (id_local INTEGER PRIMARY KEY, image INTEGER, caption TEXT, copyright TEXT);
CREATE TABLE AgLibraryCollection (
    id_local INTEGER PRIMARY KEY, name TEXT, parent INTEGER, creationId TEXT, systemOnly INTEGER);
CREATE TABLE Adobe_libraryImageDevelopHistoryStep (id_local INTEGER PRIMARY KEY, image INTEGER);
CREATE TABLE AgLibraryKeyword (id_local INTEGER PRIMARY KEY, name TEXT);
CREATE TABLE AgLibraryKeywordImage (id_local INTEGER PRIMARY KEY, image INTEGER, tag INTEGER);
"""

PREVIEWS_SCHEMA = """
CREATE TABLE IF NOT EXISTS ImageCacheEntry (id INTEGER PRIMARY KEY, imageId INTEGER, uuid TEXT, digest TEXT);
CREATE TABLE IF NOT EXISTS PyramidLevel (id INTEGER PRIMARY KEY, uuid TEXT, level INTEGER);
"""


def make_jpeg(width: int = 8, height: int = 6, color: str = 'red') -> bytes:
    """A small valid JPEG image."""
    buffer = io.BytesIO()
    Image.new('RGB', (width, height), color=color).save(buffer, format='JPEG')
    return buffer.getvalue()


def build_section(name: str, payload: bytes, padding: int = 0,
                  version: int = 1, kind: int = 0, name_field: Optional[int] = None,
                  marker: bytes = b"AgHg", length: Optional[int] = None) -> bytes:
    """One serialized .lrprev section: header, name, payload and padding."""
    raw_name = name.encode('utf-8') + b"\x00"
    if name_field is not None:
        raw_name = raw_name.ljust(name_field, b"\x00")
    header_length = 24 + len(raw_name)
    if length is None:
        length = len(payload)
    header = marker + struct.pack(">HBBQQ", header_length, version, kind, length, padding)
    return header + raw_name + payload + b"\x00" * padding


def build_lrprev(sections: Iterable[Tuple[str, bytes]], padding: int = 16) -> bytes:
    return b"".join(build_section(name, payload, padding=padding, kind=index)
                    for index, (name, payload) in enumerate(sections))


class CatalogBuilder:
    """Writes a minimal Lightroom-shaped catalog database."""

    def __init__(self, path: str, root: str = "/photos/", folder: str = "2020/"):
        self.path = path
        self.conn = sqlite3.connect(path)
        self.conn.executescript(CATALOG_SCHEMA)
        self.conn.execute("INSERT INTO AgLibraryRootFolder VALUES (1, ?)", (root,))
        self.conn.execute("INSERT INTO AgLibraryFolder VALUES (1, ?, 1)", (folder,))
        self._next_id = 1000

    def _id(self) -> int:
        self._next_id += 1
        return self._next_id

    def add_lens(self, lens_id: int, name: Optional[str]) -> 'CatalogBuilder':
        self.conn.execute("INSERT INTO AgInternedExifLens VALUES (?, ?)", (lens_id, name))
        return self

    def add_camera(self, camera_id: int, name: Optional[str]) -> 'CatalogBuilder':
        self.conn.execute("INSERT INTO AgInternedExifCameraModel VALUES (?, ?)", (camera_id, name))
        return self

    def add_photo(self, photo_id: int, base_name: str, extension: str = "CR2",
                  file_format: str = "RAW", capture_time: Optional[str] = "2020-01-01T10:00:00",
                  lens: Optional[int] = None, camera: Optional[int] = None,
                  aperture: Optional[float] = None, shutter: Optional[float] = None,
                  focal_length: Optional[float] = None, sidecar: Optional[str] = None,
                  caption: Optional[str] = None) -> 'CatalogBuilder':
        file_id = self._id()
        self.conn.execute(
            "INSERT INTO AgLibraryFile VALUES (?, ?, ?, ?, 1, ?, 'hash')",
            (file_id, f"FILE-{photo_id}", base_name, extension, sidecar))
        self.conn.execute(
            "INSERT INTO Adobe_images VALUES (?, ?, ?, ?, 4000, 6000, 'AB', ?, 3, '', 0)",
            (photo_id, f"IMAGE-{photo_id}", file_id, file_format, capture_time))
        self.conn.execute(
            "INSERT INTO AgHarvestedExifMetadata VALUES (?, ?, 1, 1, 2020, 0, 100, ?, ?, ?, 0, NULL, NULL, ?, ?)",
            (self._id(), photo_id, shutter, focal_length, aperture, lens, camera))
        self.conn.execute(
            "INSERT INTO AgLibraryIPTC VALUES (?, ?, ?, NULL)", (self._id(), photo_id, caption))
        return self

    def add_collection(self, collection_id: int, name: str, parent: Optional[int] = None,
                       kind: str = "com.adobe.ag.library.collection",
                       system_only: int = 0) -> 'CatalogBuilder':
        self.conn.execute("INSERT INTO AgLibraryCollection VALUES (?, ?, ?, ?, ?)",
                          (collection_id, name, parent, kind, system_only))
        return self

    def add_history_steps(self, photo_id: int, count: int) -> 'CatalogBuilder':
        for _ in range(count):
            self.conn.execute("INSERT INTO Adobe_libraryImageDevelopHistoryStep VALUES (?, ?)",
                              (self._id(), photo_id))
        return self

    def add_keyword(self, keyword_id: int, name: str, photo_ids: Sequence[int]) -> 'CatalogBuilder':
        self.conn.execute("INSERT INTO AgLibraryKeyword VALUES (?, ?)", (keyword_id, name))
        for photo_id in photo_ids:
            self.conn.execute("INSERT INTO AgLibraryKeywordImage VALUES (?, ?, ?)",
                              (self._id(), photo_id, keyword_id))
        return self

    def close(self) -> str:
        self.conn.commit()
        self.conn.close()
        return self.path


class PreviewsBuilder:
    """Writes a previews.db and .lrprev files next to a catalog."""

    def __init__(self, catalog_path: str):
        catalog_dir = os.path.dirname(catalog_path)
        name = os.path.splitext(os.path.basename(catalog_path))[0]
        self.root = os.path.join(catalog_dir, f"{name} Previews.lrdata")
        os.makedirs(self.root, exist_ok=True)
        self.conn = sqlite3.connect(os.path.join(self.root, "previews.db"))
        self.conn.executescript(PREVIEWS_SCHEMA)

    def add_entry(self, image_id: int, uuid: str, digest: str, levels: Sequence[int] = (1, 2, 3),
                  container: Optional[bytes] = None) -> str:
        self.conn.execute("INSERT INTO ImageCacheEntry (imageId, uuid, digest) VALUES (?, ?, ?)",
                          (image_id, uuid, digest))
        for level in levels:
            self.conn.execute("INSERT INTO PyramidLevel (uuid, level) VALUES (?, ?)", (uuid, level))

        path = os.path.join(self.root, uuid[0], uuid[0:4], f"{uuid}-{digest}.lrprev")
        if container is not None:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'wb') as f:
                f.write(container)
        return path

    def close(self) -> str:
        self.conn.commit()
        self.conn.close()
        return self.root


def build_main_catalog(path: str, root: str = "/photos/") -> str:
    """Three photos from two cameras, with keywords, edits and collections."""
    builder = CatalogBuilder(path, root=root)
    builder.add_lens(1, "EF 50mm").add_lens(2, "EF 24-70mm")
    builder.add_camera(1, "Canon R5").add_camera(2, "Canon 5D")
    builder.add_photo(10, "IMG_0001", capture_time="2020-01-01T10:00:00", lens=1, camera=1,
                      aperture=2, shutter=7, focal_length=50.0, sidecar="JPG", caption="Beach")
    builder.add_photo(11, "IMG_0002", capture_time="2020-01-01T11:00:00", lens=1, camera=1,
                      aperture=2, shutter=8, focal_length=50.0)
    builder.add_photo(12, "IMG_0003", extension="JPG", file_format="JPG",
                      capture_time="2020-01-02T09:00:00", lens=2, camera=2,
                      aperture=4, shutter=7, focal_length=24.0)
    builder.add_history_steps(10, 3).add_history_steps(11, 3)
    builder.add_keyword(5, "cat", [10, 11]).add_keyword(6, "dog", [12])
    builder.add_collection(100, "Trips", kind="com.adobe.ag.library.group")
    builder.add_collection(101, "Paris", parent=100)
    builder.add_collection(102, "Best", kind="com.adobe.ag.library.smart_collection")
    builder.add_collection(103, "Quick Collection", system_only=1)
    return builder.close()


def build_second_catalog(path: str) -> str:
    """Two photos sharing a lens name (under another id) with the main catalog."""
    builder = CatalogBuilder(path)
    builder.add_lens(7, "EF 50mm").add_lens(8, "RF 85mm")
    builder.add_camera(3, "Canon R5")
    builder.add_photo(1, "DSC_0001", capture_time="2020-01-01T08:00:00", lens=7, camera=3,
                      aperture=2, shutter=7, focal_length=50.0)
    builder.add_photo(2, "DSC_0002", capture_time="2019-12-31T23:00:00", lens=8, camera=3,
                      aperture=3, shutter=6, focal_length=85.0)
    return builder.close()
