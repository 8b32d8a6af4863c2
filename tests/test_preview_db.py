import os
import shutil
import tempfile
import unittest

from luminosity.errors import CorruptFormat, NotFound, OpenError, Unavailable
from luminosity.preview_db import (
    CatalogPreviews,
    PhotoCacheInfo,
    previews_root_path,
)

from tests.fixtures import PreviewsBuilder, build_lrprev, make_jpeg


class TestPreviewPaths(unittest.TestCase):
    """Test cases for locating preview caches and containers."""

    def test_previews_root_path(self):
        self.assertEqual(previews_root_path("/photos/Main.lrcat"),
                         os.path.join("/photos", "Main Previews.lrdata"))

    def test_previews_root_path_keeps_dots_in_name(self):
        self.assertEqual(previews_root_path("/photos/My.Photos.lrcat"),
                         os.path.join("/photos", "My.Photos Previews.lrdata"))

    def test_container_path(self):
        info = PhotoCacheInfo(id=7, uuid="ABCD-1234", digest="ff00", max_level=5)

        self.assertEqual(info.path("/root"),
                         os.path.join("/root", "A", "ABCD", "ABCD-1234-ff00.lrprev"))

    def test_to_dict(self):
        info = PhotoCacheInfo(id=7, uuid="ABCD-1234", digest="ff00", max_level=5)
        self.assertEqual(info.to_dict(),
                         {'id': 7, 'uuid': "ABCD-1234", 'digest': "ff00", 'max_level': 5})


class TestCatalogPreviews(unittest.TestCase):
    """Test cases for the CatalogPreviews class."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.catalog_path = os.path.join(self.temp_dir, "Main.lrcat")
        open(self.catalog_path, 'wb').close()

        self.jpeg = make_jpeg(40, 30)
        builder = PreviewsBuilder(self.catalog_path)
        self.container_path = builder.add_entry(
            1, "0F3A-uuid-one", "d1", levels=(1, 4, 2),
            container=build_lrprev([("small", b"tiny"), ("large", self.jpeg)]))
        builder.add_entry(2, "9B00-uuid-two", "d2", container=None)
        builder.add_entry(3, "7C11-uuid-three", "d3",
                          container=b"NOT A PREVIEW CONTAINER")
        builder.close()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_missing_previews_directory(self):
        with self.assertRaises(Unavailable):
            CatalogPreviews(os.path.join(self.temp_dir, "Other.lrcat"))

    def test_missing_previews_database(self):
        os.makedirs(os.path.join(self.temp_dir, "Empty Previews.lrdata"))
        with self.assertRaises(Unavailable):
            CatalogPreviews(os.path.join(self.temp_dir, "Empty.lrcat"))

    def test_invalid_previews_database(self):
        root = os.path.join(self.temp_dir, "Broken Previews.lrdata")
        os.makedirs(root)
        with open(os.path.join(root, "previews.db"), 'wb') as f:
            f.write(b"this is not a sqlite database" * 10)

        with self.assertRaises(OpenError):
            CatalogPreviews(os.path.join(self.temp_dir, "Broken.lrcat"))

    def test_cache_info_uses_highest_level(self):
        with CatalogPreviews(self.catalog_path) as previews:
            info = previews.get_photo_cache_info(1)

        self.assertEqual(info.id, 1)
        self.assertEqual(info.uuid, "0F3A-uuid-one")
        self.assertEqual(info.digest, "d1")
        self.assertEqual(info.max_level, 4)

    def test_preview_path(self):
        with CatalogPreviews(self.catalog_path) as previews:
            info = previews.get_photo_cache_info(1)
            self.assertEqual(previews.preview_path(info), self.container_path)

    def test_unknown_image(self):
        with CatalogPreviews(self.catalog_path) as previews:
            with self.assertRaises(NotFound):
                previews.get_photo_cache_info(42)
            with self.assertRaises(NotFound):
                previews.get_preview(42)

    def test_get_preview_returns_largest_section(self):
        with CatalogPreviews(self.catalog_path) as previews:
            self.assertEqual(previews.get_preview(1), self.jpeg)

    def test_missing_container(self):
        with CatalogPreviews(self.catalog_path) as previews:
            with self.assertRaises(IOError):
                previews.get_preview(2)

    def test_corrupt_container(self):
        with CatalogPreviews(self.catalog_path) as previews:
            with self.assertRaises(CorruptFormat):
                previews.get_preview(3)


if __name__ == '__main__':
    unittest.main()
