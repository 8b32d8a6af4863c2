import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from luminosity.config import AppConfig, load_config, save_config


class TestConfig(unittest.TestCase):
    """Test cases for loading and saving configuration."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.temp_dir, "config.json")

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def write(self, data):
        with open(self.path, 'w') as f:
            json.dump(data, f)

    def test_defaults(self):
        config = AppConfig()

        self.assertEqual(config.log_level, "INFO")
        self.assertEqual(config.stats_outfile, "stats.json")
        self.assertFalse(config.load_collections)

    def test_load(self):
        self.write({'log_level': "debug", 'load_collections': True, 'db_busy_timeout': 100})

        config = load_config(self.path)

        self.assertEqual(config.log_level, "DEBUG")
        self.assertTrue(config.load_collections)
        self.assertEqual(config.db_busy_timeout, 100)

    def test_environment_substitution(self):
        self.write({'preview_output_dir': "${LUMINOSITY_TEST_DIR}/previews"})

        with patch.dict(os.environ, {'LUMINOSITY_TEST_DIR': "/data"}):
            config = load_config(self.path)

        self.assertEqual(config.preview_output_dir, "/data/previews")

    def test_unknown_field(self):
        self.write({'log_level': "INFO", 'no_such_option': 1})

        with self.assertRaises(ValueError):
            load_config(self.path)

    def test_not_an_object(self):
        self.write(["log_level"])

        with self.assertRaises(ValueError):
            load_config(self.path)

    def test_missing_file(self):
        with self.assertRaises(RuntimeError):
            load_config(os.path.join(self.temp_dir, "missing.json"))

    def test_invalid_json(self):
        with open(self.path, 'w') as f:
            f.write("{not json")

        with self.assertRaises(RuntimeError):
            load_config(self.path)

    def test_save_and_load(self):
        config = AppConfig(pretty_print=True, sunburst_outfile="burst.json")

        save_config(config, self.path)

        self.assertEqual(load_config(self.path), config)


if __name__ == '__main__':
    unittest.main()
