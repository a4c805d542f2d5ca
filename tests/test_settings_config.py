import os
import sys
import unittest
from unittest import mock

import yaml

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import YamlConfig
from settings_schema import AppSettings, validate_settings


class SettingsSchemaTest(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = validate_settings({})
        self.assertEqual(settings, AppSettings())
        self.assertEqual(settings.storage_key, "solo-leveling-irl-offline")
        self.assertEqual(settings.weight_unit, "kg")

    def test_invalid_values(self) -> None:
        with self.assertRaises(ValueError):
            validate_settings({"weight_unit": "stone"})
        with self.assertRaises(ValueError):
            validate_settings({"language": "fr"})
        with self.assertRaises(ValueError):
            validate_settings({"log_level": "LOUD"})


class YamlConfigTest(unittest.TestCase):
    def setUp(self) -> None:
        self.path = "test_config.yaml"
        if os.path.exists(self.path):
            os.remove(self.path)
        self.config = YamlConfig(self.path)

    def tearDown(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)

    def test_missing_file(self) -> None:
        self.assertEqual(self.config.load(), {})

    def test_save_and_load(self) -> None:
        self.config.save({"db_path": "other.db", "language": "es"})
        with open(self.path, "r", encoding="utf-8") as f:
            self.assertEqual(yaml.safe_load(f)["db_path"], "other.db")
        settings = self.config.settings()
        self.assertEqual(settings.db_path, "other.db")
        self.assertEqual(settings.language, "es")

    def test_environment_override(self) -> None:
        self.config.save({"db_path": "file.db"})
        with mock.patch.dict(os.environ, {"PROGRESSION_DB": "env.db"}):
            self.assertEqual(self.config.settings().db_path, "env.db")

    def test_invalid_file(self) -> None:
        self.config.save({"weight_unit": "stone"})
        with self.assertRaises(ValueError):
            self.config.settings()


if __name__ == "__main__":
    unittest.main()
