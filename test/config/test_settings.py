#!/usr/bin/env python3
"""
Unit tests for the Settings class in src/config/settings.py.

Tests the singleton, create/get/update/reset, group reads and JSON
persistence of advisor tunables.
"""

import json
import tempfile
import threading
import unittest
from pathlib import Path

from src.config.settings import Settings


class SettingsTestCase(unittest.TestCase):
    """Fresh singleton backed by a temporary file."""

    def setUp(self):
        Settings._instance = None
        self.temp_dir = tempfile.TemporaryDirectory()
        self.settings_file = Path(self.temp_dir.name) / "settings.json"
        self.settings = Settings(self.settings_file)

    def tearDown(self):
        Settings._instance = None
        self.temp_dir.cleanup()


class TestSettingsSingleton(SettingsTestCase):
    """Test singleton pattern implementation."""

    def test_singleton_instance(self):
        """Later constructions return the first instance."""
        self.assertIs(Settings(), self.settings)
        self.assertIs(Settings(Path("elsewhere.json")), self.settings)
        self.assertEqual(self.settings.settings_file, self.settings_file)

    def test_singleton_thread_safety(self):
        """Concurrent construction yields one instance."""
        Settings._instance = None
        instances = []

        def create_instance():
            instances.append(Settings(self.settings_file))

        threads = [threading.Thread(target=create_instance) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(instances), 10)
        self.assertTrue(all(instance is instances[0] for instance in instances))


class TestSettingsCRUD(SettingsTestCase):
    """Test create, get, update and reset."""

    def test_create_setting_with_default(self):
        self.settings.create("advisor.blend.exploit_threshold", default=0.5)

        self.assertEqual(self.settings.get("advisor.blend.exploit_threshold"), 0.5)
        self.assertTrue(self.settings.exists("advisor.blend.exploit_threshold"))

    def test_create_existing_setting_preserves_value(self):
        """A value already in the file wins over the default."""
        self.settings.create("tracker.sessions.idle_timeout_seconds", default=3600)
        self.settings.update("tracker.sessions.idle_timeout_seconds", 60)

        self.settings.create("tracker.sessions.idle_timeout_seconds", default=3600)

        self.assertEqual(self.settings.get("tracker.sessions.idle_timeout_seconds"), 60)

    def test_update_nonexistent_setting_raises_error(self):
        with self.assertRaises(KeyError):
            self.settings.update("advisor.missing", 1)

    def test_get_setting_with_fallback(self):
        self.assertEqual(self.settings.get("advisor.missing", fallback="x"), "x")
        self.assertIsNone(self.settings.get("advisor.missing"))

    def test_reset_to_default(self):
        self.settings.create("advisor.blend.full_confidence_sample", default=30)
        self.settings.update("advisor.blend.full_confidence_sample", 10)

        self.settings.reset("advisor.blend.full_confidence_sample")

        self.assertEqual(self.settings.get("advisor.blend.full_confidence_sample"), 30)

    def test_reset_without_default_raises_error(self):
        with self.assertRaises(KeyError):
            self.settings.reset("advisor.never.created")

    def test_false_value_is_kept(self):
        """Falsy values are real values, not missing ones."""
        self.settings.create("advisor.external.enabled", default=True)
        self.settings.update("advisor.external.enabled", False)

        self.assertIs(self.settings.get("advisor.external.enabled"), False)


class TestSettingsGroups(SettingsTestCase):
    """Test group reads."""

    def test_get_group(self):
        self.settings.create("advisor.blend.full_confidence_sample", default=30)
        self.settings.create("advisor.blend.exploit_threshold", default=0.5)

        group = self.settings.get_group("advisor.blend")

        self.assertEqual(group, {"full_confidence_sample": 30, "exploit_threshold": 0.5})
        self.assertIsInstance(group, dict)

    def test_get_nonexistent_group(self):
        self.assertEqual(self.settings.get_group("nothing.here"), {})

    def test_get_all(self):
        self.settings.create("history.database_path", default="data/poker_advisor.db")

        self.assertEqual(self.settings.get_all()["history"]["database_path"], "data/poker_advisor.db")


class TestSettingsFilePersistence(SettingsTestCase):
    """Test JSON persistence."""

    def test_save_to_file(self):
        self.settings.create("advisor.external.model", default="claude-haiku-4-5-20251001")

        with open(self.settings_file, 'r', encoding='utf-8') as f:
            data = json.load(f)

        self.assertEqual(data["settings"]["advisor"]["external"]["model"], "claude-haiku-4-5-20251001")
        self.assertIn("last_modified", data["metadata"])

    def test_load_existing_file(self):
        """Values written by a previous run are picked up."""
        self.settings.create("advisor.blend.exploit_threshold", default=0.5)
        self.settings.update("advisor.blend.exploit_threshold", 0.7)

        Settings._instance = None
        reloaded = Settings(self.settings_file)
        reloaded.create("advisor.blend.exploit_threshold", default=0.5)

        self.assertEqual(reloaded.get("advisor.blend.exploit_threshold"), 0.7)

    def test_load_corrupted_file(self):
        """A corrupt file yields empty settings, defaults still apply."""
        self.settings_file.write_text("{not json", encoding='utf-8')

        Settings._instance = None
        reloaded = Settings(self.settings_file)
        reloaded.create("advisor.blend.exploit_threshold", default=0.5)

        self.assertEqual(reloaded.get("advisor.blend.exploit_threshold"), 0.5)


if __name__ == '__main__':
    unittest.main()
