# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/tests/settings_loader_test.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests settings loading, override merging and schema validation

"""
Tests for deployer settings.
Invalid settings MUST raise SettingsError (fail-closed).
"""

import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from c2r_installer.errors import SettingsError
from c2r_installer.settings import SETTINGS_ENV_VAR, deep_merge, load_settings


class TestSettingsLoader(unittest.TestCase):
    """Test settings defaults, overrides and validation."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.env = patch.dict(os.environ)
        self.env.start()
        os.environ.pop(SETTINGS_ENV_VAR, None)

    def tearDown(self):
        self.env.stop()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _override(self, text: str) -> Path:
        path = Path(self.temp_dir) / "override.yaml"
        path.write_text(text)
        return path

    def test_defaults_load(self):
        settings = load_settings()
        self.assertEqual(settings.installer_url, "https://officecdn.microsoft.com/pr/wsus/setup.exe")
        self.assertEqual(settings.installer_timeout, 7200.0)
        self.assertEqual(settings.configure_switch, "/configure")
        self.assertEqual(settings.service_name, "ClickToRunSvc")
        self.assertEqual(settings.tentative_success_codes, (0, 3010))
        self.assertEqual(settings.vendor_organization, "Microsoft Corporation")
        self.assertIn("winword.exe", settings.app_process_names)
        self.assertIsNone(settings.log_path)
        self.assertTrue(str(settings.working_root).endswith(os.path.join("C2RDeploy", "Work")))

    def test_override_file_is_merged(self):
        override = self._override(
            "install:\n"
            "  completion_timeout_seconds: 60\n"
            "working_area:\n"
            f"  root: {self.temp_dir}/work\n"
        )
        settings = load_settings(override)
        self.assertEqual(settings.completion_timeout, 60.0)
        # Sibling keys keep their defaults
        self.assertEqual(settings.completion_poll_interval, 15.0)
        self.assertEqual(settings.working_root, Path(self.temp_dir) / "work")

    def test_override_from_environment(self):
        override = self._override("service:\n  name: OtherSvc\n")
        os.environ[SETTINGS_ENV_VAR] = str(override)
        self.assertEqual(load_settings().service_name, "OtherSvc")

    def test_missing_override_fails(self):
        with self.assertRaises(SettingsError):
            load_settings(Path(self.temp_dir) / "absent.yaml")

    def test_schema_violation_fails(self):
        override = self._override("installer:\n  url: ftp://example.com/setup.exe\n")
        with self.assertRaises(SettingsError) as context:
            load_settings(override)
        self.assertIn("installer/url", str(context.exception))

    def test_tentative_codes_must_include_zero(self):
        override = self._override("uninstall:\n  tentative_success_codes: [3010]\n")
        with self.assertRaises(SettingsError):
            load_settings(override)

    def test_inverted_app_close_bounds_fail(self):
        override = self._override(
            "app_close:\n  min_timeout_seconds: 100\n  max_timeout_seconds: 10\n"
        )
        with self.assertRaises(SettingsError):
            load_settings(override)

    def test_malformed_yaml_fails(self):
        override = self._override("install: [unclosed\n")
        with self.assertRaises(SettingsError):
            load_settings(override)

    def test_deep_merge_does_not_modify_inputs(self):
        base = {'a': {'b': 1, 'c': 2}}
        override = {'a': {'b': 5}}
        merged = deep_merge(base, override)
        self.assertEqual(merged, {'a': {'b': 5, 'c': 2}})
        self.assertEqual(base, {'a': {'b': 1, 'c': 2}})


if __name__ == '__main__':
    unittest.main()
