# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/tests/app_closer_test.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests graceful shutdown of running suite applications and timeout clamping

import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import psutil

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from c2r_installer.services.app_closer import SuiteAppCloser, clamp_timeout


def fake_process(pid, name):
    proc = MagicMock()
    proc.pid = pid
    proc.info = {'name': name}
    return proc


class TestClampTimeout(unittest.TestCase):
    """Test app-close timeout bounds."""

    def test_default_when_unset(self):
        self.assertEqual(clamp_timeout(None, 30, 5, 600), 30)

    def test_within_bounds(self):
        self.assertEqual(clamp_timeout(120, 30, 5, 600), 120)

    def test_clamped_to_floor_and_ceiling(self):
        self.assertEqual(clamp_timeout(0, 30, 5, 600), 5)
        self.assertEqual(clamp_timeout(86400, 30, 5, 600), 600)


class TestSuiteAppCloser(unittest.TestCase):
    """Test suite application shutdown."""

    def setUp(self):
        self.closer = SuiteAppCloser(["WINWORD.EXE", "excel.exe"])

    @patch("c2r_installer.services.app_closer.psutil.wait_procs")
    @patch("c2r_installer.services.app_closer.psutil.process_iter")
    def test_only_suite_processes_are_closed(self, mock_iter, mock_wait):
        word = fake_process(10, "WINWORD.EXE")
        notepad = fake_process(11, "notepad.exe")
        excel = fake_process(12, "excel.exe")
        mock_iter.return_value = [word, notepad, excel]
        mock_wait.return_value = ([word, excel], [])

        self.assertEqual(self.closer.close_running_apps(30), 2)

        word.terminate.assert_called_once()
        excel.terminate.assert_called_once()
        notepad.terminate.assert_not_called()
        mock_wait.assert_called_once_with([word, excel], timeout=30)
        word.kill.assert_not_called()

    @patch("c2r_installer.services.app_closer.psutil.wait_procs")
    @patch("c2r_installer.services.app_closer.psutil.process_iter")
    def test_stragglers_are_killed(self, mock_iter, mock_wait):
        word = fake_process(10, "winword.exe")
        mock_iter.return_value = [word]
        mock_wait.return_value = ([], [word])

        self.closer.close_running_apps(5)
        word.kill.assert_called_once()

    @patch("c2r_installer.services.app_closer.psutil.wait_procs")
    @patch("c2r_installer.services.app_closer.psutil.process_iter")
    def test_vanished_process_is_tolerated(self, mock_iter, mock_wait):
        word = fake_process(10, "winword.exe")
        word.terminate.side_effect = psutil.NoSuchProcess(10)
        mock_iter.return_value = [word]
        mock_wait.return_value = ([word], [])

        self.assertEqual(self.closer.close_running_apps(5), 1)

    @patch("c2r_installer.services.app_closer.psutil.process_iter")
    def test_nothing_running(self, mock_iter):
        mock_iter.return_value = [fake_process(1, "explorer.exe")]
        self.assertEqual(self.closer.close_running_apps(5), 0)


if __name__ == '__main__':
    unittest.main()
