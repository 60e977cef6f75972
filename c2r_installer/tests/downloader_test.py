# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/tests/downloader_test.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests primary streaming download, fallback download and combined failure

"""
Tests for the Fetcher.
The fallback transport is used ONLY when the primary transport raises.
"""

import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import requests

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from c2r_installer.errors import DeploymentError, DownloadError
from c2r_installer.fetch.downloader import Downloader

URL = "https://officecdn.microsoft.com/pr/wsus/setup.exe"


def streaming_response(chunks):
    response = MagicMock()
    response.iter_bytes.return_value = iter(chunks)
    context = MagicMock()
    context.__enter__.return_value = response
    context.__exit__.return_value = False
    return context


class TestDownloader(unittest.TestCase):
    """Test download transports."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.destination = Path(self.temp_dir) / "nested" / "work"

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    @patch("c2r_installer.fetch.downloader.requests.get")
    @patch("c2r_installer.fetch.downloader.httpx.stream")
    def test_primary_transport_streams_to_disk(self, mock_stream, mock_get):
        mock_stream.return_value = streaming_response([b"MZ", b"\x90\x00", b"body"])

        path = Downloader(chunk_size=4096).fetch(URL, self.destination, "setup.exe")

        self.assertEqual(path, self.destination / "setup.exe")
        self.assertEqual(path.read_bytes(), b"MZ\x90\x00body")
        mock_stream.assert_called_once()
        self.assertEqual(mock_stream.call_args[0], ("GET", URL))
        mock_get.assert_not_called()

    @patch("c2r_installer.fetch.downloader.requests.get")
    @patch("c2r_installer.fetch.downloader.httpx.stream")
    def test_fallback_used_when_primary_raises(self, mock_stream, mock_get):
        mock_stream.side_effect = httpx.ConnectError("connection refused")
        mock_get.return_value = MagicMock(content=b"fallback-bytes")

        path = Downloader().fetch(URL, self.destination, "setup.exe")

        self.assertEqual(path.read_bytes(), b"fallback-bytes")
        mock_get.assert_called_once()
        mock_get.return_value.raise_for_status.assert_called_once()

    @patch("c2r_installer.fetch.downloader.requests.get")
    @patch("c2r_installer.fetch.downloader.httpx.stream")
    def test_both_transports_failing_raises(self, mock_stream, mock_get):
        mock_stream.side_effect = httpx.ConnectError("connection refused")
        mock_get.side_effect = requests.ConnectionError("no route")

        with self.assertRaises(DownloadError) as context:
            Downloader().fetch(URL, self.destination, "setup.exe")

        error = context.exception
        self.assertIsInstance(error, DeploymentError)
        self.assertEqual(error.url, URL)
        self.assertEqual(error.destination, self.destination / "setup.exe")
        self.assertIn(URL, str(error))


if __name__ == '__main__':
    unittest.main()
