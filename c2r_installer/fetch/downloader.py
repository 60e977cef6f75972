# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/fetch/downloader.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Retrieves remote installer and configuration files with a fallback transport

"""
Downloader: retrieves a remote resource into a local directory.

Primary transport: streaming httpx GET, written chunk by chunk.
Fallback transport: plain requests GET, written in one piece. Used only
when the primary transport raised.

A half-written file may remain after a failure; the working area that
holds it is discarded at the end of every run.
"""

import logging
from pathlib import Path
from typing import Optional

import httpx
import requests

from ..errors import DownloadError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300.0
DEFAULT_CHUNK_SIZE = 64 * 1024


class Downloader:
    """Fetches remote resources to disk."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 log: Optional[logging.Logger] = None):
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.log = log or logger

    def fetch(self, url: str, destination_dir: Path, file_name: str) -> Path:
        """
        Download url to destination_dir/file_name.

        Args:
            url: Source URL
            destination_dir: Target directory (created if absent)
            file_name: Target file name

        Returns:
            Path of the downloaded file

        Raises:
            DownloadError: If both transports fail
        """
        destination_dir = Path(destination_dir)
        target = destination_dir / file_name

        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DownloadError(f"Cannot create download directory {destination_dir}: {e}", url, target)

        self.log.info(f"Downloading {url} -> {target}")

        try:
            self._stream_download(url, target)
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as primary_error:
            self.log.warning(f"Streaming download failed ({primary_error}); retrying with fallback client")
            try:
                self._simple_download(url, target)
            except (requests.RequestException, OSError) as fallback_error:
                raise DownloadError(
                    f"Failed to download {url} to {target}: {fallback_error}",
                    url,
                    target,
                ) from fallback_error

        self.log.info(f"Downloaded {target.name} ({target.stat().st_size} bytes)")
        return target

    def _stream_download(self, url: str, target: Path) -> None:
        with httpx.stream("GET", url, timeout=self.timeout, follow_redirects=True) as response:
            response.raise_for_status()
            with target.open("wb") as fh:
                for chunk in response.iter_bytes(self.chunk_size):
                    fh.write(chunk)

    def _simple_download(self, url: str, target: Path) -> None:
        response = requests.get(url, timeout=self.timeout)
        response.raise_for_status()
        target.write_bytes(response.content)
