# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/working_area.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Creates and tears down the per-run scratch directory

"""
Working Area: transient scratch directory owned by exactly one run.

prepare() always starts from an empty directory, so residue from an earlier
interrupted run can never leak into this one. teardown() is best-effort and
safe to call on every exit path.
"""

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .errors import WorkingAreaError

logger = logging.getLogger(__name__)


class WorkingArea:
    """Per-run scratch directory."""

    def __init__(self, root: Path, log: Optional[logging.Logger] = None):
        self.root = Path(root)
        self.log = log or logger
        self.created_at: Optional[datetime] = None
        self.torn_down_at: Optional[datetime] = None

    def prepare(self) -> Path:
        """
        Delete then recreate the working directory.

        Returns:
            The working directory path

        Raises:
            WorkingAreaError: If the directory cannot be removed or created
        """
        try:
            if self.root.exists():
                self.log.info(f"Removing stale working area: {self.root}")
                shutil.rmtree(self.root)
            self.root.mkdir(parents=True)
        except OSError as e:
            raise WorkingAreaError(f"Failed to prepare working area {self.root}: {e}")

        self.created_at = datetime.now(timezone.utc)
        self.log.info(f"Working area ready: {self.root}")
        return self.root

    def teardown(self) -> bool:
        """
        Remove the working directory (best-effort).

        Returns:
            True if the directory no longer exists
        """
        try:
            if self.root.exists():
                shutil.rmtree(self.root)
        except OSError as e:
            self.log.warning(f"Failed to remove working area {self.root}: {e}")
            return False

        self.torn_down_at = datetime.now(timezone.utc)
        self.log.info(f"Working area removed: {self.root}")
        return True

    def __enter__(self) -> "WorkingArea":
        self.prepare()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.teardown()
