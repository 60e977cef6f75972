# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/services/app_closer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Gracefully closes running suite applications before the installer runs

"""
Suite Application Closer

Asks running suite processes to exit, waits a bounded grace period, then
kills whatever is left. The grace period comes from the caller and is
clamped to the configured floor and ceiling.
"""

import logging
from typing import Iterable, List, Optional

import psutil

logger = logging.getLogger(__name__)


def clamp_timeout(value: Optional[int], default: int, floor: int, ceiling: int) -> int:
    """Clamp a caller-supplied timeout into [floor, ceiling]; None uses default."""
    if value is None:
        value = default
    return max(floor, min(ceiling, int(value)))


class SuiteAppCloser:
    """Terminates running suite applications."""

    def __init__(self, process_names: Iterable[str], log: Optional[logging.Logger] = None):
        self.process_names = {name.lower() for name in process_names}
        self.log = log or logger

    def find_running(self) -> List[psutil.Process]:
        """Running processes whose executable name is a suite application."""
        running = []
        for proc in psutil.process_iter(['name']):
            name = (proc.info.get('name') or '').lower()
            if name in self.process_names:
                running.append(proc)
        return running

    def close_running_apps(self, grace_seconds: int) -> int:
        """
        Close running suite applications.

        Args:
            grace_seconds: Time allowed for graceful exit before a kill

        Returns:
            Number of processes that were asked to exit
        """
        processes = self.find_running()
        if not processes:
            self.log.info("No running suite applications")
            return 0

        names = sorted({p.info.get('name') or str(p.pid) for p in processes})
        self.log.info(f"Closing {len(processes)} suite application(s): {', '.join(names)}")

        for proc in processes:
            try:
                proc.terminate()
            except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
                self.log.warning(f"Cannot terminate pid {proc.pid}: {e}")

        _gone, alive = psutil.wait_procs(processes, timeout=grace_seconds)

        for proc in alive:
            self.log.warning(f"pid {proc.pid} still running after {grace_seconds}s grace period; killing")
            try:
                proc.kill()
            except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
                self.log.warning(f"Cannot kill pid {proc.pid}: {e}")

        return len(processes)
