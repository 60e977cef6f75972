# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/services/service_controller.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Stops the suite background service and waits for it to report stopped

"""
Service Controller: brings a Windows service to a fully stopped state.

Service state is read with `sc.exe query` and changed with `sc.exe stop`,
always as argument vectors. Quiescence is a soft step: a timeout or a
failure to talk to the service control manager is logged as a warning and
reported as False, never raised.
"""

import logging
import re
import subprocess
import time
from enum import Enum
from typing import Callable, Optional

from ..retry import retry_until

logger = logging.getLogger(__name__)

SC_EXE = "sc.exe"
ERROR_SERVICE_DOES_NOT_EXIST = 1060
COMMAND_TIMEOUT = 30

STATE_PATTERN = re.compile(r"STATE\s*:\s*(\d+)")


class ServiceState(Enum):
    """Service states as reported by the service control manager."""
    ABSENT = 0
    STOPPED = 1
    START_PENDING = 2
    STOP_PENDING = 3
    RUNNING = 4
    CONTINUE_PENDING = 5
    PAUSE_PENDING = 6
    PAUSED = 7
    UNKNOWN = -1


class ServiceController:
    """Queries and stops Windows services through sc.exe."""

    def __init__(self, runner: Callable = subprocess.run,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic,
                 log: Optional[logging.Logger] = None):
        self.runner = runner
        self.sleep = sleep
        self.clock = clock
        self.log = log or logger

    def _sc(self, *args: str) -> subprocess.CompletedProcess:
        return self.runner(
            [SC_EXE, *args],
            capture_output=True,
            text=True,
            check=False,
            timeout=COMMAND_TIMEOUT,
        )

    def query_state(self, service_name: str) -> ServiceState:
        """
        Query the current state of service_name.

        Raises:
            OSError: If sc.exe cannot be launched
            subprocess.TimeoutExpired: If sc.exe hangs
        """
        result = self._sc("query", service_name)
        if result.returncode == ERROR_SERVICE_DOES_NOT_EXIST:
            return ServiceState.ABSENT

        match = STATE_PATTERN.search(result.stdout or "")
        if result.returncode != 0 or not match:
            return ServiceState.UNKNOWN

        try:
            return ServiceState(int(match.group(1)))
        except ValueError:
            return ServiceState.UNKNOWN

    def quiesce(self, service_name: str, wait_seconds: float, poll_interval: float = 2.0) -> bool:
        """
        Stop service_name and wait until it reports stopped.

        Args:
            service_name: Service to stop
            wait_seconds: Upper bound on the wait for STOPPED
            poll_interval: Seconds between status checks

        Returns:
            True if the service is absent or stopped, False otherwise
        """
        try:
            state = self.query_state(service_name)
            if state in (ServiceState.ABSENT, ServiceState.STOPPED):
                self.log.info(f"Service {service_name} already quiesced ({state.name})")
                return True

            self.log.info(f"Stopping service {service_name} (state {state.name})")
            stop = self._sc("stop", service_name)
            if stop.returncode != 0:
                self.log.warning(f"sc.exe stop {service_name} returned {stop.returncode}")

            outcome = retry_until(
                lambda: self.query_state(service_name) in (ServiceState.STOPPED, ServiceState.ABSENT),
                interval=poll_interval,
                timeout=wait_seconds,
                clock=self.clock,
                sleep=self.sleep,
            )
        except (OSError, subprocess.SubprocessError) as e:
            self.log.warning(f"Cannot control service {service_name}: {e}")
            return False

        if outcome.succeeded:
            self.log.info(f"✓ Service {service_name} stopped after {outcome.elapsed:.0f}s")
            return True

        self.log.warning(f"Service {service_name} did not stop within {wait_seconds:.0f}s")
        return False
