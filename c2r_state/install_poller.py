# Path and File Name : /home/c2rdeploy/rebuild/c2r_state/install_poller.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Waits, bounded, for the product state record to report a completed install

"""
Installation State Poller

The installer can exit before product registration is durable, so a zero
exit code is confirmed here. The wait is bounded by timeout + one poll
interval. On timeout a single direct check of installed-product evidence is
made; if the evidence is there the wait still counts as a success.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional

from c2r_installer.retry import retry_until

from .product_state import ProductSnapshot, ProductStateReadError, ProductStateSource

logger = logging.getLogger(__name__)


class InstallPhase(Enum):
    """Installation phase derived from one product state read."""
    NOT_FOUND = "NotFound"
    INSTALLING = "Installing"
    COMPLETE = "Complete"


def classify(snapshot: Optional[ProductSnapshot]) -> InstallPhase:
    if snapshot is None:
        return InstallPhase.NOT_FOUND
    if snapshot.is_busy:
        return InstallPhase.INSTALLING
    if snapshot.version_to_report:
        return InstallPhase.COMPLETE
    return InstallPhase.NOT_FOUND


class InstallationPoller:
    """Polls a ProductStateSource until the install is complete or time runs out."""

    def __init__(self, state_source: ProductStateSource,
                 log: Optional[logging.Logger] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.state_source = state_source
        self.log = log or logger
        self.clock = clock
        self.sleep = sleep
        self.last_phase: Optional[InstallPhase] = None

    def current_phase(self) -> InstallPhase:
        """Read and classify the record; an unreadable record counts as NOT_FOUND."""
        try:
            snapshot = self.state_source.read()
        except ProductStateReadError as e:
            self.log.warning(f"Product state read failed, treating as not found: {e}")
            snapshot = None

        phase = classify(snapshot)
        if phase != self.last_phase:
            self.log.info(f"Installation phase: {phase.value}")
        self.last_phase = phase
        return phase

    def wait_for_completion(self, timeout_seconds: float, poll_interval_seconds: float) -> bool:
        """
        Wait until the product state record reports COMPLETE.

        Args:
            timeout_seconds: Overall wait budget
            poll_interval_seconds: Delay between reads

        Returns:
            True if COMPLETE was observed, or if core evidence exists after
            the timeout. False otherwise.
        """
        self.last_phase = None
        outcome = retry_until(
            lambda: self.current_phase() == InstallPhase.COMPLETE,
            interval=poll_interval_seconds,
            timeout=timeout_seconds,
            clock=self.clock,
            sleep=self.sleep,
        )

        if outcome.succeeded:
            self.log.info(f"✓ Installation complete after {outcome.attempts} check(s)")
            return True

        if self.state_source.has_core_evidence():
            self.log.warning(
                f"Installation not confirmed within {timeout_seconds:.0f}s "
                f"(last phase {self.last_phase.value}), but client executable and "
                f"version record are present; accepting"
            )
            return True

        self.log.warning(
            f"Installation not confirmed within {timeout_seconds:.0f}s "
            f"(last phase {self.last_phase.value})"
        )
        return False
