# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/models.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Operation request, deployment states and run outcome data model

"""
Deployment data model.

OperationRequest is built once from CLI input and never mutated.
RunOutcome is computed once when the state machine terminates.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
from urllib.parse import urlparse

# Suite editions the deployer is allowed to target
PRODUCT_IDS = (
    "O365ProPlusRetail",
    "O365ProPlusEEANoTeamsRetail",
    "O365BusinessRetail",
    "O365BusinessEEANoTeamsRetail",
)

SUCCESS_CODE = 0


class OperationMode(Enum):
    """Direction of a deployment run."""
    INSTALL = "Install"
    UNINSTALL = "Uninstall"

    @classmethod
    def parse(cls, value: str) -> "OperationMode":
        """Parse a mode name case-insensitively."""
        for mode in cls:
            if mode.value.lower() == str(value).strip().lower():
                return mode
        raise ValueError(f"Invalid mode '{value}' (expected Install or Uninstall)")


class DeployState(Enum):
    """Orchestrator states, in the order a successful run visits them."""
    INIT = "Init"
    WORKING_AREA_READY = "WorkingAreaReady"
    ARTIFACT_FETCHED = "ArtifactFetched"
    ARTIFACT_VERIFIED = "ArtifactVerified"
    CONFIG_READY = "ConfigReady"
    SUBPROCESS_RUNNING = "SubprocessRunning"
    SUBPROCESS_DONE = "SubprocessDone"
    CONFIRMED_INSTALL = "ConfirmedInstall"
    CONFIRMED_UNINSTALL = "ConfirmedUninstall"
    FAILED = "Failed"
    CLEANED_UP = "CleanedUp"
    TERMINAL = "Terminal"


@dataclass(frozen=True)
class OperationRequest:
    """One invocation's intent."""
    mode: OperationMode = OperationMode.INSTALL
    product_id: Optional[str] = None
    config_url: Optional[str] = None
    app_close_timeout: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.mode, OperationMode):
            raise ValueError(f"Invalid mode: {self.mode!r}")

        if self.product_id is not None and self.product_id not in PRODUCT_IDS:
            raise ValueError(
                f"Invalid product identifier '{self.product_id}' "
                f"(expected one of: {', '.join(PRODUCT_IDS)})"
            )

        if self.config_url is not None:
            parsed = urlparse(self.config_url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ValueError(f"Configuration URL must be an absolute http(s) URL: {self.config_url}")


@dataclass
class RunOutcome:
    """Final result of a deployment run."""
    exit_code: int
    mode: OperationMode
    final_state: DeployState = DeployState.TERMINAL
    history: List[DeployState] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.exit_code == SUCCESS_CODE
