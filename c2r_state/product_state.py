# Path and File Name : /home/c2rdeploy/rebuild/c2r_state/product_state.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Read-only view of the Click-to-Run product state record

"""
Product State: what Click-to-Run says is installed on this host.

The record is owned by the Click-to-Run service and only ever read here.
Layout (HKLM, 64-bit view):
    SOFTWARE\\Microsoft\\Office\\ClickToRun\\Configuration
        ProductReleaseIds   comma-separated product identifiers
        VersionToReport     installed build, set once registration is durable
    SOFTWARE\\Microsoft\\Office\\ClickToRun
        ExecutingScenario   non-empty while an install/update/removal runs
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Tuple

CLICK_TO_RUN_KEY = r"SOFTWARE\Microsoft\Office\ClickToRun"
CONFIGURATION_KEY = CLICK_TO_RUN_KEY + r"\Configuration"

PRODUCT_RELEASE_IDS_VALUE = "ProductReleaseIds"
VERSION_TO_REPORT_VALUE = "VersionToReport"
EXECUTING_SCENARIO_VALUE = "ExecutingScenario"


class ProductStateReadError(Exception):
    """Raised when the product state record exists but cannot be read"""
    pass


def parse_release_ids(raw: Optional[str]) -> FrozenSet[str]:
    """Split a ProductReleaseIds value into identifiers."""
    if not raw:
        return frozenset()
    return frozenset(part.strip() for part in str(raw).split(",") if part.strip())


@dataclass(frozen=True)
class ProductSnapshot:
    """One read of the product state record."""
    product_release_ids: FrozenSet[str] = frozenset()
    executing_scenario: str = ""
    version_to_report: Optional[str] = None

    def has_product(self, product_id: str) -> bool:
        wanted = product_id.lower()
        return any(pid.lower() == wanted for pid in self.product_release_ids)

    @property
    def is_busy(self) -> bool:
        return bool(self.executing_scenario and self.executing_scenario.strip())


class ProductStateSource(ABC):
    """Abstract reader of the product state record."""

    @abstractmethod
    def read(self) -> Optional[ProductSnapshot]:
        """
        Read the current record.

        Returns:
            ProductSnapshot, or None when no Click-to-Run record exists

        Raises:
            ProductStateReadError: If the record exists but cannot be read
        """

    @abstractmethod
    def client_executable_present(self) -> bool:
        """True if installed client binaries are on disk."""

    def has_core_evidence(self) -> bool:
        """
        Direct check of installed-product evidence: client executable on disk
        and a version recorded.
        """
        try:
            snapshot = self.read()
        except ProductStateReadError:
            return False
        return (
            snapshot is not None
            and bool(snapshot.version_to_report)
            and self.client_executable_present()
        )


class RegistryProductState(ProductStateSource):
    """Product state read from the HKLM Click-to-Run keys."""

    def __init__(self, client_executables: Iterable[str] = ()):
        self.client_executables: Tuple[str, ...] = tuple(client_executables)

    @staticmethod
    def _winreg():
        try:
            import winreg
        except ImportError as e:
            raise ProductStateReadError(f"Registry access is unavailable on this host: {e}")
        return winreg

    @staticmethod
    def _query(winreg, key_path: str, value_name: str) -> Optional[str]:
        """Read one value; None if the key or value is missing."""
        access = winreg.KEY_READ | winreg.KEY_WOW64_64KEY
        try:
            with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, key_path, 0, access) as key:
                value, _kind = winreg.QueryValueEx(key, value_name)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise ProductStateReadError(f"Failed to read HKLM\\{key_path}\\{value_name}: {e}")
        return None if value is None else str(value)

    def read(self) -> Optional[ProductSnapshot]:
        winreg = self._winreg()

        release_ids = self._query(winreg, CONFIGURATION_KEY, PRODUCT_RELEASE_IDS_VALUE)
        version = self._query(winreg, CONFIGURATION_KEY, VERSION_TO_REPORT_VALUE)
        scenario = self._query(winreg, CLICK_TO_RUN_KEY, EXECUTING_SCENARIO_VALUE)

        if release_ids is None and version is None and scenario is None:
            return None

        return ProductSnapshot(
            product_release_ids=parse_release_ids(release_ids),
            executing_scenario=scenario or "",
            version_to_report=version or None,
        )

    def client_executable_present(self) -> bool:
        return any(os.path.isfile(path) for path in self.client_executables)
