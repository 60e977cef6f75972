# Path and File Name : /home/c2rdeploy/rebuild/c2r_detection/detect.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Detection probe - exits 0 when the suite is installed, 1 otherwise

"""
Detection probe for the fleet agent.

Takes no arguments. The product counts as present when the product state
record lists it, a version is recorded, no scenario is executing and a
client executable is on disk. Anything else, including an unreadable record,
is reported as absent.

Exit codes:
    0 - product present (a line is printed to stdout)
    1 - product absent
"""

import sys
from dataclasses import dataclass
from typing import Optional

from c2r_installer.errors import SettingsError
from c2r_installer.settings import load_settings
from c2r_state.product_state import ProductStateReadError, ProductStateSource, RegistryProductState

PRESENT_CODE = 0
ABSENT_CODE = 1


@dataclass(frozen=True)
class DetectionResult:
    present: bool
    reason: str
    version: Optional[str] = None


def detect(product_state: ProductStateSource, product_id: str) -> DetectionResult:
    """
    Decide whether product_id is installed and usable.

    Args:
        product_state: Product state reader
        product_id: Product identifier to look for

    Returns:
        DetectionResult
    """
    try:
        snapshot = product_state.read()
    except ProductStateReadError as e:
        return DetectionResult(False, f"Product state unreadable: {e}")

    if snapshot is None:
        return DetectionResult(False, "No Click-to-Run product state record")
    if not snapshot.has_product(product_id):
        return DetectionResult(False, f"{product_id} not in ProductReleaseIds")
    if not snapshot.version_to_report:
        return DetectionResult(False, f"{product_id} listed but no version recorded")
    if snapshot.is_busy:
        return DetectionResult(False, f"Scenario '{snapshot.executing_scenario}' still executing")
    if not product_state.client_executable_present():
        return DetectionResult(False, "Client executable not found")

    return DetectionResult(True, f"{product_id} installed", snapshot.version_to_report)


def main() -> int:
    """CLI entry point."""
    try:
        settings = load_settings()
    except SettingsError as e:
        print(f"Detection failed: {e}", file=sys.stderr)
        return ABSENT_CODE

    product_id = settings.detection_product_id
    result = detect(RegistryProductState(settings.client_executables), product_id)

    if result.present:
        print(f"Detected {product_id} version {result.version}")
        return PRESENT_CODE

    print(f"Not detected: {result.reason}", file=sys.stderr)
    return ABSENT_CODE


if __name__ == '__main__':
    sys.exit(main())
