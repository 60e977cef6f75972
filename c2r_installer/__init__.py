# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Click-to-Run deployer package initialization

"""
Click-to-Run Deployer: installs or removes the suite on a managed endpoint.

Fetches the vendor installer, verifies its Authenticode signature, drives it
with a configuration document, confirms completion and reports an exit code.
The orchestrator lives in c2r_installer.installer.
"""

from .models import PRODUCT_IDS, OperationMode, OperationRequest, RunOutcome

__all__ = [
    'PRODUCT_IDS',
    'OperationMode',
    'OperationRequest',
    'RunOutcome',
]

__version__ = "1.0.0"
