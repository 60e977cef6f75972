# Path and File Name : /home/c2rdeploy/rebuild/c2r_state/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Click-to-Run product state package initialization

"""
Product state reading and installation completion polling.
"""

from .install_poller import InstallPhase, InstallationPoller, classify
from .product_state import (
    ProductSnapshot,
    ProductStateReadError,
    ProductStateSource,
    RegistryProductState,
)

__all__ = [
    'InstallPhase',
    'InstallationPoller',
    'ProductSnapshot',
    'ProductStateReadError',
    'ProductStateSource',
    'RegistryProductState',
    'classify',
]
