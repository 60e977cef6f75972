# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/configuration/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Configuration document package initialization

"""
Configuration Package: packaged default documents and the product identifier mutator.
"""

from pathlib import Path

from .document_mutator import (
    INSTALL_ACTION,
    REMOVE_ACTION,
    ConfigurationMutator,
    read_product_id,
    rewrite_product_id,
)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
INSTALL_TEMPLATE = TEMPLATE_DIR / "install.xml"
UNINSTALL_TEMPLATE = TEMPLATE_DIR / "uninstall.xml"

__all__ = [
    'INSTALL_ACTION',
    'REMOVE_ACTION',
    'INSTALL_TEMPLATE',
    'UNINSTALL_TEMPLATE',
    'ConfigurationMutator',
    'read_product_id',
    'rewrite_product_id',
]
