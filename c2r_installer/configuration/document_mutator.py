# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/configuration/document_mutator.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Rewrites the product identifier of an install or removal configuration document

"""
Configuration Mutator: overrides the single product identifier field.

Document shape:
    <Configuration>
      <Add ...>      (install)   or   <Remove ...>   (uninstall)
        <Product ID="..."> ... </Product>
      </Add>
    </Configuration>

Nothing else in the document is read or validated. A missing Product element
is a no-op, and a document that already carries the requested identifier is
not rewritten at all. Comments inside the document survive a rewrite, and a
rewrite replaces the file only once the new document is fully written.
"""

import copy
import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)

INSTALL_ACTION = "Add"
REMOVE_ACTION = "Remove"
PRODUCT_ID_ATTRIBUTE = "ID"


class ProductIdRewrite(NamedTuple):
    """Result of a pure product identifier rewrite."""
    root: ET.Element
    changed: bool
    previous: Optional[str]


def product_path(action: str) -> str:
    if action not in (INSTALL_ACTION, REMOVE_ACTION):
        raise ValueError(f"Unknown configuration action '{action}'")
    return f"./{action}/Product"


def rewrite_product_id(root: ET.Element, action: str, product_id: str) -> ProductIdRewrite:
    """
    Return a document root whose action Product carries product_id.

    The input tree is never modified. When no change is needed the input root
    is returned as-is with changed=False.
    """
    product = root.find(product_path(action))
    if product is None:
        return ProductIdRewrite(root, False, None)

    previous = product.get(PRODUCT_ID_ATTRIBUTE)
    if previous == product_id:
        return ProductIdRewrite(root, False, previous)

    new_root = copy.deepcopy(root)
    new_root.find(product_path(action)).set(PRODUCT_ID_ATTRIBUTE, product_id)
    return ProductIdRewrite(new_root, True, previous)


def comment_preserving_parser() -> ET.XMLParser:
    return ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))


def read_product_id(document_path: Path, action: str) -> Optional[str]:
    """
    Read the product identifier embedded under action.

    Raises:
        ET.ParseError: If the document is not well-formed
        OSError: If the document cannot be read
    """
    product = ET.parse(document_path).getroot().find(product_path(action))
    if product is None:
        return None
    return product.get(PRODUCT_ID_ATTRIBUTE)


class ConfigurationMutator:
    """Applies product identifier overrides to documents on disk."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def set_product_id(self, document_path: Path, product_id: str, action: str) -> bool:
        """
        Set the Product ID under action in the document at document_path.

        Args:
            document_path: Configuration document to update in place
            product_id: Requested product identifier
            action: INSTALL_ACTION or REMOVE_ACTION

        Returns:
            True if the document now carries product_id (or has no Product
            element to carry it). False if the document could not be parsed
            or saved; the caller continues with the unmodified document.
        """
        document_path = Path(document_path)

        try:
            tree = ET.parse(document_path, parser=comment_preserving_parser())
        except (ET.ParseError, OSError) as e:
            self.log.warning(f"Cannot parse configuration document {document_path}: {e}")
            return False

        rewrite = rewrite_product_id(tree.getroot(), action, product_id)

        if rewrite.previous is None and not rewrite.changed:
            self.log.info(f"No {action}/Product element in {document_path.name}; nothing to override")
            return True

        if not rewrite.changed:
            self.log.info(f"{action}/Product already set to {product_id} in {document_path.name}")
            return True

        # The live document is only replaced by a completely written sibling
        staging_path = document_path.with_name(document_path.name + ".tmp")
        try:
            ET.ElementTree(rewrite.root).write(staging_path, encoding="utf-8", xml_declaration=True)
            os.replace(staging_path, document_path)
        except OSError as e:
            self.log.warning(f"Cannot save configuration document {document_path}: {e}")
            self._discard(staging_path)
            return False

        self.log.info(f"{action}/Product ID changed {rewrite.previous} -> {product_id} in {document_path.name}")
        return True

    def _discard(self, staging_path: Path) -> None:
        try:
            staging_path.unlink(missing_ok=True)
        except OSError as e:
            self.log.warning(f"Cannot remove partial document {staging_path}: {e}")
