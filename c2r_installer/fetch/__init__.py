# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/fetch/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Fetch package initialization

"""
Fetch Package: retrieves installer binaries and configuration documents.
"""

from .downloader import Downloader

__all__ = ['Downloader']
