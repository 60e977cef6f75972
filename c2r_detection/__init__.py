# Path and File Name : /home/c2rdeploy/rebuild/c2r_detection/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Detection probe package initialization

from .detect import DetectionResult, detect

__all__ = ['DetectionResult', 'detect']
