# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/services/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Services package initialization

"""
Services Package: background service quiescence and suite application shutdown.
"""

from .app_closer import SuiteAppCloser, clamp_timeout
from .service_controller import ServiceController, ServiceState

__all__ = ['ServiceController', 'ServiceState', 'SuiteAppCloser', 'clamp_timeout']
