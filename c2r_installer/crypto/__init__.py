# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/crypto/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Crypto package initialization

"""
Crypto Package: Authenticode signature reading and vendor trust verification.
"""

from .authenticode import AuthenticodeReader, SignatureInfo, SignatureStatus
from .trust_verifier import TrustedRootStore, TrustVerifier

__all__ = [
    'AuthenticodeReader',
    'SignatureInfo',
    'SignatureStatus',
    'TrustedRootStore',
    'TrustVerifier',
]
