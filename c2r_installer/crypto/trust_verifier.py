# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/crypto/trust_verifier.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Fail-closed vendor trust verification of a downloaded installer executable

"""
Trust Verifier: decides whether an executable may be run.

Security Properties:
- FAIL-CLOSED on ANY error or ambiguity
- NO retry, NO fallback, NO best-effort warnings

Verification Order (MANDATORY):
1. Signature present
2. Signer subject organization is the vendor
3. Signature status is VALID
4. Chain from the signer reaches a vendor root certificate
5. That root's thumbprint is in the host trusted root store
6. ONLY THEN: the executable is trusted
"""

import logging
import ssl
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Set

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.x509.oid import NameOID

from .authenticode import AuthenticodeReader, SignatureStatus

logger = logging.getLogger(__name__)

MAX_CHAIN_DEPTH = 8
SYSTEM_STORE = "system"


def thumbprint(cert: x509.Certificate) -> str:
    """SHA-1 thumbprint in the upper-case hex form the platform displays."""
    return cert.fingerprint(hashes.SHA1()).hex().upper()


def _name_attribute(name: x509.Name, oid) -> List[str]:
    return [attr.value for attr in name.get_attributes_for_oid(oid)]


class TrustedRootStore:
    """Host trusted root certificates, indexed by thumbprint."""

    def __init__(self, certificates: Iterable[x509.Certificate]):
        self.certificates: List[x509.Certificate] = list(certificates)
        self.thumbprints: Set[str] = {thumbprint(c) for c in self.certificates}

    def contains(self, cert: x509.Certificate) -> bool:
        return thumbprint(cert) in self.thumbprints

    @classmethod
    def from_pem_bundle(cls, path: Path) -> "TrustedRootStore":
        """Load roots from a PEM bundle file."""
        return cls(x509.load_pem_x509_certificates(Path(path).read_bytes()))

    @classmethod
    def from_system(cls) -> "TrustedRootStore":
        """
        Load the Windows ROOT system store.

        Raises:
            RuntimeError: If the host has no Windows certificate store
        """
        if not sys.platform.startswith("win"):
            raise RuntimeError("The system ROOT store is only available on Windows hosts")

        certificates = []
        for cert_bytes, encoding, _trust in ssl.enum_certificates("ROOT"):
            if encoding != "x509_asn":
                continue
            try:
                certificates.append(x509.load_der_x509_certificate(cert_bytes))
            except ValueError:
                logger.debug("Skipping unparseable certificate in ROOT store")
        return cls(certificates)

    @classmethod
    def load(cls, location: str) -> "TrustedRootStore":
        """Load the system store for 'system', else a PEM bundle at location."""
        if location == SYSTEM_STORE:
            return cls.from_system()
        return cls.from_pem_bundle(Path(location))


class TrustVerifier:
    """Fail-closed vendor trust gate for executables."""

    def __init__(self, root_store: TrustedRootStore,
                 vendor_organization: str,
                 vendor_root_common_name: str,
                 signature_reader: Optional[AuthenticodeReader] = None,
                 log: Optional[logging.Logger] = None):
        self.root_store = root_store
        self.vendor_organization = vendor_organization
        self.vendor_root_common_name = vendor_root_common_name
        self.signature_reader = signature_reader or AuthenticodeReader()
        self.log = log or logger

    def verify(self, file_path: Path) -> bool:
        """
        Verify that file_path is signed by the vendor and chains to a trusted root.

        Returns:
            True only when every check holds. FAIL-CLOSED: any error is False.
        """
        try:
            is_trusted, message = self._evaluate(Path(file_path))
        except Exception as e:
            is_trusted, message = False, f"Verification error: {e}"

        if is_trusted:
            self.log.info(f"✓ Trust verification passed for {file_path}: {message}")
        else:
            self.log.error(f"Trust verification FAILED for {file_path}: {message}")
        return is_trusted

    def _evaluate(self, file_path: Path):
        # Check 1: Signature present
        if not file_path.exists():
            return False, "File not found"

        signature = self.signature_reader.read(file_path)
        if signature.status == SignatureStatus.NOT_SIGNED or signature.signer is None:
            return False, f"No digital signature ({signature.message or signature.status.value})"

        # Check 2: Signer organization
        organizations = _name_attribute(signature.signer.subject, NameOID.ORGANIZATION_NAME)
        if self.vendor_organization not in organizations:
            return False, f"Signer organization {organizations or ['<none>']} is not '{self.vendor_organization}'"

        # Check 3: Signature status
        if signature.status != SignatureStatus.VALID:
            return False, f"Signature status is {signature.status.value}: {signature.message}"

        # Check 4: Vendor root in chain
        chain = self.build_chain(signature.signer, signature.certificates)
        vendor_root = self._find_vendor_root(chain)
        if vendor_root is None:
            return False, f"No '{self.vendor_root_common_name}' certificate in signer chain"

        # Check 5: Root trusted by host
        root_thumbprint = thumbprint(vendor_root)
        if not self.root_store.contains(vendor_root):
            return False, f"Vendor root {root_thumbprint} is not in the host trusted root store"

        return True, f"Signed by {self.vendor_organization}, root {root_thumbprint}"

    def build_chain(self, signer: x509.Certificate,
                    embedded: Iterable[x509.Certificate]) -> List[x509.Certificate]:
        """
        Build the issuer chain upward from signer.

        Candidates are the certificates embedded in the signature plus the host
        roots. Each link is accepted only if its signature verifies.
        """
        candidates = list(embedded) + self.root_store.certificates
        chain = [signer]
        seen = {thumbprint(signer)}
        current = signer

        while len(chain) < MAX_CHAIN_DEPTH and current.issuer != current.subject:
            issuer = self._find_issuer(current, candidates)
            if issuer is None or thumbprint(issuer) in seen:
                break
            chain.append(issuer)
            seen.add(thumbprint(issuer))
            current = issuer

        return chain

    @staticmethod
    def _find_issuer(cert: x509.Certificate,
                     candidates: Iterable[x509.Certificate]) -> Optional[x509.Certificate]:
        for candidate in candidates:
            if candidate.subject != cert.issuer:
                continue
            try:
                cert.verify_directly_issued_by(candidate)
            except (ValueError, TypeError, InvalidSignature):
                continue
            return candidate
        return None

    def _find_vendor_root(self, chain: List[x509.Certificate]) -> Optional[x509.Certificate]:
        for cert in chain:
            for common_name in _name_attribute(cert.subject, NameOID.COMMON_NAME):
                if common_name.startswith(self.vendor_root_common_name):
                    return cert
        return None

