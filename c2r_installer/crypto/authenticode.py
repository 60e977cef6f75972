# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/crypto/authenticode.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Reads and integrity-checks the Authenticode signature embedded in a PE executable

"""
Authenticode Reader: extracts the embedded signature of a PE executable.

Integrity checks (all must hold for status VALID):
1. PE security directory points at a PKCS#7 WIN_CERTIFICATE
2. Image hash (file minus checksum, security directory entry and
   certificate table) equals the digest in SpcIndirectDataContent
3. Hash of SpcIndirectDataContent equals the signed messageDigest attribute
4. Signer signature over the signed attributes verifies with the signer key

Trust (chain, vendor, root store) is NOT decided here; see trust_verifier.
"""

import logging
import struct
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa

from . import der

logger = logging.getLogger(__name__)

OID_SIGNED_DATA = "1.2.840.113549.1.7.2"
OID_SPC_INDIRECT_DATA = "1.3.6.1.4.1.311.2.1.4"
OID_MESSAGE_DIGEST = "1.2.840.113549.1.9.4"

HASH_ALGORITHMS = {
    "1.3.14.3.2.26": hashes.SHA1,
    "2.16.840.1.101.3.4.2.1": hashes.SHA256,
    "2.16.840.1.101.3.4.2.2": hashes.SHA384,
    "2.16.840.1.101.3.4.2.3": hashes.SHA512,
}

WIN_CERT_TYPE_PKCS_SIGNED_DATA = 0x0002
SECURITY_DIRECTORY_INDEX = 4
PE32_MAGIC = 0x10B
PE32_PLUS_MAGIC = 0x20B


class SignatureStatus(Enum):
    """Signature status, named after the platform's Authenticode statuses."""
    VALID = "Valid"
    NOT_SIGNED = "NotSigned"
    HASH_MISMATCH = "HashMismatch"
    UNKNOWN_ERROR = "UnknownError"


@dataclass
class SignatureInfo:
    """Digital signature descriptor of an executable."""
    status: SignatureStatus
    signer: Optional[x509.Certificate] = None
    certificates: List[x509.Certificate] = field(default_factory=list)
    message: str = ""


class AuthenticodeError(ValueError):
    """Raised when a PE image or its signature blob is malformed"""
    pass


@dataclass(frozen=True)
class PeLayout:
    """Offsets excluded from the Authenticode image hash."""
    checksum_offset: int
    security_entry_offset: int
    cert_table_offset: int
    cert_table_size: int


@dataclass
class SignedContent:
    """Fields pulled out of a PKCS#7 SignedData blob."""
    certificates: List[x509.Certificate]
    image_digest_oid: str
    image_digest: bytes
    indirect_data_content: bytes
    signer_serial: int
    signer_issuer: bytes
    signer_digest_oid: str
    signed_attributes: bytes
    message_digest: Optional[bytes]
    signature: bytes


def locate_security_directory(data: bytes) -> PeLayout:
    """
    Find the checksum field and the security data directory of a PE image.

    Raises:
        AuthenticodeError: If data is not a PE image
    """
    try:
        if data[:2] != b"MZ":
            raise AuthenticodeError("Not a PE image (missing MZ header)")

        pe_offset = struct.unpack_from("<I", data, 0x3C)[0]
        if data[pe_offset:pe_offset + 4] != b"PE\0\0":
            raise AuthenticodeError("Not a PE image (missing PE signature)")

        optional_offset = pe_offset + 24
        magic = struct.unpack_from("<H", data, optional_offset)[0]
        if magic == PE32_MAGIC:
            directories_offset = optional_offset + 96
        elif magic == PE32_PLUS_MAGIC:
            directories_offset = optional_offset + 112
        else:
            raise AuthenticodeError(f"Unknown optional header magic 0x{magic:x}")

        directory_count = struct.unpack_from("<I", data, directories_offset - 4)[0]
        entry_offset = directories_offset + SECURITY_DIRECTORY_INDEX * 8

        if directory_count <= SECURITY_DIRECTORY_INDEX:
            cert_offset, cert_size = 0, 0
        else:
            cert_offset, cert_size = struct.unpack_from("<II", data, entry_offset)
    except struct.error as e:
        raise AuthenticodeError(f"Truncated PE header: {e}")

    if cert_size and cert_offset + cert_size > len(data):
        raise AuthenticodeError("Certificate table extends past end of file")

    return PeLayout(optional_offset + 64, entry_offset, cert_offset, cert_size)


def compute_image_digest(data: bytes, layout: PeLayout, algorithm: hashes.HashAlgorithm) -> bytes:
    """Authenticode image hash of a PE file."""
    digest = hashes.Hash(algorithm)
    digest.update(data[:layout.checksum_offset])
    digest.update(data[layout.checksum_offset + 4:layout.security_entry_offset])
    end = layout.cert_table_offset if layout.cert_table_size else len(data)
    digest.update(data[layout.security_entry_offset + 8:end])
    return digest.finalize()


def extract_pkcs7(data: bytes, layout: PeLayout) -> bytes:
    """Return the PKCS#7 blob from the first WIN_CERTIFICATE entry."""
    blob = data[layout.cert_table_offset:layout.cert_table_offset + layout.cert_table_size]
    try:
        length, _revision, cert_type = struct.unpack_from("<IHH", blob, 0)
    except struct.error as e:
        raise AuthenticodeError(f"Truncated WIN_CERTIFICATE header: {e}")

    if cert_type != WIN_CERT_TYPE_PKCS_SIGNED_DATA:
        raise AuthenticodeError(f"Unsupported certificate type 0x{cert_type:x}")
    if length < 8 or length > len(blob):
        raise AuthenticodeError(f"Bad WIN_CERTIFICATE length {length}")

    return blob[8:length]


def parse_signed_data(pkcs7: bytes) -> SignedContent:
    """
    Walk a PKCS#7 ContentInfo carrying Authenticode SignedData.

    Raises:
        AuthenticodeError: If the structure is not Authenticode SignedData
        der.DerError: If the encoding is malformed
    """
    content_info = der.children(der.expect(der.parse(pkcs7), der.TAG_SEQUENCE))
    if der.decode_oid(content_info[0].content) != OID_SIGNED_DATA:
        raise AuthenticodeError("ContentInfo is not SignedData")

    signed_data = der.children(der.children(content_info[1])[0])
    encap_content = der.children(signed_data[2])
    if der.decode_oid(encap_content[0].content) != OID_SPC_INDIRECT_DATA:
        raise AuthenticodeError("Encapsulated content is not SpcIndirectDataContent")

    indirect_data = der.children(encap_content[1])[0]
    digest_info = der.children(der.children(indirect_data)[1])
    image_digest_oid = der.decode_oid(der.children(digest_info[0])[0].content)
    image_digest = der.expect(digest_info[1], der.TAG_OCTET_STRING).content

    certificates = []
    signer_infos = None
    for node in signed_data[3:]:
        if node.tag == der.TAG_CONTEXT_0:
            certificates = [
                x509.load_der_x509_certificate(item.encoded)
                for item in der.children(node)
                if item.tag == der.TAG_SEQUENCE
            ]
        elif node.tag == der.TAG_SET:
            signer_infos = der.children(node)

    if not signer_infos:
        raise AuthenticodeError("SignedData carries no SignerInfo")

    signer_info = der.children(signer_infos[0])
    issuer_node, serial_node = der.children(signer_info[1])[:2]
    signer_digest_oid = der.decode_oid(der.children(signer_info[2])[0].content)

    if signer_info[3].tag != der.TAG_CONTEXT_0:
        raise AuthenticodeError("SignerInfo carries no signed attributes")
    attributes_node = signer_info[3]
    signature = der.expect(signer_info[5], der.TAG_OCTET_STRING).content

    message_digest = None
    for attribute in der.children(attributes_node):
        attr_type, attr_values = der.children(attribute)[:2]
        if der.decode_oid(attr_type.content) == OID_MESSAGE_DIGEST:
            message_digest = der.children(attr_values)[0].content

    # Signed attributes are signed as an explicit SET OF, not as the [0] field
    signed_attributes = bytes([der.TAG_SET]) + attributes_node.encoded[1:]

    return SignedContent(
        certificates=certificates,
        image_digest_oid=image_digest_oid,
        image_digest=image_digest,
        indirect_data_content=indirect_data.content,
        signer_serial=der.decode_integer(serial_node.content),
        signer_issuer=issuer_node.encoded,
        signer_digest_oid=signer_digest_oid,
        signed_attributes=signed_attributes,
        message_digest=message_digest,
        signature=signature,
    )


def find_signer(content: SignedContent) -> Optional[x509.Certificate]:
    """Pick the embedded certificate whose issuer and serial both match the SignerInfo."""
    for cert in content.certificates:
        if cert.serial_number == content.signer_serial and cert.issuer.public_bytes() == content.signer_issuer:
            return cert
    return None


def _hash_for(oid: str) -> hashes.HashAlgorithm:
    if oid not in HASH_ALGORITHMS:
        raise AuthenticodeError(f"Unsupported digest algorithm {oid}")
    return HASH_ALGORITHMS[oid]()


def _digest(algorithm: hashes.HashAlgorithm, payload: bytes) -> bytes:
    digest = hashes.Hash(algorithm)
    digest.update(payload)
    return digest.finalize()


def verify_signer_signature(signer: x509.Certificate, content: SignedContent) -> None:
    """
    Verify the SignerInfo signature with the signer public key.

    Raises:
        InvalidSignature: If the signature does not verify
        AuthenticodeError: If the key type or digest is unsupported
    """
    algorithm = _hash_for(content.signer_digest_oid)
    public_key = signer.public_key()

    if isinstance(public_key, rsa.RSAPublicKey):
        public_key.verify(content.signature, content.signed_attributes, padding.PKCS1v15(), algorithm)
    elif isinstance(public_key, ec.EllipticCurvePublicKey):
        public_key.verify(content.signature, content.signed_attributes, ec.ECDSA(algorithm))
    else:
        raise AuthenticodeError(f"Unsupported signer key type {type(public_key).__name__}")


class AuthenticodeReader:
    """Reads the embedded Authenticode signature of a PE file."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def read(self, file_path: Path) -> SignatureInfo:
        """
        Read and integrity-check the signature of file_path.

        Returns:
            SignatureInfo. Never raises for malformed input; the status says
            what went wrong.
        """
        info = self._read(file_path)
        self.log.debug(f"Authenticode status for {file_path}: {info.status.value} ({info.message})")
        return info

    def _read(self, file_path: Path) -> SignatureInfo:
        try:
            data = Path(file_path).read_bytes()
        except OSError as e:
            return SignatureInfo(SignatureStatus.UNKNOWN_ERROR, message=f"Cannot read {file_path}: {e}")

        try:
            layout = locate_security_directory(data)
            if not layout.cert_table_size:
                return SignatureInfo(SignatureStatus.NOT_SIGNED, message="No certificate table")

            content = parse_signed_data(extract_pkcs7(data, layout))
        except (AuthenticodeError, ValueError, IndexError) as e:
            return SignatureInfo(SignatureStatus.UNKNOWN_ERROR, message=f"Malformed signature: {e}")

        signer = find_signer(content)
        if signer is None:
            return SignatureInfo(
                SignatureStatus.UNKNOWN_ERROR,
                certificates=content.certificates,
                message="Signer certificate not embedded",
            )

        def mismatch(reason: str) -> SignatureInfo:
            return SignatureInfo(SignatureStatus.HASH_MISMATCH, signer, content.certificates, reason)

        try:
            image_digest = compute_image_digest(data, layout, _hash_for(content.image_digest_oid))
            if image_digest != content.image_digest:
                return mismatch("Image digest does not match signed digest")

            content_digest = _digest(_hash_for(content.signer_digest_oid), content.indirect_data_content)
            if content.message_digest != content_digest:
                return mismatch("Signed messageDigest does not match content")

            verify_signer_signature(signer, content)
        except InvalidSignature:
            return mismatch("Signer signature does not verify")
        except AuthenticodeError as e:
            return SignatureInfo(SignatureStatus.UNKNOWN_ERROR, signer, content.certificates, str(e))

        return SignatureInfo(SignatureStatus.VALID, signer, content.certificates, "Signature verified")
