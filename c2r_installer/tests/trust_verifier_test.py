# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/tests/trust_verifier_test.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests fail-closed vendor trust verification against generated certificate chains

"""
Tests for the Trust Verifier.
Every missing or wrong element MUST yield False (fail-closed).
"""

import datetime
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from c2r_installer.crypto.authenticode import SignatureInfo, SignatureStatus
from c2r_installer.crypto.trust_verifier import TrustedRootStore, TrustVerifier, thumbprint

VENDOR_ORG = "Microsoft Corporation"
VENDOR_ROOT = "Microsoft Root Certificate Authority"


def make_name(common_name, organization):
    return x509.Name([
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization),
    ])


def issue(subject, subject_key, issuer, issuer_key):
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(subject_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=365))
        .sign(issuer_key, hashes.SHA256())
    )


def make_chain(root_cn=VENDOR_ROOT + " 2011", leaf_org=VENDOR_ORG):
    """Return (leaf, intermediate, root) certificates."""
    root_key = ec.generate_private_key(ec.SECP256R1())
    ca_key = ec.generate_private_key(ec.SECP256R1())
    leaf_key = ec.generate_private_key(ec.SECP256R1())

    root_name = make_name(root_cn, VENDOR_ORG)
    ca_name = make_name("Microsoft Code Signing PCA 2011", VENDOR_ORG)
    leaf_name = make_name("Signing Test Leaf", leaf_org)

    root = issue(root_name, root_key, root_name, root_key)
    intermediate = issue(ca_name, ca_key, root_name, root_key)
    leaf = issue(leaf_name, leaf_key, ca_name, ca_key)
    return leaf, intermediate, root


class TestTrustVerifier(unittest.TestCase):
    """Test the fail-closed verification order."""

    @classmethod
    def setUpClass(cls):
        cls.leaf, cls.intermediate, cls.root = make_chain()

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.artifact = Path(self.temp_dir) / "setup.exe"
        self.artifact.write_bytes(b"MZ")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _verifier(self, info, roots=None):
        reader = MagicMock()
        reader.read.return_value = info
        store = TrustedRootStore([self.root] if roots is None else roots)
        return TrustVerifier(store, VENDOR_ORG, VENDOR_ROOT, signature_reader=reader)

    def _valid_info(self, **overrides):
        values = dict(
            status=SignatureStatus.VALID,
            signer=self.leaf,
            certificates=[self.leaf, self.intermediate],
        )
        values.update(overrides)
        return SignatureInfo(**values)

    def test_trusted_chain_passes(self):
        self.assertTrue(self._verifier(self._valid_info()).verify(self.artifact))

    def test_chain_is_built_to_store_root(self):
        verifier = self._verifier(self._valid_info())
        chain = verifier.build_chain(self.leaf, [self.intermediate])
        self.assertEqual(chain, [self.leaf, self.intermediate, self.root])

    def test_missing_file_fails(self):
        verifier = self._verifier(self._valid_info())
        self.assertFalse(verifier.verify(Path(self.temp_dir) / "absent.exe"))

    def test_not_signed_fails(self):
        info = SignatureInfo(SignatureStatus.NOT_SIGNED, message="No certificate table")
        self.assertFalse(self._verifier(info).verify(self.artifact))

    def test_wrong_signer_organization_fails(self):
        leaf, intermediate, root = make_chain(leaf_org="Contoso Ltd")
        info = SignatureInfo(SignatureStatus.VALID, leaf, [leaf, intermediate])
        self.assertFalse(self._verifier(info, roots=[root]).verify(self.artifact))

    def test_invalid_status_fails(self):
        info = self._valid_info(status=SignatureStatus.HASH_MISMATCH)
        self.assertFalse(self._verifier(info).verify(self.artifact))

    def test_chain_without_vendor_root_fails(self):
        leaf, intermediate, root = make_chain(root_cn="Contoso Root Authority")
        info = SignatureInfo(SignatureStatus.VALID, leaf, [leaf, intermediate])
        self.assertFalse(self._verifier(info, roots=[root]).verify(self.artifact))

    def test_vendor_root_not_in_host_store_fails(self):
        # Root travels embedded in the signature but the host does not trust it
        info = self._valid_info(certificates=[self.leaf, self.intermediate, self.root])
        self.assertFalse(self._verifier(info, roots=[]).verify(self.artifact))

    def test_broken_chain_fails(self):
        info = self._valid_info(certificates=[self.leaf])
        self.assertFalse(self._verifier(info).verify(self.artifact))

    def test_forged_intermediate_fails(self):
        # Same subject name as the real intermediate, different key
        _, forged_intermediate, _ = make_chain()
        info = self._valid_info(certificates=[self.leaf, forged_intermediate])
        self.assertFalse(self._verifier(info).verify(self.artifact))

    def test_reader_exception_fails_closed(self):
        reader = MagicMock()
        reader.read.side_effect = RuntimeError("boom")
        verifier = TrustVerifier(TrustedRootStore([self.root]), VENDOR_ORG, VENDOR_ROOT,
                                 signature_reader=reader)
        self.assertFalse(verifier.verify(self.artifact))


class TestTrustedRootStore(unittest.TestCase):
    """Test root store loading."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        _, _, self.root = make_chain()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_pem_bundle(self):
        bundle = Path(self.temp_dir) / "roots.pem"
        bundle.write_bytes(self.root.public_bytes(serialization.Encoding.PEM))

        store = TrustedRootStore.load(str(bundle))
        self.assertTrue(store.contains(self.root))
        self.assertIn(thumbprint(self.root), store.thumbprints)

    def test_thumbprint_format(self):
        value = thumbprint(self.root)
        self.assertEqual(len(value), 40)
        self.assertEqual(value, value.upper())

    @unittest.skipIf(sys.platform.startswith("win"), "system store exists on Windows")
    def test_system_store_unavailable_off_windows(self):
        with self.assertRaises(RuntimeError):
            TrustedRootStore.load("system")


if __name__ == '__main__':
    unittest.main()
