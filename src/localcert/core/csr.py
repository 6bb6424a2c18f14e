"""Key and CSR generation for the generated-key finalize path."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

if TYPE_CHECKING:
    from collections.abc import Sequence


_MAX_CN_LENGTH = 64
"""RFC 5280 upper bound for the commonName attribute."""


def _subject_for(identifiers: Sequence[str]) -> x509.Name:
    """Use the first identifier as CN when it fits, else an empty subject."""
    first = identifiers[0]
    if len(first.encode("utf-8")) > _MAX_CN_LENGTH:
        return x509.Name([])
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, first)])


def generate_key_and_csr(
    identifiers: Sequence[str],
) -> tuple[ec.EllipticCurvePrivateKey, bytes]:
    """Return a fresh P-256 key and a DER CSR naming *identifiers*.

    The first identifier becomes the subject common name when it is at
    most 64 bytes long; all of them go into the Subject Alternative Name
    extension.
    """
    if not identifiers:
        msg = "at least one identifier is required"
        raise ValueError(msg)

    key = ec.generate_private_key(ec.SECP256R1())
    csr = (
        x509.CertificateSigningRequestBuilder()
        .subject_name(_subject_for(identifiers))
        .add_extension(
            x509.SubjectAlternativeName([x509.DNSName(name) for name in identifiers]),
            critical=False,
        )
        .sign(key, hashes.SHA256())
    )
    return key, csr.public_bytes(serialization.Encoding.DER)


def csr_to_der(csr: bytes | x509.CertificateSigningRequest) -> bytes:
    """Accept a CSR object or DER bytes and return DER bytes."""
    if isinstance(csr, x509.CertificateSigningRequest):
        return csr.public_bytes(serialization.Encoding.DER)
    return bytes(csr)


def private_key_pem(key: ec.EllipticCurvePrivateKey) -> str:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")
