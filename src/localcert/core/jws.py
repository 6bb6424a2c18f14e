"""JWS signing and JWK utilities (RFC 7515 / 7517 / 7638).

Uses the ``cryptography`` library directly -- no josepy dependency.
Envelopes are produced in the Flattened JSON Serialization that ACME
servers expect, and key problems raise
:class:`~localcert.errors.AcmeProblemError` with the matching ACME
error type.

Security note:
    This module handles raw cryptographic operations.  Changes should
    be reviewed carefully for signature encoding and key-policy
    enforcement.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from typing import Any

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa, utils

from localcert.errors import (
    BAD_PUBLIC_KEY,
    AcmeProblemError,
)

log = logging.getLogger(__name__)

# --- Constants -----------------------------------------------------------

_MIN_RSA_KEY_SIZE = 2048
"""Smallest RSA modulus accepted for an account key."""


# --- Base64url helpers (RFC 7515 S2) -------------------------------------


def b64url_encode(b: bytes) -> str:
    """Encode bytes to base64url without padding."""
    return base64.urlsafe_b64encode(b).rstrip(b"=").decode("ascii")


def b64url_decode(s: str) -> bytes:
    """Decode a base64url string (no padding required)."""
    remainder = len(s) % 4
    if remainder:
        s += "=" * (4 - remainder)
    return base64.urlsafe_b64decode(s)


def _uint_b64(value: int, length: int | None = None) -> str:
    if length is None:
        length = max(1, (value.bit_length() + 7) // 8)
    return b64url_encode(value.to_bytes(length, "big"))


# --- Algorithm dispatch --------------------------------------------------

# Maps curve name to (JWA alg, JWK crv, hash, component length)
_EC_ALGORITHMS: dict[str, tuple[str, str, hashes.HashAlgorithm, int]] = {
    "secp256r1": ("ES256", "P-256", hashes.SHA256(), 32),
    "secp384r1": ("ES384", "P-384", hashes.SHA384(), 48),
    "secp521r1": ("ES512", "P-521", hashes.SHA512(), 66),
}

_EC_CURVES: dict[str, type[ec.EllipticCurve]] = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
}


# --- Account key ---------------------------------------------------------


class AccountKey:
    """An ACME account private key able to sign JWS envelopes.

    Parameters
    ----------
    private_key:
        An EC (P-256, P-384, P-521) or RSA (>= 2048 bit) private key.

    Raises
    ------
    AcmeProblemError
        ``BAD_PUBLIC_KEY`` if the key type or size is not supported.

    """

    def __init__(
        self,
        private_key: ec.EllipticCurvePrivateKey | rsa.RSAPrivateKey,
    ) -> None:
        if isinstance(private_key, ec.EllipticCurvePrivateKey):
            if private_key.curve.name not in _EC_ALGORITHMS:
                msg = f"Unsupported EC curve '{private_key.curve.name}'"
                raise AcmeProblemError(BAD_PUBLIC_KEY, msg)
        elif isinstance(private_key, rsa.RSAPrivateKey):
            if private_key.key_size < _MIN_RSA_KEY_SIZE:
                msg = (
                    f"RSA key size {private_key.key_size} is below "
                    f"the minimum of {_MIN_RSA_KEY_SIZE}"
                )
                raise AcmeProblemError(BAD_PUBLIC_KEY, msg)
        else:
            msg = f"Unsupported key type {type(private_key).__name__}"
            raise AcmeProblemError(BAD_PUBLIC_KEY, msg)
        self._key = private_key

    @classmethod
    def generate(cls, curve: str = "P-256") -> AccountKey:
        """Generate a fresh EC account key on *curve*."""
        try:
            curve_cls = _EC_CURVES[curve]
        except KeyError:
            msg = f"Unsupported curve '{curve}'"
            raise AcmeProblemError(BAD_PUBLIC_KEY, msg) from None
        return cls(ec.generate_private_key(curve_cls()))

    @classmethod
    def from_pem(cls, data: bytes, password: bytes | None = None) -> AccountKey:
        """Load an account key from PEM-encoded PKCS#8 or traditional data."""
        return cls(serialization.load_pem_private_key(data, password=password))  # type: ignore[arg-type]

    def to_pem(self) -> bytes:
        """Serialise the private key as unencrypted PKCS#8 PEM."""
        return self._key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    @property
    def private_key(self) -> ec.EllipticCurvePrivateKey | rsa.RSAPrivateKey:
        return self._key

    @property
    def algorithm(self) -> str:
        """Return the JWA ``alg`` used for signatures with this key."""
        if isinstance(self._key, ec.EllipticCurvePrivateKey):
            return _EC_ALGORITHMS[self._key.curve.name][0]
        return "RS256"

    def public_jwk(self) -> dict[str, Any]:
        """Return the public half of the key as a JWK dict."""
        if isinstance(self._key, ec.EllipticCurvePrivateKey):
            _, crv, _, size = _EC_ALGORITHMS[self._key.curve.name]
            nums = self._key.public_key().public_numbers()
            return {
                "kty": "EC",
                "crv": crv,
                "x": _uint_b64(nums.x, size),
                "y": _uint_b64(nums.y, size),
            }
        nums = self._key.public_key().public_numbers()
        return {
            "kty": "RSA",
            "n": _uint_b64(nums.n),
            "e": _uint_b64(nums.e),
        }

    def thumbprint(self) -> str:
        return compute_thumbprint(self.public_jwk())

    def sign(self, signing_input: bytes) -> bytes:
        """Sign *signing_input*, returning the raw JWS signature bytes.

        EC signatures are returned as the fixed-length ``r || s``
        concatenation required by RFC 7518 §3.4, not DER.
        """
        if isinstance(self._key, ec.EllipticCurvePrivateKey):
            _, _, hash_alg, size = _EC_ALGORITHMS[self._key.curve.name]
            der_sig = self._key.sign(signing_input, ec.ECDSA(hash_alg))
            r, s = utils.decode_dss_signature(der_sig)
            return r.to_bytes(size, "big") + s.to_bytes(size, "big")
        return self._key.sign(signing_input, padding.PKCS1v15(), hashes.SHA256())


# --- JWS construction ----------------------------------------------------


def sign_flattened(  # noqa: PLR0913
    key: AccountKey,
    *,
    url: str,
    nonce: str,
    payload: Any = None,  # noqa: ANN401
    kid: str | None = None,
) -> dict[str, str]:
    """Build a JWS Flattened JSON Serialization for an ACME request.

    Parameters
    ----------
    key:
        The account key that signs the request.
    url:
        Target URL, bound into the protected header.
    nonce:
        Fresh replay nonce obtained from the ACME server.
    payload:
        JSON-serialisable payload, or ``None`` for POST-as-GET.
    kid:
        Account URL.  When ``None`` the public JWK is embedded instead
        (new-account style requests).

    Returns
    -------
    dict
        ``{"protected": ..., "payload": ..., "signature": ...}``

    """
    protected: dict[str, Any] = {
        "alg": key.algorithm,
        "nonce": nonce,
        "url": url,
    }
    if kid is None:
        protected["jwk"] = key.public_jwk()
    else:
        protected["kid"] = kid

    protected_b64 = b64url_encode(
        json.dumps(protected, separators=(",", ":")).encode("utf-8"),
    )
    if payload is None:
        payload_b64 = ""
    else:
        payload_b64 = b64url_encode(
            json.dumps(payload, separators=(",", ":")).encode("utf-8"),
        )

    signature = key.sign(f"{protected_b64}.{payload_b64}".encode("ascii"))
    log.debug("Signed JWS for %s (alg=%s)", url, key.algorithm)
    return {
        "protected": protected_b64,
        "payload": payload_b64,
        "signature": b64url_encode(signature),
    }


# --- JWK thumbprint (RFC 7638) -------------------------------------------


def compute_thumbprint(jwk_dict: dict[str, Any]) -> str:
    """Compute the RFC 7638 JWK Thumbprint using SHA-256.

    Construct the canonical JSON representation with required members
    in lexicographic order, then return the base64url-encoded SHA-256
    hash.
    """
    kty = jwk_dict.get("kty")

    if kty == "RSA":
        canonical = {
            "e": jwk_dict["e"],
            "kty": "RSA",
            "n": jwk_dict["n"],
        }
    elif kty == "EC":
        canonical = {
            "crv": jwk_dict["crv"],
            "kty": "EC",
            "x": jwk_dict["x"],
            "y": jwk_dict["y"],
        }
    else:
        msg = f"Cannot compute thumbprint for kty '{kty}'"
        raise AcmeProblemError(BAD_PUBLIC_KEY, msg)

    canonical_json = json.dumps(
        canonical,
        sort_keys=True,
        separators=(",", ":"),
    )
    digest = hashlib.sha256(canonical_json.encode("ascii")).digest()
    return b64url_encode(digest)
