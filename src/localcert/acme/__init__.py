"""ACME engine capability surface.

Exports the abstract resource classes an ACME client library must
provide to drive an issuance, and the generated-key result type.
"""

from localcert.acme.base import (
    AcmeAccount,
    AcmeAuthorization,
    AcmeChallenge,
    AcmeDirectory,
    AcmeOrder,
    GeneratedKey,
)

__all__ = [
    "AcmeAccount",
    "AcmeAuthorization",
    "AcmeChallenge",
    "AcmeDirectory",
    "AcmeOrder",
    "GeneratedKey",
]
