"""Provisioning API wire layer.

Exports the client, its retry policy and transport types, and the
request/response models.
"""

from localcert.wire.client import ProvisioningClient, canonical_base_url
from localcert.wire.models import (
    DomainClaimRequest,
    DomainClaimResult,
    ProvisionRequest,
    ProvisionResult,
    WireRevision,
)
from localcert.wire.retry import RetryPolicy
from localcert.wire.transport import HttpResponse, HttpTransport, UrllibTransport

__all__ = [
    "DomainClaimRequest",
    "DomainClaimResult",
    "HttpResponse",
    "HttpTransport",
    "ProvisionRequest",
    "ProvisionResult",
    "ProvisioningClient",
    "RetryPolicy",
    "UrllibTransport",
    "WireRevision",
    "canonical_base_url",
]
