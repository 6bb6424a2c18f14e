"""DNS-01 certificate issuance for domains assigned by a provisioning service.

Public API::

    from localcert import SessionBuilder

    registered = SessionBuilder().build_with_account(account)
    authorized = registered.new_order().authorize()
    pem_chain = authorized.finalize_with_csr(csr_der).get_certificate()
"""

from localcert.builder import SessionBuilder
from localcert.config.settings import DEFAULT_ACME_POLLING_INTERVAL, DEFAULT_SERVER_URL
from localcert.errors import (
    AcmeProblemError,
    FeatureMissingError,
    HttpError,
    InvalidBaseUrlError,
    LocalcertError,
    PhaseConsumedError,
    SerializationError,
    StateError,
    StatusWaitTimeout,
    TransportError,
    UnexpectedStatusError,
)
from localcert.states import (
    AuthorizedState,
    FinalizedState,
    OrderedState,
    RegisteredState,
    ResumeOrderState,
)

__version__ = "0.3.0"

__all__ = [
    "DEFAULT_ACME_POLLING_INTERVAL",
    "DEFAULT_SERVER_URL",
    "AcmeProblemError",
    "AuthorizedState",
    "FeatureMissingError",
    "FinalizedState",
    "HttpError",
    "InvalidBaseUrlError",
    "LocalcertError",
    "OrderedState",
    "PhaseConsumedError",
    "RegisteredState",
    "ResumeOrderState",
    "SerializationError",
    "SessionBuilder",
    "StateError",
    "StatusWaitTimeout",
    "TransportError",
    "UnexpectedStatusError",
    "__version__",
]
