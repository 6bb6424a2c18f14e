"""Retry policy for signed provisioning requests.

A signed envelope carries a single-use nonce.  When the server rejects
it as stale the whole request must be signed again, so retries wrap the
build-sign-send sequence rather than the HTTP call alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from localcert.errors import BAD_NONCE, AcmeProblemError

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Which problem types are retried, and how many attempts in total.

    Attributes
    ----------
    max_attempts:
        Total attempts including the first.  ``1`` disables retries.
    retryable_types:
        ACME problem URNs that trigger another attempt.

    """

    max_attempts: int = 2
    retryable_types: frozenset[str] = frozenset({BAD_NONCE})

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            msg = f"max_attempts must be >= 1, got {self.max_attempts}"
            raise ValueError(msg)

    @classmethod
    def disabled(cls) -> RetryPolicy:
        return cls(max_attempts=1)

    def is_retryable(self, exc: BaseException) -> bool:
        return (
            isinstance(exc, AcmeProblemError)
            and exc.error_type in self.retryable_types
        )

    def run(self, operation: Callable[[], T], *, name: str = "request") -> T:
        """Call *operation* until it succeeds or the policy gives up.

        The final failure is re-raised unchanged.
        """
        last_exc: AcmeProblemError | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation()
            except AcmeProblemError as exc:
                if attempt == self.max_attempts or not self.is_retryable(exc):
                    raise
                last_exc = exc
                log.warning(
                    "%s attempt %d/%d failed with %s; retrying",
                    name,
                    attempt,
                    self.max_attempts,
                    exc.error_type,
                )

        raise last_exc  # type: ignore[misc]
