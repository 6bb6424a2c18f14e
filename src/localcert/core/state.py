"""Issuance phase machine.

Defines the legal transitions between issuance phases and the mapping
used to resume an order from the status the ACME server reports.  All
phase changes go through :func:`assert_transition`.

Usage::

    from localcert.core.state import PHASE_TRANSITIONS, assert_transition
    from localcert.core.types import Phase

    assert_transition(Phase.ORDERED, Phase.AUTHORIZED)
"""

from __future__ import annotations

import logging

from localcert.core.types import OrderStatus, Phase
from localcert.errors import StateError, UnexpectedStatusError

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Phases: registered → ordered (or any resumable phase), ordered →
#         authorized, authorized → finalized, finalized → complete.
# ---------------------------------------------------------------------------

PHASE_TRANSITIONS: dict[Phase, frozenset[Phase]] = {
    Phase.REGISTERED: frozenset(
        {Phase.ORDERED, Phase.AUTHORIZED, Phase.FINALIZED},
    ),
    Phase.ORDERED: frozenset({Phase.AUTHORIZED}),
    Phase.AUTHORIZED: frozenset({Phase.FINALIZED}),
    Phase.FINALIZED: frozenset({Phase.COMPLETE}),
    Phase.COMPLETE: frozenset(),
}

# ---------------------------------------------------------------------------
# Resume: the order status decides which phase an existing order is in.
# ---------------------------------------------------------------------------

RESUME_PHASES: dict[OrderStatus, Phase] = {
    OrderStatus.PENDING: Phase.ORDERED,
    OrderStatus.READY: Phase.AUTHORIZED,
    OrderStatus.PROCESSING: Phase.FINALIZED,
    OrderStatus.VALID: Phase.FINALIZED,
}


def assert_transition(current: Phase, target: Phase) -> None:
    """Raise :class:`StateError` if *current* → *target* is not allowed."""
    allowed = PHASE_TRANSITIONS.get(current)
    if allowed is None:
        msg = f"Unknown phase {current!r}"
        raise StateError(msg)
    if target not in allowed:
        msg = (
            f"Invalid transition {current.value!r} -> {target.value!r}; "
            f"allowed targets: {sorted(p.value for p in allowed) or '(terminal)'}"
        )
        raise StateError(msg)


def resume_phase(status: OrderStatus | str) -> Phase:
    """Return the phase an order with *status* resumes into.

    Raises
    ------
    UnexpectedStatusError
        For ``invalid`` orders and any status the server invents.

    """
    try:
        return RESUME_PHASES[status]  # type: ignore[index]
    except KeyError:
        raise UnexpectedStatusError("order", status) from None


def log_transition(
    order_url: str | None,
    from_phase: Phase,
    to_phase: Phase,
    *,
    reason: str | None = None,
) -> None:
    """Emit a structured log entry for a phase transition.

    Parameters
    ----------
    order_url:
        URL of the order being driven, or ``None`` before one exists.
    from_phase:
        The phase being consumed.
    to_phase:
        The phase being produced.
    reason:
        Optional human-readable reason for the transition.

    """
    extra = {
        "event": "phase_transition",
        "order_url": order_url or "-",
        "from_phase": from_phase.value,
        "to_phase": to_phase.value,
    }
    if reason:
        extra["reason"] = reason
    log.info(
        "order %s: %s -> %s%s",
        extra["order_url"],
        extra["from_phase"],
        extra["to_phase"],
        f" ({reason})" if reason else "",
        extra=extra,
    )
