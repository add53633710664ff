"""
Canonical workflow types and status state machines (``payout_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for status state machines, the two concrete lifecycles
(disbursement and payment), and ``StatusTransitionValidator`` which answers
"may a record move from status A to status B?".

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* Terminal states have no outgoing transitions.
* An unknown current state has no allowed transitions.

The validator is advisory: mutation-issuing callers consult it before
requesting a status change.  Normalization of historical data never rejects
a record because its history contains a transition the table does not list.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from payout_kernel.domain.dtos import ValidationError, ValidationResult
from payout_kernel.domain.models import EntityKind


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow."""
    from_state: str
    to_state: str
    action: str


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a record lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    Guarantees: ``initial_state`` is a member of ``states``.
    ``terminal_states`` are states with no outgoing transitions.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(f"{self.name}: initial state {self.initial_state!r} not in states")
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(f"{self.name}: transition {t.from_state}->{t.to_state} uses unknown state")
            if t.from_state in self.terminal_states:
                raise ValueError(f"{self.name}: terminal state {t.from_state!r} has an outgoing transition")


# =========================================================================
# Status enums
# =========================================================================


class DisbursementStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    RETRY = "retry"
    CANCELED = "canceled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    RETRY = "retry"
    CANCELED = "canceled"


class ReceiverStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"
    SUSPENDED = "suspended"


# =========================================================================
# Lifecycles
# =========================================================================

_D = DisbursementStatus
_P = PaymentStatus
_R = ReceiverStatus

DISBURSEMENT_WORKFLOW = Workflow(
    name="disbursement",
    description="Batch payout campaign lifecycle",
    initial_state=_D.DRAFT.value,
    states=tuple(s.value for s in DisbursementStatus),
    transitions=(
        Transition(_D.DRAFT.value, _D.PENDING.value, "submit"),
        Transition(_D.DRAFT.value, _D.CANCELED.value, "cancel"),
        Transition(_D.PENDING.value, _D.PROCESSING.value, "start"),
        Transition(_D.PENDING.value, _D.CANCELED.value, "cancel"),
        Transition(_D.PROCESSING.value, _D.COMPLETED.value, "complete"),
        Transition(_D.PROCESSING.value, _D.FAILED.value, "fail"),
        Transition(_D.PROCESSING.value, _D.CANCELED.value, "cancel"),
        Transition(_D.FAILED.value, _D.RETRY.value, "retry"),
        Transition(_D.FAILED.value, _D.CANCELED.value, "cancel"),
        Transition(_D.RETRY.value, _D.PROCESSING.value, "start"),
        Transition(_D.RETRY.value, _D.FAILED.value, "fail"),
        Transition(_D.RETRY.value, _D.CANCELED.value, "cancel"),
    ),
    terminal_states=(_D.COMPLETED.value, _D.CANCELED.value),
)

PAYMENT_WORKFLOW = Workflow(
    name="payment",
    description="Single transfer lifecycle",
    initial_state=_P.PENDING.value,
    states=tuple(s.value for s in PaymentStatus),
    transitions=(
        Transition(_P.PENDING.value, _P.PROCESSING.value, "start"),
        Transition(_P.PENDING.value, _P.FAILED.value, "fail"),
        Transition(_P.PENDING.value, _P.CANCELED.value, "cancel"),
        Transition(_P.PROCESSING.value, _P.COMPLETED.value, "complete"),
        Transition(_P.PROCESSING.value, _P.FAILED.value, "fail"),
        Transition(_P.FAILED.value, _P.RETRY.value, "retry"),
        Transition(_P.FAILED.value, _P.CANCELED.value, "cancel"),
        Transition(_P.RETRY.value, _P.PROCESSING.value, "start"),
        Transition(_P.RETRY.value, _P.FAILED.value, "fail"),
        Transition(_P.RETRY.value, _P.CANCELED.value, "cancel"),
    ),
    terminal_states=(_P.COMPLETED.value, _P.CANCELED.value),
)


def _state_key(state: str | Enum | None) -> str:
    if state is None:
        return ""
    if isinstance(state, Enum):
        state = state.value
    return str(state).strip().lower()


class StatusTransitionValidator:
    """Legality checks for one workflow's status transitions.

    Status names are matched case-insensitively.
    """

    def __init__(self, workflow: Workflow):
        self._workflow = workflow
        edges: dict[str, set[str]] = {s: set() for s in workflow.states}
        for t in workflow.transitions:
            edges[t.from_state].add(t.to_state)
        self._edges: dict[str, frozenset[str]] = {s: frozenset(v) for s, v in edges.items()}

    @property
    def workflow(self) -> Workflow:
        return self._workflow

    def allowed_transitions(self, current: str | Enum | None) -> frozenset[str]:
        """Statuses reachable in one step; empty for terminal or unknown states."""
        return self._edges.get(_state_key(current), frozenset())

    def is_transition_allowed(self, current: str | Enum | None, next_status: str | Enum | None) -> bool:
        return _state_key(next_status) in self.allowed_transitions(current)

    def is_terminal(self, state: str | Enum | None) -> bool:
        return _state_key(state) in self._workflow.terminal_states

    def is_known(self, state: str | Enum | None) -> bool:
        return _state_key(state) in self._edges

    def validate_transition(self, current: str | Enum | None, next_status: str | Enum | None) -> ValidationResult:
        """Same decision as ``is_transition_allowed`` with a displayable reason."""
        if self.is_transition_allowed(current, next_status):
            return ValidationResult.success()
        cur, nxt = _state_key(current), _state_key(next_status)
        if not self.is_known(cur):
            message = f"Unknown {self._workflow.name} status: {cur!r}"
        elif self.is_terminal(cur):
            message = f"{self._workflow.name.capitalize()} status {cur!r} is terminal"
        else:
            message = f"Cannot transition {self._workflow.name} from {cur!r} to {nxt!r}"
        return ValidationResult.failure(
            ValidationError(
                code="ILLEGAL_STATUS_TRANSITION",
                message=message,
                field="status",
                details={"current": cur, "next": nxt, "allowed": sorted(self.allowed_transitions(cur))},
            )
        )


DISBURSEMENT_TRANSITIONS = StatusTransitionValidator(DISBURSEMENT_WORKFLOW)
PAYMENT_TRANSITIONS = StatusTransitionValidator(PAYMENT_WORKFLOW)

_VALIDATORS: dict[EntityKind, StatusTransitionValidator] = {
    EntityKind.DISBURSEMENT: DISBURSEMENT_TRANSITIONS,
    EntityKind.PAYMENT: PAYMENT_TRANSITIONS,
}


def transition_validator_for(kind: EntityKind | str) -> StatusTransitionValidator:
    """Raises KeyError for kinds without a lifecycle (receivers)."""
    return _VALIDATORS[EntityKind(kind)]


def is_transition_allowed(
    kind: EntityKind | str,
    current: str | Enum | None,
    next_status: str | Enum | None,
) -> bool:
    return transition_validator_for(kind).is_transition_allowed(current, next_status)


# =========================================================================
# Status descriptions
# =========================================================================


@dataclass(frozen=True)
class StatusInfo:
    label: str
    description: str


_STATUS_INFO: dict[EntityKind, dict[Enum, StatusInfo]] = {
    EntityKind.DISBURSEMENT: {
        _D.DRAFT: StatusInfo("Draft", "Disbursement is in draft mode"),
        _D.PENDING: StatusInfo("Pending", "Disbursement is pending approval"),
        _D.PROCESSING: StatusInfo("Processing", "Disbursement is being processed"),
        _D.COMPLETED: StatusInfo("Completed", "Disbursement has been completed"),
        _D.FAILED: StatusInfo("Failed", "Disbursement processing failed"),
        _D.CANCELED: StatusInfo("Canceled", "Disbursement was canceled"),
        _D.RETRY: StatusInfo("Retry", "Disbursement will be retried"),
    },
    EntityKind.PAYMENT: {
        _P.PENDING: StatusInfo("Pending", "Payment is queued for processing"),
        _P.PROCESSING: StatusInfo("Processing", "Payment is being processed"),
        _P.COMPLETED: StatusInfo("Completed", "Payment has been successfully sent"),
        _P.FAILED: StatusInfo("Failed", "Payment processing failed"),
        _P.CANCELED: StatusInfo("Canceled", "Payment was canceled"),
        _P.RETRY: StatusInfo("Retry", "Payment will be retried"),
    },
    EntityKind.RECEIVER: {
        _R.ACTIVE: StatusInfo("Active", "Receiver is active and can receive payments"),
        _R.INACTIVE: StatusInfo("Inactive", "Receiver is inactive"),
        _R.PENDING: StatusInfo("Pending", "Receiver registration is pending"),
        _R.SUSPENDED: StatusInfo("Suspended", "Receiver account is suspended"),
    },
}


_STATUS_ENUMS: dict[EntityKind, type[Enum]] = {
    EntityKind.DISBURSEMENT: DisbursementStatus,
    EntityKind.PAYMENT: PaymentStatus,
    EntityKind.RECEIVER: ReceiverStatus,
}


def status_info(kind: EntityKind | str, status: str | Enum | None) -> StatusInfo:
    """Label and description for a status; unknown statuses echo the raw value."""
    kind = EntityKind(kind)
    try:
        member = _STATUS_ENUMS[kind](_state_key(status))
    except ValueError:
        raw = status.value if isinstance(status, Enum) else (status or "")
        return StatusInfo(label=str(raw), description=f"Unknown {kind.value} status")
    return _STATUS_INFO[kind][member]
