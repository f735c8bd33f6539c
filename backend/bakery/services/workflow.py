# Overview: Status constants and allowed transitions for every stateful record.

"""
Each stateful record has one transition table. Services never compare
status strings to decide whether a move is legal; they ask the machine.

Transfer (a sales run and its return are both transfers):
    pending        -> active | completed | cancelled
    active         -> pending_return | completed
    pending_return -> completed | return_completed | cancelled | active
ProductionBatch:
    pending_approval -> in_production | declined | cancelled
    in_production    -> completed
PaymentConfirmation / SupplyRequest:
    pending -> approved | declined
"""

from __future__ import annotations

from .errors import InvalidStateError


TRANSFER_STATUS_PENDING = "pending"
TRANSFER_STATUS_ACTIVE = "active"
TRANSFER_STATUS_COMPLETED = "completed"
TRANSFER_STATUS_CANCELLED = "cancelled"
TRANSFER_STATUS_PENDING_RETURN = "pending_return"
TRANSFER_STATUS_RETURN_COMPLETED = "return_completed"

BATCH_STATUS_PENDING_APPROVAL = "pending_approval"
BATCH_STATUS_IN_PRODUCTION = "in_production"
BATCH_STATUS_COMPLETED = "completed"
BATCH_STATUS_DECLINED = "declined"
BATCH_STATUS_CANCELLED = "cancelled"

APPROVAL_STATUS_PENDING = "pending"
APPROVAL_STATUS_APPROVED = "approved"
APPROVAL_STATUS_DECLINED = "declined"


class StateMachine:
    def __init__(self, name: str, transitions: dict[str, set[str]]):
        self.name = name
        self.transitions = transitions

    @property
    def states(self) -> set[str]:
        targets = set().union(*self.transitions.values())
        return set(self.transitions) | targets

    def can(self, current: str, target: str) -> bool:
        return target in self.transitions.get(current, set())

    def require(self, current: str, target: str, message: str | None = None) -> None:
        if not self.can(current, target):
            raise InvalidStateError(
                message or f"Cannot move {self.name} from {current} to {target}.",
                details={"current": current, "target": target},
            )


TRANSFER_MACHINE = StateMachine("transfer", {
    TRANSFER_STATUS_PENDING: {
        TRANSFER_STATUS_ACTIVE,
        TRANSFER_STATUS_COMPLETED,
        TRANSFER_STATUS_CANCELLED,
    },
    TRANSFER_STATUS_ACTIVE: {
        TRANSFER_STATUS_PENDING_RETURN,
        TRANSFER_STATUS_COMPLETED,
    },
    TRANSFER_STATUS_PENDING_RETURN: {
        TRANSFER_STATUS_COMPLETED,
        TRANSFER_STATUS_RETURN_COMPLETED,
        TRANSFER_STATUS_CANCELLED,
        TRANSFER_STATUS_ACTIVE,
    },
    TRANSFER_STATUS_COMPLETED: set(),
    TRANSFER_STATUS_CANCELLED: set(),
    TRANSFER_STATUS_RETURN_COMPLETED: set(),
})

BATCH_MACHINE = StateMachine("production batch", {
    BATCH_STATUS_PENDING_APPROVAL: {
        BATCH_STATUS_IN_PRODUCTION,
        BATCH_STATUS_DECLINED,
        BATCH_STATUS_CANCELLED,
    },
    BATCH_STATUS_IN_PRODUCTION: {BATCH_STATUS_COMPLETED},
    BATCH_STATUS_COMPLETED: set(),
    BATCH_STATUS_DECLINED: set(),
    BATCH_STATUS_CANCELLED: set(),
})

APPROVAL_MACHINE = StateMachine("approval", {
    APPROVAL_STATUS_PENDING: {APPROVAL_STATUS_APPROVED, APPROVAL_STATUS_DECLINED},
    APPROVAL_STATUS_APPROVED: set(),
    APPROVAL_STATUS_DECLINED: set(),
})
