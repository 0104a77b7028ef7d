"""
Status enums and transition tables for the production and maintenance workflows.

Work orders move through named operations (ready/start/complete/cancel), each
allowed from a fixed set of source states. Inspection actions move strictly
forward one state at a time.
"""
from __future__ import annotations

import enum
from typing import Dict, FrozenSet, Tuple

from mes_api.core.errors import InvalidStateError, InvalidStatusTransitionError


class WorkOrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    READY = "READY"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class InspectionActionStatus(str, enum.Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class WorkOrderOperation(str, enum.Enum):
    READY = "ready"
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"


# operation -> (allowed source states, target state)
WORK_ORDER_TRANSITIONS: Dict[WorkOrderOperation, Tuple[FrozenSet[WorkOrderStatus], WorkOrderStatus]] = {
    WorkOrderOperation.READY: (
        frozenset({WorkOrderStatus.PENDING}),
        WorkOrderStatus.READY,
    ),
    WorkOrderOperation.START: (
        frozenset({WorkOrderStatus.PENDING, WorkOrderStatus.READY}),
        WorkOrderStatus.IN_PROGRESS,
    ),
    WorkOrderOperation.COMPLETE: (
        frozenset({WorkOrderStatus.IN_PROGRESS}),
        WorkOrderStatus.COMPLETED,
    ),
    WorkOrderOperation.CANCEL: (
        frozenset(set(WorkOrderStatus) - {WorkOrderStatus.COMPLETED}),
        WorkOrderStatus.CANCELLED,
    ),
}

# current -> allowed next states (same -> same is always a no-op)
INSPECTION_ACTION_TRANSITIONS: Dict[InspectionActionStatus, FrozenSet[InspectionActionStatus]] = {
    InspectionActionStatus.OPEN: frozenset({InspectionActionStatus.IN_PROGRESS}),
    InspectionActionStatus.IN_PROGRESS: frozenset({InspectionActionStatus.COMPLETED}),
    InspectionActionStatus.COMPLETED: frozenset(),
}


# PUBLIC_INTERFACE
def next_work_order_status(current: WorkOrderStatus, operation: WorkOrderOperation) -> WorkOrderStatus:
    """
    Return the status a work order moves to when `operation` is applied.

    Raises:
        InvalidStateError: if `current` is not an allowed source for `operation`.
    """
    sources, target = WORK_ORDER_TRANSITIONS[operation]
    if WorkOrderStatus(current) not in sources:
        raise InvalidStateError(
            f"Cannot {operation.value} work order in status {WorkOrderStatus(current).value}",
            current=WorkOrderStatus(current).value,
        )
    return target


# PUBLIC_INTERFACE
def validate_inspection_action_transition(
    current: InspectionActionStatus, requested: InspectionActionStatus
) -> None:
    """
    Check that an inspection action may move from `current` to `requested`.

    Raises:
        InvalidStatusTransitionError: for any move not in the transition table.
    """
    current = InspectionActionStatus(current)
    requested = InspectionActionStatus(requested)
    if current == requested:
        return
    if requested not in INSPECTION_ACTION_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(current.value, requested.value)
