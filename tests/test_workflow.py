"""
Transition tables for work orders and inspection actions.
"""

import pytest

from mes_api.core.errors import InvalidStateError, InvalidStatusTransitionError
from mes_api.core.workflow import (
    InspectionActionStatus,
    WorkOrderOperation,
    WorkOrderStatus,
    next_work_order_status,
    validate_inspection_action_transition,
)

WO_ALLOWED = {
    (WorkOrderStatus.PENDING, WorkOrderOperation.READY): WorkOrderStatus.READY,
    (WorkOrderStatus.PENDING, WorkOrderOperation.START): WorkOrderStatus.IN_PROGRESS,
    (WorkOrderStatus.READY, WorkOrderOperation.START): WorkOrderStatus.IN_PROGRESS,
    (WorkOrderStatus.IN_PROGRESS, WorkOrderOperation.COMPLETE): WorkOrderStatus.COMPLETED,
    (WorkOrderStatus.PENDING, WorkOrderOperation.CANCEL): WorkOrderStatus.CANCELLED,
    (WorkOrderStatus.READY, WorkOrderOperation.CANCEL): WorkOrderStatus.CANCELLED,
    (WorkOrderStatus.IN_PROGRESS, WorkOrderOperation.CANCEL): WorkOrderStatus.CANCELLED,
    (WorkOrderStatus.CANCELLED, WorkOrderOperation.CANCEL): WorkOrderStatus.CANCELLED,
}


@pytest.mark.parametrize("current", list(WorkOrderStatus))
@pytest.mark.parametrize("operation", list(WorkOrderOperation))
def test_work_order_operations(current, operation):
    """Every (status, operation) pair either lands on the expected target or is rejected."""
    expected = WO_ALLOWED.get((current, operation))
    if expected is None:
        with pytest.raises(InvalidStateError):
            next_work_order_status(current, operation)
    else:
        assert next_work_order_status(current, operation) is expected


def test_completed_work_order_is_terminal():
    """No operation moves a completed order."""
    for operation in WorkOrderOperation:
        with pytest.raises(InvalidStateError):
            next_work_order_status(WorkOrderStatus.COMPLETED, operation)


def test_work_order_status_accepts_plain_strings():
    """Values loaded as plain strings are coerced to the enum."""
    assert next_work_order_status("READY", WorkOrderOperation.START) is WorkOrderStatus.IN_PROGRESS


IA_ALLOWED = {
    (InspectionActionStatus.OPEN, InspectionActionStatus.IN_PROGRESS),
    (InspectionActionStatus.IN_PROGRESS, InspectionActionStatus.COMPLETED),
}


@pytest.mark.parametrize("current", list(InspectionActionStatus))
@pytest.mark.parametrize("requested", list(InspectionActionStatus))
def test_inspection_action_transitions(current, requested):
    """Forward single steps and same-status requests pass; everything else is rejected."""
    if current == requested or (current, requested) in IA_ALLOWED:
        validate_inspection_action_transition(current, requested)
    else:
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            validate_inspection_action_transition(current, requested)
        assert exc_info.value.details == {"current": current.value, "requested": requested.value}
