"""
Decisions for lifecycle operations given the stack's current remote status.

Each (operation, status) pair maps to exactly one action, so every branch of
the controller can be checked without talking to CloudFormation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class Operation(Enum):
    """Lifecycle operations a caller can request."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    DEPLOY = "deploy"


class Action(Enum):
    """What the controller should do for a requested operation."""

    PROCEED = "proceed"
    SKIP = "skip"
    REFUSE = "refuse"
    RECREATE = "recreate"
    CREATE = "create"
    UPDATE = "update"


@dataclass(frozen=True)
class Transition:
    """Outcome of a decision, with an advisory for refusals."""

    action: Action
    reason: Optional[str] = None


MANUAL_DELETE_REASON = (
    "Stack is in CREATE_FAILED state so must be manually deleted "
    "before it can be updated"
)
RECREATE_REASON = (
    "Stack is in ROLLBACK_COMPLETE state so must be deleted and created again"
)

# Statuses that change the outcome of an update; anything else proceeds
UPDATE_TRANSITIONS: Dict[str, Transition] = {
    "CREATE_FAILED": Transition(Action.REFUSE, MANUAL_DELETE_REASON),
    "ROLLBACK_COMPLETE": Transition(Action.RECREATE, RECREATE_REASON),
}


def decide(operation: Operation, status: Optional[str]) -> Transition:
    """
    Decide how to carry out an operation.

    Args:
        operation: Requested lifecycle operation
        status: Current remote status, or None if the stack does not exist

    Returns:
        The transition to follow
    """
    if operation is Operation.DEPLOY:
        if status is None:
            return Transition(Action.CREATE)
        return Transition(Action.UPDATE)

    if operation is Operation.UPDATE:
        if status is None:
            return Transition(Action.SKIP, "Stack does not exist")
        return UPDATE_TRANSITIONS.get(status, Transition(Action.PROCEED))

    return Transition(Action.PROCEED)
