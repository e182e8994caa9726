"""
CloudFormation stack status values.
"""

import re
from typing import Optional

SUCCESS_STATES = ["CREATE_COMPLETE", "DELETE_COMPLETE", "UPDATE_COMPLETE"]
FAILURE_STATES = [
    "CREATE_FAILED",
    "DELETE_FAILED",
    "ROLLBACK_COMPLETE",
    "ROLLBACK_FAILED",
    "UPDATE_ROLLBACK_COMPLETE",
    "UPDATE_ROLLBACK_FAILED",
]
END_STATES = SUCCESS_STATES + FAILURE_STATES

TERMINAL_PATTERN = re.compile(r"_(COMPLETE|FAILED)$")


def is_terminal(status: Optional[str]) -> bool:
    """Check whether a status is one the stack will not leave on its own."""
    if status is None:
        return False
    return TERMINAL_PATTERN.search(status) is not None

