"""
Stack lifecycle errors and remote error classification.
"""

from enum import Enum
from typing import Optional

from botocore.exceptions import ClientError

NOT_FOUND_SUFFIX = " does not exist"
NO_UPDATES_MESSAGE = "No updates are to be performed."


class StackError(Exception):
    """Base class for stack lifecycle errors."""


class NoSuchStack(StackError):
    """The named stack does not exist remotely."""

    def __init__(self, name: str):
        super().__init__(f"no such stack: {name}")
        self.name = name


class StackUpdateError(StackError):
    """A stack operation ran to a terminal state other than the expected one."""


class StackWaitTimeout(StackError):
    """The stack did not reach a terminal state within the allowed time."""

    def __init__(self, name: str, max_wait: float, last_status: Optional[str]):
        super().__init__(
            f"stack {name} still {last_status} after waiting {max_wait:g}s"
        )
        self.name = name
        self.max_wait = max_wait
        self.last_status = last_status


class StackWaitCancelled(StackError):
    """Waiting for the stack was cancelled by the caller."""


class RemoteErrorKind(Enum):
    """What a remote error means to the lifecycle controller."""

    NOT_FOUND = "not_found"
    NO_OP_UPDATE = "no_op_update"
    VALIDATION = "validation"
    OTHER = "other"


def error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def error_message(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Message", ""))


def is_validation_error(error: BaseException) -> bool:
    """Check whether an exception is a request-level validation rejection."""
    return isinstance(error, ClientError) and error_code(error) == "ValidationError"


def classify_error(error: BaseException) -> RemoteErrorKind:
    """
    Classify a remote error once, at the boundary.

    Only validation-class errors are inspected further; the message decides
    between a missing stack, an update with nothing to change, and any other
    rejection.
    """
    if not is_validation_error(error):
        return RemoteErrorKind.OTHER

    message = error_message(error)  # type: ignore[arg-type]
    if message.endswith(NOT_FOUND_SUFFIX):
        return RemoteErrorKind.NOT_FOUND
    if message == NO_UPDATES_MESSAGE:
        return RemoteErrorKind.NO_OP_UPDATE
    return RemoteErrorKind.VALIDATION
