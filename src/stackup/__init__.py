"""
Stackup - CloudFormation stack lifecycle management.
"""

__version__ = "1.0.0"

from .config import StackupConfig, load_config
from .errors import (
    NoSuchStack,
    RemoteErrorKind,
    StackError,
    StackUpdateError,
    StackWaitCancelled,
    StackWaitTimeout,
    classify_error,
)
from .stack import Stack

__all__ = [
    "Stack",
    "StackupConfig",
    "load_config",
    "StackError",
    "NoSuchStack",
    "StackUpdateError",
    "StackWaitTimeout",
    "StackWaitCancelled",
    "RemoteErrorKind",
    "classify_error",
]
