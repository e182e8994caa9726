"""
Read access to a single CloudFormation stack.
"""

import logging
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from .errors import RemoteErrorKind, classify_error

logger = logging.getLogger(__name__)

DELETED_STATUS = "DELETE_COMPLETE"


class RemoteStack:
    """
    Cached view of a stack's description.

    The stack is looked up by name until its id (ARN) is known; after that
    the id is used, so a deleted stack can still be watched to completion.
    """

    def __init__(self, name: str, client: Any):
        self.name = name
        self.client = client
        self.stack_id: Optional[str] = None
        self._description: Optional[Dict[str, Any]] = None
        self._loaded = False

    @property
    def identifier(self) -> str:
        """Value to pass as StackName in API calls."""
        return self.stack_id or self.name

    def _describe(self) -> Dict[str, Any]:
        logger.debug(f"Describing stack {self.identifier}")
        response = self.client.describe_stacks(StackName=self.identifier)
        stacks = response.get("Stacks") or []
        if not stacks:
            raise ClientError(
                {
                    "Error": {
                        "Code": "ValidationError",
                        "Message": f"Stack with id {self.name} does not exist",
                    }
                },
                "DescribeStacks",
            )

        description = stacks[0]
        self._description = description
        self._loaded = True
        if description.get("StackId"):
            self.stack_id = description["StackId"]
        return description

    def load(self) -> Dict[str, Any]:
        """
        Describe the live stack.

        A stack id that now describes a deleted stack is dropped and the
        name looked up again, since a new stack may have taken the name.

        Raises:
            ClientError: if the stack does not exist or the call fails
        """
        by_id = self.stack_id is not None
        description = self._describe()
        if by_id and description.get("StackStatus") == DELETED_STATUS:
            logger.debug(f"Stack {self.stack_id} was deleted, looking up {self.name}")
            self.forget()
            description = self._describe()
        return description

    def reload(self) -> Optional[Dict[str, Any]]:
        """Describe the stack again, leaving no description if it has vanished."""
        try:
            return self._describe()
        except ClientError as e:
            if classify_error(e) is not RemoteErrorKind.NOT_FOUND:
                raise
            logger.debug(f"Stack {self.identifier} no longer exists")
            self._description = None
            self._loaded = True
            return None

    def remember(self, stack_id: Optional[str]) -> None:
        """Track a stack id returned by a mutation call."""
        if stack_id:
            self.stack_id = stack_id

    def forget(self) -> None:
        """Drop the cached id and description, e.g. after the stack is deleted."""
        self.stack_id = None
        self._description = None
        self._loaded = False

    @property
    def stack_status(self) -> Optional[str]:
        if not self._loaded:
            self.load()
        if self._description is None:
            return None
        return self._description.get("StackStatus")

    @property
    def outputs(self) -> List[Dict[str, str]]:
        if not self._loaded:
            self.load()
        if self._description is None:
            return []
        return list(self._description.get("Outputs", []))
