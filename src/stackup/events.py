"""
Stack event monitoring.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterator, List, Set

from botocore.exceptions import ClientError

from .errors import RemoteErrorKind, classify_error
from .remote import RemoteStack

logger = logging.getLogger(__name__)


class StackEventMonitor:
    """Hand out each stack event once, oldest first."""

    def __init__(self, remote: RemoteStack):
        self.remote = remote
        self._seen: Set[str] = set()

    def _events_newest_first(self) -> Iterator[Dict[str, Any]]:
        paginator = self.remote.client.get_paginator("describe_stack_events")
        for page in paginator.paginate(StackName=self.remote.identifier):
            yield from page.get("StackEvents", [])

    def new_events(self) -> List[Dict[str, Any]]:
        """Return events not returned before, in chronological order."""
        fresh: List[Dict[str, Any]] = []
        try:
            for event in self._events_newest_first():
                if event["EventId"] in self._seen:
                    break
                fresh.append(event)
        except ClientError as e:
            if classify_error(e) is not RemoteErrorKind.NOT_FOUND:
                raise
            logger.debug(f"No events for {self.remote.identifier}: stack not found")
            return []

        self._seen.update(event["EventId"] for event in fresh)
        fresh.reverse()
        return fresh

    def zero(self) -> int:
        """Mark all existing events as seen. Returns how many were skipped."""
        skipped = len(self.new_events())
        logger.debug(f"Skipped {skipped} earlier events for {self.remote.name}")
        return skipped


def format_event(event: Dict[str, Any]) -> str:
    """Render an event as ``[HH:MM:SS] <logical-id> - <status> - <reason>``."""
    timestamp = event.get("Timestamp")
    if isinstance(timestamp, datetime):
        ts = timestamp.astimezone().strftime("%H:%M:%S")
    else:
        ts = "--:--:--"

    fields = [
        event.get("LogicalResourceId"),
        event.get("ResourceStatus"),
        event.get("ResourceStatusReason"),
    ]
    return f"[{ts}] " + " - ".join(str(f) for f in fields if f)
