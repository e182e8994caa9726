"""
CloudFormation stack lifecycle management.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, NoReturn, Optional

import boto3
from botocore.exceptions import ClientError

from .config import StackupConfig
from .errors import (
    NoSuchStack,
    RemoteErrorKind,
    StackUpdateError,
    StackWaitCancelled,
    StackWaitTimeout,
    classify_error,
    error_code,
    error_message,
    is_validation_error,
)
from .events import StackEventMonitor, format_event
from .parameters import Parameters, to_parameter_records
from .remote import RemoteStack
from .status import is_terminal
from .transitions import Action, Operation, decide

logger = logging.getLogger(__name__)

# Rejections of a create call that mean "not accepted" rather than "failed"
PREFLIGHT_ERROR_CODES = {"ValidationError", "AlreadyExistsException"}


class Stack:
    """
    An abstraction of a CloudFormation stack.

    Each mutating operation blocks until the stack reaches a terminal state,
    echoing stack events as they appear. One operation at a time per instance.
    """

    def __init__(
        self,
        name: str,
        client: Optional[Any] = None,
        *,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        config: Optional[StackupConfig] = None,
        echo: Optional[Callable[[str], Any]] = None,
        sleep: Callable[[float], Any] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        cancel: Optional[threading.Event] = None,
    ):
        """
        Initialize the stack.

        Args:
            name: Stack name
            client: CloudFormation client (created from region/profile if omitted)
            region: AWS region
            profile: AWS profile to use
            config: Polling and mutation settings
            echo: Receives one line per event or advisory (defaults to print)
            sleep: Pause between polls
            clock: Monotonic clock used for the maximum wait
            cancel: Event that aborts a wait in progress when set
        """
        self.name = name
        self.config = config or StackupConfig()
        self.region = region or self.config.region
        self.profile = profile or self.config.profile
        self.cloudformation = client if client is not None else self._create_client()
        self.echo = echo or print
        self.sleep = sleep
        self.clock = clock
        self.cancel = cancel

        self.remote = RemoteStack(name, self.cloudformation)
        self.event_monitor = StackEventMonitor(self.remote)
        self.event_monitor.zero()  # drain previous events

    def __repr__(self) -> str:
        return f"Stack({self.name!r})"

    def _create_client(self) -> Any:
        session_args = {}
        if self.region:
            session_args["region_name"] = self.region
        if self.profile:
            session_args["profile_name"] = self.profile

        session = boto3.Session(**session_args)
        return session.client("cloudformation")

    def status(self) -> str:
        """
        Get current stack status.

        Raises:
            NoSuchStack: if the stack does not exist
        """
        try:
            return str(self.remote.load()["StackStatus"])
        except ClientError as e:
            self.handle_validation_error(e)

    def exists(self) -> bool:
        """Check whether the stack exists."""
        try:
            self.status()
        except NoSuchStack:
            return False
        return True

    def _current_status(self) -> Optional[str]:
        try:
            return self.status()
        except NoSuchStack:
            return None

    def create(self, template: str, parameters: Parameters) -> bool:
        """
        Create the stack and wait for it to finish.

        Returns:
            True once created, False if CloudFormation rejected the request

        Raises:
            StackUpdateError: if creation ran but did not complete
        """
        logger.info(f"Creating stack {self.name}")
        try:
            response = self.cloudformation.create_stack(
                StackName=self.name,
                TemplateBody=template,
                DisableRollback=self.config.disable_rollback,
                Capabilities=list(self.config.capabilities),
                Parameters=to_parameter_records(parameters),
            )
        except ClientError as e:
            if error_code(e) not in PREFLIGHT_ERROR_CODES:
                raise
            logger.warning(f"Create of {self.name} rejected: {error_message(e)}")
            self.echo(error_message(e))
            return False

        self.remote.forget()
        self.remote.remember(response.get("StackId"))
        status = self.wait_for_events()

        if status != "CREATE_COMPLETE":
            raise StackUpdateError("stack creation failed")
        return True

    def update(self, template: str, parameters: Parameters) -> bool:
        """
        Update the stack in place and wait for it to finish.

        Returns:
            True once updated; False if the stack does not exist, needs
            manual attention, or there was nothing to update

        Raises:
            StackUpdateError: if the update ran but did not complete
        """
        current = self._current_status()
        transition = decide(Operation.UPDATE, current)
        logger.debug(f"Update of {self.name} in {current}: {transition.action.value}")

        if transition.action is Action.SKIP:
            return False

        if transition.action is Action.REFUSE:
            self.echo(transition.reason)
            return False

        if transition.action is Action.RECREATE:
            self.echo(transition.reason)
            try:
                self.delete()
            except StackUpdateError as e:
                self.echo(f"Could not delete stack {self.name}: {e}")
                return False
            return self.create(template, parameters)

        logger.info(f"Updating stack {self.name}")
        try:
            self.cloudformation.update_stack(
                StackName=self.name,
                TemplateBody=template,
                Capabilities=list(self.config.capabilities),
                Parameters=to_parameter_records(parameters),
            )
        except ClientError as e:
            if classify_error(e) is RemoteErrorKind.NO_OP_UPDATE:
                self.echo(error_message(e))
                return False
            raise

        status = self.wait_for_events()
        if status != "UPDATE_COMPLETE":
            raise StackUpdateError("stack update failed")
        return True

    def delete(self) -> bool:
        """
        Delete the stack and wait for it to go.

        Raises:
            NoSuchStack: if the stack does not exist
            StackUpdateError: if the deletion did not complete
        """
        logger.info(f"Deleting stack {self.name}")
        try:
            # Pin the stack id so the deleted stack can still be described
            self.remote.load()
            self.cloudformation.delete_stack(StackName=self.remote.identifier)
            status = self.wait_for_events()
        except ClientError as e:
            self.handle_validation_error(e)

        if status != "DELETE_COMPLETE":
            raise StackUpdateError("stack delete failed")
        self.remote.forget()
        return True

    def deploy(self, template: str, parameters: Optional[Parameters] = None) -> bool:
        """Create the stack, or update it if it already exists."""
        if parameters is None:
            parameters = []
        try:
            transition = decide(Operation.DEPLOY, self._current_status())
            if transition.action is Action.UPDATE:
                return self.update(template, parameters)
            return self.create(template, parameters)
        except ClientError as e:
            self.handle_validation_error(e)

    def outputs(self) -> Dict[str, str]:
        """Get stack outputs as a dictionary."""
        try:
            self.remote.load()
            return {
                output["OutputKey"]: output["OutputValue"]
                for output in self.remote.outputs
            }
        except ClientError as e:
            self.handle_validation_error(e)

    def valid(self, template: str) -> bool:
        """Check a template with CloudFormation."""
        try:
            self.cloudformation.validate_template(TemplateBody=template)
        except ClientError as e:
            if not is_validation_error(e):
                raise
            logger.info(f"Template rejected: {error_message(e)}")
            return False
        return True

    def wait_for_events(self) -> Optional[str]:
        """
        Wait (displaying stack events) until the stack reaches a stable state.

        Returns:
            The terminal status, or None if the stack vanished

        Raises:
            StackWaitTimeout: if config.max_wait elapses first
            StackWaitCancelled: if the cancel event is set while waiting
        """
        interval = self.config.poll_interval
        max_wait = self.config.max_wait
        started = self.clock()

        while True:
            self.display_new_events()
            self.remote.reload()
            status = self.remote.stack_status
            logger.debug(f"Stack {self.name} is {status}")
            if status is None or is_terminal(status):
                return status

            if max_wait is not None and self.clock() - started >= max_wait:
                raise StackWaitTimeout(self.name, max_wait, status)

            if self.cancel is not None:
                if self.cancel.wait(interval):
                    raise StackWaitCancelled(f"stopped waiting for stack {self.name}")
            else:
                self.sleep(interval)

    def display_new_events(self) -> int:
        """Echo events not shown before. Returns how many were shown."""
        events = self.event_monitor.new_events()
        for event in events:
            self.echo(format_event(event))
        return len(events)

    def handle_validation_error(self, e: ClientError) -> NoReturn:
        """Re-raise a missing-stack error as NoSuchStack, anything else as is."""
        if classify_error(e) is RemoteErrorKind.NOT_FOUND:
            raise NoSuchStack(self.name) from e
        raise e
