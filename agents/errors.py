"""Exceptions raised by the sale workflow."""

from __future__ import annotations


class WorkflowError(Exception):
    """Base class for orchestration failures."""


class InvalidSignalError(WorkflowError):
    """A signal is unknown or its payload is unusable."""


class InvalidTransitionError(WorkflowError):
    """A signal arrived in a phase that does not accept it."""

    def __init__(self, signal_type: str, status: str) -> None:
        super().__init__(f"{signal_type!r} is not accepted while {status}")
        self.signal_type = signal_type
        self.status = status


class WorkflowNotFoundError(WorkflowError):
    def __init__(self, workflow_id: str) -> None:
        super().__init__(f"workflow {workflow_id} not found")
        self.workflow_id = workflow_id
