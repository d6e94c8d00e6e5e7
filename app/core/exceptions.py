# app/core/exceptions.py

from typing import List, Sequence


class QueueError(Exception):
    """Base class for task queue errors"""


class TaskValidationError(QueueError):
    """Raised when a submitted task definition is malformed."""

    def __init__(self, message: str, errors: Sequence[dict] = ()):
        super().__init__(message)
        self.errors: List[dict] = list(errors)


class TaskConflictError(QueueError):
    """Raised when a taskId is already bound to a different definition."""

    def __init__(self, task_id: str):
        super().__init__(
            f"taskId {task_id} already used by another task definition"
        )
        self.task_id = task_id


class TaskNotFoundError(QueueError):
    """Raised when no task is registered under a taskId."""

    def __init__(self, task_id: str):
        super().__init__(f"task {task_id} not found")
        self.task_id = task_id


class StoreUnavailableError(QueueError):
    """Raised when the underlying store cannot be reached. Safe to retry."""


class InvalidCredentialsError(QueueError):
    """Raised for malformed, expired or badly signed credentials."""


class InsufficientScopesError(QueueError):
    """Raised when a caller's scopes do not satisfy an operation."""

    def __init__(self, required: List[List[str]], granted: Sequence[str]):
        super().__init__("client does not have the scopes required for this operation")
        self.required = required
        self.granted = list(granted)
