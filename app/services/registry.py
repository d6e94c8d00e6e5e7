from enum import Enum
from typing import Optional

from app.core.exceptions import TaskConflictError
from app.core.log import get_logger
from app.db.store import PutOutcome, StoredTask, TaskStore
from app.models.task import TaskDefinition
from app.services.validator import definition_fingerprint

logger = get_logger("registry")


class CreateOutcome(str, Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already-exists"


class TaskRegistry:
    """
    Binds each taskId to at most one task definition.

    create() is idempotent: repeating it with an equal definition
    succeeds without writing again, while a different definition
    under a taken taskId raises TaskConflictError.
    """

    def __init__(self, store: TaskStore):
        self._store = store

    async def create(self, task_id: str, definition: TaskDefinition) -> CreateOutcome:
        """
        Register an already validated definition.

        Raises:
            TaskConflictError if task_id holds a different definition.
            StoreUnavailableError if the store cannot be reached.
        """
        record = StoredTask(
            task_id=task_id,
            fingerprint=definition_fingerprint(definition),
            definition=definition.to_document(),
            expires=definition.expires,
        )

        outcome = await self._store.put_if_absent_or_equal(record)

        if outcome is PutOutcome.CONFLICT:
            logger.warning(f"Rejected createTask for {task_id}: taskId bound to another definition")
            raise TaskConflictError(task_id)

        if outcome is PutOutcome.EQUAL:
            logger.info(f"Task {task_id} already exists with an identical definition")
            return CreateOutcome.ALREADY_EXISTS

        logger.info(f"Created task {task_id}")
        return CreateOutcome.CREATED

    async def get(self, task_id: str) -> Optional[StoredTask]:
        return await self._store.get(task_id)
