from typing import Optional

from app.core.exceptions import TaskNotFoundError
from app.models.credentials import Credentials
from app.services.registry import TaskRegistry
from app.services.validator import validate_task_id


class RetrievalGate:
    """
    Serves registered task definitions.

    Task definitions are public once created: only claiming and running
    a task is access controlled. Credentials are accepted and ignored, so
    an anonymous caller gets exactly the bytes a fully scoped one does.
    """

    def __init__(self, registry: TaskRegistry):
        self._registry = registry

    async def retrieve(self, task_id: str, credentials: Optional[Credentials] = None) -> str:
        """
        Returns the stored JSON document for task_id.

        Raises:
            TaskValidationError if task_id is not a slugid.
            TaskNotFoundError if nothing is registered under task_id.
        """
        validate_task_id(task_id)

        record = await self._registry.get(task_id)
        if record is None:
            raise TaskNotFoundError(task_id)

        return record.definition
