from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from datetime import datetime, timezone

from app.api.deps import get_access_evaluator, get_registry, get_retrieval_gate
from app.core.exceptions import (
    InsufficientScopesError,
    StoreUnavailableError,
    TaskConflictError,
    TaskNotFoundError,
    TaskValidationError,
)
from app.core.log import get_logger
from app.core.scopes import AccessEvaluator, create_task_scopes
from app.core.security import get_credentials
from app.models.credentials import Credentials
from app.models.task import TaskCreated
from app.services.registry import TaskRegistry
from app.services.retrieval import RetrievalGate
from app.services.validator import check_deadline_window, validate_task_definition
from config.settings import settings

router = APIRouter()
logger = get_logger("api.tasks")


def _validation_failed(e: TaskValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": str(e), "errors": e.errors},
    )

async def _read_json_body(request: Request):
    # Malformed JSON answers 400, same as any other invalid definition
    try:
        return await request.json()
    except ValueError as e:
        raise TaskValidationError(
            "request body is not valid JSON",
            errors=[{"loc": ["body"], "msg": str(e), "type": "json_invalid"}],
        ) from e

def _store_unavailable(e: StoreUnavailableError) -> HTTPException:
    logger.warning(f"Answering 503, task store unavailable: {e}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Task store unavailable, retry the request.",
    )


@router.put("/{task_id}", response_model=TaskCreated)
async def create_task(
    task_id: str,
    request: Request,
    credentials: Credentials = Depends(get_credentials),
    registry: TaskRegistry = Depends(get_registry),
    access: AccessEvaluator = Depends(get_access_evaluator),
):
    """
    Create a task under a caller-chosen taskId.

    Repeating the call with the same definition is a no-op that succeeds
    again, so clients can safely retry. A different definition under a
    taken taskId is a 409.
    """
    # 1. Parse, validate and fill in defaults
    try:
        task_def = await _read_json_body(request)
        definition = validate_task_definition(task_id, task_def)
        check_deadline_window(
            definition,
            now=datetime.now(timezone.utc),
            max_days=settings.MAX_TASK_DEADLINE_DAYS,
        )
    except TaskValidationError as e:
        logger.info(f"Rejected createTask for {task_id}: {e}")
        raise _validation_failed(e)

    # 2. Check the caller may create this task
    try:
        access.ensure_authorized(credentials, create_task_scopes(definition))
    except InsufficientScopesError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "message": str(e),
                "clientId": credentials.client_id,
                "requiredScopes": e.required,
            },
        )

    # 3. Register it, exactly once
    try:
        await registry.create(task_id, definition)
    except TaskConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(e), "taskId": e.task_id},
        )
    except StoreUnavailableError as e:
        raise _store_unavailable(e)

    return TaskCreated(task_id=task_id)


@router.get("/{task_id}")
async def get_task(
    task_id: str,
    gate: RetrievalGate = Depends(get_retrieval_gate),
):
    """
    Returns the task definition exactly as it was stored.
    No credentials are needed.
    """
    try:
        document = await gate.retrieve(task_id)
    except TaskValidationError as e:
        raise _validation_failed(e)
    except TaskNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": str(e), "taskId": e.task_id},
        )
    except StoreUnavailableError as e:
        raise _store_unavailable(e)

    return Response(content=document, media_type="application/json")
