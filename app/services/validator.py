"""
Definition validation and canonical form.

validate_task_definition is pure: it never touches the store or the clock,
so the same (taskId, body) always produces the same definition. Checks that
depend on the current time live in check_deadline_window.
"""

import hashlib
import json
from datetime import datetime, timedelta
from typing import Any, Mapping

import pydantic

from app.core.task_ids import is_slugid
from app.core.exceptions import TaskValidationError
from app.models.task import TaskDefinition

# Compared as sets: order and duplicates don't matter.
SET_FIELDS = ("routes", "scopes")


def _summarize_errors(error: pydantic.ValidationError) -> list[dict]:
    # ctx may hold exception objects, keep only what serializes
    return [
        {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
        for err in error.errors(include_url=False)
    ]


def validate_task_id(task_id: str) -> str:
    if not is_slugid(task_id):
        raise TaskValidationError(
            f"taskId {task_id!r} is not a valid slugid",
            errors=[{"loc": ["taskId"], "msg": "invalid slugid", "type": "value_error"}],
        )
    return task_id


def validate_task_definition(task_id: str, raw: Mapping[str, Any]) -> TaskDefinition:
    """
    Validates a submitted task definition and fills in its defaults.

    Raises:
        TaskValidationError for a bad taskId, unknown or missing fields,
        out-of-range values or a broken created/deadline/expires ordering.
    """
    validate_task_id(task_id)

    if not isinstance(raw, Mapping):
        raise TaskValidationError(
            "task definition must be a JSON object",
            errors=[{"loc": ["body"], "msg": "expected a JSON object", "type": "dict_type"}],
        )

    try:
        definition = TaskDefinition.model_validate(raw)
    except pydantic.ValidationError as e:
        raise TaskValidationError(
            f"invalid task definition ({e.error_count()} errors)",
            errors=_summarize_errors(e),
        ) from e

    if definition.task_group_id is None:
        definition = definition.model_copy(update={"task_group_id": task_id})

    return definition


def check_deadline_window(definition: TaskDefinition, now: datetime, max_days: int) -> None:
    """
    Rejects deadlines further than max_days in the future.
    """
    limit = now + timedelta(days=max_days)
    if definition.deadline > limit:
        raise TaskValidationError(
            f"'deadline' cannot be more than {max_days} days into the future",
            errors=[{"loc": ["deadline"], "msg": "deadline too far in the future", "type": "value_error"}],
        )


def canonical_form(definition: TaskDefinition) -> str:
    """
    Canonical JSON for equality checks: sorted map keys, set-like fields
    sorted and de-duplicated, dependencies left in order.
    """
    doc = definition.model_dump(mode="json", by_alias=True)
    for field in SET_FIELDS:
        doc[field] = sorted(set(doc[field]))
    return json.dumps(doc, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def definition_fingerprint(definition: TaskDefinition) -> str:
    return hashlib.sha256(canonical_form(definition).encode("utf-8")).hexdigest()
