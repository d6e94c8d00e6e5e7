import pydantic
from enum import Enum
from datetime import datetime, timezone
from typing import Annotated, Optional, List, Dict, Any
from pydantic import ConfigDict, EmailStr, Field, StrictInt, StringConstraints
from pydantic.alias_generators import to_camel

from app.core.task_ids import SLUGID_PATTERN

# provisionerId, workerType and schedulerId share one identifier grammar.
IDENTIFIER_PATTERN = r"^([a-zA-Z0-9_-]*)$"
# Scopes are printable ASCII.
SCOPE_PATTERN = r"^[\x20-\x7e]*$"

MAX_DEPENDENCIES = 10000
MAX_ROUTES = 64

Identifier = Annotated[str, StringConstraints(min_length=1, max_length=38, pattern=IDENTIFIER_PATTERN)]
SlugId = Annotated[str, StringConstraints(pattern=SLUGID_PATTERN)]
Route = Annotated[str, StringConstraints(min_length=1, max_length=249)]
Scope = Annotated[str, StringConstraints(max_length=4096, pattern=SCOPE_PATTERN)]


# --- Enums ---
class TaskPriority(str, Enum):
    HIGHEST = "highest"
    VERY_HIGH = "very-high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very-low"
    LOWEST = "lowest"

class TaskRequires(str, Enum):
    ALL_COMPLETED = "all-completed"
    ONE_COMPLETED = "one-completed"


# --- Timestamp helpers ---
def normalize_timestamp(value: datetime) -> datetime:
    """
    UTC, truncated to milliseconds. Naive datetimes are taken as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)

def format_timestamp(value: datetime) -> str:
    """Renders a timestamp as e.g. 2026-10-18T09:30:00.000Z"""
    value = normalize_timestamp(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"

def add_one_year(value: datetime) -> datetime:
    try:
        return value.replace(year=value.year + 1)
    except ValueError:
        # Feb 29th
        return value.replace(year=value.year + 1, day=28)


# --- Models ---
class TaskMetadata(pydantic.BaseModel):
    """
    Human readable information about a task.
    """
    name: str = Field(max_length=255)
    description: str = Field(max_length=32768)
    owner: EmailStr
    source: str = Field(max_length=4096, pattern=r"^(https?|ssh)://")

    model_config = ConfigDict(extra="forbid")


class TaskDefinition(pydantic.BaseModel):
    """
    The immutable definition of a task, as submitted to createTask and
    returned by task(taskId). Field names are camelCase on the wire.

    Defaults are filled in here, so two submissions that differ only in
    omitted optional fields validate to the same definition.
    """
    provisioner_id: Identifier
    worker_type: Identifier
    scheduler_id: Identifier = "-"
    # Defaults to the taskId; filled in by validate_task_definition.
    task_group_id: Optional[SlugId] = None
    dependencies: List[SlugId] = Field(default_factory=list, max_length=MAX_DEPENDENCIES)
    requires: TaskRequires = TaskRequires.ALL_COMPLETED
    routes: List[Route] = Field(default_factory=list, max_length=MAX_ROUTES)
    priority: TaskPriority = TaskPriority.LOWEST
    retries: StrictInt = Field(5, ge=0, le=49)
    created: datetime
    deadline: datetime
    expires: Optional[datetime] = None
    scopes: List[Scope] = Field(default_factory=list)
    payload: Dict[str, Any]
    metadata: TaskMetadata
    tags: Dict[str, str] = Field(default_factory=dict)
    extra: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    @pydantic.field_validator("created", "deadline", "expires")
    @classmethod
    def truncate_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None:
            return v
        return normalize_timestamp(v)

    @pydantic.field_validator("dependencies")
    @classmethod
    def validate_unique_dependencies(cls, v: List[str]) -> List[str]:
        if len(set(v)) != len(v):
            raise ValueError("dependencies must not contain duplicates")
        return v

    @pydantic.model_validator(mode='after')
    def validate_timeline(self) -> 'TaskDefinition':
        """
        Ensures created <= deadline <= expires, defaulting expires
        to one year after the deadline.
        """
        if self.expires is None:
            self.expires = add_one_year(self.deadline)

        if self.created > self.deadline:
            raise ValueError("'deadline' must not be before 'created'.")

        if self.deadline > self.expires:
            raise ValueError("'expires' must not be before 'deadline'.")

        return self

    @pydantic.field_serializer("created", "deadline", "expires")
    def serialize_timestamp(self, v: Optional[datetime]) -> Optional[str]:
        if v is None:
            return None
        return format_timestamp(v)

    def to_document(self) -> str:
        """The JSON document stored for, and returned by, task(taskId)."""
        return self.model_dump_json(by_alias=True)


class TaskCreated(pydantic.BaseModel):
    """
    Acknowledgement returned by createTask.
    """
    task_id: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
