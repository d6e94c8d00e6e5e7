"""
Key-value storage for task definitions.

Both stores offer one conditional write, put_if_absent_or_equal, and a
plain get. Create-once semantics per taskId rest entirely on that write:
the SQL store relies on the primary key, the memory store on
dict.setdefault. Neither takes a store-wide lock.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.future import select

from app.core.exceptions import StoreUnavailableError
from app.core.log import get_logger
from app.db.models import TaskRecord

logger = get_logger("store")

# Errors that mean "the database is unreachable", not "the data is wrong"
TRANSIENT_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError, OSError)

# Inserts that hit an IntegrityError but then find no row
INSERT_ATTEMPTS = 3


@dataclass(frozen=True)
class StoredTask:
    task_id: str
    fingerprint: str
    definition: str
    expires: datetime


class PutOutcome(str, Enum):
    INSERTED = "inserted"
    EQUAL = "equal"
    CONFLICT = "conflict"


class TaskStore(ABC):
    """
    Conditional-write key-value store keyed by taskId.
    """

    @abstractmethod
    async def put_if_absent_or_equal(self, record: StoredTask) -> PutOutcome:
        """
        Store the record unless its taskId is taken.

        Returns:
            INSERTED if the record was written, EQUAL if an identical
            record (same fingerprint) already holds the taskId, CONFLICT if
            a different one does. Nothing is written unless INSERTED.

        Raises:
            StoreUnavailableError if the store cannot be reached.
        """
        ...

    @abstractmethod
    async def get(self, task_id: str) -> Optional[StoredTask]:
        """
        Returns the record for task_id, or None if there is none.

        Raises:
            StoreUnavailableError if the store cannot be reached.
        """
        ...


def _compare(existing: StoredTask, record: StoredTask) -> PutOutcome:
    if existing.fingerprint == record.fingerprint:
        return PutOutcome.EQUAL
    return PutOutcome.CONFLICT


class MemoryTaskStore(TaskStore):
    """
    In-process store for development and tests. Lost on restart.
    """

    def __init__(self):
        self._records: Dict[str, StoredTask] = {}

    async def put_if_absent_or_equal(self, record: StoredTask) -> PutOutcome:
        # setdefault is atomic, so racing writers agree on one winner
        existing = self._records.setdefault(record.task_id, record)
        if existing is record:
            return PutOutcome.INSERTED
        return _compare(existing, record)

    async def get(self, task_id: str) -> Optional[StoredTask]:
        return self._records.get(task_id)

    def __len__(self) -> int:
        return len(self._records)


class SqlTaskStore(TaskStore):
    """
    Store backed by the `tasks` table. Each call runs in its own session,
    so an abandoned request either committed its row or left nothing.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @staticmethod
    def _to_stored(row: TaskRecord) -> StoredTask:
        return StoredTask(
            task_id=row.task_id,
            fingerprint=row.fingerprint,
            definition=row.definition,
            expires=row.expires,
        )

    @staticmethod
    async def _fetch(session: AsyncSession, task_id: str) -> Optional[TaskRecord]:
        result = await session.execute(select(TaskRecord).where(TaskRecord.task_id == task_id))
        return result.scalar_one_or_none()

    async def put_if_absent_or_equal(self, record: StoredTask) -> PutOutcome:
        try:
            for _ in range(INSERT_ATTEMPTS):
                async with self._session_factory() as session:
                    session.add(TaskRecord(
                        task_id=record.task_id,
                        fingerprint=record.fingerprint,
                        definition=record.definition,
                        expires=record.expires,
                    ))
                    try:
                        await session.commit()
                        return PutOutcome.INSERTED
                    except IntegrityError:
                        await session.rollback()

                    existing = await self._fetch(session, record.task_id)
                    if existing is None:
                        # Swept between our insert and this read; try again.
                        logger.debug(f"Row for {record.task_id} vanished, retrying insert")
                        continue
                    return _compare(self._to_stored(existing), record)
        except TRANSIENT_ERRORS as e:
            logger.error(f"Task store unavailable during create of {record.task_id}: {e}")
            raise StoreUnavailableError(str(e)) from e

        logger.error(
            f"Insert of {record.task_id} kept failing without an existing row, "
            f"giving up after {INSERT_ATTEMPTS} attempts"
        )
        raise StoreUnavailableError(f"could not store task {record.task_id}")

    async def get(self, task_id: str) -> Optional[StoredTask]:
        try:
            async with self._session_factory() as session:
                row = await self._fetch(session, task_id)
        except TRANSIENT_ERRORS as e:
            logger.error(f"Task store unavailable during read of {task_id}: {e}")
            raise StoreUnavailableError(str(e)) from e
        return None if row is None else self._to_stored(row)
