from functools import lru_cache

from fastapi import Depends

from config.settings import settings
from app.core.scopes import AccessEvaluator
from app.db.store import MemoryTaskStore, SqlTaskStore, TaskStore
from app.services.registry import TaskRegistry
from app.services.retrieval import RetrievalGate


@lru_cache()
def get_task_store() -> TaskStore:
    """
    The process-wide task store, chosen by TASK_STORE_BACKEND.
    """
    if settings.TASK_STORE_BACKEND == "memory":
        return MemoryTaskStore()

    from app.db.session import AsyncSessionLocal
    return SqlTaskStore(AsyncSessionLocal)


def get_registry(store: TaskStore = Depends(get_task_store)) -> TaskRegistry:
    return TaskRegistry(store)


def get_retrieval_gate(registry: TaskRegistry = Depends(get_registry)) -> RetrievalGate:
    return RetrievalGate(registry)


@lru_cache()
def get_access_evaluator() -> AccessEvaluator:
    return AccessEvaluator()
