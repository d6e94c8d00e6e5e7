"""
Scope-based authorization.

A scope expression is a list of alternatives; each alternative is a list
of scopes that must all be held. [["a", "b"], ["c"]] reads "a and b, or c".
How a single granted scope satisfies a required one is up to the
ScopeChecker, so the rule language can be swapped without touching callers.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional, Sequence

from app.core.exceptions import InsufficientScopesError
from app.core.log import get_logger
from app.models.credentials import Credentials
from app.models.task import TaskDefinition

logger = get_logger("scopes")

ScopeExpression = List[List[str]]


class AccessDecision(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"


class ScopeChecker(ABC):
    """Decides whether a set of granted scopes satisfies an expression."""

    @abstractmethod
    def check(self, granted: Sequence[str], required: ScopeExpression) -> bool:
        ...


class PrefixScopeChecker(ScopeChecker):
    """
    A granted scope satisfies a required one when they are equal, or when
    the granted scope ends in '*' and the required scope starts with
    everything before it. '*' on its own satisfies anything.
    """

    @staticmethod
    def satisfies(granted: Sequence[str], scope: str) -> bool:
        for candidate in granted:
            if candidate == scope:
                return True
            if candidate.endswith("*") and scope.startswith(candidate[:-1]):
                return True
        return False

    def check(self, granted: Sequence[str], required: ScopeExpression) -> bool:
        return any(
            all(self.satisfies(granted, scope) for scope in alternative)
            for alternative in required
        )


class AccessEvaluator:
    """
    Authorizes operations that need it. Task retrieval never comes here.
    """

    def __init__(self, checker: Optional[ScopeChecker] = None):
        self.checker = checker or PrefixScopeChecker()

    def authorize(self, credentials: Credentials, required: ScopeExpression) -> AccessDecision:
        if self.checker.check(credentials.scopes, required):
            return AccessDecision.GRANTED
        return AccessDecision.DENIED

    def ensure_authorized(self, credentials: Credentials, required: ScopeExpression) -> None:
        """
        Raises:
            InsufficientScopesError if the caller's scopes fall short.
        """
        if self.authorize(credentials, required) is AccessDecision.DENIED:
            logger.info(f"Denied client '{credentials.client_id}': requires {required}")
            raise InsufficientScopesError(required=required, granted=credentials.scopes)


def create_task_scopes(definition: TaskDefinition) -> ScopeExpression:
    """
    Scopes needed to create a task: permission to use its priority and
    worker type, its scheduler and each route, plus every scope the task
    itself will run with.
    """
    required = [
        f"queue:create-task:{definition.priority.value}:"
        f"{definition.provisioner_id}/{definition.worker_type}",
        f"queue:scheduler-id:{definition.scheduler_id}",
    ]
    required.extend(f"queue:route:{route}" for route in definition.routes)
    required.extend(definition.scopes)
    return [required]
