"""Budget exhaustion errors."""

from enum import Enum
from typing import Any, Optional

from loopbudget.core.snapshot import BudgetSnapshot


class BudgetReason(str, Enum):
    """Why a guarded operation was refused."""

    TIMEOUT = "TIMEOUT"
    STEP_LIMIT = "STEP_LIMIT"
    TOOL_LIMIT = "TOOL_LIMIT"
    TOKEN_LIMIT = "TOKEN_LIMIT"
    USAGE_UNAVAILABLE = "USAGE_UNAVAILABLE"

    def __str__(self) -> str:
        return self.value


class BudgetError(Exception):
    """Deterministic exception when a guarded operation would exceed the budget. Catch this in agent loops.

    Errors raised by the call function itself are never wrapped in this type.
    """

    def __init__(
        self,
        reason: BudgetReason,
        snapshot: BudgetSnapshot,
        execution_id: Optional[str] = None,
    ):
        self.reason = BudgetReason(reason)
        self.snapshot = snapshot
        self.execution_id = execution_id
        super().__init__(f"Budget exceeded: {self.reason.value}")

    def __repr__(self) -> str:
        return (
            f"BudgetError(reason={self.reason.value}, execution_id={self.execution_id!r}, "
            f"snapshot={self.snapshot!r})"
        )


def is_budget_error(error: Any) -> bool:
    """Return True if *error* is a BudgetError (and not a provider or network failure)."""
    return isinstance(error, BudgetError)
