"""loopbudget - step, tool, time and token limits for LLM agent loops."""

__version__ = "0.1.0"

from loopbudget.core.limits import BudgetLimits, TokenAccountingMode
from loopbudget.core.snapshot import BudgetSnapshot
from loopbudget.core.errors import BudgetError, BudgetReason, is_budget_error
from loopbudget.core.budget import (
    Budget,
    BudgetState,
    Terminated,
    create_budget,
    guarded_response,
    record_tool_call,
)
from loopbudget.core.provider import BaseCallFunction, CallResult
from loopbudget.core.providers import OpenAIChatCall, AnthropicMessagesCall
from loopbudget.core.factory import create_budget_from_settings
from loopbudget.config.settings import Settings

__all__ = [
    "BudgetLimits",
    "TokenAccountingMode",
    "BudgetSnapshot",
    "BudgetError",
    "BudgetReason",
    "is_budget_error",
    "Budget",
    "BudgetState",
    "Terminated",
    "create_budget",
    "guarded_response",
    "record_tool_call",
    "BaseCallFunction",
    "CallResult",
    "OpenAIChatCall",
    "AnthropicMessagesCall",
    "create_budget_from_settings",
    "Settings",
]
