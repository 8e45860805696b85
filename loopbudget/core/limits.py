"""Immutable limits for a single agent loop budget."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

DEFAULT_OUTPUT_TOKENS_PARAM = "max_output_tokens"


class TokenAccountingMode(str, Enum):
    """What to do when a provider response carries no usable usage data."""

    FAIL_OPEN = "fail-open"
    FAIL_CLOSED = "fail-closed"


@dataclass(frozen=True)
class BudgetLimits:
    """Limits for one agent loop. Set once at construction and never changed.

    Args:
        max_steps: Max call attempts (failed calls count).
        max_tool_calls: Max recorded tool invocations.
        timeout_ms: Wall-clock budget in milliseconds, measured from budget creation.
        max_output_tokens: Per-call cap written into the call parameters.
        max_tokens: Cumulative token budget across all calls.
        execution_id: Optional opaque label echoed into every BudgetError.
        token_accounting_mode: "fail-open" (default) or "fail-closed".
        output_tokens_param: Parameter name that carries the per-call output cap.
    """

    max_steps: int
    max_tool_calls: int
    timeout_ms: float
    max_output_tokens: int
    max_tokens: int
    execution_id: Optional[str] = None
    token_accounting_mode: Union[TokenAccountingMode, str] = TokenAccountingMode.FAIL_OPEN
    output_tokens_param: str = DEFAULT_OUTPUT_TOKENS_PARAM

    def __post_init__(self) -> None:
        for name in ("max_steps", "max_tool_calls", "timeout_ms", "max_output_tokens", "max_tokens"):
            value = getattr(self, name)
            if (
                isinstance(value, bool)
                or not isinstance(value, (int, float))
                or value != value  # NaN
                or value < 0
            ):
                raise ValueError(f"{name} must be a non-negative number, got {value!r}")
        try:
            mode = TokenAccountingMode(self.token_accounting_mode)
        except ValueError:
            raise ValueError(
                f"Unknown token_accounting_mode: {self.token_accounting_mode!r}. "
                "Supported: fail-open, fail-closed"
            ) from None
        object.__setattr__(self, "token_accounting_mode", mode)
        if not self.output_tokens_param:
            raise ValueError("output_tokens_param must be a non-empty string")

    @property
    def fail_closed(self) -> bool:
        return self.token_accounting_mode is TokenAccountingMode.FAIL_CLOSED
