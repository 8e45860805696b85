"""Point-in-time view of a budget, attached to every BudgetError."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class BudgetSnapshot:
    """Counters and limits at one instant."""

    steps_used: int
    max_steps: int
    tool_calls_used: int
    max_tool_calls: int
    tokens_used: int
    max_tokens: int
    elapsed_ms: float
    timeout_ms: float
    token_accounting_reliable: bool
    overshoot: Optional[int] = None  # only set for TOKEN_LIMIT

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain dict, e.g. for structured logging."""
        return asdict(self)

    def __repr__(self) -> str:
        parts = [
            f"BudgetSnapshot(steps={self.steps_used}/{self.max_steps}",
            f"tools={self.tool_calls_used}/{self.max_tool_calls}",
            f"tokens={self.tokens_used}/{self.max_tokens}",
            f"elapsed={self.elapsed_ms:.0f}/{self.timeout_ms:.0f}ms",
        ]
        if self.overshoot is not None:
            parts.append(f"overshoot={self.overshoot}")
        if not self.token_accounting_reliable:
            parts.append("accounting=unreliable")
        return ", ".join(parts) + ")"


def create_snapshot(limits, state, now_ms: float, overshoot: Optional[int] = None) -> BudgetSnapshot:
    """Build a snapshot from limits and state. Pure: reads, never mutates.

    Args:
        limits: BudgetLimits of the owning budget
        state: BudgetState of the owning budget
        now_ms: Current clock reading in milliseconds
        overshoot: Tokens over max_tokens (TOKEN_LIMIT only)

    Returns:
        BudgetSnapshot
    """
    return BudgetSnapshot(
        steps_used=state.steps_used,
        max_steps=limits.max_steps,
        tool_calls_used=state.tool_calls_used,
        max_tool_calls=limits.max_tool_calls,
        tokens_used=state.tokens_used,
        max_tokens=limits.max_tokens,
        elapsed_ms=now_ms - state.start_time,
        timeout_ms=limits.timeout_ms,
        token_accounting_reliable=state.token_accounting_reliable,
        overshoot=overshoot,
    )
