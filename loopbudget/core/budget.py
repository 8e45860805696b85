"""Budget state machine and guarded operations for agent loops.

A Budget bounds one agent loop: call attempts (steps), tool calls, wall-clock
time, per-call output tokens, and cumulative tokens. Use in agent loops:

    budget = create_budget(BudgetLimits(...))
    response = await guarded_response(budget, params, call_fn)
    record_tool_call(budget)

and catch BudgetError.

Usage precondition: a Budget belongs to one logical agent loop and must be
driven sequentially (await one guarded operation before issuing the next).
State is not locked; concurrent guarded operations on the same Budget give
undefined counter ordering and undefined first observer of a termination.
"""

import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, TypeVar, Union

from loopbudget.core.errors import BudgetError, BudgetReason
from loopbudget.core.limits import BudgetLimits
from loopbudget.core.snapshot import BudgetSnapshot, create_snapshot
from loopbudget.core.usage import extract_usage

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Takes the clamped call parameters; may return an awaitable.
CallFunction = Callable[[Dict[str, Any]], Union[Awaitable[T], T]]


def _wall_clock_ms() -> float:
    return time.time() * 1000.0


@dataclass(frozen=True)
class Terminated:
    """Sticky termination: reason plus the snapshot captured when it was recorded."""

    reason: BudgetReason
    snapshot: BudgetSnapshot


@dataclass
class BudgetState:
    """Mutable counters of one Budget. Counters only grow; termination is set at most once."""

    start_time: float
    steps_used: int = 0
    tool_calls_used: int = 0
    tokens_used: int = 0
    token_accounting_reliable: bool = True
    termination: Optional[Terminated] = None

    def terminate(self, reason: BudgetReason, snapshot: BudgetSnapshot) -> Terminated:
        """Record termination. Raises RuntimeError if one is already recorded."""
        if self.termination is not None:
            raise RuntimeError(
                f"Budget already terminated with {self.termination.reason.value}"
            )
        self.termination = Terminated(reason=reason, snapshot=snapshot)
        return self.termination


class Budget:
    """Per-loop budget. The guard operations below are the only mutators of its state."""

    def __init__(
        self,
        limits: BudgetLimits,
        now: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            limits: Immutable limits for this loop.
            now: Clock returning a non-decreasing timestamp in milliseconds.
                Defaults to the wall clock.
        """
        self._limits = limits
        self._now = now or _wall_clock_ms
        self._state = BudgetState(start_time=self._now())

    @property
    def limits(self) -> BudgetLimits:
        return self._limits

    @property
    def termination(self) -> Optional[Terminated]:
        """Stored termination, or None while the budget is live."""
        return self._state.termination

    @property
    def token_accounting_reliable(self) -> bool:
        return self._state.token_accounting_reliable

    def snapshot(self, overshoot: Optional[int] = None) -> BudgetSnapshot:
        """Current counters and limits."""
        return create_snapshot(self._limits, self._state, self._now(), overshoot=overshoot)

    def _fail(self, reason: BudgetReason, snapshot: Optional[BudgetSnapshot] = None) -> BudgetError:
        snapshot = snapshot if snapshot is not None else self.snapshot()
        logger.warning(
            f"Budget exceeded: {reason.value} (execution_id={self._limits.execution_id}, {snapshot!r})"
        )
        return BudgetError(reason, snapshot, self._limits.execution_id)

    def _check(self, used: int, limit: int, quota_reason: BudgetReason) -> None:
        """Precedence: TIMEOUT > quota (STEP_LIMIT / TOOL_LIMIT) > stored termination."""
        elapsed = self._now() - self._state.start_time
        if elapsed >= self._limits.timeout_ms:
            raise self._fail(BudgetReason.TIMEOUT)

        if used + 1 > limit:
            raise self._fail(quota_reason)

        termination = self._state.termination
        if termination is not None:
            raise self._fail(termination.reason, termination.snapshot)

    def record_tool_call(self) -> None:
        """Declare that a tool was executed. Raises BudgetError if the budget refuses it."""
        self._check(
            self._state.tool_calls_used, self._limits.max_tool_calls, BudgetReason.TOOL_LIMIT
        )
        self._state.tool_calls_used += 1
        logger.debug(
            f"Tool call {self._state.tool_calls_used}/{self._limits.max_tool_calls} "
            f"(execution_id={self._limits.execution_id})"
        )

    def _clamp_params(self, params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Copy *params* with the output-size field set to min(requested, max_output_tokens)."""
        call_params = dict(params or {})
        key = self._limits.output_tokens_param
        requested = call_params.get(key)
        cap = self._limits.max_output_tokens
        call_params[key] = cap if requested is None else min(requested, cap)
        return call_params

    def _account(self, result: Any) -> None:
        """Add the call's usage to tokens_used and run the cumulative-token boundary check."""
        tokens = extract_usage(result)

        if tokens is None:
            if self._limits.fail_closed:
                raise self._fail(BudgetReason.USAGE_UNAVAILABLE)
            if self._state.token_accounting_reliable:
                logger.warning(
                    "Response carried no usable usage data; max_tokens is no longer enforced "
                    f"(execution_id={self._limits.execution_id})"
                )
            self._state.token_accounting_reliable = False
            return

        self._state.tokens_used += tokens
        logger.debug(
            f"Added {tokens} tokens, total {self._state.tokens_used}/{self._limits.max_tokens}"
        )

        if not self._state.token_accounting_reliable:
            return

        if self._state.tokens_used > self._limits.max_tokens:
            overshoot = self._state.tokens_used - self._limits.max_tokens
            termination = self._state.terminate(
                BudgetReason.TOKEN_LIMIT, self.snapshot(overshoot=overshoot)
            )
            logger.warning(
                f"Token budget crossed by {overshoot}; next guarded operation will fail "
                f"(execution_id={self._limits.execution_id}, {termination.snapshot!r})"
            )

    async def guarded_response(
        self,
        params: Optional[Mapping[str, Any]],
        fn: CallFunction,
    ) -> Any:
        """Run one provider call within budget.

        Checks limits, consumes a step, clamps the output-size parameter, invokes
        *fn*, then accounts for its usage. A call that pushes tokens over
        max_tokens still returns; the next guarded operation fails.

        Args:
            params: Call parameters (may carry the output-size field).
            fn: Call function; receives a copy of params with the clamped field.

        Returns:
            Whatever *fn* returned.

        Raises:
            BudgetError: Before *fn* runs (TIMEOUT, STEP_LIMIT, stored TOKEN_LIMIT),
                or after it in fail-closed mode (USAGE_UNAVAILABLE).
            Exception: Anything *fn* raises, unchanged.
        """
        self._check(self._state.steps_used, self._limits.max_steps, BudgetReason.STEP_LIMIT)
        self._state.steps_used += 1
        call_params = self._clamp_params(params)
        logger.debug(
            f"Step {self._state.steps_used}/{self._limits.max_steps} "
            f"(execution_id={self._limits.execution_id})"
        )

        result = fn(call_params)
        if inspect.isawaitable(result):
            result = await result

        self._account(result)
        return result


def create_budget(limits: BudgetLimits, now: Optional[Callable[[], float]] = None) -> Budget:
    """Create a Budget for one agent loop."""
    return Budget(limits, now=now)


async def guarded_response(
    budget: Budget,
    params: Optional[Mapping[str, Any]],
    fn: CallFunction,
) -> Any:
    """Run *fn* as one guarded call against *budget*. See Budget.guarded_response."""
    return await budget.guarded_response(params, fn)


def record_tool_call(budget: Budget) -> None:
    """Record one tool execution against *budget*. See Budget.record_tool_call."""
    budget.record_tool_call()
