"""Unit tests for limits, snapshots and budget errors."""

import pytest

from loopbudget.core.errors import BudgetError, BudgetReason, is_budget_error
from loopbudget.core.limits import BudgetLimits, TokenAccountingMode
from loopbudget.core.snapshot import BudgetSnapshot


@pytest.fixture
def snapshot():
    return BudgetSnapshot(
        steps_used=2,
        max_steps=2,
        tool_calls_used=0,
        max_tool_calls=5,
        tokens_used=120,
        max_tokens=1000,
        elapsed_ms=15.0,
        timeout_ms=1000.0,
        token_accounting_reliable=True,
    )


def test_budget_error_fields(snapshot):
    """Test BudgetError carries reason, snapshot and execution id."""
    error = BudgetError(BudgetReason.STEP_LIMIT, snapshot, execution_id="exec-1")

    assert error.reason == BudgetReason.STEP_LIMIT
    assert error.reason == "STEP_LIMIT"
    assert error.snapshot is snapshot
    assert error.execution_id == "exec-1"
    assert str(error) == "Budget exceeded: STEP_LIMIT"


def test_budget_error_accepts_reason_string(snapshot):
    """Test a plain reason string is normalised to BudgetReason."""
    error = BudgetError("TOKEN_LIMIT", snapshot)
    assert error.reason is BudgetReason.TOKEN_LIMIT
    assert error.execution_id is None


def test_is_budget_error(snapshot):
    """Test the predicate separates budget errors from everything else."""
    assert is_budget_error(BudgetError(BudgetReason.TIMEOUT, snapshot))
    assert not is_budget_error(RuntimeError("regular error"))
    assert not is_budget_error(None)
    assert not is_budget_error({"reason": "STEP_LIMIT"})


def test_snapshot_to_dict(snapshot):
    """Test snapshot serialisation for logs."""
    data = snapshot.to_dict()
    assert data["steps_used"] == 2
    assert data["overshoot"] is None
    assert set(data) >= {"elapsed_ms", "timeout_ms", "token_accounting_reliable"}


def test_snapshot_is_immutable(snapshot):
    """Test snapshots cannot be modified after capture."""
    with pytest.raises(AttributeError):
        snapshot.steps_used = 99


def test_limits_defaults():
    """Test optional limit fields."""
    limits = BudgetLimits(
        max_steps=1, max_tool_calls=1, timeout_ms=1, max_output_tokens=1, max_tokens=1
    )
    assert limits.token_accounting_mode is TokenAccountingMode.FAIL_OPEN
    assert limits.fail_closed is False
    assert limits.execution_id is None
    assert limits.output_tokens_param == "max_output_tokens"


def test_limits_mode_from_string():
    """Test the accounting mode accepts its string form."""
    limits = BudgetLimits(
        max_steps=1, max_tool_calls=1, timeout_ms=1, max_output_tokens=1, max_tokens=1,
        token_accounting_mode="fail-closed",
    )
    assert limits.token_accounting_mode is TokenAccountingMode.FAIL_CLOSED
    assert limits.fail_closed is True


def test_limits_reject_unknown_mode():
    """Test an unknown accounting mode is rejected."""
    with pytest.raises(ValueError, match="token_accounting_mode"):
        BudgetLimits(
            max_steps=1, max_tool_calls=1, timeout_ms=1, max_output_tokens=1, max_tokens=1,
            token_accounting_mode="lenient",
        )


def test_limits_reject_negative_values():
    """Test negative limits are rejected; zero is allowed."""
    with pytest.raises(ValueError, match="max_tool_calls"):
        BudgetLimits(
            max_steps=1, max_tool_calls=-1, timeout_ms=1, max_output_tokens=1, max_tokens=1
        )
    BudgetLimits(max_steps=0, max_tool_calls=0, timeout_ms=0, max_output_tokens=0, max_tokens=0)


@pytest.mark.parametrize("bad_value", [float("nan"), "1000", None, True])
def test_limits_reject_non_numeric_and_nan(bad_value):
    """Test NaN and non-numeric limits raise ValueError."""
    with pytest.raises(ValueError, match="timeout_ms"):
        BudgetLimits(
            max_steps=1, max_tool_calls=1, timeout_ms=bad_value, max_output_tokens=1, max_tokens=1
        )
