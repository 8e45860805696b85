"""Unit tests for diagnostic helpers."""

from io import StringIO

from rich.console import Console

from loopbudget.core.snapshot import BudgetSnapshot
from loopbudget.utils.helpers import format_elapsed, format_tokens, print_snapshot, snapshot_table


def make_snapshot(**overrides):
    values = dict(
        steps_used=3,
        max_steps=10,
        tool_calls_used=1,
        max_tool_calls=5,
        tokens_used=1250,
        max_tokens=1000,
        elapsed_ms=12_400.0,
        timeout_ms=60_000.0,
        token_accounting_reliable=True,
        overshoot=250,
    )
    values.update(overrides)
    return BudgetSnapshot(**values)


def test_format_tokens():
    assert format_tokens(1250) == "1,250"
    assert format_tokens(0) == "0"


def test_format_elapsed():
    assert format_elapsed(850) == "850ms"
    assert format_elapsed(12_400) == "12.4s"
    assert format_elapsed(185_000) == "3m 05s"


def test_snapshot_table_rows():
    """Test one row per dimension plus overshoot."""
    table = snapshot_table(make_snapshot(), title="exec-1")
    assert table.row_count == 5
    assert table.title == "exec-1"


def test_snapshot_table_marks_unreliable_accounting():
    table = snapshot_table(make_snapshot(overshoot=None, token_accounting_reliable=False))
    assert table.row_count == 5


def test_print_snapshot():
    """Test rendering to a console."""
    buffer = StringIO()
    console = Console(file=buffer, width=100, color_system=None)

    print_snapshot(make_snapshot(), console=console)

    output = buffer.getvalue()
    assert "Steps" in output
    assert "1,250" in output
    assert "Overshoot" in output
