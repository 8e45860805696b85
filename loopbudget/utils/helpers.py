"""Formatting helpers for budget diagnostics."""

from typing import Optional

from rich.console import Console
from rich.table import Table

from loopbudget.core.snapshot import BudgetSnapshot


def format_tokens(tokens: int) -> str:
    """Format token count with thousands separator.

    Args:
        tokens: Token count

    Returns:
        Formatted token string (e.g., "1,250")
    """
    return f"{tokens:,}"


def format_elapsed(elapsed_ms: float) -> str:
    """Format milliseconds as a short duration (e.g., "850ms", "12.4s", "3m 05s")."""
    if elapsed_ms < 1000:
        return f"{elapsed_ms:.0f}ms"
    seconds = elapsed_ms / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, rest = divmod(int(seconds), 60)
    return f"{minutes}m {rest:02d}s"


def _usage_style(used: float, limit: float) -> str:
    if limit <= 0 or used >= limit:
        return "red"
    if used >= limit * 0.8:
        return "yellow"
    return "green"


def snapshot_table(snapshot: BudgetSnapshot, title: Optional[str] = None) -> Table:
    """Build a rich Table showing used vs limit for each budget dimension.

    Args:
        snapshot: Snapshot to render
        title: Optional table title (e.g. the execution id)

    Returns:
        rich Table
    """
    table = Table(title=title, show_header=True, header_style="bold cyan", box=None)
    table.add_column("Limit", style="cyan")
    table.add_column("Used", justify="right")
    table.add_column("Max", justify="right")

    rows = [
        ("Steps", snapshot.steps_used, snapshot.max_steps, str),
        ("Tool calls", snapshot.tool_calls_used, snapshot.max_tool_calls, str),
        ("Tokens", snapshot.tokens_used, snapshot.max_tokens, format_tokens),
        ("Elapsed", snapshot.elapsed_ms, snapshot.timeout_ms, format_elapsed),
    ]
    for label, used, limit, fmt in rows:
        style = _usage_style(used, limit)
        table.add_row(label, f"[{style}]{fmt(used)}[/{style}]", fmt(limit))

    if snapshot.overshoot is not None:
        table.add_row("Overshoot", f"[red]{format_tokens(snapshot.overshoot)}[/red]", "")
    if not snapshot.token_accounting_reliable:
        table.add_row("Accounting", "[yellow]unreliable[/yellow]", "")
    return table


def print_snapshot(
    snapshot: BudgetSnapshot,
    console: Optional[Console] = None,
    title: Optional[str] = None,
) -> None:
    """Print a snapshot table to *console* (stdout by default)."""
    console = console or Console()
    console.print(snapshot_table(snapshot, title=title))
