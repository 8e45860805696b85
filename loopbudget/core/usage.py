"""Token usage extraction from call function results.

Results may be plain dicts ({"usage": {...}}), CallResult objects, or raw SDK
responses whose ``usage`` is an object with token attributes.
"""

from typing import Any, Mapping, Optional


def _field(container: Any, name: str) -> Any:
    """Read *name* as a mapping key or attribute. None when absent."""
    if container is None:
        return None
    if isinstance(container, Mapping):
        return container.get(name)
    return getattr(container, name, None)


def extract_usage(result: Any) -> Optional[int]:
    """Return the total tokens consumed by a call, or None if usage is unavailable.

    Order: ``total_tokens`` if present; else ``prompt_tokens + completion_tokens``
    when both are present. Only one of the two partial fields counts as
    unavailable, never as a partial sum. A negative count in any of the three
    fields makes usage unavailable.

    Args:
        result: Value returned by the call function

    Returns:
        Token count or None
    """
    usage = _field(result, "usage")
    if usage is None:
        return None

    counts = [_field(usage, name) for name in ("total_tokens", "prompt_tokens", "completion_tokens")]
    counts = [None if value is None else int(value) for value in counts]
    if any(value is not None and value < 0 for value in counts):
        return None
    total, prompt_tokens, completion_tokens = counts

    if total is not None:
        return total
    if prompt_tokens is None or completion_tokens is None:
        return None
    return prompt_tokens + completion_tokens
