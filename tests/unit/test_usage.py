"""Unit tests for token usage extraction."""

from types import SimpleNamespace

from loopbudget.core.provider import CallResult
from loopbudget.core.usage import extract_usage


def test_total_tokens_preferred():
    """Test total_tokens wins over the partial fields."""
    result = {"usage": {"total_tokens": 42, "prompt_tokens": 1, "completion_tokens": 1}}
    assert extract_usage(result) == 42


def test_prompt_plus_completion():
    """Test the partial sum when total_tokens is absent."""
    assert extract_usage({"usage": {"prompt_tokens": 300, "completion_tokens": 350}}) == 650


def test_single_partial_field_is_unavailable():
    """Test one partial field never yields a partial sum."""
    assert extract_usage({"usage": {"prompt_tokens": 300}}) is None
    assert extract_usage({"usage": {"completion_tokens": 350}}) is None


def test_missing_usage():
    """Test results without usage."""
    assert extract_usage({}) is None
    assert extract_usage({"usage": None}) is None
    assert extract_usage(None) is None
    assert extract_usage("plain text") is None


def test_none_values_count_as_absent():
    """Test a None total falls through to the partial fields."""
    result = {"usage": {"total_tokens": None, "prompt_tokens": 5, "completion_tokens": 6}}
    assert extract_usage(result) == 11


def test_zero_total_is_available():
    """Test zero is a real count, not missing data."""
    assert extract_usage({"usage": {"total_tokens": 0}}) == 0


def test_negative_counts_are_unavailable():
    """Test a negative count in any field makes usage unavailable."""
    assert extract_usage({"usage": {"total_tokens": -300}}) is None
    assert extract_usage({"usage": {"prompt_tokens": -1, "completion_tokens": 5}}) is None
    assert extract_usage({"usage": {"prompt_tokens": 5, "completion_tokens": -1}}) is None
    assert extract_usage(
        {"usage": {"total_tokens": 10, "prompt_tokens": -4, "completion_tokens": 14}}
    ) is None


def test_attribute_style_usage():
    """Test SDK-style objects with a usage attribute."""
    response = SimpleNamespace(usage=SimpleNamespace(prompt_tokens=10, completion_tokens=20))
    assert extract_usage(response) == 30

    response = SimpleNamespace(usage=SimpleNamespace(total_tokens=99))
    assert extract_usage(response) == 99


def test_call_result_usage():
    """Test CallResult objects from the bundled providers."""
    result = CallResult(
        response_text="hi",
        usage={"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": 7},
        raw_response=None,
        model="gpt-4o",
    )
    assert extract_usage(result) == 7

    result.usage = None
    assert extract_usage(result) is None
