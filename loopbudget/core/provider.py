"""Call function abstraction for LLM backends.

The guard only needs an async callable taking a params dict and returning a
value with an optional ``usage``. Implementations live under
loopbudget.core.providers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from loopbudget.core.limits import DEFAULT_OUTPUT_TOKENS_PARAM


@dataclass
class CallResult:
    """Result of one provider call."""

    response_text: str
    usage: Optional[Dict[str, int]]  # None when the provider omitted usage
    raw_response: Any
    model: str

    def __repr__(self) -> str:
        tokens = self.usage.get("total_tokens") if self.usage else None
        return (
            f"CallResult(model={self.model}, tokens={tokens}, "
            f"response_length={len(self.response_text)})"
        )


class BaseCallFunction(ABC):
    """Abstract base for provider call functions. Implement this to add a new backend.

    Instances are passed directly to guarded_response. Provider errors are not
    caught here; they must reach the caller unchanged.
    """

    def __init__(
        self,
        model: str,
        output_tokens_param: str = DEFAULT_OUTPUT_TOKENS_PARAM,
    ):
        """
        Args:
            model: Default model id; a "model" entry in params overrides it.
            output_tokens_param: Params key holding the clamped output cap.
        """
        self.model = model
        self.output_tokens_param = output_tokens_param

    def _split_params(self, params: Dict[str, Any]) -> tuple:
        """Return (model, messages, max_output_tokens, remaining kwargs) from params."""
        kwargs = dict(params)
        model = kwargs.pop("model", None) or self.model
        messages: List[Dict[str, Any]] = kwargs.pop("messages", None) or []
        if "prompt" in kwargs:
            messages = messages + [{"role": "user", "content": kwargs.pop("prompt")}]
        max_output_tokens = kwargs.pop(self.output_tokens_param, None)
        return model, messages, max_output_tokens, kwargs

    @abstractmethod
    async def __call__(self, params: Dict[str, Any]) -> CallResult:
        """Execute one request.

        Args:
            params: Clamped call parameters ("messages" or "prompt", optional
                "model", the output-size field, and provider-specific options)

        Returns:
            CallResult with response text and usage
        """
        pass
