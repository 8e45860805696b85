"""Anthropic Claude call function.

Claude reports input_tokens / output_tokens; they are mapped to
prompt_tokens / completion_tokens so the guard can account for them.
"""

import logging
import os
from typing import Any, Dict, Optional

from loopbudget.core.limits import DEFAULT_OUTPUT_TOKENS_PARAM
from loopbudget.core.provider import BaseCallFunction, CallResult

logger = logging.getLogger(__name__)


def _extract_response_text(resp: Any) -> str:
    """Extract text from Anthropic response content blocks."""
    text = ""
    if getattr(resp, "content", None):
        for block in resp.content:
            if getattr(block, "text", None):
                text += block.text
    return text


def _extract_usage_dict(resp: Any) -> Optional[Dict[str, int]]:
    """Map Anthropic usage to prompt/completion tokens. None when a count is missing."""
    usage = getattr(resp, "usage", None)
    if usage is None:
        return None
    inp = getattr(usage, "input_tokens", None)
    out = getattr(usage, "output_tokens", None)
    if inp is None or out is None:
        return None
    return {
        "prompt_tokens": inp,
        "completion_tokens": out,
        "total_tokens": inp + out,
    }


class AnthropicMessagesCall(BaseCallFunction):
    """Async Messages API call via AsyncAnthropic. The output cap is sent as ``max_tokens``."""

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        output_tokens_param: str = DEFAULT_OUTPUT_TOKENS_PARAM,
        client: Optional[Any] = None,
    ):
        """Initialize the Anthropic call function.

        Args:
            model: Default model name
            api_key: Anthropic API key (or ANTHROPIC_API_KEY env)
            timeout: Request timeout in seconds
            output_tokens_param: Params key holding the clamped output cap
            client: Pre-built AsyncAnthropic client (skips lazy init)
        """
        super().__init__(model, output_tokens_param=output_tokens_param)
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    def _get_client(self):
        """Lazy-init AsyncAnthropic client. Raises if no API key."""
        if self._client is None:
            try:
                import anthropic
            except ImportError as e:
                raise ImportError(
                    "anthropic package is required for AnthropicMessagesCall. "
                    "Install with: pip install loopbudget[anthropic]"
                ) from e
            key = self._api_key or os.environ.get("ANTHROPIC_API_KEY")
            if not key:
                raise ValueError(
                    "Anthropic API key not set. Use api_key= or ANTHROPIC_API_KEY."
                )
            self._client = anthropic.AsyncAnthropic(api_key=key, timeout=self._timeout)
        return self._client

    async def __call__(self, params: Dict[str, Any]) -> CallResult:
        model, messages, max_output_tokens, kwargs = self._split_params(params)
        if max_output_tokens is None:
            raise ValueError("Anthropic requires an output token cap; run the call through the budget guard")

        client = self._get_client()
        logger.debug(f"Anthropic request: model={model}, max_tokens={max_output_tokens}")
        response = await client.messages.create(
            model=model,
            messages=messages,
            max_tokens=max_output_tokens,
            **kwargs,
        )

        return CallResult(
            response_text=_extract_response_text(response),
            usage=_extract_usage_dict(response),
            raw_response=response,
            model=model,
        )
