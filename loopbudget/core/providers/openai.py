"""OpenAI (and OpenAI-compatible) call function."""

import logging
from typing import Any, Dict, Optional

from loopbudget.core.limits import DEFAULT_OUTPUT_TOKENS_PARAM
from loopbudget.core.provider import BaseCallFunction, CallResult

logger = logging.getLogger(__name__)


def _extract_usage_dict(response: Any) -> Optional[Dict[str, int]]:
    """Usage dict from a chat completion, or None when the API returned none."""
    usage = getattr(response, "usage", None)
    if usage is None:
        return None
    return {
        "prompt_tokens": usage.prompt_tokens,
        "completion_tokens": usage.completion_tokens,
        "total_tokens": usage.total_tokens,
    }


class OpenAIChatCall(BaseCallFunction):
    """Async chat completion via AsyncOpenAI. The output cap is sent as ``max_tokens``."""

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        organization: Optional[str] = None,
        timeout: float = 60.0,
        output_tokens_param: str = DEFAULT_OUTPUT_TOKENS_PARAM,
        client: Optional[Any] = None,
    ):
        """Initialize the OpenAI call function.

        Args:
            model: Default model name
            api_key: OpenAI (or compatible) API key
            base_url: API base URL (None = OpenAI default)
            organization: Optional organization ID
            timeout: Request timeout in seconds
            output_tokens_param: Params key holding the clamped output cap
            client: Pre-built AsyncOpenAI client (skips lazy init)
        """
        super().__init__(model, output_tokens_param=output_tokens_param)
        self._api_key = api_key
        self._base_url = base_url
        self._organization = organization
        self._timeout = timeout
        self._client = client

    def _get_client(self):
        """Lazy-init AsyncOpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                organization=self._organization,
                timeout=self._timeout,
            )
        return self._client

    async def __call__(self, params: Dict[str, Any]) -> CallResult:
        model, messages, max_output_tokens, kwargs = self._split_params(params)
        if max_output_tokens is not None:
            kwargs["max_tokens"] = max_output_tokens

        client = self._get_client()
        logger.debug(f"OpenAI request: model={model}, max_tokens={max_output_tokens}")
        response = await client.chat.completions.create(
            model=model,
            messages=messages,
            **kwargs,
        )

        response_text = ""
        if response.choices:
            response_text = response.choices[0].message.content or ""

        return CallResult(
            response_text=response_text,
            usage=_extract_usage_dict(response),
            raw_response=response,
            model=model,
        )
