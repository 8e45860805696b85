"""Factories for budgets and provider call functions."""

from typing import Any, Callable, Optional

from loopbudget.config.settings import Settings
from loopbudget.core.budget import Budget, create_budget
from loopbudget.core.provider import BaseCallFunction


def create(
    provider_name: str,
    model: str,
    settings: Optional[Settings] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    **kwargs: Any,
) -> BaseCallFunction:
    """Create a provider call function by name.

    Args:
        provider_name: "openai" or "anthropic"
        model: Default model id for the call function
        settings: Optional settings (API keys, base URL, timeout, output param)
        api_key: Override API key (else from settings/env)
        base_url: Override base URL (OpenAI only; else from settings/env)
        **kwargs: Passed to the call function constructor

    Returns:
        BaseCallFunction implementation

    Raises:
        ValueError: If provider_name is not supported
    """
    name = provider_name.lower().strip()
    _settings = settings or Settings()
    kwargs.setdefault("timeout", _settings.request_timeout)
    kwargs.setdefault("output_tokens_param", _settings.output_tokens_param)

    if name == "openai":
        from loopbudget.core.providers.openai import OpenAIChatCall

        return OpenAIChatCall(
            model,
            api_key=api_key or _settings.get_api_key(),
            base_url=base_url or _settings.get_base_url(),
            **kwargs,
        )

    if name == "anthropic":
        from loopbudget.core.providers.anthropic import AnthropicMessagesCall

        return AnthropicMessagesCall(
            model,
            api_key=api_key or _settings.get_anthropic_api_key(),
            **kwargs,
        )

    raise ValueError(f"Unknown provider: {provider_name}. Supported: openai, anthropic")


def create_budget_from_settings(
    settings: Optional[Settings] = None,
    execution_id: Optional[str] = None,
    now: Optional[Callable[[], float]] = None,
) -> Budget:
    """Create a Budget whose limits come from Settings (env, .env or YAML)."""
    _settings = settings or Settings()
    return create_budget(_settings.to_limits(execution_id=execution_id), now=now)
