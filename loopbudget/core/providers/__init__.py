"""Concrete LLM call function implementations."""

from loopbudget.core.providers.openai import OpenAIChatCall
from loopbudget.core.providers.anthropic import AnthropicMessagesCall

__all__ = ["OpenAIChatCall", "AnthropicMessagesCall"]
