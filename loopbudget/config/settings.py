"""Configuration management for loopbudget."""

import os
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from loopbudget.core.limits import BudgetLimits, DEFAULT_OUTPUT_TOKENS_PARAM


class Settings(BaseSettings):
    """Default limits and provider credentials for loopbudget."""

    model_config = SettingsConfigDict(
        env_prefix="LOOPBUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Default limits
    max_steps: int = Field(
        default=25,
        ge=0,
        description="Max provider call attempts per agent loop"
    )
    max_tool_calls: int = Field(
        default=50,
        ge=0,
        description="Max tool invocations per agent loop"
    )
    timeout_ms: float = Field(
        default=300_000,
        ge=0,
        description="Wall-clock budget in milliseconds from budget creation"
    )
    max_output_tokens: int = Field(
        default=4096,
        ge=0,
        description="Per-call output token cap"
    )
    max_tokens: int = Field(
        default=200_000,
        ge=0,
        description="Cumulative token budget per agent loop"
    )
    token_accounting_mode: str = Field(
        default="fail-open",
        description="Missing usage policy: 'fail-open' or 'fail-closed'"
    )
    output_tokens_param: str = Field(
        default=DEFAULT_OUTPUT_TOKENS_PARAM,
        description="Call parameter that carries the per-call output cap"
    )

    # API settings
    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key"
    )
    openai_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for OpenAI-compatible API"
    )
    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Anthropic API key for Claude",
        validation_alias=AliasChoices("LOOPBUDGET_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY"),
    )
    request_timeout: float = Field(
        default=60.0,
        description="Provider request timeout in seconds"
    )

    @classmethod
    def load_from_file(cls, config_file: str) -> "Settings":
        """Load settings from a YAML config file.

        Args:
            config_file: Path to YAML config file

        Returns:
            Settings instance
        """
        import yaml

        with open(config_file, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    def to_limits(self, execution_id: Optional[str] = None) -> BudgetLimits:
        """Build BudgetLimits from these settings.

        Args:
            execution_id: Optional label echoed into every BudgetError

        Returns:
            BudgetLimits
        """
        return BudgetLimits(
            max_steps=self.max_steps,
            max_tool_calls=self.max_tool_calls,
            timeout_ms=self.timeout_ms,
            max_output_tokens=self.max_output_tokens,
            max_tokens=self.max_tokens,
            execution_id=execution_id,
            token_accounting_mode=self.token_accounting_mode,
            output_tokens_param=self.output_tokens_param,
        )

    def get_api_key(self) -> Optional[str]:
        """Get the OpenAI API key, checking environment variables."""
        return self.openai_api_key or os.getenv("OPENAI_API_KEY")

    def get_base_url(self) -> Optional[str]:
        """Get the base URL for OpenAI requests (None uses the OpenAI default)."""
        return self.openai_base_url or os.getenv("OPENAI_BASE_URL")

    def get_anthropic_api_key(self) -> Optional[str]:
        """Get Anthropic API key (settings or ANTHROPIC_API_KEY env)."""
        return self.anthropic_api_key or os.getenv("ANTHROPIC_API_KEY")
