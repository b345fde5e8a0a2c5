"""Configuration data models."""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = Field(..., description="LLM provider name")
    model: str = Field(..., description="Model identifier")
    api_key: str = Field(..., description="API key for the provider")
    max_tokens: int = Field(default=1000, gt=0, description="Maximum tokens for completion")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    timeout: float = Field(default=30, gt=0, description="Per-call timeout in seconds")

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        """Validate LLM provider."""
        allowed = {"openai", "anthropic"}
        if v.lower() not in allowed:
            raise ValueError(f"Provider must be one of: {allowed}")
        return v.lower()

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Expand environment variables in API key."""
        return os.path.expandvars(v)


class StoreConfig(BaseModel):
    """Document store configuration."""

    catalog_path: str = Field(default="data/movies.json", description="Movie catalog JSON file")
    users_path: str = Field(default="data/users.json", description="User documents JSON file")

    @field_validator("catalog_path", "users_path")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand environment variables and ``~`` in paths."""
        return os.path.expanduser(os.path.expandvars(v))


class RecommendationConfig(BaseModel):
    """Default result counts when the caller does not ask for one.

    Hard caps live in the criteria compiler and always win over these.
    """

    tool_search_limit: int = Field(default=5, gt=0, description="Default chat tool results")
    mood_limit: int = Field(default=5, gt=0, description="Default mood results")
    browse_limit: int = Field(default=20, gt=0, description="Default browse page size")
    similar_limit: int = Field(default=5, gt=0, description="Default similar movie results")


class ChatConfig(BaseModel):
    """Conversational orchestrator configuration."""

    assistant_name: str = Field(default="CineMatch", description="Assistant persona name")
    context_window: int = Field(
        default=5, ge=1, le=20, description="Number of caller-echoed turns kept"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )
    file: Optional[str] = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, gt=0, description="Maximum log file size in MB")
    backup_count: int = Field(default=5, ge=0, description="Number of backup log files")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Logging level must be one of: {allowed}")
        return v.upper()


class Config(BaseModel):
    """Main configuration model."""

    llm: LLMConfig = Field(..., description="LLM configuration")
    store: StoreConfig = Field(default_factory=StoreConfig, description="Store configuration")
    recommendations: RecommendationConfig = Field(
        default_factory=RecommendationConfig, description="Recommendation defaults"
    )
    chat: ChatConfig = Field(default_factory=ChatConfig, description="Chat configuration")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    model_config = ConfigDict(
        validate_assignment=True,
        populate_by_name=True,
    )
