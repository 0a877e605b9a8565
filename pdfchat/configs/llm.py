"""
Generative model configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Chat model configuration for answer generation
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from pdfchat.configs.base import BaseSettings


class LLMSettings(BaseSettings):
    """Chat model configuration (Ollama by default)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    provider: str = Field(default="ollama", description="Chat backend: 'ollama' or 'google'")
    model: str = Field(default="mistral", description="Chat model identifier")
    base_url: str = Field(default="http://localhost:11434", description="Ollama server URL")
    temperature: float = Field(default=0.0, description="Sampling temperature")
    timeout_seconds: float = Field(
        default=60.0,
        description="Seconds to wait for a completion before abandoning the request",
        gt=0,
    )
