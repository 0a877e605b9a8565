"""
HTTP server configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Uvicorn and upload handling configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from pdfchat.configs.base import BaseSettings


class ServerSettings(BaseSettings):
    """Server bind address and upload limits."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SERVER_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=3000, description="Bind port")
    upload_dir: str | None = Field(
        default=None,
        description="Parent directory for upload temp dirs (system temp if unset)",
    )
    max_upload_bytes: int = Field(
        default=25 * 1024 * 1024,
        description="Maximum accepted upload size in bytes",
    )
