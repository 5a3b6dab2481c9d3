"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central settings pulled from .env / environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Upstream API
    insights_api_base_url: str = "https://insights.braiins.com/api"
    insights_api_timeout: float = 10.0
    """Per-request timeout in seconds. Applies to each gateway call individually."""

    insights_user_agent: str = "braiins-insights-mcp-server/0.1.0"

    # App
    app_env: str = "development"
    log_level: str = "INFO"

    # MCP
    mcp_server_name: str = "braiins-insights-mcp-server"
    mcp_server_version: str = "0.1.0"

    # FastAPI (SSE transport)
    fastapi_host: str = "0.0.0.0"
    fastapi_port: int = 8000


settings = Settings()
