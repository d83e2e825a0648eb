"""Application configuration using pydantic-settings."""

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration loaded from environment / .env file."""

    # ── Azure OpenAI (announcement copywriting) ───────────────────────────────
    # Leave the endpoint empty to run on templates only.
    azure_openai_endpoint: str = Field(
        default="",
        description="Azure OpenAI resource endpoint, e.g. https://<name>.openai.azure.com/",
    )
    azure_openai_api_key: Optional[str] = Field(
        default=None,
        description="API key; when unset DefaultAzureCredential is used",
    )
    azure_openai_api_version: str = Field(default="2024-10-21")
    azure_openai_deployment: str = Field(default="gpt-4o-mini")

    llm_max_tokens: int = Field(default=300)
    llm_temperature: float = Field(default=0.8)
    llm_timeout_seconds: float = Field(default=20.0)

    # ── Sale workflow ─────────────────────────────────────────────────────────
    default_discount_percent: int = Field(default=20, ge=0, le=100)
    use_llm: bool = Field(
        default=True,
        description="Let the support specialist draft the announcement with the LLM",
    )
    # A specialist that has not reported after this long is recorded as failed.
    specialist_timeout_seconds: float = Field(default=30.0, gt=0)
    poll_interval_ms: int = Field(default=100, gt=0)
    max_wait_ms: int = Field(default=10_000, gt=0)

    # ── Demo actor ────────────────────────────────────────────────────────────
    demo_actor_id: str = Field(default="00000000-0000-0000-0000-000000000001")
    demo_actor_role: str = Field(default="user")

    # ── HTTP server ───────────────────────────────────────────────────────────
    server_host: str = Field(default="127.0.0.1")
    server_port: int = Field(default=8088)

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default="logs/weekend-sale.log")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
