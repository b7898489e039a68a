"""
iam_reconciler.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Carry the retry ceiling/delay used by the reconciliation loop.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="IAM_RECONCILER_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "iam-reconciler"
    log_level: str = "INFO"
    # JSON lines for log shipping; set false for console output during local runs.
    log_json: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Binding template (YAML or JSON document with a top-level `bindings` list).
    iam_template_path: Path = Path(
        "deployment/gke/deployment_manager_configs/iam_bindings_template.yaml"
    )

    # Remote policy store
    resource_manager_base_url: str = "https://cloudresourcemanager.googleapis.com"
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    # Reconciliation loop
    max_attempts: int = Field(default=5, ge=1)
    retry_delay_seconds: float = Field(default=3.0, ge=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# The retry delay is constant between attempts; there is no exponential backoff.
