from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from violet.errors import ConfigurationError

logger = logging.getLogger(__name__)

PROVIDERS = {"openai", "rules"}


@dataclass(frozen=True)
class Settings:
    openai_api_key: str
    openai_model: str = "gpt-3.5-turbo"
    openai_base_url: str = "https://api.openai.com/v1"
    llm_provider: str = "openai"
    data_dir: str = "data"
    http_timeout_s: float = 30.0
    log_level: str = "INFO"


def _key_from_secrets_file(path: str) -> str:
    """Read OPENAI_API_KEY from a JSON secrets file, or '' when unusable."""
    secrets_path = Path(path)
    if not secrets_path.exists():
        logger.error(f"Secrets file not found: {secrets_path}")
        return ""
    try:
        data = json.loads(secrets_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error(f"Could not read secrets file {secrets_path}: {e}")
        return ""
    if not isinstance(data, dict):
        logger.error(f"Secrets file {secrets_path} is not a JSON object")
        return ""
    return str(data.get("OPENAI_API_KEY") or "").strip()


def load_settings(env: Optional[dict] = None) -> Settings:
    """Collect settings from the environment.

    A missing API key is fatal unless the offline rule-based provider is selected.
    """
    env = os.environ if env is None else env

    provider = env.get("VIOLET_LLM_PROVIDER", "openai").strip().lower()
    if provider not in PROVIDERS:
        raise ConfigurationError(
            f"VIOLET_LLM_PROVIDER must be one of {sorted(PROVIDERS)}, got '{provider}'"
        )

    api_key = env.get("OPENAI_API_KEY", "").strip()
    secrets_file = env.get("VIOLET_SECRETS_FILE", "").strip()
    if not api_key and secrets_file:
        api_key = _key_from_secrets_file(secrets_file)

    if not api_key and provider == "openai":
        raise ConfigurationError("OPENAI_API_KEY is missing")

    try:
        timeout = float(env.get("VIOLET_HTTP_TIMEOUT_S", "30"))
    except ValueError as e:
        raise ConfigurationError(f"VIOLET_HTTP_TIMEOUT_S is not a number: {e}") from e

    return Settings(
        openai_api_key=api_key,
        openai_model=env.get("OPENAI_MODEL", "gpt-3.5-turbo").strip(),
        openai_base_url=env.get("OPENAI_BASE_URL", "https://api.openai.com/v1").strip(),
        llm_provider=provider,
        data_dir=env.get("VIOLET_DATA_DIR", "data").strip(),
        http_timeout_s=timeout,
        log_level=env.get("LOG_LEVEL", "INFO").strip().upper(),
    )
