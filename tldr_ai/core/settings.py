from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _config_path() -> Path:
    override = os.getenv("TLDR_CONFIG")
    if override:
        return Path(override)
    root = Path(__file__).resolve().parents[2]  # project root
    return root / "config.yaml"


def _load_yaml_config() -> dict:
    cfg_path = _config_path()
    if not cfg_path.exists():
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # LLM
    llm_provider: str = "gemini"
    llm_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.2
    llm_max_tokens: Optional[int] = None
    llm_timeout_s: float = 60.0

    # First of the two names wins
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_AI_API_KEY"),
    )

    # Uploads
    max_upload_bytes: int = 10 * 1024 * 1024

    log_level: str = "INFO"

    def __init__(self, **kwargs):
        cfg = _load_yaml_config()
        llm = (cfg.get("llm") or {})
        upload = (cfg.get("upload") or {})
        logging_cfg = (cfg.get("logging") or {})

        from_yaml = {
            "llm_provider": llm.get("provider"),
            "llm_model": llm.get("model"),
            "llm_temperature": llm.get("temperature"),
            "llm_max_tokens": llm.get("max_tokens"),
            "llm_timeout_s": llm.get("timeout_s"),
            "max_upload_bytes": upload.get("max_bytes"),
            "log_level": logging_cfg.get("level"),
        }
        merged = {k: v for k, v in from_yaml.items() if v is not None}
        merged.update(kwargs)

        super().__init__(**merged)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
