from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

# app/settings.py -> parent = app/ -> parent = repo root
REPO_ROOT = Path(__file__).resolve().parents[1]

# Prompt pipeline config shipped with the repo
DEFAULT_PROMPT_CONFIG = REPO_ROOT / "configs" / "prompting.yaml"


@dataclass
class Settings:
    """
    Centralized application configuration.

    Does NOT depend on pydantic. Values are loaded from environment
    variables via Settings.from_env().
    """

    # --- Pipeline config ---
    prompt_config_path: str = str(DEFAULT_PROMPT_CONFIG)

    # --- Default user for analytics records ---
    default_user_id: str = "system"

    # --- API keys (comma-separated) ---
    api_keys_raw: str = ""

    # --- App version ---
    app_version: str = "dev"

    @property
    def api_keys(self) -> set[str]:
        return {k.strip() for k in (self.api_keys_raw or "").split(",") if k.strip()}

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build Settings from environment variables with sane fallbacks.

        PROMPT_CONFIG can be absolute or relative to REPO_ROOT.
        """
        raw_cfg = os.getenv("PROMPT_CONFIG", "").strip()
        if raw_cfg:
            cfg_candidate = Path(raw_cfg)
            if not cfg_candidate.is_absolute():
                cfg_candidate = REPO_ROOT / raw_cfg
        else:
            cfg_candidate = DEFAULT_PROMPT_CONFIG

        return cls(
            prompt_config_path=str(cfg_candidate),
            default_user_id=os.getenv("DEFAULT_USER_ID", cls.default_user_id) or cls.default_user_id,
            api_keys_raw=os.getenv("API_KEYS", cls.api_keys_raw),
            app_version=os.getenv("APP_VERSION", cls.app_version),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
