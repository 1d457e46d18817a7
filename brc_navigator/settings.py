# settings.py

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import toml
import streamlit as st

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_SECRETS_PATH = PROJECT_ROOT / ".streamlit" / "secrets.toml"

DEFAULT_MODEL = "claude-3-5-haiku-latest"
DEFAULT_TEMPERATURE = 0.3
DEFAULT_SHEET_URL = (
    "https://docs.google.com/spreadsheets/d/1Tzdfebm596C3TpsA9bPO0DLs8PcAQHD5/"
    "edit?usp=sharing&ouid=103820390436928978344&rtpof=true&sd=true"
)
DEFAULT_STORAGE_PATH = Path.home() / ".brc_navigator" / "local_storage.json"

# secrets key -> environment variable
_ENV_KEYS = {
    "claude_api_key": "ANTHROPIC_API_KEY",
    "model": "BRC_MODEL",
    "temperature": "BRC_TEMPERATURE",
    "default_sheet_url": "BRC_SHEET_URL",
    "storage_path": "BRC_STORAGE_PATH",
}


@dataclass
class NavigatorSettings:
    anthropic_api_key: str
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    default_sheet_url: str = DEFAULT_SHEET_URL
    storage_path: Path = DEFAULT_STORAGE_PATH


def _streamlit_secrets() -> Mapping[str, Any]:
    """Read Streamlit secrets, or nothing when no secrets are configured."""
    try:
        return dict(st.secrets)
    except Exception as e:
        logger.debug(f"Streamlit secrets unavailable: {e}")
        return {}


def _file_secrets(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        return {}
    try:
        return toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning(f"Error loading local secrets.toml: {e}")
        return {}


def load_settings(
    secrets: Optional[Mapping[str, Any]] = None,
    secrets_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> NavigatorSettings:
    """
    Resolve settings from Streamlit secrets, the local secrets.toml, then the environment.

    Each key is taken from the first source that defines it; anything left
    unset falls back to the module defaults.
    """
    sources = [
        _streamlit_secrets() if secrets is None else secrets,
        _file_secrets(secrets_path or DEFAULT_SECRETS_PATH),
    ]
    env = os.environ if environ is None else environ

    def lookup(key: str) -> Optional[Any]:
        for source in sources:
            value = source.get(key)
            if value not in (None, ""):
                return value
        return env.get(_ENV_KEYS[key]) or None

    temperature = lookup("temperature")
    try:
        temperature = float(temperature) if temperature is not None else DEFAULT_TEMPERATURE
    except (TypeError, ValueError):
        logger.warning(f"Ignoring invalid temperature {temperature!r}")
        temperature = DEFAULT_TEMPERATURE

    storage_path = lookup("storage_path")

    return NavigatorSettings(
        anthropic_api_key=str(lookup("claude_api_key") or ""),
        model=str(lookup("model") or DEFAULT_MODEL),
        temperature=temperature,
        default_sheet_url=str(lookup("default_sheet_url") or DEFAULT_SHEET_URL),
        storage_path=Path(storage_path).expanduser() if storage_path else DEFAULT_STORAGE_PATH,
    )
