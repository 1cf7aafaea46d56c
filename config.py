# config.py - environment-driven settings for backend and UI
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

LLM_PROVIDER = os.environ.get("LLM_PROVIDER", "gemini").strip().lower()
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
LLM_TEMPERATURE = float(os.environ.get("LLM_TEMPERATURE", "0.5"))
LLM_TIMEOUT_SECS = int(os.environ.get("LLM_TIMEOUT_SECS", "30"))

BACKEND_URL = os.environ.get("SYMPTOM_CHECKER_API", "http://127.0.0.1:5000").rstrip("/")
CREDENTIAL_MODE = os.environ.get("CREDENTIAL_MODE", "env").strip().lower()
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
API_KEY_HEADER = "X-API-Key"

_KEY_VARS = {
    "gemini": ("GEMINI_API_KEY", "API_KEY", "GOOGLE_API_KEY"),
    "openai": ("OPENAI_API_KEY",),
}


def env_api_key(provider: Optional[str] = None) -> Optional[str]:
    """Return the process-wide API key for `provider`, read at call time."""
    for name in _KEY_VARS.get(provider or LLM_PROVIDER, ()):
        value = os.environ.get(name, "").strip().strip('"').strip("'")
        if value:
            return value
    return None


def host_api_keys() -> str:
    return os.environ.get("HOST_API_KEYS", "")
