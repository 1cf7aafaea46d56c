"""
API key supply for the front end.

Three mutually exclusive modes:
- env:    the backend's process-wide key; the UI sends nothing
- manual: a key typed by the user, held only in session state
- host:   a key picked from the host's key-selection dialog, cached as
          "ready" until a credential failure invalidates it
"""

from enum import Enum
from typing import Dict, List, MutableMapping, Optional

from errors import CredentialError, PredictionError
from logging_utils import get_logger

logger = get_logger(__name__)


class CredentialMode(str, Enum):
    ENV = "env"
    MANUAL = "manual"
    HOST = "host"

    @classmethod
    def parse(cls, value: Optional[str]) -> "CredentialMode":
        try:
            return cls((value or "env").strip().lower())
        except ValueError:
            logger.warning("Unknown CREDENTIAL_MODE %r, falling back to env", value)
            return cls.ENV


class KeyState:
    """Session-scoped key cache over any mutable mapping (e.g. st.session_state)."""

    KEY = "api_key"
    READY = "api_key_ready"

    def __init__(self, store: MutableMapping):
        self._store = store
        self._store.setdefault(self.KEY, None)
        self._store.setdefault(self.READY, False)

    @property
    def key(self) -> Optional[str]:
        return self._store.get(self.KEY)

    @property
    def ready(self) -> bool:
        return bool(self._store.get(self.READY)) and bool(self.key)

    def set_key(self, key: Optional[str]) -> bool:
        key = (key or "").strip()
        if not key:
            self.invalidate()
            return False
        self._store[self.KEY] = key
        self._store[self.READY] = True
        return True

    def invalidate(self) -> None:
        self._store[self.KEY] = None
        self._store[self.READY] = False


class HostKeySelector:
    """Keys the hosting environment offers for selection, by label."""

    def __init__(self, keys: Optional[Dict[str, str]] = None):
        self._keys = {k: v for k, v in (keys or {}).items() if k and v}

    @classmethod
    def from_env(cls, raw: str) -> "HostKeySelector":
        """Parse `label=key,label2=key2`; a bare entry is labelled by position."""
        keys = {}
        for i, item in enumerate(p.strip() for p in (raw or "").split(",")):
            if not item:
                continue
            label, sep, key = item.partition("=")
            if not sep:
                label, key = f"Key {i + 1}", item
            keys[label.strip()] = key.strip()
        return cls(keys)

    def is_available(self) -> bool:
        return bool(self._keys)

    def labels(self) -> List[str]:
        return list(self._keys)

    def has_selected_key(self, state: KeyState) -> bool:
        return state.ready and state.key in self._keys.values()

    def select(self, state: KeyState, label: Optional[str]) -> bool:
        """
        Apply the dialog's outcome. `None` means the dialog was closed without
        a choice, which leaves the state as it was.
        """
        if label is None:
            return False
        if label not in self._keys:
            raise KeyError(label)
        return state.set_key(self._keys[label])


def resolve_api_key(mode: CredentialMode, state: KeyState) -> Optional[str]:
    """Key to send with a request; None lets the backend use its own."""
    if mode is CredentialMode.ENV:
        return None
    return state.key if state.ready else None


def needs_key(mode: CredentialMode, state: KeyState) -> bool:
    return mode is not CredentialMode.ENV and not state.ready


def handle_prediction_error(state: KeyState, error: PredictionError) -> bool:
    """Drop a cached key after a credential failure so the UI asks again."""
    if isinstance(error, CredentialError):
        logger.info("Credential rejected, clearing cached key")
        state.invalidate()
        return True
    return False
