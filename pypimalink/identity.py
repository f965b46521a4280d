"""
Installation identity and settings persistence.

The web user ID is generated once per installation and kept in a settings
store. Hosts usually bring their own store; ``JsonSettingsStore`` keeps the
values in an (optionally encrypted) JSON file, ``MemorySettingsStore`` keeps
them for the lifetime of the process.
"""
import base64
import hashlib
import json
import logging
import secrets
from pathlib import Path
from typing import Optional, Protocol

from cryptography.fernet import Fernet, InvalidToken

from .constants import SETTING_WEB_USER_ID

_LOGGER = logging.getLogger(__name__)


class SettingsStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemorySettingsStore:
    """Settings kept in memory only"""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonSettingsStore:
    """
    Settings saved to a JSON file with encrypted values.

    Args:
        storage_dir: Directory for the settings file (default: .pimalink)
        encryption_key: Optional Fernet key (32 bytes urlsafe base64).
                       If None, uses a machine-specific key.
                       If "disabled", values are stored in plaintext.
    """

    FILE_NAME = "settings.json"

    def __init__(
        self,
        storage_dir: str = ".pimalink",
        encryption_key: Optional[str] = None,
    ):
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.settings_file = self.storage_dir / self.FILE_NAME

        self._fernet = None
        if encryption_key != "disabled":
            if encryption_key:
                self._fernet = Fernet(encryption_key.encode())
            else:
                self._fernet = Fernet(self._get_machine_key())

        self._values: dict[str, str] = self._load()

    def get_settings_file(self) -> str:
        """Absolute path to the settings file"""
        return str(self.settings_file.absolute())

    def _get_machine_key(self) -> bytes:
        """Generate a machine-specific encryption key."""
        import uuid
        import platform

        seed = f"{uuid.getnode()}-{platform.node()}-{self.storage_dir.absolute()}"
        key_bytes = hashlib.sha256(seed.encode()).digest()
        return base64.urlsafe_b64encode(key_bytes)

    def _encrypt(self, value: str) -> str:
        if not self._fernet:
            return value
        return self._fernet.encrypt(value.encode()).decode()

    def _decrypt(self, value: str) -> str:
        if not self._fernet:
            return value
        try:
            return self._fernet.decrypt(value.encode()).decode()
        except InvalidToken:
            # Written by a plaintext store
            return value

    def _load(self) -> dict[str, str]:
        if not self.settings_file.exists():
            return {}
        try:
            with open(self.settings_file, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            _LOGGER.warning("Ignoring unreadable settings file %s: %s", self.settings_file, e)
            return {}

        raw = data.get("settings") or {}
        encrypted = data.get("_encrypted", False)
        values = {}
        for key, value in raw.items():
            if not isinstance(value, str):
                continue
            values[key] = self._decrypt(value) if encrypted else value
        return values

    def _save(self) -> None:
        data = {
            "settings": {k: self._encrypt(v) for k, v in self._values.items()},
            "_encrypted": self._fernet is not None,
        }
        with open(self.settings_file, "w") as f:
            json.dump(data, f, indent=2)

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
        self._save()


def generate_web_user_id() -> str:
    """16 hex characters from 8 random bytes"""
    return secrets.token_hex(8)


def ensure_web_user_id(store: SettingsStore) -> str:
    """Return the installation's web user ID, creating it on first run only."""
    web_user_id = store.get(SETTING_WEB_USER_ID)
    if not web_user_id:
        web_user_id = generate_web_user_id()
        store.set(SETTING_WEB_USER_ID, web_user_id)
        _LOGGER.info("New ID Generated")
    _LOGGER.info("webUserID: %s", web_user_id)
    return web_user_id
