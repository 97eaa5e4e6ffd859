"""
shotboard.credentials - API credential availability.

The core only asks whether a usable credential exists and reports when the
service rejected it. Acquiring a new key is left to the caller.
"""

from __future__ import annotations

import os
from typing import Protocol


class CredentialProvider(Protocol):
    def has_credential(self) -> bool: ...

    def invalidate(self) -> None: ...


class EnvCredentialProvider:
    """Reads the API key from an environment variable.

    After invalidate() the key is treated as unavailable until select()
    is called, even if the variable is still set.
    """

    def __init__(self, env_var: str = "GEMINI_API_KEY") -> None:
        self.env_var = env_var
        self._invalidated = False

    def get_key(self) -> str | None:
        if self._invalidated:
            return None
        value = os.environ.get(self.env_var, "").strip()
        return value or None

    def has_credential(self) -> bool:
        return self.get_key() is not None

    def invalidate(self) -> None:
        self._invalidated = True

    def select(self, key: str | None = None) -> None:
        """Mark a (new) key as selected, optionally setting it."""
        if key is not None:
            os.environ[self.env_var] = key
        self._invalidated = False


class StaticCredentialProvider:
    """Credential availability held in memory."""

    def __init__(self, available: bool = True) -> None:
        self.available = available

    def has_credential(self) -> bool:
        return self.available

    def invalidate(self) -> None:
        self.available = False
