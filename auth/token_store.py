from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from auth.models import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, CredentialPair


class TokenStore(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryTokenStore(TokenStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._tokens: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._tokens.get(key)

    def set(self, key: str, value: str) -> None:
        self._tokens[key] = value

    def delete(self, key: str) -> None:
        self._tokens.pop(key, None)


class FileTokenStore(TokenStore):
    def __init__(self, path: str | Path = ".tokens.json") -> None:
        self._path = Path(path)

    def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise RuntimeError(f"Token store entry {key!r} must be a string.")
        return value

    def set(self, key: str, value: str) -> None:
        all_tokens = self._read_all()
        all_tokens[key] = value
        self._write_all(all_tokens)

    def delete(self, key: str) -> None:
        all_tokens = self._read_all()
        if all_tokens.pop(key, None) is None:
            return
        self._write_all(all_tokens)

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        raw = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise RuntimeError("Token store file is invalid; expected top-level JSON object.")
        return raw

    def _write_all(self, payload: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f"{self._path.name}.",
            suffix=".tmp",
            dir=self._path.parent,
        )
        tmp_path = Path(tmp_name)

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, sort_keys=True)
            os.replace(tmp_path, self._path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()


def save_credentials(store: TokenStore, pair: CredentialPair) -> None:
    store.set(ACCESS_TOKEN_KEY, pair.access)
    store.set(REFRESH_TOKEN_KEY, pair.refresh)


def load_credentials(store: TokenStore) -> CredentialPair | None:
    access = store.get(ACCESS_TOKEN_KEY)
    refresh = store.get(REFRESH_TOKEN_KEY)
    if not access or not refresh:
        return None
    return CredentialPair(access=access, refresh=refresh)
