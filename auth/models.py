from __future__ import annotations

from dataclasses import dataclass

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"


@dataclass(frozen=True)
class CredentialPair:
    access: str
    refresh: str

    @classmethod
    def from_payload(cls, payload: dict) -> "CredentialPair":
        if not isinstance(payload, dict):
            raise RuntimeError("Refresh response must be a JSON object.")

        access = payload.get(ACCESS_TOKEN_KEY)
        refresh = payload.get(REFRESH_TOKEN_KEY)
        if not isinstance(access, str) or not access:
            raise RuntimeError(f"Refresh response missing {ACCESS_TOKEN_KEY}.")
        if not isinstance(refresh, str) or not refresh:
            raise RuntimeError(f"Refresh response missing {REFRESH_TOKEN_KEY}.")

        return cls(access=access, refresh=refresh)
