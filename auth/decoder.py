from __future__ import annotations

import jwt


class CredentialDecodeError(RuntimeError):
    pass


def decode_claims(token: str) -> dict:
    """Read the claims of a JWT without verifying its signature.

    The client never holds the signing key; the server stays the authority on
    validity and this is only used to tell an expired credential apart from
    any other rejection.
    """
    try:
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
        )
    except jwt.PyJWTError as error:
        raise CredentialDecodeError(f"Malformed credential: {error}") from error


def decode_expiry(token: str) -> float:
    claims = decode_claims(token)
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise CredentialDecodeError("Credential has no numeric exp claim.")
    return float(exp)
