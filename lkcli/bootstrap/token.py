"""Short-lived access tokens for authenticated cloud API calls.

Tokens are HS256 JWTs signed with the project's API secret and issued
under its API key.
"""

import base64
import hashlib
import hmac
import json
import time
from typing import Any, Optional

from lkcli.config.projects import ProjectConfig


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64url_decode(seg: str) -> bytes:
    pad = "=" * ((4 - (len(seg) % 4)) % 4)
    return base64.urlsafe_b64decode((seg + pad).encode("ascii"))


def _encode_segment(data: dict[str, Any]) -> str:
    return _b64url_encode(
        json.dumps(data, separators=(",", ":"), sort_keys=True).encode("utf-8")
    )


def create_access_token(
    project: ProjectConfig,
    ttl_seconds: int = 300,
    now: Optional[int] = None,
) -> str:
    """
    Mint an access token for the project's credentials.

    Args:
        project: Project whose API key/secret sign the token
        ttl_seconds: Token lifetime
        now: Issue time as a unix timestamp (defaults to the current time)

    Returns:
        The encoded JWT
    """
    issued = int(time.time() if now is None else now)
    header = {"alg": "HS256", "typ": "JWT"}
    payload: dict[str, Any] = {
        "iss": project.api_key,
        "sub": project.api_key,
        "nbf": issued,
        "exp": issued + max(1, int(ttl_seconds)),
    }

    signing_input = f"{_encode_segment(header)}.{_encode_segment(payload)}".encode(
        "ascii"
    )
    sig = hmac.new(
        project.api_secret.encode("utf-8"), signing_input, hashlib.sha256
    ).digest()
    return signing_input.decode("ascii") + "." + _b64url_encode(sig)


def decode_access_token(token: str, api_secret: str) -> Optional[dict[str, Any]]:
    """Verify a token's signature and return its claims, or None if invalid.

    Claims such as ``exp`` are not checked.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None
    signing_input = ".".join(parts[:2]).encode("ascii")
    expected = hmac.new(
        api_secret.encode("utf-8"), signing_input, hashlib.sha256
    ).digest()
    try:
        got = _b64url_decode(parts[2])
        claims = json.loads(_b64url_decode(parts[1]))
    except ValueError:
        return None
    if not hmac.compare_digest(expected, got):
        return None
    return claims
