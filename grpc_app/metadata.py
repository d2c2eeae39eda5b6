from __future__ import annotations

from typing import Iterable, Optional, Sequence


AUTHORIZATION_META_KEY = "authorization"
BUNDLE_ID_META_KEY = "x-ios-bundle-identifier"
NO_TOKEN_PLACEHOLDER = "No token is available"

Metadata = Sequence[tuple[str, str]]


def bearer_authorization(token: Optional[str]) -> str:
    """Build the ``authorization`` header value for ``token``.

    A value that already carries the ``Bearer`` scheme is used as is. Without
    a token the request still goes out with a placeholder so the server
    answers UNAUTHENTICATED through the normal error path.
    """
    if not token or not token.strip():
        return NO_TOKEN_PLACEHOLDER
    token = token.strip()
    if token.lower().startswith("bearer "):
        return token
    return f"Bearer {token}"


def build_request_metadata(
    authorization: str,
    bundle_identifier: Optional[str],
    extra: Optional[Iterable[tuple[str, str]]] = None,
) -> tuple[tuple[str, str], ...]:
    # gRPC metadata keys must be lowercase
    md: list[tuple[str, str]] = [(AUTHORIZATION_META_KEY, authorization)]
    if bundle_identifier:
        md.append((BUNDLE_ID_META_KEY, bundle_identifier))
    for key, value in extra or ():
        md.append((key.lower(), value))
    return tuple(md)


def redact_metadata(metadata: Iterable[tuple[str, str]]) -> dict[str, str]:
    redacted: dict[str, str] = {}
    for key, value in metadata:
        if key.lower() == AUTHORIZATION_META_KEY and value != NO_TOKEN_PLACEHOLDER:
            scheme = value.split(" ", 1)[0] if " " in value else ""
            redacted[key] = f"{scheme} ***".strip()
        else:
            redacted[key] = value
    return redacted
