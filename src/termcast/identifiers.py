"""Content-derived identifiers for published recordings."""

from __future__ import annotations

import hashlib


TOKEN_LENGTH = 32


def derive_token(content: bytes | str) -> str:
    """Return the lowercase hex MD5 digest of ``content``.

    The token only depends on the exact byte sequence; text is encoded as UTF-8.
    It doubles as the recording filename stem and as the player DOM id.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.md5(content, usedforsecurity=False).hexdigest()


__all__ = ["TOKEN_LENGTH", "derive_token"]
