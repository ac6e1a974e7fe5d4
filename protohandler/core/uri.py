from __future__ import annotations

import re
from urllib.parse import unquote

# proto://subcommand?name=val&name=val
_SCHEME_RE = re.compile(r"^(?P<proto>[a-z][a-zA-Z0-9_-]+)://")


def decode_activation_uri(raw: str) -> str:
    """Reverse %XX escaping once. ``+`` is left as-is."""
    return unquote(raw, encoding="utf-8", errors="replace")


def get_protocol(uri: str) -> str | None:
    match = _SCHEME_RE.match(uri)
    if match is None:
        return None
    return match.group("proto")
