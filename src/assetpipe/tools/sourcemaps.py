"""Inline source map extraction.

Bundlers and compilers embed their maps as a base64 ``sourceMappingURL`` data URI
at the end of the output; development builds move that map to an adjacent
``.map`` file and leave a plain reference behind.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from dataclasses import dataclass
from typing import Any, Literal

Kind = Literal["js", "css"]

_DATA_URI = r"data:application/json;(?:charset=[^;,]+;)?base64,([A-Za-z0-9+/=]+)"
_PATTERNS: dict[str, re.Pattern[str]] = {
    "js": re.compile(rf"\n?//[#@] ?sourceMappingURL={_DATA_URI}\s*$"),
    "css": re.compile(rf"\n?/\*[#@] ?sourceMappingURL={_DATA_URI}\s*\*/\s*$"),
}


@dataclass(frozen=True, slots=True)
class ExtractedMap:
    code: str
    source_map: dict[str, Any] | None


def extract_inline_map(code: str, kind: Kind) -> ExtractedMap:
    """Strip a trailing inline source map from ``code`` and decode it."""

    match = _PATTERNS[kind].search(code)
    if match is None:
        return ExtractedMap(code=code, source_map=None)
    try:
        payload = base64.b64decode(match.group(1) + "=" * (-len(match.group(1)) % 4))
        source_map = json.loads(payload.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError):
        return ExtractedMap(code=code, source_map=None)
    if not isinstance(source_map, dict):
        return ExtractedMap(code=code, source_map=None)
    stripped = code[: match.start()].rstrip("\n") + "\n"
    return ExtractedMap(code=stripped, source_map=source_map)


def link_external_map(code: str, map_name: str, kind: Kind) -> str:
    """Append a ``sourceMappingURL`` comment pointing at ``map_name``."""

    body = code.rstrip("\n")
    if kind == "css":
        return f"{body}\n/*# sourceMappingURL={map_name} */\n"
    return f"{body}\n//# sourceMappingURL={map_name}\n"


def render_map(source_map: dict[str, Any], file_name: str) -> str:
    data = dict(source_map)
    data["file"] = file_name
    return json.dumps(data, separators=(",", ":"))
