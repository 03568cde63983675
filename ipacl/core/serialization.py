"""Wire helpers for the two serialized allowlist forms.

Compact form: a JSON string literal holding comma-separated entries,
e.g. ``"10.0.0.1,::1"``. The empty list is ``""``.

Line form: one entry per line.
"""
from typing import Iterable, List, Union

from ipacl.core.errors import AllowlistFormatError

Data = Union[bytes, bytearray, str]


def _text(data: Data) -> str:
    if isinstance(data, (bytes, bytearray)):
        try:
            return bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise AllowlistFormatError("allowlist: invalid allowlist") from e
    return data


def quote_entries(entries: Iterable[str]) -> str:
    """Render entries in the compact form."""
    return '"' + ",".join(entries) + '"'


def unquote_entries(data: Data) -> List[str]:
    """Split a compact-form value into trimmed, non-empty tokens."""
    text = _text(data)
    if len(text) < 2 or text[0] != '"' or text[-1] != '"':
        raise AllowlistFormatError("allowlist: invalid allowlist")

    body = text[1:-1].strip()
    tokens = []
    for token in body.split(","):
        token = token.strip()
        if token:
            tokens.append(token)
    return tokens


def join_lines(entries: Iterable[str]) -> bytes:
    """Render entries in the line form."""
    return "\n".join(entries).encode("utf-8")


def split_lines(data: Data) -> List[str]:
    """Split a line-form value, dropping blank lines."""
    return [line.strip() for line in _text(data).splitlines() if line.strip()]
