"""Parsing de identificadores.

Un único punto de normalización para `name#1234`, `name-1234` y `name`:
- `#` siempre separa nombre y discriminador.
- `-` solo separa cuando el sufijo es numérico (un vanity de Steam como
  `foo-bar` se queda entero).
"""

from __future__ import annotations

import re

from core.domain.models import ParsedIdentifier

_DASH_TAG = re.compile(r"^(?P<name>.+)-(?P<tag>\d+)$")


class InvalidIdentifier(ValueError):
    """El identificador está vacío tras normalizar."""


def parse_identifier(raw: str | None) -> ParsedIdentifier:
    handle = (raw or "").strip()
    if not handle:
        raise InvalidIdentifier("identifier is empty")

    if "#" in handle:
        name, _, tag = handle.rpartition("#")
        name = name.strip()
        tag = tag.strip()
        if name and tag:
            return ParsedIdentifier(raw=raw or "", handle=handle, name=name, discriminator=tag)
        return ParsedIdentifier(raw=raw or "", handle=handle, name=name or tag or handle)

    match = _DASH_TAG.match(handle)
    if match:
        return ParsedIdentifier(
            raw=raw or "",
            handle=handle,
            name=match.group("name"),
            discriminator=match.group("tag"),
        )
    return ParsedIdentifier(raw=raw or "", handle=handle, name=handle)


_UUID_HEX = re.compile(r"^[0-9a-fA-F]{32}$")


def compact_uuid(value: str) -> str | None:
    """`8667ba71-b85a-4004-af54-457a9734eed7` -> `8667ba71b85a4004af54457a9734eed7`."""

    candidate = value.strip().replace("-", "")
    if _UUID_HEX.match(candidate):
        return candidate.lower()
    return None
