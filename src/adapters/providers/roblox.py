"""Proveedores Roblox.

- `RobloxUsernamesIdentity`: POST /v1/usernames/users (búsqueda exacta por lote).
- `RobloxUserSearchIdentity`: búsqueda difusa; se prefiere la coincidencia exacta.
- `RobloxHeadshotTexture`: thumbnails API (headshot PNG).

Roblox sirve headshots de 48, 60, 150, 420 y 720 px; pedimos 420 o 720
según el tamaño de salida.
"""

from __future__ import annotations

import httpx

from adapters.http_client import dig, request_json
from core.domain.models import ParsedIdentifier, TextureRef
from core.domain.results import (
    IdentityMatch,
    NotFound,
    ProviderResult,
    Restricted,
    Success,
    Unavailable,
)
from core.interfaces.provider import FreshnessTier, TextureQuery


def _user_id(entry: object) -> str | None:
    value = dig(entry, "id")
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        return None
    return str(value)


class RobloxUsernamesIdentity:
    name = "roblox-usernames"
    _url = "https://users.roblox.com/v1/usernames/users"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def resolve_identity(self, identifier: ParsedIdentifier) -> ProviderResult[IdentityMatch]:
        result = await request_json(
            self._client,
            "POST",
            self._url,
            provider=self.name,
            json={"usernames": [identifier.handle], "excludeBannedUsers": True},
        )
        if not isinstance(result, Success):
            return result
        entries = dig(result.value, "data")
        if not isinstance(entries, list):
            return Unavailable(reason="missing field data", provider=self.name)
        if not entries:
            return NotFound(provider=self.name)

        user_id = _user_id(entries[0])
        if user_id is None:
            return Unavailable(reason="missing field data[0].id", provider=self.name)
        return Success(
            value=IdentityMatch(canonical_id=user_id, display_name=dig(entries[0], "name")),
            provider=self.name,
        )


class RobloxUserSearchIdentity:
    name = "roblox-search"
    _url = "https://users.roblox.com/v1/users/search"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def resolve_identity(self, identifier: ParsedIdentifier) -> ProviderResult[IdentityMatch]:
        result = await request_json(
            self._client,
            "GET",
            self._url,
            provider=self.name,
            params={"keyword": identifier.handle, "limit": 10},
        )
        if not isinstance(result, Success):
            return result
        entries = dig(result.value, "data")
        if not isinstance(entries, list):
            return Unavailable(reason="missing field data", provider=self.name)
        if not entries:
            return NotFound(provider=self.name)

        wanted = identifier.handle.lower()
        chosen = next(
            (e for e in entries if isinstance(dig(e, "name"), str) and e["name"].lower() == wanted),
            entries[0],
        )
        user_id = _user_id(chosen)
        if user_id is None:
            return Unavailable(reason="missing field id", provider=self.name)
        return Success(
            value=IdentityMatch(canonical_id=user_id, display_name=dig(chosen, "name")),
            provider=self.name,
        )


class RobloxHeadshotTexture:
    name = "roblox-thumbnails"
    tier = FreshnessTier.AUTHORITATIVE
    requires_canonical_id = True
    _url = "https://thumbnails.roblox.com/v1/users/avatar-headshot"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def locate_texture(self, query: TextureQuery) -> ProviderResult[TextureRef]:
        if not query.canonical_id:
            return NotFound(provider=self.name)
        size = "720x720" if (query.size or 0) > 420 else "420x420"
        result = await request_json(
            self._client,
            "GET",
            self._url,
            provider=self.name,
            params={
                "userIds": query.canonical_id,
                "size": size,
                "format": "Png",
                "isCircular": "false",
            },
        )
        if not isinstance(result, Success):
            return result

        entry = dig(result.value, "data", 0)
        if not isinstance(entry, dict):
            return NotFound(provider=self.name)

        state = entry.get("state")
        image_url = entry.get("imageUrl")
        if state == "Completed" and isinstance(image_url, str) and image_url:
            return Success(value=TextureRef(url=image_url, source=self.name), provider=self.name)
        if state == "Blocked":
            return Restricted(reason="avatar thumbnail is blocked by moderation", provider=self.name)
        if state in ("Pending", "Error"):
            return Unavailable(reason=f"thumbnail state {state}", provider=self.name)
        return Unavailable(reason=f"unexpected thumbnail state {state!r}", provider=self.name)
