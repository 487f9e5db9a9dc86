"""Proveedores Minecraft.

Identidad (rápido primero, autoritativo al final):
- `MinecraftUuidLiteral`: el identificador ya es un UUID.
- `PlayerDBIdentity`: playerdb.co (devuelve también la URL de la skin).
- `AshconIdentity`: api.ashcon.app (también incluye textura).
- `MojangBatchIdentity`: POST a api.mojang.com con la lista de nombres (rate-limited).

Textura (frescura primero):
- `MojangSessionTexture`: sessionserver, propiedad `textures` en base64 (autoritativo).
- `CrafatarSkinMirror`: espejo cacheado por UUID (puede ir minutos por detrás).
"""

from __future__ import annotations

import base64
import json
from typing import Any
from urllib.parse import quote

import httpx

from adapters.http_client import dig, request_json
from core.domain.identifiers import compact_uuid
from core.domain.models import ParsedIdentifier, TextureRef
from core.domain.results import (
    IdentityMatch,
    NotFound,
    ProviderResult,
    Success,
    Unavailable,
)
from core.interfaces.provider import FreshnessTier, TextureQuery


class MinecraftUuidLiteral:
    name = "uuid-literal"

    async def resolve_identity(self, identifier: ParsedIdentifier) -> ProviderResult[IdentityMatch]:
        uuid = compact_uuid(identifier.handle)
        if uuid is None:
            return NotFound(provider=self.name)
        return Success(value=IdentityMatch(canonical_id=uuid), provider=self.name)


class PlayerDBIdentity:
    name = "playerdb"
    _base_url = "https://playerdb.co/api/player/minecraft"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def resolve_identity(self, identifier: ParsedIdentifier) -> ProviderResult[IdentityMatch]:
        url = f"{self._base_url}/{quote(identifier.handle, safe='')}"
        result = await request_json(self._client, "GET", url, provider=self.name)
        # PlayerDB responde 400 con `code` para jugadores inexistentes.
        if isinstance(result, Unavailable) and result.reason == "HTTP 400":
            return NotFound(provider=self.name)
        if not isinstance(result, Success):
            return result

        data = result.value
        code = dig(data, "code")
        if code != "player.found":
            if isinstance(code, str) and ("not_found" in code or "invalid" in code):
                return NotFound(provider=self.name)
            return Unavailable(reason=f"unexpected code {code!r}", provider=self.name)

        raw_id = dig(data, "data", "player", "raw_id")
        if not isinstance(raw_id, str) or not raw_id:
            return Unavailable(reason="missing field data.player.raw_id", provider=self.name)

        hint = None
        skin = dig(data, "data", "player", "skin_texture")
        if isinstance(skin, str) and skin.startswith("http"):
            hint = TextureRef(url=skin, source=self.name)

        return Success(
            value=IdentityMatch(
                canonical_id=raw_id.replace("-", "").lower(),
                display_name=dig(data, "data", "player", "username"),
                texture_hint=hint,
            ),
            provider=self.name,
        )


class AshconIdentity:
    name = "ashcon"
    _base_url = "https://api.ashcon.app/mojang/v2/user"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def resolve_identity(self, identifier: ParsedIdentifier) -> ProviderResult[IdentityMatch]:
        url = f"{self._base_url}/{quote(identifier.handle, safe='')}"
        result = await request_json(self._client, "GET", url, provider=self.name)
        if not isinstance(result, Success):
            return result

        uuid = dig(result.value, "uuid")
        if not isinstance(uuid, str) or not uuid:
            return Unavailable(reason="missing field uuid", provider=self.name)

        hint = None
        skin = dig(result.value, "textures", "skin", "url")
        if isinstance(skin, str) and skin.startswith("http"):
            hint = TextureRef(url=skin, source=self.name)

        return Success(
            value=IdentityMatch(
                canonical_id=uuid.replace("-", "").lower(),
                display_name=dig(result.value, "username"),
                texture_hint=hint,
            ),
            provider=self.name,
        )


class MojangBatchIdentity:
    """Lookup por lotes: un POST con la lista de nombres."""

    name = "mojang-profiles"
    _url = "https://api.mojang.com/profiles/minecraft"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def resolve_identity(self, identifier: ParsedIdentifier) -> ProviderResult[IdentityMatch]:
        result = await request_json(
            self._client,
            "POST",
            self._url,
            provider=self.name,
            json=[identifier.handle],
        )
        if not isinstance(result, Success):
            return result
        if not isinstance(result.value, list):
            return Unavailable(reason="expected a JSON list", provider=self.name)

        wanted = identifier.handle.lower()
        for entry in result.value:
            if not isinstance(entry, dict):
                continue
            profile_id = entry.get("id")
            profile_name = entry.get("name")
            if isinstance(profile_id, str) and isinstance(profile_name, str) and profile_name.lower() == wanted:
                return Success(
                    value=IdentityMatch(canonical_id=profile_id.lower(), display_name=profile_name),
                    provider=self.name,
                )
        return NotFound(provider=self.name)


def _decode_textures_property(profile: Any) -> dict[str, Any] | None:
    properties = dig(profile, "properties")
    if not isinstance(properties, list):
        return None
    for prop in properties:
        if not isinstance(prop, dict) or prop.get("name", "textures") != "textures":
            continue
        value = prop.get("value")
        if not isinstance(value, str):
            continue
        try:
            decoded = json.loads(base64.b64decode(value))
        except ValueError:
            return None
        return decoded if isinstance(decoded, dict) else None
    return None


class MojangSessionTexture:
    name = "mojang-session"
    tier = FreshnessTier.AUTHORITATIVE
    requires_canonical_id = True
    _base_url = "https://sessionserver.mojang.com/session/minecraft/profile"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def locate_texture(self, query: TextureQuery) -> ProviderResult[TextureRef]:
        if not query.canonical_id:
            return NotFound(provider=self.name)
        url = f"{self._base_url}/{quote(query.canonical_id, safe='')}"
        response = await request_json(self._client, "GET", url, provider=self.name, params={"unsigned": "false"})
        if not isinstance(response, Success):
            return response

        textures = _decode_textures_property(response.value)
        if textures is None:
            return Unavailable(reason="missing or malformed textures property", provider=self.name)
        skin_url = dig(textures, "textures", "SKIN", "url")
        if not isinstance(skin_url, str) or not skin_url:
            # Sin SKIN: la cuenta usa la skin por defecto, el espejo la sirve.
            return NotFound(provider=self.name)
        return Success(value=TextureRef(url=skin_url, source=self.name), provider=self.name)


class CrafatarSkinMirror:
    name = "crafatar"
    tier = FreshnessTier.MIRROR
    requires_canonical_id = True
    _base_url = "https://crafatar.com/skins"

    async def locate_texture(self, query: TextureQuery) -> ProviderResult[TextureRef]:
        if not query.canonical_id:
            return NotFound(provider=self.name)
        url = f"{self._base_url}/{quote(query.canonical_id, safe='')}"
        return Success(value=TextureRef(url=url, source=self.name), provider=self.name)
