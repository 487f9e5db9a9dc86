"""Proveedor Steam (perfil público de la comunidad).

Implementación:
- SteamID64 (17 dígitos) -> /profiles/<id>, cualquier otro valor -> /id/<vanity>.
- Extrae `og:image` del HTML y fuerza la variante `_full` (184 px).

Steam responde 200 con una página de error para vanities inexistentes:
la ausencia de `og:image` se trata como NotFound.
"""

from __future__ import annotations

import re
from urllib.parse import quote

import httpx

from adapters.http_client import extract_og_image, request_text
from core.domain.models import TextureRef
from core.domain.results import NotFound, ProviderResult, Success
from core.interfaces.provider import FreshnessTier, TextureQuery

_STEAM_ID64 = re.compile(r"^\d{17}$")
_SMALL_VARIANT = re.compile(r"(_medium|_thumb)?\.jpg$", re.IGNORECASE)


def profile_url(handle: str) -> str:
    if _STEAM_ID64.match(handle):
        return f"https://steamcommunity.com/profiles/{handle}"
    return f"https://steamcommunity.com/id/{quote(handle, safe='')}"


def full_resolution(avatar_url: str) -> str:
    """`..._medium.jpg` / `..._thumb.jpg` / `....jpg` -> `..._full.jpg`."""

    if avatar_url.lower().endswith("_full.jpg"):
        return avatar_url
    return _SMALL_VARIANT.sub("_full.jpg", avatar_url)


class SteamCommunityAvatar:
    name = "steam-community"
    tier = FreshnessTier.AUTHORITATIVE
    requires_canonical_id = False

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def locate_texture(self, query: TextureQuery) -> ProviderResult[TextureRef]:
        result = await request_text(self._client, profile_url(query.identifier.handle), provider=self.name)
        if not isinstance(result, Success):
            return result

        response = result.value
        og_image = extract_og_image(html=response.text or "", base_url=str(response.url))
        if og_image is None:
            return NotFound(provider=self.name)
        return Success(
            value=TextureRef(url=full_resolution(og_image), format="jpeg", source=self.name),
            provider=self.name,
        )
