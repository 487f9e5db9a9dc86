"""Proveedor Chess.com (API pública `pub/player`)."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from adapters.http_client import dig, request_json
from core.domain.models import TextureRef
from core.domain.results import NotFound, ProviderResult, Success
from core.interfaces.provider import FreshnessTier, TextureQuery


class ChessComPlayerAvatar:
    name = "chess-com"
    tier = FreshnessTier.AUTHORITATIVE
    requires_canonical_id = False
    _base_url = "https://api.chess.com/pub/player"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def locate_texture(self, query: TextureQuery) -> ProviderResult[TextureRef]:
        # La API solo acepta usernames en minúsculas.
        url = f"{self._base_url}/{quote(query.identifier.handle.lower(), safe='')}"
        result = await request_json(self._client, "GET", url, provider=self.name)
        if not isinstance(result, Success):
            return result

        avatar_url = dig(result.value, "avatar")
        if not isinstance(avatar_url, str) or not avatar_url:
            # Jugador sin avatar propio: el placeholder oficial es SVG.
            return NotFound(provider=self.name)
        return Success(value=TextureRef(url=avatar_url, source=self.name), provider=self.name)
