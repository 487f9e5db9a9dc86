"""Proveedores GitHub.

- `GitHubUsersApiAvatar`: API oficial (`avatar_url`), fuente autoritativa pero
  rate-limited sin token (60 req/h).
- `GitHubProfilePng`: `https://github.com/<user>.png`, redirección al CDN de
  avatares; no consume cuota de API.
"""

from __future__ import annotations

from urllib.parse import quote

import httpx

from adapters.http_client import dig, request_json
from core.domain.models import TextureRef
from core.domain.results import ProviderResult, Success, Unavailable
from core.interfaces.provider import FreshnessTier, TextureQuery


class GitHubUsersApiAvatar:
    name = "github-api"
    tier = FreshnessTier.AUTHORITATIVE
    requires_canonical_id = False
    _base_url = "https://api.github.com/users"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def locate_texture(self, query: TextureQuery) -> ProviderResult[TextureRef]:
        url = f"{self._base_url}/{quote(query.identifier.handle, safe='')}"
        # GitHub requiere UA. Accept JSON versión estable.
        result = await request_json(
            self._client,
            "GET",
            url,
            provider=self.name,
            headers={"Accept": "application/vnd.github+json"},
        )
        if not isinstance(result, Success):
            return result

        avatar_url = dig(result.value, "avatar_url")
        if not isinstance(avatar_url, str) or not avatar_url:
            return Unavailable(reason="missing field avatar_url", provider=self.name)
        if query.size:
            separator = "&" if "?" in avatar_url else "?"
            avatar_url = f"{avatar_url}{separator}s={min(query.size, 460)}"
        return Success(value=TextureRef(url=avatar_url, source=self.name), provider=self.name)


class GitHubProfilePng:
    name = "github-png"
    tier = FreshnessTier.MIRROR
    requires_canonical_id = False
    _base_url = "https://github.com"

    async def locate_texture(self, query: TextureQuery) -> ProviderResult[TextureRef]:
        url = f"{self._base_url}/{quote(query.identifier.handle, safe='')}.png"
        return Success(value=TextureRef(url=url, source=self.name), provider=self.name)
