"""Proveedor Overwatch (ow-api.com).

Uso: `Name#1234` o `Name-1234`; la URL siempre lleva `Name-1234`.
Plataforma `pc` y región `us` cubren la mayoría de perfiles (incluidas
cuentas con progresión cruzada).

Perfiles privados: ow-api suele devolver el icono igualmente; si marca
`private` y no hay icono, el acceso está restringido.
"""

from __future__ import annotations

from urllib.parse import quote

import httpx

from adapters.http_client import dig, request_json
from core.domain.models import TextureRef
from core.domain.results import NotFound, ProviderResult, Restricted, Success, Unavailable
from core.interfaces.provider import FreshnessTier, TextureQuery


class OwApiProfileIcon:
    name = "ow-api"
    tier = FreshnessTier.AUTHORITATIVE
    requires_canonical_id = False
    _base_url = "https://ow-api.com/v1/stats"

    def __init__(self, client: httpx.AsyncClient, *, platform: str = "pc", region: str = "us") -> None:
        self._client = client
        self._platform = platform
        self._region = region

    async def locate_texture(self, query: TextureQuery) -> ProviderResult[TextureRef]:
        tag = query.identifier.battletag("-")
        url = f"{self._base_url}/{self._platform}/{self._region}/{quote(tag, safe='')}/profile"
        result = await request_json(self._client, "GET", url, provider=self.name)
        if not isinstance(result, Success):
            return result

        data = result.value
        error = dig(data, "error")
        if isinstance(error, str) and "not found" in error.lower():
            return NotFound(provider=self.name)

        icon = dig(data, "icon")
        if isinstance(icon, str) and icon:
            return Success(value=TextureRef(url=icon, source=self.name), provider=self.name)
        if dig(data, "private") is True:
            return Restricted(reason="Overwatch profile is private", provider=self.name)
        return Unavailable(reason="missing field icon", provider=self.name)
