"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y la clasificación de respuestas de proveedores.
- Facilita testeo: se puede inyectar un `transport` (p.ej. `httpx.MockTransport`).

Clasificación común (ningún proveedor debe romper al caller):
- 404                         -> NotFound
- timeout / error de red      -> Unavailable
- otro no-2xx (incl. 429)     -> Unavailable
- JSON malformado             -> Unavailable
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from core.config import AppSettings
from core.domain.models import TextureRef
from core.domain.results import NotFound, ProviderResult, Success, Unavailable

logger = logging.getLogger(__name__)

JSON_ACCEPT = "application/json"


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todos los proveedores se comporten igual.
    - Un cliente por request: nada mutable se comparte entre requests.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json, text/html;q=0.9, image/*;q=0.8, */*;q=0.5",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


def _classify_status(response: httpx.Response, provider: str) -> ProviderResult[Any] | None:
    if response.status_code == 404:
        return NotFound(provider=provider)
    if response.status_code == 429:
        return Unavailable(reason="rate limited (HTTP 429)", provider=provider)
    if not response.is_success:
        return Unavailable(reason=f"HTTP {response.status_code}", provider=provider)
    return None


async def _send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    provider: str,
    **kwargs: Any,
) -> httpx.Response | Unavailable:
    try:
        return await client.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        logger.debug("%s: timeout on %s %s (%s)", provider, method, url, type(exc).__name__)
        return Unavailable(reason="timeout", provider=provider)
    except httpx.HTTPError as exc:
        logger.debug("%s: transport error on %s %s: %s", provider, method, url, exc)
        return Unavailable(reason=f"transport error: {type(exc).__name__}", provider=provider)


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    provider: str,
    **kwargs: Any,
) -> ProviderResult[Any]:
    """Una request -> JSON ya parseado o un fallo tipado."""

    headers = {"Accept": JSON_ACCEPT, **(kwargs.pop("headers", None) or {})}
    response = await _send(client, method, url, provider=provider, headers=headers, **kwargs)
    if isinstance(response, Unavailable):
        return response
    failure = _classify_status(response, provider)
    if failure is not None:
        return failure
    # Mojang y otros lookups responden 204 sin cuerpo para "no existe".
    if response.status_code == 204:
        return NotFound(provider=provider)
    try:
        return Success(value=response.json(), provider=provider)
    except ValueError:
        return Unavailable(reason="malformed JSON", provider=provider)


async def request_text(
    client: httpx.AsyncClient,
    url: str,
    *,
    provider: str,
    **kwargs: Any,
) -> ProviderResult[httpx.Response]:
    """GET de HTML/texto; devuelve la respuesta para conservar la URL final."""

    response = await _send(client, "GET", url, provider=provider, **kwargs)
    if isinstance(response, Unavailable):
        return response
    failure = _classify_status(response, provider)
    if failure is not None:
        return failure
    return Success(value=response, provider=provider)


class HttpTextureFetcher:
    """Descarga bytes de texturas (únicas respuestas no-JSON del sistema)."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def __call__(self, ref: TextureRef) -> ProviderResult[bytes]:
        provider = ref.source or "texture-fetch"
        if ref.url is None:
            return Success(value=ref.data or b"", provider=provider)
        response = await _send(self._client, "GET", ref.url, provider=provider)
        if isinstance(response, Unavailable):
            return response
        failure = _classify_status(response, provider)
        if failure is not None:
            return failure
        if not response.content:
            return Unavailable(reason="empty texture body", provider=provider)
        return Success(value=response.content, provider=provider)


def dig(data: Any, *path: str | int) -> Any:
    """Navega dicts/listas; devuelve None si falta cualquier tramo."""

    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
        if current is None:
            return None
    return current


def extract_og_image(*, html: str, base_url: str | None = None) -> str | None:
    """URL de `<meta property="og:image">`, absoluta si hay `base_url`."""

    if not html:
        return None

    soup = BeautifulSoup(html, "html.parser")
    og = soup.find("meta", attrs={"property": "og:image"})
    if not og or not og.get("content"):
        return None
    og_image = str(og.get("content")).strip()
    if not og_image:
        return None
    return urljoin(base_url, og_image) if base_url else og_image
