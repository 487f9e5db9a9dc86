"""Contratos de proveedores de identidad y textura.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Un proveedor concreto implementa cero, una o ambas capacidades; las
  cadenas del Core solo dependen de estas abstracciones.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol, runtime_checkable

from core.domain.models import ParsedIdentifier, TextureRef
from core.domain.results import CanonicalId, IdentityMatch, ProviderResult


class FreshnessTier(IntEnum):
    """Orden de frescura: menor valor = más actual."""

    AUTHORITATIVE = 0
    SECONDARY = 1
    MIRROR = 2


@dataclass(frozen=True)
class TextureQuery:
    identifier: ParsedIdentifier
    canonical_id: CanonicalId | None = None
    size: int | None = None


@runtime_checkable
class IdentityProvider(Protocol):
    """Traduce un identificador humano a un ID canónico estable."""

    name: str

    async def resolve_identity(self, identifier: ParsedIdentifier) -> ProviderResult[IdentityMatch]:
        ...


@runtime_checkable
class TextureProvider(Protocol):
    """Localiza la textura (URL o bytes) de una cuenta.

    Reglas de diseño:
    - `tier` ordena la cadena (autoritativo primero, espejo cacheado al final).
    - `requires_canonical_id` indica si necesita el ID o acepta el nombre crudo.
    """

    name: str
    tier: FreshnessTier
    requires_canonical_id: bool

    async def locate_texture(self, query: TextureQuery) -> ProviderResult[TextureRef]:
        ...


@runtime_checkable
class TextureFetcher(Protocol):
    """Descarga los bytes de una `TextureRef` con URL."""

    async def __call__(self, ref: TextureRef) -> ProviderResult[bytes]:
        ...
