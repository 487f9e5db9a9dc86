"""Resultados etiquetados de proveedores.

Por qué dataclasses y no excepciones:
- "No encontrado" es un resultado normal de un proveedor, no un error.
- Las cadenas de fallback necesitan inspeccionar el resultado y decidir si
  siguen, sin try/except anidados ni flags mutables.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from core.domain.models import TextureRef

T = TypeVar("T")

CanonicalId = str


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    provider: str = ""


@dataclass(frozen=True)
class NotFound:
    provider: str = ""


@dataclass(frozen=True)
class Unavailable:
    reason: str
    provider: str = ""


@dataclass(frozen=True)
class Restricted:
    """El proveedor encontró la entidad pero limita el acceso deliberadamente."""

    reason: str
    provider: str = ""


ProviderResult = Union[Success[T], NotFound, Unavailable, Restricted]


@dataclass(frozen=True)
class IdentityMatch:
    """ID canónico y, opcionalmente, una textura obtenida como subproducto."""

    canonical_id: CanonicalId
    display_name: str | None = None
    texture_hint: TextureRef | None = None


def outcome_label(result: object) -> str:
    """Etiqueta corta para eventos/logs."""

    if isinstance(result, Success):
        return "success"
    if isinstance(result, NotFound):
        return "not_found"
    if isinstance(result, Restricted):
        return "restricted"
    return "unavailable"
