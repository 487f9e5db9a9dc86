"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Facilita normalizar datos heterogéneos de múltiples proveedores de avatar.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
- Todo objeto vive dentro de un único request; nada se persiste.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict


class Resampling(str, Enum):
    """Algoritmo de resampling al escalar la imagen compuesta."""

    NEAREST = "nearest"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"


class ParsedIdentifier(BaseModel):
    """Identificador normalizado (`name#1234`, `name-1234` o solo `name`).

    Cada adaptador decide en su propio call site si usa `handle`, `name` o
    `battletag()`; la normalización no se aplica globalmente.
    """

    model_config = ConfigDict(frozen=True)

    raw: str = Field(..., description="Valor tal como llegó en el request.")
    handle: str = Field(..., min_length=1, description="Valor recortado completo.")
    name: str = Field(..., min_length=1, description="Parte de nombre sin discriminador.")
    discriminator: str | None = Field(
        default=None,
        description="Tag numérico (BattleTag) si venía en el identificador.",
    )

    def battletag(self, separator: str = "-") -> str:
        if self.discriminator is None:
            return self.name
        return f"{self.name}{separator}{self.discriminator}"


class TextureRef(BaseModel):
    """Referencia a una textura: URL remota o bytes ya descargados."""

    url: str | None = Field(default=None, description="URL a descargar.")
    data: bytes | None = Field(default=None, description="Bytes ya descargados.")
    format: str = Field(default="png", description="Formato declarado (PNG asumido).")
    source: str | None = Field(default=None, description="Proveedor que la produjo.")

    @model_validator(mode="after")
    def _exactly_one(self) -> "TextureRef":
        if (self.url is None) == (self.data is None):
            raise ValueError("TextureRef needs exactly one of url or data")
        return self


class CropRect(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)

    def box(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.x + self.width, self.y + self.height)


class Layer(BaseModel):
    """Una capa de la composición: qué textura, qué región y dónde pegarla."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(default="primary", description="Clave de la textura de origen.")
    crop: CropRect | None = Field(default=None, description="Región a recortar (None = completa).")
    dest_offset: tuple[int, int] = Field(default=(0, 0), description="Posición en el canvas.")


class CompositionSpec(BaseModel):
    """Receta de composición.

    Las capas se aplican en orden con alpha blending sobre un
    canvas transparente; una capa posterior solo tapa a las anteriores donde
    sus propios píxeles no son transparentes.
    """

    model_config = ConfigDict(frozen=True)

    layers: tuple[Layer, ...] = Field(..., min_length=1)
    canvas_size: tuple[int, int] | None = Field(
        default=None,
        description="Tamaño lógico del canvas (None = tamaño de la primera capa).",
    )
    target_size: tuple[int, int] | None = Field(
        default=None,
        description="Tamaño de salida (None = tamaño del canvas).",
    )
    resampling: Resampling = Resampling.BILINEAR
    output_format: str = Field(default="PNG")

    @model_validator(mode="after")
    def _layers_fit(self) -> "CompositionSpec":
        if self.canvas_size is None:
            return self
        cw, ch = self.canvas_size
        for layer in self.layers:
            if layer.crop is None:
                continue
            x, y = layer.dest_offset
            if x < 0 or y < 0 or x + layer.crop.width > cw or y + layer.crop.height > ch:
                raise ValueError("layer does not fit inside the canvas")
        return self


class CachePolicy(BaseModel):
    """Política de caché HTTP de un endpoint (`fresh-always` | `cache-seconds:N`)."""

    model_config = ConfigDict(frozen=True)

    max_age: int | None = Field(
        default=None,
        ge=0,
        description="Segundos cacheables; None significa fresh-always.",
    )

    @classmethod
    def fresh_always(cls) -> "CachePolicy":
        return cls(max_age=None)

    @classmethod
    def parse(cls, value: str) -> "CachePolicy":
        text = value.strip().lower()
        if text == "fresh-always":
            return cls.fresh_always()
        prefix = "cache-seconds:"
        if text.startswith(prefix):
            seconds = text[len(prefix):].strip()
            if seconds.isdigit():
                return cls(max_age=int(seconds))
        raise ValueError(f"invalid cache policy: {value!r}")

    def label(self) -> str:
        if self.max_age is None:
            return "fresh-always"
        return f"cache-seconds:{self.max_age}"

    def headers(self) -> dict[str, str]:
        if self.max_age is None:
            return {
                "Cache-Control": "no-cache, no-store, must-revalidate, max-age=0",
                "Pragma": "no-cache",
                "Expires": "0",
            }
        return {"Cache-Control": f"public, max-age={self.max_age}"}
