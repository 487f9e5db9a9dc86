"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI ni la API.
- Permite que adaptadores (HTTP) y servicios (pipeline) lean config de forma consistente.
- Las decisiones por endpoint (tamaño, resampling, caché) son configuración, no código.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import CachePolicy, Resampling


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "avatar-api"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "avatar-api"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "avatar-api"
    return Path.home() / ".config" / "avatar-api"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str]) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# avatar-api user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AssetSettings(BaseModel):
    """Política de salida de un endpoint de avatar.

    - `default_size`: tamaño cuando el request no pide uno (None = tamaño nativo).
    - `max_native_size`: resolución máxima real del asset; pedir más solo difumina.
    - `resampling`: algoritmo según clase de asset (pixel-art => nearest).
    - `cache_policy`: `fresh-always` o `cache-seconds:N`.
    """

    default_size: int | None = Field(default=256, ge=1)
    max_native_size: int | None = Field(default=None, ge=1)
    resampling: Resampling = Resampling.BILINEAR
    cache_policy: CachePolicy = Field(default_factory=CachePolicy.fresh_always)

    @field_validator("cache_policy", mode="before")
    @classmethod
    def _parse_policy(cls, value: object) -> object:
        if isinstance(value, str):
            return CachePolicy.parse(value)
        return value


DEFAULT_ASSET_SETTINGS: dict[str, AssetSettings] = {
    "minecraft": AssetSettings(
        default_size=256,
        resampling=Resampling.NEAREST,
        cache_policy="fresh-always",
    ),
    "roblox": AssetSettings(
        default_size=256,
        max_native_size=720,
        resampling=Resampling.BILINEAR,
        cache_policy="fresh-always",
    ),
    # Steam sirve como máximo 184x184 (`_full.jpg`).
    "steam": AssetSettings(
        default_size=184,
        max_native_size=184,
        resampling=Resampling.BICUBIC,
        cache_policy="cache-seconds:3600",
    ),
    "github": AssetSettings(
        default_size=256,
        resampling=Resampling.BILINEAR,
        cache_policy="cache-seconds:3600",
    ),
    "chess": AssetSettings(
        default_size=256,
        resampling=Resampling.BILINEAR,
        cache_policy="cache-seconds:3600",
    ),
    "overwatch": AssetSettings(
        default_size=None,
        resampling=Resampling.BICUBIC,
        cache_policy="fresh-always",
    ),
}


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/API/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="AVATAR_API_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout del cliente httpx por request (segundos).",
    )
    provider_timeout_seconds: float = Field(
        default=8.0,
        gt=0,
        description="Presupuesto por llamada a un proveedor; al vencer se pasa al siguiente.",
    )
    user_agent: str = Field(
        default="avatar-api/0.1 (+https://local)",
        min_length=1,
        description="User-Agent para peticiones a proveedores.",
    )
    fanout: bool = Field(
        default=False,
        description="Lanzar los proveedores de una cadena en paralelo (gana la prioridad, no la llegada).",
    )
    max_output_size: int = Field(
        default=1024,
        ge=1,
        le=4096,
        description="Límite global del lado de la imagen de salida (px).",
    )
    log_level: str = Field(
        default="INFO",
        description="Nivel de logging (DEBUG, INFO, WARNING...).",
    )
    host: str = Field(default="127.0.0.1", description="Host para `avatar-api serve`.")
    port: int = Field(default=8000, ge=1, le=65535, description="Puerto para `avatar-api serve`.")

    assets: dict[str, AssetSettings] = Field(
        default_factory=dict,
        description="Overrides por familia de asset (JSON en AVATAR_API_ASSETS).",
    )

    def asset(self, family: str) -> AssetSettings:
        """Settings efectivos de una familia: override si existe, si no el default."""

        override = self.assets.get(family)
        if override is not None:
            return override
        return DEFAULT_ASSET_SETTINGS.get(family, AssetSettings())
