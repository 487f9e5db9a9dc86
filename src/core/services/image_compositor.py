"""Image composition: decode, crop, layer, resample, encode.

Pure CPU work on Pillow images; no I/O. The only exception leaving this
module is `CompositionError`, raised for undecodable bytes or a composition that
does not match the decoded texture.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Mapping

from PIL import Image, UnidentifiedImageError

from core.config import AppSettings, AssetSettings
from core.domain.models import CompositionSpec, CropRect, Layer, Resampling

_RESAMPLE_FILTERS: dict[Resampling, Image.Resampling] = {
    Resampling.NEAREST: Image.Resampling.NEAREST,
    Resampling.BILINEAR: Image.Resampling.BILINEAR,
    Resampling.BICUBIC: Image.Resampling.BICUBIC,
}

PRIMARY_SOURCE = "primary"

# Skin layout (64x64 and legacy 64x32): head front and hat front.
MINECRAFT_FACE_BASE = CropRect(x=8, y=8, width=8, height=8)
MINECRAFT_FACE_HAT = CropRect(x=40, y=8, width=8, height=8)


class CompositionError(Exception):
    """Texture bytes could not be decoded or composed."""


@dataclass(frozen=True)
class SizeDecision:
    size: int | None
    requested: int | None
    clamped: bool = False
    limit: int | None = None


def resolve_output_size(
    requested: int | None,
    asset: AssetSettings,
    settings: AppSettings,
) -> SizeDecision:
    """Pick the output edge length.

    Smoothed assets are clamped to their native maximum (upscaling a photo
    only blurs it). Every asset is clamped to the global `max_output_size`.
    """

    size = requested if requested is not None and requested > 0 else asset.default_size
    if size is None:
        return SizeDecision(size=None, requested=requested)

    limit = settings.max_output_size
    if asset.max_native_size is not None and asset.resampling is not Resampling.NEAREST:
        limit = min(limit, asset.max_native_size)
    if size > limit:
        return SizeDecision(size=limit, requested=size, clamped=True, limit=limit)
    return SizeDecision(size=size, requested=requested)


def decode_texture(data: bytes) -> Image.Image:
    if not data:
        raise CompositionError("empty texture")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
        raise CompositionError("unsupported or corrupt image") from exc
    except (OSError, ValueError, SyntaxError) as exc:
        raise CompositionError("could not decode image") from exc


def _layer_image(layer: Layer, sources: Mapping[str, Image.Image]) -> Image.Image:
    try:
        source = sources[layer.source]
    except KeyError as exc:
        raise CompositionError(f"missing texture {layer.source!r}") from exc
    if layer.crop is None:
        return source
    left, top, right, bottom = layer.crop.box()
    if right > source.width or bottom > source.height:
        raise CompositionError(
            f"crop {layer.crop.box()} outside texture {source.width}x{source.height}"
        )
    return source.crop((left, top, right, bottom))


def compose_image(sources: Mapping[str, Image.Image], spec: CompositionSpec) -> Image.Image:
    layers = [(layer, _layer_image(layer, sources)) for layer in spec.layers]

    canvas_size = spec.canvas_size or layers[0][1].size
    canvas = Image.new("RGBA", canvas_size, (0, 0, 0, 0))
    for layer, img in layers:
        x, y = layer.dest_offset
        if x + img.width > canvas.width or y + img.height > canvas.height:
            raise CompositionError("layer does not fit inside the canvas")
        canvas.alpha_composite(img, dest=(x, y))

    if spec.target_size is not None and spec.target_size != canvas.size:
        canvas = canvas.resize(spec.target_size, _RESAMPLE_FILTERS[spec.resampling])
    return canvas


def encode_image(img: Image.Image, output_format: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    try:
        img.save(buffer, format=output_format)
    except (OSError, ValueError, KeyError) as exc:
        raise CompositionError(f"could not encode {output_format}") from exc
    return buffer.getvalue()


def compose(textures: bytes | Mapping[str, bytes], spec: CompositionSpec) -> bytes:
    """Decode `textures`, apply `spec` and return the encoded buffer.

    Deterministic: the same bytes and spec always produce identical output.
    """

    if isinstance(textures, (bytes, bytearray)):
        textures = {PRIMARY_SOURCE: bytes(textures)}
    sources = {key: decode_texture(data) for key, data in textures.items()}
    return encode_image(compose_image(sources, spec), spec.output_format)


def minecraft_face_spec(size: int | None, resampling: Resampling = Resampling.NEAREST) -> CompositionSpec:
    """8x8 face: head front, then the hat overlay alpha-blended on top."""

    return CompositionSpec(
        layers=(
            Layer(source=PRIMARY_SOURCE, crop=MINECRAFT_FACE_BASE),
            Layer(source=PRIMARY_SOURCE, crop=MINECRAFT_FACE_HAT),
        ),
        canvas_size=(8, 8),
        target_size=(size, size) if size else None,
        resampling=resampling,
    )


def full_image_spec(size: int | None, resampling: Resampling) -> CompositionSpec:
    """Whole texture resized to a square output."""

    return CompositionSpec(
        layers=(Layer(source=PRIMARY_SOURCE),),
        target_size=(size, size) if size else None,
        resampling=resampling,
    )
