import io

import pytest
from PIL import Image
from pydantic import ValidationError

from core.config import AppSettings, AssetSettings
from core.domain.models import CompositionSpec, CropRect, Layer, Resampling
from core.services.image_compositor import (
    CompositionError,
    compose,
    full_image_spec,
    minecraft_face_spec,
    resolve_output_size,
)

from factories import BLACK, BLUE, CLEAR, GREEN, RED, WHITE, colors_of, make_skin, size_of, two_color_png


def test_composition_is_byte_identical_across_runs():
    skin = make_skin(hat=(0, 255, 0, 128))
    spec = minecraft_face_spec(64)

    assert compose(skin, spec) == compose(skin, spec)


def test_nearest_keeps_hard_edges():
    out = compose(two_color_png(), full_image_spec(64, Resampling.NEAREST))

    assert size_of(out) == (64, 64)
    assert colors_of(out) == {BLACK, WHITE}


@pytest.mark.parametrize("resampling", [Resampling.BILINEAR, Resampling.BICUBIC])
def test_smooth_resampling_interpolates_the_edge(resampling):
    out = compose(two_color_png(), full_image_spec(64, resampling))

    colors = colors_of(out)
    assert BLACK in colors and WHITE in colors
    assert len(colors) > 2


def test_transparent_overlay_leaves_base_layer_untouched():
    skin = make_skin(hat=CLEAR)

    out = compose(skin, minecraft_face_spec(None))

    with Image.open(io.BytesIO(skin)) as img:
        expected = img.convert("RGBA").crop((8, 8, 16, 16)).tobytes()
    with Image.open(io.BytesIO(out)) as img:
        assert img.size == (8, 8)
        assert img.convert("RGBA").tobytes() == expected


def test_opaque_overlay_occludes_base_layer():
    out = compose(make_skin(hat=GREEN), minecraft_face_spec(16))

    assert colors_of(out) == {GREEN}


def test_face_upscale_has_no_interpolated_colors():
    out = compose(make_skin(), minecraft_face_spec(128))

    assert size_of(out) == (128, 128)
    assert colors_of(out) == {RED, BLUE}


def test_legacy_64x32_skin_is_supported():
    out = compose(make_skin(size=(64, 32)), minecraft_face_spec(8))

    assert colors_of(out) == {RED, BLUE}


def test_crop_outside_texture_is_a_composition_error():
    with pytest.raises(CompositionError):
        compose(two_color_png(8, 8), minecraft_face_spec(64))


@pytest.mark.parametrize("data", [b"", b"definitely not an image", b"\x89PNG\r\n\x1a\n\x00\x00"])
def test_corrupt_bytes_are_a_composition_error(data):
    with pytest.raises(CompositionError):
        compose(data, full_image_spec(32, Resampling.BILINEAR))


def test_decode_error_message_hides_library_details():
    with pytest.raises(CompositionError) as excinfo:
        compose(b"definitely not an image", full_image_spec(32, Resampling.BILINEAR))

    assert str(excinfo.value) == "unsupported or corrupt image"
    assert excinfo.value.__cause__ is not None


def test_missing_source_texture_is_a_composition_error():
    spec = CompositionSpec(layers=(Layer(source="overlay"),))

    with pytest.raises(CompositionError):
        compose({"primary": two_color_png()}, spec)


def test_layer_must_fit_the_canvas():
    with pytest.raises(ValidationError):
        CompositionSpec(
            layers=(Layer(crop=CropRect(x=0, y=0, width=8, height=8), dest_offset=(4, 0)),),
            canvas_size=(8, 8),
        )


def test_layers_are_applied_in_order_with_offsets():
    spec = CompositionSpec(
        layers=(
            Layer(source="a"),
            Layer(source="b", crop=CropRect(x=0, y=0, width=2, height=2), dest_offset=(2, 2)),
        ),
        canvas_size=(4, 4),
    )
    base = Image.new("RGBA", (4, 4), RED)
    patch = Image.new("RGBA", (2, 2), BLUE)
    buf_a, buf_b = io.BytesIO(), io.BytesIO()
    base.save(buf_a, format="PNG")
    patch.save(buf_b, format="PNG")

    out = compose({"a": buf_a.getvalue(), "b": buf_b.getvalue()}, spec)

    with Image.open(io.BytesIO(out)) as img:
        rgba = img.convert("RGBA")
        assert rgba.getpixel((0, 0)) == RED
        assert rgba.getpixel((3, 3)) == BLUE


class TestOutputSize:
    def setup_method(self):
        self.settings = AppSettings(_env_file=None, max_output_size=1024)

    def test_default_size_when_not_requested(self):
        asset = AssetSettings(default_size=256)
        assert resolve_output_size(None, asset, self.settings).size == 256
        assert resolve_output_size(0, asset, self.settings).size == 256

    def test_smoothed_assets_clamp_to_native_resolution(self):
        asset = AssetSettings(default_size=184, max_native_size=184, resampling=Resampling.BICUBIC)

        decision = resolve_output_size(512, asset, self.settings)

        assert decision.size == 184
        assert decision.clamped
        assert decision.requested == 512

    def test_pixel_art_is_not_clamped_to_native(self):
        asset = AssetSettings(default_size=256, max_native_size=64, resampling=Resampling.NEAREST)

        decision = resolve_output_size(512, asset, self.settings)

        assert decision.size == 512
        assert not decision.clamped

    def test_global_limit_applies_to_every_asset(self):
        asset = AssetSettings(default_size=256, resampling=Resampling.NEAREST)

        decision = resolve_output_size(4000, asset, self.settings)

        assert decision.size == 1024
        assert decision.clamped

    def test_native_default(self):
        asset = AssetSettings(default_size=None)
        assert resolve_output_size(None, asset, self.settings).size is None
