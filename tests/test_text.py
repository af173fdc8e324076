import numpy as np
import pytest
from PIL import Image

from edit_core import (
    BitmapFontProvider,
    FallbackFontProvider,
    FontNotFound,
    ImageFormat,
    InvalidParameters,
    SystemFontProvider,
    TextOverlay,
    apply_texts,
)
from edit_core.fonts import (
    GLYPHS,
    PLACEHOLDER_CJK,
    PLACEHOLDER_OTHER,
    BitmapFont,
    glyph_for,
)
from edit_core.ops_text import parse_hex_color, preferred_fonts


@pytest.fixture
def white(make_image):
    return make_image(Image.new("RGB", (60, 20), (255, 255, 255)))


@pytest.fixture
def bitmap():
    return BitmapFontProvider()


def test_bitmap_fallback_draws_glyph_pattern(white, bitmap, decode_rgba):
    out = apply_texts(white, [TextOverlay("HI", 2, 2, 7, "#FF0000")], font_provider=bitmap)
    px = decode_rgba(out)

    # top row of "H" is 0b10001
    assert tuple(px[2, 2, :3]) == (255, 0, 0)
    assert tuple(px[2, 3, :3]) == (255, 255, 255)
    assert tuple(px[2, 6, :3]) == (255, 0, 0)
    # middle bar of "H"
    assert (px[5, 2:7, 0] == 255).all() and (px[5, 2:7, 1] == 0).all()
    assert out.has_alpha is False
    assert (out.width, out.height) == (60, 20)


def test_bitmap_font_scales_with_size(white, bitmap, decode_rgba):
    px = decode_rgba(apply_texts(white, [TextOverlay("I", 0, 0, 14, "#000000")], font_provider=bitmap))
    # scale 2: the 3-wide top bar of "I" (cols 1..3) becomes 6 px wide
    dark = np.where(px[0, :, 0] == 0)[0]
    assert dark.tolist() == [2, 3, 4, 5, 6, 7]


def test_rotation_is_ignored(white, bitmap):
    upright = apply_texts(white, [TextOverlay("AB", 3, 3, 7, "#0000ff")], font_provider=bitmap)
    rotated = apply_texts(white, [TextOverlay("AB", 3, 3, 7, "#0000ff", 45.0)], font_provider=bitmap)
    assert upright.data == rotated.data


def test_empty_text_is_skipped(white, bitmap, decode_rgba):
    out = apply_texts(white, [TextOverlay("", 0, 0, 0, "bogus")], font_provider=bitmap)
    assert (decode_rgba(out)[..., :3] == 255).all()


def test_empty_list_rejected(white):
    with pytest.raises(InvalidParameters):
        apply_texts(white, [])


def test_zero_font_size_rejected(white):
    with pytest.raises(InvalidParameters, match="font size"):
        apply_texts(white, [TextOverlay("x", 0, 0, 0)])


def test_bad_color_names_index_and_value(white):
    texts = [TextOverlay("ok", 0, 0, 10, "#000000"), TextOverlay("bad", 0, 0, 10, "#12345G")]
    with pytest.raises(InvalidParameters, match=r"index 1: #12345G"):
        apply_texts(white, texts)


def test_default_provider_draws_something(make_image, decode_rgba):
    base = make_image(Image.new("RGB", (120, 40), (255, 255, 255)), ImageFormat.PNG)
    out = apply_texts(base, [TextOverlay("Hello", 4, 4, 24, "#000000")])
    assert (decode_rgba(out)[..., :3] < 128).any()


def test_system_provider_without_fonts(tmp_path):
    provider = SystemFontProvider([tmp_path], search_system=False)
    with pytest.raises(FontNotFound):
        provider.load(["DejaVuSans.ttf"], 12)


def test_system_provider_skips_unusable_files(tmp_path):
    (tmp_path / "Broken.ttf").write_bytes(b"not a font")
    provider = SystemFontProvider([tmp_path], search_system=False)
    assert provider.find("broken.TTF") == tmp_path / "Broken.ttf"
    with pytest.raises(FontNotFound):
        provider.load(["Broken.ttf"], 12)


def test_fallback_chain_ends_in_bitmap(tmp_path):
    chain = FallbackFontProvider([SystemFontProvider([tmp_path], search_system=False), BitmapFontProvider()])
    font = chain.load(["Nope.ttf"], 21)
    assert isinstance(font, BitmapFont)
    assert font.scale == 3


def test_fallback_chain_can_fail(tmp_path):
    chain = FallbackFontProvider([SystemFontProvider([tmp_path], search_system=False)])
    with pytest.raises(FontNotFound):
        chain.load(["Nope.ttf"], 12)


def test_glyph_table_shape():
    for ch, rows in GLYPHS.items():
        assert len(rows) == 7, ch
        assert all(0 <= r < 32 for r in rows), ch


def test_placeholder_glyphs():
    assert glyph_for("a") == GLYPHS["A"]
    assert glyph_for("\t") == GLYPHS[" "]
    assert glyph_for("字") == PLACEHOLDER_CJK
    assert glyph_for("カ") == PLACEHOLDER_CJK
    assert glyph_for("ж") == PLACEHOLDER_OTHER
    assert glyph_for("@") == PLACEHOLDER_OTHER


def test_cjk_text_prefers_cjk_fonts():
    assert preferred_fonts("你好")[0].lower().startswith("noto")
    assert preferred_fonts("hello")[0] == "DejaVuSans.ttf"


@pytest.mark.parametrize(
    "value, rgb",
    [("#000000", (0, 0, 0)), ("#FFffFF", (255, 255, 255)), ("#1a2B3c", (26, 43, 60))],
)
def test_parse_hex_color(value, rgb):
    assert parse_hex_color(value) == rgb


@pytest.mark.parametrize("value", ["000000", "#FFF", "#GG0000", "#00000000", "red"])
def test_parse_hex_color_rejects(value):
    with pytest.raises(ValueError):
        parse_hex_color(value)
