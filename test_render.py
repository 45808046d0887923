"""Certificate rendering: surface size, anchors, determinism, and degradation."""

import io
import math

import pytest
from PIL import Image, ImageDraw

from certgen.api.models import Template, TextField
from certgen.errors import FontUnavailableError, InvalidTemplateError
from certgen.fonts import FontRegistry
from certgen.render.certificate import render_certificate
from certgen.render.image import save_image_to_bytes
from conftest import make_template_bytes


@pytest.fixture
def name_field() -> TextField:
    return TextField(
        label="Name", x=100, y=100, width=300, height=40, font_size=24, align="center", auto_width=False
    )


@pytest.fixture
def text_calls(monkeypatch):
    """Record every ImageDraw.text call as (position, text, anchor)."""
    calls = []
    original = ImageDraw.ImageDraw.text

    def spy(self, xy, text, *args, **kwargs):
        calls.append((tuple(xy), text, kwargs.get("anchor")))
        return original(self, xy, text, *args, **kwargs)

    monkeypatch.setattr(ImageDraw.ImageDraw, "text", spy)
    return calls


def test_surface_matches_template_size(template, registry, name_field):
    image = render_certificate(template, [name_field], {"Name": "Ann"}, registry)
    assert image.size == (1000, 600)
    assert image.mode == "RGBA"


def test_template_is_stretched_not_cropped(registry):
    # Declared size differs from the encoded image: the image is scaled to fill it
    template = Template(make_template_bytes(200, 100, color=(10, 20, 30)), width=400, height=300)
    image = render_certificate(template, [], None, registry)
    assert image.size == (400, 300)
    for corner in [(0, 0), (399, 0), (0, 299), (399, 299)]:
        assert image.getpixel(corner) == pytest.approx((10, 20, 30, 255), abs=1)


def test_text_anchors_ignore_overflow_without_auto_width(template, registry, name_field, text_calls):
    render_certificate(template, [name_field], {"Name": "Ann"}, registry)
    render_certificate(template, [name_field], {"Name": "Beatrice Montgomery"}, registry)
    assert text_calls == [
        ((250, 128), "Ann", "ms"),
        ((250, 128), "Beatrice Montgomery", "ms"),
    ]


def test_auto_width_moves_center_anchor(template, registry, name_field, text_calls):
    field = name_field.model_copy(update={"auto_width": True})
    render_certificate(template, [field], {"Name": "Ann"}, registry)
    width = math.ceil(registry.load_font("Arial", 24).getlength("Ann")) + 20
    (x, y), _, _ = text_calls[0]
    assert x == 100 + width / 2
    assert y == 128


def test_text_is_drawn_in_field_color(template, registry, name_field):
    field = name_field.model_copy(update={"color": (255, 0, 0), "font_size": 40})
    image = render_certificate(template, [field], {"Name": "WWWW"}, registry)
    region = image.crop((100, 80, 400, 150))
    assert (255, 0, 0, 255) in {color for _, color in region.getcolors(maxcolors=100000)}


def test_missing_column_renders_blank(template, registry, name_field):
    image = render_certificate(template, [name_field], {"Other": "x"}, registry)
    assert image.getcolors() == [(1000 * 600, (255, 255, 255, 255))]


def test_rendering_is_deterministic(template, registry, name_field):
    row = {"Name": "Beatrice Montgomery"}
    first = save_image_to_bytes(render_certificate(template, [name_field], row, registry))
    second = save_image_to_bytes(render_certificate(template, [name_field], row, registry))
    assert first == second


def test_later_fields_draw_on_top(template, registry):
    below = TextField(label="A", x=100, y=100, width=300, height=40, font_size=40, color="#ff0000")
    above = below.model_copy(update={"id": "field-above", "label": "B", "color": (0, 0, 255)})
    row = {"A": "MMMM", "B": "MMMM"}
    image = render_certificate(template, [below, above], row, registry)
    colors = {color for _, color in image.getcolors(maxcolors=100000)}
    assert (0, 0, 255, 255) in colors
    assert (255, 0, 0, 255) not in colors


def test_invalid_template_raises(registry, name_field):
    with pytest.raises(InvalidTemplateError):
        Template.from_bytes(b"definitely not an image")

    broken = Template(b"not an image at all", width=10, height=10)
    with pytest.raises(InvalidTemplateError):
        render_certificate(broken, [name_field], {"Name": "Ann"}, registry)


def test_unloadable_font_skipped_in_preview_but_fatal_when_strict(template, no_font_settings, name_field):
    registry = FontRegistry(no_font_settings)
    image = render_certificate(template, [name_field], {"Name": "Ann"}, registry)
    assert image.size == (1000, 600)
    with pytest.raises(FontUnavailableError):
        render_certificate(template, [name_field], {"Name": "Ann"}, registry, strict=True)


def test_template_from_path(tmp_path):
    path = tmp_path / "diploma.png"
    path.write_bytes(make_template_bytes(320, 200))
    template = Template.from_path(path)
    assert (template.width, template.height, template.name) == (320, 200, "diploma")
    assert Image.open(io.BytesIO(template.image_bytes)).size == (320, 200)
