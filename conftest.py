"""Shared fixtures: in-memory templates and offline font settings."""

import io

import pytest
from PIL import Image

from certgen.api import Session, Template
from certgen.config import Settings
from certgen.fonts import FontRegistry


def make_template_bytes(width: int = 1000, height: int = 600, color=(255, 255, 255)) -> bytes:
    """Solid-color PNG of the given size."""
    img = Image.new("RGB", (width, height), color=color)
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def settings() -> Settings:
    """Settings that never touch system fonts or the network."""
    return Settings(search_system_fonts=False, download_google_fonts=False, use_default_font=True)


@pytest.fixture
def no_font_settings(tmp_path) -> Settings:
    """Settings under which no font can be resolved at all."""
    return Settings(
        font_dirs=[tmp_path / "empty"],
        search_system_fonts=False,
        download_google_fonts=False,
        use_default_font=False,
    )


@pytest.fixture
def registry(settings) -> FontRegistry:
    return FontRegistry(settings)


@pytest.fixture
def template() -> Template:
    return Template.from_bytes(make_template_bytes(1000, 600))


@pytest.fixture
def session(template, settings) -> Session:
    return Session(template, settings=settings)
