"""Settings loading and file-name helpers."""

from pathlib import Path

import pytest

from certgen.config import Settings, format_output_name, load_config, sanitize_filename


def test_defaults_without_config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = load_config()
    assert settings == Settings()
    assert settings.archive_name == "certificates.zip"
    assert not settings.download_google_fonts


def test_load_config_from_toml(tmp_path):
    path = tmp_path / "certgen.toml"
    path.write_text(
        'font_dirs = ["fonts", "/opt/fonts"]\n'
        "search_system_fonts = false\n"
        'archive_name = "diplomas.zip"\n'
    )
    settings = load_config(path)
    assert settings.font_dirs == [tmp_path / "fonts", Path("/opt/fonts")]
    assert not settings.search_system_fonts
    assert settings.archive_name == "diplomas.zip"


def test_missing_explicit_config_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.toml")


def test_invalid_config_raises(tmp_path):
    path = tmp_path / "certgen.toml"
    path.write_text('output_format = "GIF"\n')
    with pytest.raises(ValueError):
        load_config(path)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Ann", "Ann"),
        ("Beatrice Montgomery", "Beatrice_Montgomery"),
        ("O'Brien/Smith", "O_Brien_Smith"),
        ("Zoë-2024_final", "Zo_-2024_final"),
    ],
)
def test_sanitize_filename(name, expected):
    assert sanitize_filename(name) == expected


def test_format_output_name_fallback():
    assert format_output_name("Ann Lee", 0) == "Ann_Lee"
    assert format_output_name("", 4) == "certificate-5"
    assert format_output_name(None, 0, prefix="award") == "award-1"
