"""Batch export: archive entries, naming, progress, and failure handling."""

import io
import zipfile

import pytest
from PIL import Image

from certgen.api.models import Template, TextField
from certgen.errors import ExportAbortedError, ExportCancelledError
from certgen.render import archive as archive_module
from certgen.render.archive import BatchExporter, ExportState, unique_entry_name


@pytest.fixture
def fields() -> list[TextField]:
    return [
        TextField(label="Name", x=100, y=100, width=300, height=40, font_size=24, align="center"),
        TextField(label="Course", x=100, y=200, width=300, height=40, font_size=18, align="left"),
    ]


@pytest.fixture
def exporter(registry) -> BatchExporter:
    return BatchExporter(registry)


def read_entries(result) -> dict[str, Image.Image]:
    with zipfile.ZipFile(io.BytesIO(result.archive)) as zf:
        return {name: Image.open(io.BytesIO(zf.read(name))) for name in zf.namelist()}


def test_two_rows_two_entries(template, exporter, fields):
    rows = [{"Name": "Ann"}, {"Name": "Beatrice Montgomery"}]
    result = exporter.export_all(template, fields[:1], rows)

    assert result.entry_names == ["Ann.png", "Beatrice_Montgomery.png"]
    entries = read_entries(result)
    assert set(entries) == {"Ann.png", "Beatrice_Montgomery.png"}
    for image in entries.values():
        assert image.format == "PNG"
        assert image.size == (1000, 600)


def test_progress_reported_after_every_row(template, exporter, fields):
    calls = []
    rows = [{"Name": f"Person {i}"} for i in range(3)]
    exporter.export_all(template, fields, rows, progress=lambda done, total: calls.append((done, total)))
    assert calls == [(1, 3), (2, 3), (3, 3)]
    assert exporter.completed_count == 3
    assert exporter.state is ExportState.IDLE


def test_duplicate_titles_are_disambiguated(template, exporter, fields):
    rows = [{"Name": "Ann"}, {"Name": "Ann"}, {"Name": "Ann!"}, {"Name": "Ann"}]
    result = exporter.export_all(template, fields, rows)
    assert result.entry_names == ["Ann.png", "Ann_2.png", "Ann_.png", "Ann_3.png"]
    assert len(read_entries(result)) == 4


def test_empty_title_falls_back_to_row_number(template, exporter, fields):
    rows = [{"Name": "Ann"}, {"Name": ""}, {"Course": "Only a course"}]
    result = exporter.export_all(template, fields, rows)
    assert result.entry_names == ["Ann.png", "certificate-2.png", "certificate-3.png"]


def test_no_fields_uses_row_numbers(template, exporter):
    result = exporter.export_all(template, [], [{"Name": "Ann"}, {"Name": "Bob"}])
    assert result.entry_names == ["certificate-1.png", "certificate-2.png"]


def test_preview_and_export_are_identical(template, session, fields):
    for field in fields:
        session.add_field(**field.model_dump(exclude={"id"}))
    session.set_rows([{"Name": "Ann", "Course": "Python"}, {"Name": "Bob", "Course": "Rust"}])
    session.set_preview_index(1)

    result = session.export_all()
    with zipfile.ZipFile(io.BytesIO(result.archive)) as zf:
        assert zf.read("Bob.png") == session.preview_png()


def test_row_failure_aborts_whole_export(template, exporter, fields, monkeypatch):
    original = archive_module.render_certificate

    def flaky(template, fields, row, registry, strict=False):
        if row["Name"] == "Broken":
            raise RuntimeError("boom")
        return original(template, fields, row, registry, strict=strict)

    monkeypatch.setattr(archive_module, "render_certificate", flaky)
    progress = []
    rows = [{"Name": "Ann"}, {"Name": "Broken"}, {"Name": "Cid"}]

    with pytest.raises(ExportAbortedError) as excinfo:
        exporter.export_all(template, fields, rows, progress=lambda done, total: progress.append(done))

    assert excinfo.value.row_index == 1
    assert isinstance(excinfo.value.cause, RuntimeError)
    assert progress == [1]
    assert exporter.state is ExportState.IDLE


def test_invalid_template_aborts_at_first_row(exporter, fields):
    broken = Template(b"not an image", width=100, height=100)
    with pytest.raises(ExportAbortedError) as excinfo:
        exporter.export_all(broken, fields, [{"Name": "Ann"}])
    assert excinfo.value.row_index == 0


def test_cancel_between_rows(template, exporter, fields):
    rows = [{"Name": f"Person {i}"} for i in range(5)]
    with pytest.raises(ExportCancelledError) as excinfo:
        exporter.export_all(template, fields, rows, should_cancel=lambda: exporter.completed_count >= 2)
    assert excinfo.value.completed == 2
    assert excinfo.value.total == 5
    assert exporter.state is ExportState.IDLE


def test_unique_entry_name_skips_taken_suffixes():
    used = {"Ann.png", "Ann_2.png"}
    assert unique_entry_name("Ann", used) == "Ann_3.png"
    assert "Ann_3.png" in used


def test_result_save(tmp_path, template, exporter, fields):
    result = exporter.export_all(template, fields, [{"Name": "Ann"}])
    path = result.save(tmp_path / "certificates.zip")
    assert zipfile.is_zipfile(path)
