"""CLI interface for the certificate generator."""

import logging
import tomllib
from pathlib import Path

import click

from certgen.api import Session, Template, TextField
from certgen.config import load_config
from certgen.errors import CertgenError
from certgen.utils.tabular import (
    SAMPLE_FILENAME,
    detect_columns,
    load_rows,
    validate_rows,
    write_sample_csv,
)


def load_layout(layout_path: Path) -> list[TextField]:
    """
    Load fields from a TOML layout file.

    The file holds one [[fields]] table per field using TextField attribute names:

        [[fields]]
        label = "Name"
        x = 100
        y = 100
        color = "#1a1a1a"

    Raises:
        ValueError: If a field table is invalid.
    """
    with open(layout_path, "rb") as f:
        layout = tomllib.load(f)
    return [TextField(**entry) for entry in layout.get("fields", [])]


def _build_session(
    template_path: Path, data_path: Path, layout: Path | None, config: Path | None
) -> Session:
    settings = load_config(config)
    template = Template.from_path(template_path)
    rows = load_rows(data_path)

    if layout is not None:
        fields = load_layout(layout)
        validate_rows(rows, [field.label for field in fields])
        session = Session(template, rows=rows, settings=settings, fields=fields)
    else:
        columns = validate_rows(rows, [])
        session = Session(template, rows=rows, settings=settings)
        session.auto_map_fields(columns)
        click.echo(f"No layout given, created {len(columns)} field(s) from columns: {', '.join(columns)}")
    return session


@click.group()
@click.version_option()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def main(verbose: bool) -> None:
    """Render certificates from an image template and a CSV or Excel file."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def columns(data: Path) -> None:
    """List the columns detected in a CSV or Excel file."""
    try:
        rows = load_rows(data)
    except (CertgenError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    for column in detect_columns(rows):
        click.echo(column)
    click.echo(f"{len(rows)} row(s)", err=True)


@main.command()
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    default=Path(SAMPLE_FILENAME),
    show_default=True,
    help="Output CSV path, or a directory to write it into.",
)
def sample(output: Path) -> None:
    """Write a sample data file to start from."""
    try:
        path = write_sample_csv(output)
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    click.echo(f"✓ Sample data saved to: {path}")


@main.command()
@click.argument("template", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--layout",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="TOML file with [[fields]] tables. Fields are created from the columns if omitted.",
)
@click.option(
    "--row", type=click.IntRange(min=1), default=1, show_default=True, help="1-based row to preview."
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("preview.png"),
    show_default=True,
    help="Output PNG path.",
)
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to certgen.toml. Defaults to ./certgen.toml when present.",
)
def preview(
    template: Path,
    data: Path,
    layout: Path | None,
    row: int,
    output: Path,
    config: Path | None,
) -> None:
    """Render a single row to a PNG for checking the layout."""
    try:
        session = _build_session(template, data, layout, config)
        if row > len(session.rows):
            click.echo(f"Error: Row {row} is out of range, {data.name} has {len(session.rows)} row(s)", err=True)
            raise SystemExit(1)
        session.set_preview_index(row - 1)
        output.write_bytes(session.preview_png())
        click.echo(f"✓ Preview of row {row} saved to: {output}")
    except (CertgenError, ValueError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


@main.command()
@click.argument("template", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--layout",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="TOML file with [[fields]] tables. Fields are created from the columns if omitted.",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output ZIP path. Defaults to the configured archive name.",
)
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to certgen.toml. Defaults to ./certgen.toml when present.",
)
def export(
    template: Path,
    data: Path,
    layout: Path | None,
    output: Path | None,
    config: Path | None,
) -> None:
    """Render every row and package the certificates into a ZIP archive."""
    try:
        session = _build_session(template, data, layout, config)
        output = output or Path(session.settings.archive_name)

        with click.progressbar(length=len(session.rows), label="Rendering certificates") as bar:
            last = 0

            def on_progress(completed: int, total: int) -> None:
                nonlocal last
                bar.update(completed - last)
                last = completed

            result = session.export_all(progress=on_progress)

        result.save(output)
        click.echo(f"✓ {len(result.entry_names)} certificate(s) saved to: {output}")
    except (CertgenError, ValueError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
