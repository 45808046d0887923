"""Batch export: render one certificate per data row into a ZIP archive."""

import logging
import zipfile
from dataclasses import dataclass, field
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Callable, Sequence

from certgen.api.models import DataRow, Template, TextField
from certgen.config import Settings, format_output_name
from certgen.design.geometry import bound_text
from certgen.errors import ExportAbortedError, ExportCancelledError
from certgen.fonts import FontRegistry
from certgen.render.certificate import render_certificate
from certgen.render.image import save_image_to_bytes

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
CancelCheck = Callable[[], bool]


class ExportState(str, Enum):
    """Batch exporter state."""

    IDLE = "idle"
    RUNNING = "running"


@dataclass
class ExportResult:
    """Finished archive and the names of its entries, in row order."""

    archive: bytes
    entry_names: list[str] = field(default_factory=list)

    def save(self, output_path: Path) -> Path:
        """Write the archive to disk."""
        output_path = Path(output_path)
        output_path.write_bytes(self.archive)
        return output_path


def unique_entry_name(base: str, used: set[str], extension: str = "png") -> str:
    """
    Pick an archive entry name that is not taken yet.

    The first occurrence keeps the bare name; repeats get _2, _3, ... appended.

    Examples:
        "Ann", {} → "Ann.png"
        "Ann", {"Ann.png"} → "Ann_2.png"
    """
    name = f"{base}.{extension}"
    occurrence = 1
    while name in used:
        occurrence += 1
        name = f"{base}_{occurrence}.{extension}"
    used.add(name)
    return name


def row_title(fields: Sequence[TextField], row: DataRow) -> str:
    """Value the first field shows for a row ("" without fields)."""
    if not fields:
        return ""
    return bound_text(fields[0], row)


class BatchExporter:
    """
    Renders rows strictly one after another (IDLE -> RUNNING -> IDLE).

    completed_count only grows during a run and reports how many rows are
    already in the archive. Any row failure aborts the whole run.
    """

    def __init__(self, registry: FontRegistry, settings: Settings | None = None) -> None:
        self.registry = registry
        self.settings = settings or registry.settings
        self.state = ExportState.IDLE
        self.completed_count = 0
        self.total = 0

    def export_all(
        self,
        template: Template,
        fields: Sequence[TextField],
        rows: Sequence[DataRow],
        progress: ProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> ExportResult:
        """
        Render every row and package the images into one archive.

        Args:
            template: Template image.
            fields: Fields to draw (first field names the files).
            rows: Data rows, rendered in order.
            progress: Called with (completed, total) after every row.
            should_cancel: Checked between rows; returning True stops the run.

        Returns:
            ExportResult with the ZIP bytes and entry names.

        Raises:
            ExportAbortedError: If any row fails to render or encode.
            ExportCancelledError: If should_cancel() returned True.
            RuntimeError: If an export is already running.
        """
        if self.state is ExportState.RUNNING:
            raise RuntimeError("An export is already running")

        fields = list(fields)
        self.state = ExportState.RUNNING
        self.completed_count = 0
        self.total = len(rows)
        image_format = self.settings.output_format
        extension = image_format.lower()
        logger.info(f"Exporting {self.total} certificate(s) from template '{template.name}'")

        try:
            buffer = BytesIO()
            entry_names: list[str] = []
            used: set[str] = set()

            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                for index, row in enumerate(rows):
                    if should_cancel is not None and should_cancel():
                        raise ExportCancelledError(self.completed_count, self.total)

                    try:
                        image = render_certificate(template, fields, row, self.registry, strict=True)
                        image_bytes = save_image_to_bytes(image, format=image_format)
                    except Exception as e:
                        logger.error(f"Row {index + 1} failed, aborting export: {e}")
                        raise ExportAbortedError(index, e) from e

                    base = format_output_name(
                        row_title(fields, row), index, self.settings.filename_fallback_prefix
                    )
                    entry_name = unique_entry_name(base, used, extension)
                    archive.writestr(entry_name, image_bytes)
                    entry_names.append(entry_name)

                    self.completed_count = index + 1
                    logger.debug(f"Rendered {entry_name} ({self.completed_count}/{self.total})")
                    if progress is not None:
                        progress(self.completed_count, self.total)

            logger.info(f"Export finished: {len(entry_names)} certificate(s)")
            return ExportResult(archive=buffer.getvalue(), entry_names=entry_names)
        finally:
            self.state = ExportState.IDLE
