"""Exceptions raised by the certificate engine."""


class CertgenError(Exception):
    """Base class for all certgen errors."""


class InvalidTemplateError(CertgenError, ValueError):
    """The template image could not be decoded."""


class FontUnavailableError(CertgenError):
    """No font file could be resolved for a font family."""


class MeasurementError(CertgenError):
    """Text width could not be measured (usually because the font is unavailable)."""


class DataImportError(CertgenError, ValueError):
    """Imported tabular data is empty or lacks required columns."""


class ExportAbortedError(CertgenError):
    """A row failed during batch export; no archive was produced."""

    def __init__(self, row_index: int, cause: Exception) -> None:
        self.row_index = row_index
        self.cause = cause
        super().__init__(f"Export aborted at row {row_index + 1}: {cause}")


class ExportCancelledError(CertgenError):
    """Batch export was cancelled between rows."""

    def __init__(self, completed: int, total: int) -> None:
        self.completed = completed
        self.total = total
        super().__init__(f"Export cancelled after {completed} of {total} rows")
