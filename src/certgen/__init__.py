"""Certificate generator: place text fields on an image template and render one image per data row."""

__version__ = "0.1.0"

# High-level Python API
from certgen.api import DataRow, Session, Template, TextField
from certgen.config import Settings, load_config
from certgen.errors import (
    CertgenError,
    DataImportError,
    ExportAbortedError,
    ExportCancelledError,
    FontUnavailableError,
    InvalidTemplateError,
    MeasurementError,
)
from certgen.render.archive import ExportResult

__all__ = [
    "CertgenError",
    "DataImportError",
    "DataRow",
    "ExportAbortedError",
    "ExportCancelledError",
    "ExportResult",
    "FontUnavailableError",
    "InvalidTemplateError",
    "MeasurementError",
    "Session",
    "Settings",
    "Template",
    "TextField",
    "load_config",
]
