"""Session API and data models."""

from certgen.api.models import DataRow, Template, TextField
from certgen.api.session import HitBox, Session

__all__ = [
    "DataRow",
    "HitBox",
    "Session",
    "Template",
    "TextField",
]
