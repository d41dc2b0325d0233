"""
Error taxonomy for FootyExport.

Source errors abort a run. Export errors are raised per artifact and isolated
by the orchestrator, so one failed CSV does not prevent the others.
"""

from __future__ import annotations

from pathlib import Path


class FootyExportError(Exception):
    """Base class for all errors raised by FootyExport."""


class SourceError(FootyExportError):
    """A provider could not deliver a usable dataset."""


class SourceUnavailable(SourceError):
    """The source could not be reached (network or filesystem access)."""


class SourceMalformed(SourceError):
    """The source document does not parse into clubs and rounds."""


class SeasonNotFound(SourceError):
    """The source confirms the season/country/league does not exist."""


class ExportError(FootyExportError):
    """A row-set could not be exported."""


class EmptyDataset(ExportError):
    """The row-set to export has no rows."""


class InconsistentSchema(ExportError):
    """Rows (or row-sets) do not share the same columns in the same order."""


class WriteFailed(ExportError):
    """The CSV file could not be written."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Failed to write {path}: {cause}")
        self.path = path
        self.cause = cause
