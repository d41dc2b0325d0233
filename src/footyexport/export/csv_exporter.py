"""
CSV serialization and persistence of row-sets.

A row-set is a list of dicts that all share the same keys in the same order.
The CSV text is fully built in memory before a single filesystem write, so an
artifact either exists complete or not at all.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import time
from enum import Enum
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

import pandas as pd

from footyexport.data.season import SeasonKey
from footyexport.errors import EmptyDataset, InconsistentSchema, WriteFailed
from footyexport.utils.logging_utils import get_logger

Row = Mapping[str, Any]

LINE_TERMINATOR = "\n"


class ArtifactKind(str, Enum):
    """Kinds of exported CSV artifacts."""

    TRAIN = "train"
    TEST = "test"
    FULL = "full"


def current_millis() -> int:
    """Current wall-clock time in milliseconds."""
    return time.time_ns() // 1_000_000


def row_columns(rows: Sequence[Row]) -> List[str]:
    """
    Return the column names of a row-set, validating its shape.

    Raises
    ------
    EmptyDataset
        If `rows` is empty.
    InconsistentSchema
        If a row's keys differ (in set or order) from the first row's.
    """
    if not rows:
        raise EmptyDataset("Cannot export an empty row-set.")

    header = list(rows[0].keys())
    for i, row in enumerate(rows[1:], start=1):
        keys = list(row.keys())
        if keys != header:
            missing = [k for k in header if k not in row]
            extra = [k for k in keys if k not in header]
            raise InconsistentSchema(
                f"Row {i} does not match the header of row 0 "
                f"(missing={missing}, extra={extra}, same order={not missing and not extra})"
            )
    return header


def _write_text(path: Path, text: str) -> None:
    """Write `text` next to `path`, then move it into place in one step."""
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        # newline="" keeps the serializer's line terminator on every platform
        tmp_path.write_text(text, encoding="utf-8", newline="")
        os.replace(tmp_path, path)
    except OSError:
        with contextlib.suppress(OSError):
            tmp_path.unlink(missing_ok=True)
        raise


class CsvExporter:
    """
    Writes row-sets as CSV files into an existing output directory.

    Parameters
    ----------
    output_dir : Path | str
        Target directory. It is never created implicitly.
    logger : logging.Logger | None
        Where written artifacts are reported. Defaults to the module logger.
    """

    def __init__(
        self,
        output_dir: Path | str,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.logger = logger or get_logger(__name__)

    @staticmethod
    def serialize(rows: Sequence[Row]) -> str:
        """
        Serialize a row-set to CSV text.

        The header is taken from the first row's keys. Values containing
        separators, quotes or newlines are quoted.
        """
        header = row_columns(rows)
        # object dtype: values are written as given, None as an empty field
        df = pd.DataFrame(list(rows), columns=header, dtype=object)
        return df.to_csv(index=False, lineterminator=LINE_TERMINATOR)

    def build_path(
        self,
        kind: ArtifactKind | str,
        season: SeasonKey,
        timestamp_ms: int,
    ) -> Path:
        """Path of an artifact: {timestamp}_{season}_{country}_{league}_{kind}.csv"""
        kind = ArtifactKind(kind)
        filename = (
            f"{timestamp_ms}_{season.season_label}_{season.country}_"
            f"{season.league}_{kind.value}.csv"
        )
        return self.output_dir / filename

    async def write(
        self,
        rows: Sequence[Row],
        kind: ArtifactKind | str,
        season: SeasonKey,
        timestamp_ms: Optional[int] = None,
    ) -> Path:
        """
        Serialize `rows` and write them to one new CSV file.

        Parameters
        ----------
        rows : Sequence[Mapping]
            Non-empty row-set with identical keys in every row.
        kind : ArtifactKind | str
            'train', 'test' or 'full'.
        season : SeasonKey
            Season the rows belong to.
        timestamp_ms : int | None
            Shared run timestamp; captured now if None.

        Returns
        -------
        Path
            The written file.

        Raises
        ------
        EmptyDataset, InconsistentSchema
            If the row-set is malformed (nothing is written).
        WriteFailed
            If the filesystem write fails, e.g. missing output directory.
        """
        text = self.serialize(rows)
        if timestamp_ms is None:
            timestamp_ms = current_millis()
        path = self.build_path(kind, season, timestamp_ms)

        try:
            await asyncio.to_thread(_write_text, path, text)
        except OSError as exc:
            raise WriteFailed(path, exc) from exc

        self.logger.info("Saved %d %s rows to %s", len(rows), ArtifactKind(kind).value, path)
        return path
