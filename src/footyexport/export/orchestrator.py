"""
Export orchestration for FootyExport.

Writes the artifacts of one run. Train and test are independent: both are
always attempted and each reports its own path or error.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from footyexport.config import SOURCE_SET_COLUMN
from footyexport.data.season import SeasonKey
from footyexport.errors import EmptyDataset, ExportError, InconsistentSchema
from footyexport.export.csv_exporter import ArtifactKind, CsvExporter
from footyexport.utils.logging_utils import get_logger

Row = Mapping[str, Any]


@dataclass(frozen=True)
class ArtifactSummary:
    """Shape of one row-set."""

    rows: int
    columns: int
    column_names: List[str] = field(default_factory=list)

    @property
    def data_points(self) -> int:
        return self.rows * self.columns


@dataclass
class ArtifactResult:
    """Outcome of writing one artifact: a path on success, an error otherwise."""

    kind: ArtifactKind
    summary: ArtifactSummary
    path: Optional[Path] = None
    error: Optional[ExportError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class StandardExport:
    """Results of the train and test artifacts of one run."""

    train: ArtifactResult
    test: ArtifactResult

    @property
    def train_path(self) -> Optional[Path]:
        return self.train.path

    @property
    def test_path(self) -> Optional[Path]:
        return self.test.path

    @property
    def errors(self) -> List[ExportError]:
        return [r.error for r in (self.train, self.test) if r.error is not None]

    @property
    def ok(self) -> bool:
        return not self.errors


def summarize(rows: Sequence[Row]) -> ArtifactSummary:
    """Row count, column count and column names of a row-set."""
    column_names = list(rows[0].keys()) if rows else []
    return ArtifactSummary(rows=len(rows), columns=len(column_names), column_names=column_names)


class ExportOrchestrator:
    """
    Writes the train, test and full artifacts of a run.

    Parameters
    ----------
    exporter : CsvExporter
        Writer used for every artifact.
    logger : logging.Logger | None
        Where results are reported. Defaults to the module logger.
    """

    def __init__(
        self,
        exporter: CsvExporter,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.exporter = exporter
        self.logger = logger or get_logger(__name__)

    async def _write_one(
        self,
        rows: Sequence[Row],
        kind: ArtifactKind,
        season: SeasonKey,
        timestamp_ms: Optional[int],
    ) -> ArtifactResult:
        result = ArtifactResult(kind=kind, summary=summarize(rows))
        try:
            result.path = await self.exporter.write(rows, kind, season, timestamp_ms)
        except ExportError as exc:
            self.logger.error("Export of %s data failed: %s", kind.value, exc)
            result.error = exc
        return result

    async def export_standard(
        self,
        training_rows: Sequence[Row],
        test_rows: Sequence[Row],
        season: SeasonKey,
        timestamp_ms: Optional[int] = None,
    ) -> StandardExport:
        """
        Write the training and the test row-sets as two artifacts.

        Both writes run concurrently; a failure of one never prevents the
        other. Export errors are reported in the returned results, not raised.
        Any other exception is re-raised once both writes have finished.
        """
        train, test = await asyncio.gather(
            self._write_one(training_rows, ArtifactKind.TRAIN, season, timestamp_ms),
            self._write_one(test_rows, ArtifactKind.TEST, season, timestamp_ms),
            return_exceptions=True,
        )
        for outcome in (train, test):
            if isinstance(outcome, BaseException):
                raise outcome
        return StandardExport(train=train, test=test)

    async def export_full(
        self,
        training_rows: Sequence[Row],
        test_rows: Sequence[Row],
        season: SeasonKey,
        timestamp_ms: Optional[int] = None,
    ) -> ArtifactResult:
        """
        Write training and test rows together as one 'full' artifact.

        Every row gets a `source_set` column ('train' or 'test').

        Returns
        -------
        ArtifactResult
            Path and summary of the written artifact.

        Raises
        ------
        InconsistentSchema
            If both row-sets are non-empty and their headers differ.
        EmptyDataset
            If both row-sets are empty.
        WriteFailed
            If the file cannot be written.
        """
        if training_rows and test_rows:
            train_header = list(training_rows[0].keys())
            test_header = list(test_rows[0].keys())
            if train_header != test_header:
                raise InconsistentSchema(
                    f"Training columns {train_header} do not match test columns {test_header}"
                )

        combined: List[Dict[str, Any]] = [
            {**row, SOURCE_SET_COLUMN: ArtifactKind.TRAIN.value} for row in training_rows
        ] + [
            {**row, SOURCE_SET_COLUMN: ArtifactKind.TEST.value} for row in test_rows
        ]
        if not combined:
            raise EmptyDataset("Both training and test row-sets are empty.")

        path = await self.exporter.write(combined, ArtifactKind.FULL, season, timestamp_ms)
        return ArtifactResult(kind=ArtifactKind.FULL, summary=summarize(combined), path=path)

    def report(
        self,
        export: StandardExport,
        season: SeasonKey,
        full: Optional[ArtifactResult] = None,
    ) -> None:
        """Log summary counts of every artifact of the run."""
        labels = {
            ArtifactKind.TRAIN: "Training Data",
            ArtifactKind.TEST: "Test Data",
            ArtifactKind.FULL: "Full Data",
        }
        results = [export.train, export.test]
        if full is not None:
            results.append(full)

        for result in results:
            label = labels[result.kind]
            self.logger.info(
                "%s: Processed %d matches for %s",
                label,
                result.summary.rows,
                season.dataset_key,
            )
            self.logger.info(
                "%s: Calculated %d attributes:\n %s",
                label,
                result.summary.columns,
                result.summary.column_names,
            )
            self.logger.info(
                "%s: %d data points calculated", label, result.summary.data_points
            )
