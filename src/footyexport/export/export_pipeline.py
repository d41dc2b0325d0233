"""
End-to-end export run for FootyExport.

Usage (from project root, with the virtualenv activated):

    python -m footyexport.export.export_pipeline -y 16 -c de -l 1

This will:
- Load clubs and rounds of the season from github.com/openfootball/football.json
  (or from data/football.json with --local).
- Optionally scrape club metadata from transfermarkt.de (--clubmeta).
- Build training rows (played rounds) and test rows (the next round).
- Save output/{timestamp}_{season}_{country}_{league}_{train|test}.csv and,
  with --full, a combined *_full.csv.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from footyexport.config import (
    DEFAULT_COUNTRY,
    DEFAULT_LEAGUE,
    DEFAULT_YEAR,
    MIN_MATCHES,
    ExportConfig,
)
from footyexport.data.providers import FixtureDataProvider, ProviderKind, make_provider
from footyexport.data.repository import SeasonRepository
from footyexport.data.schema import Dataset
from footyexport.data.scraper import load_club_meta
from footyexport.data.season import SeasonKey
from footyexport.errors import ExportError, FootyExportError
from footyexport.export.csv_exporter import CsvExporter, current_millis
from footyexport.export.orchestrator import ArtifactResult, ExportOrchestrator, StandardExport
from footyexport.features.feature_builder import (
    FeatureConfig,
    build_feature_rows,
    build_league_table,
    last_completed_round,
)
from footyexport.utils.logging_utils import configure_logging, get_logger

logger = get_logger(__name__)


@dataclass
class RunOptions:
    """Behaviour of one export run (mirrors the CLI flags)."""

    year: int = DEFAULT_YEAR
    country: str = DEFAULT_COUNTRY
    league: str = DEFAULT_LEAGUE
    exclude: Sequence[str] = field(default_factory=tuple)
    min_matches: int = MIN_MATCHES
    club_meta: bool = False
    local: bool = False
    full: bool = False
    complete: bool = False
    verbose: bool = False
    tables: bool = False

    @property
    def season(self) -> SeasonKey:
        return SeasonKey(year=self.year, country=self.country, league=self.league)


@dataclass
class ExportOutcome:
    """What one run produced."""

    dataset_key: str
    last_played_round: int
    standard: StandardExport
    full: Optional[ArtifactResult] = None
    full_error: Optional[ExportError] = None

    @property
    def full_path(self) -> Optional[Path]:
        return self.full.path if self.full else None

    @property
    def ok(self) -> bool:
        return self.standard.ok and self.full_error is None


def _log_predicted_round(dataset: Dataset, predicted_round: int, log: logging.Logger) -> None:
    if predicted_round > len(dataset.rounds):
        log.warning(
            "No games found to be predicted. This is expected if the season "
            "is over, otherwise indicates an error"
        )
        return

    matches = dataset.rounds[predicted_round - 1].matches
    log.info(
        "Predicted games are %s",
        [f"[{i}] {m.home} : {m.away}" for i, m in enumerate(matches, start=1)],
    )


async def run_export(
    options: RunOptions,
    config: ExportConfig | None = None,
    provider: FixtureDataProvider | None = None,
    log: logging.Logger | None = None,
) -> ExportOutcome:
    """
    Run one export.

    Parameters
    ----------
    options : RunOptions
        Season and behaviour flags.
    config : ExportConfig | None
        Source and output locations; defaults from config.py if None.
    provider : FixtureDataProvider | None
        Provider to use instead of the one selected by `options.local`.
    log : logging.Logger | None
        Where progress is reported. Defaults to the module logger.

    Returns
    -------
    ExportOutcome
        Paths and per-artifact errors of the run.

    Raises
    ------
    SourceError
        If the season cannot be loaded. No file is written in that case.
    """
    config = config or ExportConfig()
    log = log or logger
    start = time.monotonic()

    season = options.season
    log.info("Behaviour config is %s", options)
    log.warning(
        "The first %d matchdays will be ignored in training data due to --minmatches setting",
        options.min_matches,
    )

    if provider is None:
        provider = make_provider(
            ProviderKind.LOCAL if options.local else ProviderKind.REMOTE, config
        )
    repository = SeasonRepository(provider, logger=log)
    dataset = await repository.load(season)

    last_played = last_completed_round(dataset.rounds)
    predicted_round = last_played + 1
    log.info("Last completely played game day is %d", last_played)

    club_meta = {}
    if options.club_meta:
        club_meta = await load_club_meta(repository.club_codes(dataset), 2000 + season.year)
        log.info("Got club metadata from transfermarkt.de for %d clubs", len(club_meta))

    round_meta = repository.round_meta(options.min_matches, predicted_round, dataset)
    log.info(
        "Got round metadata for rounds %d - %d (%d rounds)",
        options.min_matches,
        predicted_round,
        len(round_meta),
    )

    feature_config = FeatureConfig(
        min_matches=options.min_matches,
        exclude=tuple(options.exclude),
        verbose=options.verbose,
        complete=options.complete,
    )
    rows = build_feature_rows(dataset, club_meta, round_meta, last_played, feature_config)

    exporter = CsvExporter(config.output_dir, logger=log)
    orchestrator = ExportOrchestrator(exporter, logger=log)
    run_timestamp = current_millis()

    standard = await orchestrator.export_standard(
        rows.training_rows, rows.test_rows, season, run_timestamp
    )
    outcome = ExportOutcome(
        dataset_key=season.dataset_key,
        last_played_round=last_played,
        standard=standard,
    )

    if options.full:
        try:
            outcome.full = await orchestrator.export_full(
                rows.training_rows, rows.test_rows, season, run_timestamp
            )
        except ExportError as exc:
            log.error("Export of full data failed: %s", exc)
            outcome.full_error = exc

    orchestrator.report(standard, season, outcome.full)
    if standard.train_path:
        log.info("Saved training data set to %s", standard.train_path)
    if standard.test_path:
        log.info("Saved test data set to %s", standard.test_path)
    if outcome.full_path:
        log.info("Saved full data set to %s", outcome.full_path)
    log.info("Export took %d ms", int((time.monotonic() - start) * 1000))

    if options.tables:
        table = build_league_table(dataset, last_played)
        log.info("Table after game day %d:\n%s", last_played, table.to_string(index=False))

    _log_predicted_round(dataset, predicted_round, log)
    return outcome


def _exclude_list(value: str) -> List[str]:
    return [name for name in value.split(";") if name]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Export a season's fixtures as training and test CSV files."
    )
    parser.add_argument(
        "-y", "--year", type=int, default=DEFAULT_YEAR,
        help="The year of the season start in YY, i.e. 14 [default=%(default)s]",
    )
    parser.add_argument(
        "-c", "--countrycode", default=DEFAULT_COUNTRY,
        help="The country code, i.e. de, es, en, it [default=%(default)s]",
    )
    parser.add_argument(
        "-l", "--league", default=DEFAULT_LEAGUE,
        help="The league, i.e. 1 for Premier League, Serie A, 1. Bundesliga [default=%(default)s]",
    )
    parser.add_argument(
        "-e", "--exclude", type=_exclude_list, default=[],
        help='Attributes to drop from the CSV, i.e. "form_delta_last_3;team_h_form_last_5"',
    )
    parser.add_argument(
        "-m", "--minmatches", type=int, default=MIN_MATCHES,
        help="Matchdays to play before a match is used as training data [default=%(default)s]",
    )
    parser.add_argument(
        "-M", "--clubmeta", action="store_true",
        help="Scrape club metadata (market value) from transfermarkt.de. Slower.",
    )
    parser.add_argument(
        "-L", "--local", action="store_true",
        help="Use local data instead of github.",
    )
    parser.add_argument(
        "-F", "--full", action="store_true",
        help="Also write a CSV with all data in addition to test and training sets.",
    )
    parser.add_argument(
        "-C", "--complete", action="store_true",
        help="Also add all yet unplayed matches to the test data.",
    )
    parser.add_argument(
        "-V", "--verbose", action="store_true",
        help="Add human readable columns like round and club codes.",
    )
    parser.add_argument(
        "-T", "--tables", action="store_true",
        help="Print the league table.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    options = RunOptions(
        year=args.year,
        country=args.countrycode,
        league=args.league,
        exclude=args.exclude,
        min_matches=args.minmatches,
        club_meta=args.clubmeta,
        local=args.local,
        full=args.full,
        complete=args.complete,
        verbose=args.verbose,
        tables=args.tables,
    )

    try:
        config = ExportConfig()
        config.output_dir.mkdir(parents=True, exist_ok=True)
        outcome = asyncio.run(run_export(options, config))
    except (FootyExportError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    return 0 if outcome.ok else 1


def cli() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    cli()
