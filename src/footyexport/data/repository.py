"""
Season assembly for FootyExport.

`SeasonRepository` drives a provider to build one season's `Dataset`,
verifies that every match references a known club, and keeps the result for
the feature-engineering step.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from footyexport.data.providers import FixtureDataProvider
from footyexport.data.schema import Dataset, check_referential_integrity
from footyexport.data.season import SeasonKey
from footyexport.utils.logging_utils import get_logger


class SeasonRepository:
    """
    Loads and caches the dataset of one season.

    Parameters
    ----------
    provider : FixtureDataProvider
        Source of clubs and rounds, chosen once per run.
    logger : logging.Logger | None
        Where progress and failures are reported. Defaults to the module logger.
    """

    def __init__(
        self,
        provider: FixtureDataProvider,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.provider = provider
        self.logger = logger or get_logger(__name__)
        self._dataset: Optional[Dataset] = None

    @property
    def dataset(self) -> Optional[Dataset]:
        """The most recently loaded dataset, or None before the first load."""
        return self._dataset

    async def load(self, season: SeasonKey) -> Dataset:
        """
        Fetch clubs and rounds concurrently and build the season's dataset.

        Both fetches are awaited before anything else happens. If both fail,
        both errors are logged and the clubs error is raised.

        Raises
        ------
        SourceUnavailable, SourceMalformed, SeasonNotFound
            Whatever the provider raised, or SourceMalformed when a match
            references a club code that is not part of the season.
        """
        self.logger.info(
            "Loading %s from %s", season.dataset_key, self.provider.description
        )

        clubs, rounds = await asyncio.gather(
            self.provider.fetch_clubs(season),
            self.provider.fetch_rounds(season),
            return_exceptions=True,
        )

        errors = [r for r in (clubs, rounds) if isinstance(r, BaseException)]
        if len(errors) == 2:
            self.logger.error("Fetching clubs failed: %s", errors[0])
            self.logger.error("Fetching rounds failed: %s", errors[1])
        if errors:
            raise errors[0]

        check_referential_integrity(clubs, rounds)

        dataset = Dataset(season=season, clubs=clubs, rounds=rounds)
        self._dataset = dataset
        self.logger.info(
            "Loaded %d clubs and %d rounds (%d matches) for %s",
            len(dataset.clubs),
            len(dataset.rounds),
            dataset.match_count,
            season.dataset_key,
        )
        return dataset

    def _resolve(self, dataset: Optional[Dataset]) -> Dataset:
        if dataset is not None:
            return dataset
        if self._dataset is None:
            raise RuntimeError("No dataset loaded yet. Call load() first.")
        return self._dataset

    def club_codes(self, dataset: Optional[Dataset] = None) -> List[str]:
        """Club codes in the dataset's club order."""
        return [club.code for club in self._resolve(dataset).clubs]

    def round_meta(
        self,
        first_round: int,
        last_round: int,
        dataset: Optional[Dataset] = None,
    ) -> Dict[int, Dict[str, Any]]:
        """
        Describe the rounds numbered first_round..last_round (inclusive).

        Rounds outside the season are skipped.

        Returns
        -------
        dict[int, dict]
            round number -> {"round_name", "first_date", "last_date", "matches"}
        """
        meta: Dict[int, Dict[str, Any]] = {}
        for rnd in self._resolve(dataset).rounds:
            if not first_round <= rnd.number <= last_round:
                continue
            dates = sorted(m.date for m in rnd.matches if m.date)
            meta[rnd.number] = {
                "round_name": rnd.name,
                "first_date": dates[0] if dates else None,
                "last_date": dates[-1] if dates else None,
                "matches": len(rnd.matches),
            }
        return meta
