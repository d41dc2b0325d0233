"""
Season addressing for FootyExport.

A `SeasonKey` names one season of one league and derives every label and
location keyed by it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SourceKind(str, Enum):
    """The two source documents available per season."""

    CLUBS = "clubs"
    ROUNDS = "rounds"


def season_label(year: int) -> str:
    """
    Return the season label for a two-digit season start year.

    >>> season_label(16)
    '2016-2017'
    """
    start = 2000 + int(year)
    return f"{start}-{start + 1}"


def dataset_key(year: int, country: str, league: str) -> str:
    """Return the canonical dataset key, e.g. '2016-2017_de_1'."""
    return f"{season_label(year)}_{country}_{league}"


@dataclass(frozen=True)
class SeasonKey:
    """
    Immutable address of one season's dataset.

    Attributes
    ----------
    year : int
        Two-digit year of the season start (16 -> 2016-2017).
    country : str
        Lowercase country code, e.g. 'de'.
    league : str
        League identifier, e.g. '1' for the top division.
    """

    year: int
    country: str
    league: str

    def __post_init__(self) -> None:
        if isinstance(self.year, bool) or not isinstance(self.year, int):
            raise ValueError(f"Season year must be an integer, got {self.year!r}")
        if not 0 <= self.year < 100:
            raise ValueError(
                f"Season year must be a two-digit year in [0, 99], got {self.year}"
            )
        # 1 and "1" address the same league
        object.__setattr__(self, "league", str(self.league))

    @property
    def season_label(self) -> str:
        return season_label(self.year)

    @property
    def dataset_key(self) -> str:
        return dataset_key(self.year, self.country, self.league)

    def source_path(self, kind: SourceKind) -> str:
        """
        Relative location of a source document, shared by all providers.

        Documents live under '{country}/{season_label}/' and are named after
        the football.json convention ('de.1.clubs.json' / 'de.1.json').
        """
        prefix = f"{self.country}/{self.season_label}/{self.country}.{self.league}"
        if SourceKind(kind) is SourceKind.CLUBS:
            return f"{prefix}.clubs.json"
        return f"{prefix}.json"

    def __str__(self) -> str:
        return self.dataset_key
