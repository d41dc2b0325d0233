"""
Club / round model and parsing of football.json source documents.

Both providers hand raw JSON documents to the parsers below, so a season
loaded from the remote repository and one loaded from a local copy of the
same files are identical.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from footyexport.data.season import SeasonKey
from footyexport.errors import SourceMalformed
from footyexport.utils.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Club:
    """A club taking part in a season. `code` is unique within the season."""

    code: str
    name: str
    key: Optional[str] = None


@dataclass(frozen=True)
class Match:
    """A fixture between two clubs referenced by code; scores are None until played."""

    home: str
    away: str
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None
    date: Optional[str] = None

    @property
    def is_played(self) -> bool:
        return self.home_goals is not None and self.away_goals is not None

    @property
    def outcome(self) -> Optional[str]:
        """Outcome from the home club's perspective, None when unplayed."""
        if not self.is_played:
            return None
        if self.home_goals > self.away_goals:
            return "home_win"
        if self.home_goals < self.away_goals:
            return "away_win"
        return "draw"


@dataclass(frozen=True)
class Round:
    """One matchday. `number` is its 1-based position in the season."""

    number: int
    name: str
    matches: Tuple[Match, ...]

    @property
    def is_complete(self) -> bool:
        return bool(self.matches) and all(m.is_played for m in self.matches)


@dataclass(frozen=True)
class Dataset:
    """Clubs and rounds of one season, as fetched from a provider."""

    season: SeasonKey
    clubs: Tuple[Club, ...]
    rounds: Tuple[Round, ...]

    @property
    def match_count(self) -> int:
        return sum(len(r.matches) for r in self.rounds)


def _require(payload: Any, key: str, expected: type, where: str) -> Any:
    if not isinstance(payload, dict):
        raise SourceMalformed(f"{where}: expected an object, got {type(payload).__name__}")
    if key not in payload:
        raise SourceMalformed(f"{where}: missing required key '{key}'")
    value = payload[key]
    if not isinstance(value, expected):
        raise SourceMalformed(
            f"{where}: '{key}' should be {expected.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


def _score(value: Any, where: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise SourceMalformed(f"{where}: score should be an integer, got {value!r}")
    return value


def parse_clubs_payload(payload: Any) -> Tuple[Club, ...]:
    """
    Parse a football.json clubs document.

    Parameters
    ----------
    payload : Any
        Decoded JSON: {"name": ..., "clubs": [{"key", "name", "code"}, ...]}

    Returns
    -------
    tuple[Club, ...]
        Clubs in document order.

    Raises
    ------
    SourceMalformed
        If the document shape does not match or a club code is duplicated.
    """
    entries = _require(payload, "clubs", list, "clubs document")

    clubs = []
    seen = set()
    for i, entry in enumerate(entries):
        where = f"clubs[{i}]"
        code = _require(entry, "code", str, where)
        name = _require(entry, "name", str, where)
        key = entry.get("key")
        if code in seen:
            raise SourceMalformed(f"{where}: duplicate club code '{code}'")
        seen.add(code)
        clubs.append(Club(code=code, name=name, key=key if isinstance(key, str) else None))

    return tuple(clubs)


def _parse_match(entry: Any, where: str) -> Match:
    team1 = _require(entry, "team1", dict, where)
    team2 = _require(entry, "team2", dict, where)
    date = entry.get("date")
    return Match(
        home=_require(team1, "code", str, f"{where}.team1"),
        away=_require(team2, "code", str, f"{where}.team2"),
        home_goals=_score(entry.get("score1"), where),
        away_goals=_score(entry.get("score2"), where),
        date=date if isinstance(date, str) else None,
    )


def parse_rounds_payload(payload: Any) -> Tuple[Round, ...]:
    """
    Parse a football.json rounds document.

    Rounds keep their document order; that order is the season's chronology.

    Raises
    ------
    SourceMalformed
        If the document shape does not match.
    """
    entries = _require(payload, "rounds", list, "rounds document")

    rounds = []
    for i, entry in enumerate(entries):
        where = f"rounds[{i}]"
        matches = _require(entry, "matches", list, where)
        name = entry.get("name")
        rounds.append(
            Round(
                number=i + 1,
                name=name if isinstance(name, str) else f"Round {i + 1}",
                matches=tuple(
                    _parse_match(m, f"{where}.matches[{j}]")
                    for j, m in enumerate(matches)
                ),
            )
        )

    return tuple(rounds)


def check_referential_integrity(
    clubs: Iterable[Club],
    rounds: Iterable[Round],
) -> None:
    """
    Ensure every match references clubs of the season.

    Raises
    ------
    SourceMalformed
        On the first match referencing an unknown club code.
    """
    codes = {club.code for club in clubs}
    for rnd in rounds:
        for match in rnd.matches:
            for code in (match.home, match.away):
                if code not in codes:
                    raise SourceMalformed(
                        f"{rnd.name}: match {match.home} - {match.away} "
                        f"references unknown club code '{code}'"
                    )
    logger.debug("Referential integrity check passed for %d clubs.", len(codes))
