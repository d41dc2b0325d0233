import json
from pathlib import Path

import httpx
import pytest

from footyexport.data.schema import Dataset, parse_clubs_payload, parse_rounds_payload
from footyexport.data.season import SeasonKey, SourceKind

REMOTE_BASE_URL = "https://football-json.test/master"


@pytest.fixture
def remote_base_url() -> str:
    return REMOTE_BASE_URL


def _team(code: str) -> dict:
    return {"key": code.lower(), "name": f"Club {code}", "code": code}


def _match(date: str, home: str, away: str, score1=None, score2=None) -> dict:
    return {
        "date": date,
        "team1": _team(home),
        "team2": _team(away),
        "score1": score1,
        "score2": score2,
    }


@pytest.fixture
def season() -> SeasonKey:
    return SeasonKey(year=16, country="de", league="1")


@pytest.fixture
def clubs_payload() -> dict:
    return {
        "name": "Test League 2016/17",
        "clubs": [_team(code) for code in ("AAA", "BBB", "CCC", "DDD")],
    }


@pytest.fixture
def rounds_payload() -> dict:
    """Three played rounds followed by one unplayed round."""
    return {
        "name": "Test League 2016/17",
        "rounds": [
            {
                "name": "1. Spieltag",
                "matches": [
                    _match("2016-08-26", "AAA", "BBB", 2, 1),
                    _match("2016-08-27", "CCC", "DDD", 0, 0),
                ],
            },
            {
                "name": "2. Spieltag",
                "matches": [
                    _match("2016-09-09", "BBB", "CCC", 1, 1),
                    _match("2016-09-10", "DDD", "AAA", 0, 3),
                ],
            },
            {
                "name": "3. Spieltag",
                "matches": [
                    _match("2016-09-16", "AAA", "CCC", 1, 0),
                    _match("2016-09-17", "BBB", "DDD", 2, 2),
                ],
            },
            {
                "name": "4. Spieltag",
                "matches": [
                    _match("2016-09-20", "CCC", "AAA"),
                    _match("2016-09-21", "DDD", "BBB"),
                ],
            },
        ],
    }


@pytest.fixture
def dataset(season, clubs_payload, rounds_payload) -> Dataset:
    return Dataset(
        season=season,
        clubs=parse_clubs_payload(clubs_payload),
        rounds=parse_rounds_payload(rounds_payload),
    )


@pytest.fixture
def write_local_source(tmp_path: Path):
    """Write clubs/rounds documents into a local football.json tree."""

    def _write(season: SeasonKey, clubs, rounds) -> Path:
        data_dir = tmp_path / "football.json"
        for kind, payload in ((SourceKind.CLUBS, clubs), (SourceKind.ROUNDS, rounds)):
            if payload is None:
                continue
            path = data_dir / season.source_path(kind)
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(payload, str):
                path.write_text(payload, encoding="utf-8")
            else:
                path.write_text(json.dumps(payload), encoding="utf-8")
        return data_dir

    return _write


@pytest.fixture
def local_data_dir(write_local_source, season, clubs_payload, rounds_payload) -> Path:
    return write_local_source(season, clubs_payload, rounds_payload)


@pytest.fixture
def remote_transport(season, clubs_payload, rounds_payload):
    """httpx transport serving the fixture season; anything else is a 404."""
    documents = {
        f"/master/{season.source_path(SourceKind.CLUBS)}": clubs_payload,
        f"/master/{season.source_path(SourceKind.ROUNDS)}": rounds_payload,
    }

    def handler(request: httpx.Request) -> httpx.Response:
        payload = documents.get(request.url.path)
        if payload is None:
            return httpx.Response(404, text="404: Not Found")
        return httpx.Response(200, json=payload)

    return httpx.MockTransport(handler)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "output"
    path.mkdir()
    return path
