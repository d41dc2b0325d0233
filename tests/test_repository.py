import logging

import pytest

from footyexport.data.providers import FixtureDataProvider, LocalProvider, RemoteProvider
from footyexport.data.repository import SeasonRepository
from footyexport.errors import SeasonNotFound, SourceMalformed, SourceUnavailable


class FailingProvider(FixtureDataProvider):
    """Provider whose fetches fail with the given errors (or succeed with None)."""

    description = "failing provider"

    def __init__(self, clubs_error=None, rounds_error=None, clubs=(), rounds=()):
        self.clubs_error = clubs_error
        self.rounds_error = rounds_error
        self.clubs = clubs
        self.rounds = rounds

    async def fetch_clubs(self, season):
        if self.clubs_error:
            raise self.clubs_error
        return self.clubs

    async def fetch_rounds(self, season):
        if self.rounds_error:
            raise self.rounds_error
        return self.rounds


@pytest.mark.asyncio
async def test_load_builds_and_caches_dataset(local_data_dir, season):
    repository = SeasonRepository(LocalProvider(local_data_dir))
    assert repository.dataset is None

    dataset = await repository.load(season)

    assert repository.dataset is dataset
    assert dataset.season == season
    assert dataset.match_count == 8
    assert repository.club_codes() == ["AAA", "BBB", "CCC", "DDD"]


@pytest.mark.asyncio
async def test_local_and_remote_providers_yield_identical_datasets(
    local_data_dir, remote_base_url, remote_transport, season
):
    local = await SeasonRepository(LocalProvider(local_data_dir)).load(season)
    remote = await SeasonRepository(
        RemoteProvider(remote_base_url, transport=remote_transport)
    ).load(season)

    assert local == remote


@pytest.mark.asyncio
async def test_load_rejects_match_with_unknown_club(
    write_local_source, season, clubs_payload, rounds_payload
):
    rounds_payload["rounds"][1]["matches"][0]["team1"]["code"] = "XYZ"
    data_dir = write_local_source(season, clubs_payload, rounds_payload)
    repository = SeasonRepository(LocalProvider(data_dir))

    with pytest.raises(SourceMalformed, match="XYZ"):
        await repository.load(season)
    assert repository.dataset is None


@pytest.mark.asyncio
async def test_load_raises_the_single_failure(season):
    repository = SeasonRepository(FailingProvider(rounds_error=SeasonNotFound("no league")))
    with pytest.raises(SeasonNotFound):
        await repository.load(season)


@pytest.mark.asyncio
async def test_load_reports_both_failures_and_raises_one(season, caplog):
    provider = FailingProvider(
        clubs_error=SourceUnavailable("clubs down"),
        rounds_error=SourceMalformed("rounds broken"),
    )
    repository = SeasonRepository(provider)

    with caplog.at_level(logging.ERROR):
        with pytest.raises(SourceUnavailable):
            await repository.load(season)

    assert "clubs down" in caplog.text
    assert "rounds broken" in caplog.text


@pytest.mark.asyncio
async def test_reload_replaces_cached_dataset(local_data_dir, season):
    repository = SeasonRepository(LocalProvider(local_data_dir))
    first = await repository.load(season)
    second = await repository.load(season)

    assert repository.dataset is second
    assert first == second


def test_club_codes_requires_a_dataset():
    repository = SeasonRepository(FailingProvider())
    with pytest.raises(RuntimeError):
        repository.club_codes()


def test_club_codes_preserve_club_order(dataset):
    repository = SeasonRepository(FailingProvider())
    assert repository.club_codes(dataset) == ["AAA", "BBB", "CCC", "DDD"]


def test_round_meta_covers_existing_rounds_in_range(dataset):
    repository = SeasonRepository(FailingProvider())

    meta = repository.round_meta(3, 6, dataset)

    assert sorted(meta) == [3, 4]
    assert meta[3] == {
        "round_name": "3. Spieltag",
        "first_date": "2016-09-16",
        "last_date": "2016-09-17",
        "matches": 2,
    }
