"""
Fixture data providers for FootyExport.

A provider fetches a season's clubs and rounds. Two interchangeable variants
exist:

- `RemoteProvider` downloads the football.json documents over HTTP.
- `LocalProvider` reads the same documents from a local file tree.

Both address documents with `SeasonKey.source_path` and parse them with the
same functions, so switching between them changes latency and failure origin
only. The variant is picked once per run with `make_provider`.
"""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Tuple

import httpx

from footyexport.config import ExportConfig
from footyexport.data.schema import (
    Club,
    Round,
    parse_clubs_payload,
    parse_rounds_payload,
)
from footyexport.data.season import SeasonKey, SourceKind
from footyexport.errors import SeasonNotFound, SourceMalformed, SourceUnavailable
from footyexport.utils.logging_utils import get_logger
from footyexport.utils.paths import get_local_source_path

logger = get_logger(__name__)


class ProviderKind(str, Enum):
    """Which provider variant a run uses."""

    REMOTE = "remote"
    LOCAL = "local"


class FixtureDataProvider(ABC):
    """
    Interface of a season data source.

    Implementations make a single attempt per call: they either return the
    complete result or raise a `SourceError`. No retries happen here.
    """

    #: Human-readable origin used in log messages.
    description: str = "provider"

    @abstractmethod
    async def fetch_clubs(self, season: SeasonKey) -> Tuple[Club, ...]:
        """Return the clubs of the season in source order."""
        raise NotImplementedError

    @abstractmethod
    async def fetch_rounds(self, season: SeasonKey) -> Tuple[Round, ...]:
        """Return the rounds of the season in chronological order."""
        raise NotImplementedError


class RemoteProvider(FixtureDataProvider):
    """Fetches football.json documents from a remote repository."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self.description = self.base_url

    async def _get_json(self, season: SeasonKey, kind: SourceKind) -> Any:
        url = f"{self.base_url}/{season.source_path(kind)}"
        logger.debug("GET %s", url)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise SeasonNotFound(
                    f"No {kind.value} data for {season.dataset_key} at {url}"
                ) from exc
            raise SourceUnavailable(
                f"HTTP {exc.response.status_code} fetching {url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailable(f"Failed to fetch {url}: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise SourceMalformed(f"Invalid JSON at {url}: {exc}") from exc

    async def fetch_clubs(self, season: SeasonKey) -> Tuple[Club, ...]:
        payload = await self._get_json(season, SourceKind.CLUBS)
        return parse_clubs_payload(payload)

    async def fetch_rounds(self, season: SeasonKey) -> Tuple[Round, ...]:
        payload = await self._get_json(season, SourceKind.ROUNDS)
        return parse_rounds_payload(payload)


def _read_json_file(path: Path) -> Any:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise SourceUnavailable(f"Cannot read local source file {path}: {exc}") from exc

    try:
        return json.loads(data.decode("utf-8"))
    except ValueError as exc:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors
        raise SourceMalformed(f"Invalid JSON in {path}: {exc}") from exc


class LocalProvider(FixtureDataProvider):
    """Reads football.json documents from a local file tree."""

    def __init__(self, data_dir: Path | str) -> None:
        self.data_dir = Path(data_dir)
        self.description = f"local files under {self.data_dir}"

    async def _read(self, season: SeasonKey, kind: SourceKind) -> Any:
        path = get_local_source_path(season, kind, self.data_dir)
        logger.debug("Reading %s", path)
        return await asyncio.to_thread(_read_json_file, path)

    async def fetch_clubs(self, season: SeasonKey) -> Tuple[Club, ...]:
        payload = await self._read(season, SourceKind.CLUBS)
        return parse_clubs_payload(payload)

    async def fetch_rounds(self, season: SeasonKey) -> Tuple[Round, ...]:
        payload = await self._read(season, SourceKind.ROUNDS)
        return parse_rounds_payload(payload)


def make_provider(
    kind: ProviderKind | str,
    config: ExportConfig | None = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FixtureDataProvider:
    """
    Build the provider variant selected for a run.

    Parameters
    ----------
    kind : ProviderKind | str
        'remote' or 'local'.
    config : ExportConfig | None
        Source locations; defaults from config.py if None.
    transport : httpx.AsyncBaseTransport | None
        Optional transport for the remote provider.

    Returns
    -------
    FixtureDataProvider
        The configured provider.
    """
    if config is None:
        config = ExportConfig()

    kind = ProviderKind(kind)
    if kind is ProviderKind.LOCAL:
        return LocalProvider(config.local_data_dir)
    return RemoteProvider(
        config.remote_base_url,
        timeout_seconds=config.timeout_seconds,
        transport=transport,
    )
