"""
Club metadata scraping from transfermarkt.de.

NOTE:
- Only clubs with a known transfermarkt id (see `CLUB_META_IDS` in config)
  are scraped; every other club is skipped.
- Always respect the website's Terms of Service and robots.txt rules.
"""

from __future__ import annotations

import asyncio
import re
from typing import Dict, Iterable, Mapping, Optional

import requests
from bs4 import BeautifulSoup

from footyexport.config import (
    CLUB_META_IDS,
    TRANSFERMARKT_BASE_URL,
    TRANSFERMARKT_TIMEOUT_SECONDS,
)
from footyexport.utils.logging_utils import get_logger

logger = get_logger(__name__)

_HEADERS = {"User-Agent": "Mozilla/5.0 (footyexport club metadata)"}

_MULTIPLIERS = {
    "bn": 1e9,
    "mrd": 1e9,
    "m": 1e6,
    "mio": 1e6,
    "k": 1e3,
    "th": 1e3,
    "tsd": 1e3,
}

_VALUE_RE = re.compile(r"(\d+(?:[.,]\d+)?)\s*([a-zA-Z]+)?")


def parse_market_value(text: str | None) -> Optional[float]:
    """
    Parse a transfermarkt market value into euros.

    Understands the English ("€605.50m", "€1.01bn", "€900k") and the German
    ("605,50 Mio. €", "1,01 Mrd. €", "900 Tsd. €") notation.

    Returns
    -------
    float | None
        Value in euros, or None if the text holds no value.
    """
    if not text:
        return None

    match = _VALUE_RE.search(text.replace("\xa0", " "))
    if match is None:
        return None

    number = float(match.group(1).replace(",", "."))
    unit = (match.group(2) or "").lower()
    return number * _MULTIPLIERS.get(unit, 1.0)


def club_page_url(club_id: int, season_year: int) -> str:
    """URL of a club's overview page for the season starting in season_year."""
    return f"{TRANSFERMARKT_BASE_URL}/-/startseite/verein/{club_id}/saison_id/{season_year}"


def extract_market_value(html: str) -> Optional[float]:
    """Find the squad market value on a club overview page."""
    soup = BeautifulSoup(html, "html.parser")

    node = soup.find(class_="data-header__market-value-wrapper")
    if node is None:
        node = soup.find(class_="dataMarktwert")
    if node is None:
        return None

    # Drop the "last update" suffix nested in the wrapper
    for extra in node.find_all(class_="data-header__last-update"):
        extra.decompose()

    return parse_market_value(node.get_text(" ", strip=True))


def scrape_club_meta(
    club_codes: Iterable[str],
    season_year: int,
    club_ids: Mapping[str, int] = CLUB_META_IDS,
    session: Optional[requests.Session] = None,
) -> Dict[str, Dict[str, float]]:
    """
    Scrape metadata for the given clubs.

    Parameters
    ----------
    club_codes : Iterable[str]
        Codes of the season's clubs.
    season_year : int
        Four-digit year the season starts in.
    club_ids : Mapping[str, int]
        Club code -> transfermarkt club id.
    session : requests.Session | None
        Session to reuse; a new one is created and closed if None.

    Returns
    -------
    dict[str, dict]
        Club code -> {"market_value": float}. Clubs that could not be scraped
        are missing; the mapping may be empty.
    """
    if session is not None:
        return _scrape_with(session, club_codes, season_year, club_ids)
    with requests.Session() as http:
        return _scrape_with(http, club_codes, season_year, club_ids)


def _scrape_with(
    http: requests.Session,
    club_codes: Iterable[str],
    season_year: int,
    club_ids: Mapping[str, int],
) -> Dict[str, Dict[str, float]]:
    meta: Dict[str, Dict[str, float]] = {}

    for code in club_codes:
        club_id = club_ids.get(code)
        if club_id is None:
            logger.debug("No transfermarkt id for club %s, skipping.", code)
            continue

        url = club_page_url(club_id, season_year)
        try:
            response = http.get(url, headers=_HEADERS, timeout=TRANSFERMARKT_TIMEOUT_SECONDS)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Failed to fetch club meta for %s: %s", code, exc)
            continue

        value = extract_market_value(response.text)
        if value is None:
            logger.warning("No market value found for %s at %s", code, url)
            continue

        meta[code] = {"market_value": value}

    logger.info("Scraped metadata for %d clubs.", len(meta))
    return meta


async def load_club_meta(
    club_codes: Iterable[str],
    season_year: int,
    club_ids: Mapping[str, int] = CLUB_META_IDS,
    session: Optional[requests.Session] = None,
) -> Dict[str, Dict[str, float]]:
    """Run `scrape_club_meta` in a worker thread."""
    return await asyncio.to_thread(
        scrape_club_meta, list(club_codes), season_year, club_ids, session
    )
