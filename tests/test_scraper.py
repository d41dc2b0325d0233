import pytest
import requests

from footyexport.data import scraper
from footyexport.data.scraper import (
    club_page_url,
    extract_market_value,
    load_club_meta,
    parse_market_value,
    scrape_club_meta,
)

CLUB_PAGE = """
<html><body>
<div class="data-header__box--small">
  <a class="data-header__market-value-wrapper" href="/x">
    605,50 <span class="waehrung">Mio. €</span>
    <p class="data-header__last-update">Letzte Änderung: 01.06.2017</p>
  </a>
</div>
</body></html>
"""


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, pages):
        self.pages = pages
        self.requested = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True

    def get(self, url, headers=None, timeout=None):
        self.requested.append(url)
        page = self.pages.get(url)
        if page is None:
            return FakeResponse(status_code=404)
        return FakeResponse(page)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("€605.50m", 605.5e6),
        ("€1.01bn", 1.01e9),
        ("€900k", 900e3),
        ("605,50 Mio. €", 605.5e6),
        ("1,01 Mrd. €", 1.01e9),
        ("900 Tsd. €", 900e3),
    ],
)
def test_parse_market_value(text, expected):
    assert parse_market_value(text) == pytest.approx(expected)


@pytest.mark.parametrize("text", [None, "", "-", "k.A."])
def test_parse_market_value_without_number(text):
    assert parse_market_value(text) is None


def test_extract_market_value_ignores_last_update():
    assert extract_market_value(CLUB_PAGE) == pytest.approx(605.5e6)


def test_extract_market_value_missing_block():
    assert extract_market_value("<html><body><p>nothing</p></body></html>") is None


def test_scrape_club_meta_skips_unknown_and_failing_clubs():
    ids = {"AAA": 1, "BBB": 2}
    session = FakeSession({club_page_url(1, 2016): CLUB_PAGE})

    meta = scrape_club_meta(["AAA", "BBB", "CCC"], 2016, club_ids=ids, session=session)

    assert meta == {"AAA": {"market_value": pytest.approx(605.5e6)}}
    assert session.requested == [club_page_url(1, 2016), club_page_url(2, 2016)]


@pytest.mark.asyncio
async def test_load_club_meta_returns_empty_mapping_without_ids():
    session = FakeSession({})
    meta = await load_club_meta(["AAA"], 2016, club_ids={}, session=session)
    assert meta == {}
    assert session.requested == []


def test_scrape_club_meta_closes_the_session_it_creates(monkeypatch):
    created = []

    def make_session():
        session = FakeSession({club_page_url(1, 2016): CLUB_PAGE})
        created.append(session)
        return session

    monkeypatch.setattr(scraper.requests, "Session", make_session)

    meta = scrape_club_meta(["AAA"], 2016, club_ids={"AAA": 1})

    assert meta["AAA"]["market_value"] == pytest.approx(605.5e6)
    assert len(created) == 1
    assert created[0].closed


def test_scrape_club_meta_leaves_a_passed_session_open():
    session = FakeSession({club_page_url(1, 2016): CLUB_PAGE})
    scrape_club_meta(["AAA"], 2016, club_ids={"AAA": 1}, session=session)
    assert not session.closed
