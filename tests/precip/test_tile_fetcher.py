"""Tests for the HTTP tile fetcher."""

import pytest
import requests

from rivercast.precip.errors import TileFetchError
from rivercast.precip.tile_fetcher import TileFetcher

pytestmark = pytest.mark.unit

URL = "https://tiles.example/precip/0h/10/285/486.png"


def test_fetch_returns_body(internal_config, fake_session):
    session = fake_session({"/0h/": b"tile-bytes"})
    fetcher = TileFetcher(internal_config, session=session)

    assert fetcher.fetch(URL) == b"tile-bytes"
    assert session.requested == [URL]


def test_fetch_uses_configured_timeout(make_config, fake_session):
    config = make_config(tile_timeout_sec=2)
    session = fake_session(default=b"x")
    TileFetcher(config, session=session).fetch(URL)

    assert session.timeouts == [2.0]


def test_user_agent_header_set(internal_config, fake_session):
    session = fake_session()
    TileFetcher(internal_config, session=session)

    assert session.headers["User-Agent"] == internal_config.tiles.user_agent


def test_http_error_status_raises(internal_config, fake_session):
    fetcher = TileFetcher(internal_config, session=fake_session({"/0h/": 503}))

    with pytest.raises(TileFetchError, match="503"):
        fetcher.fetch(URL)


def test_connection_error_raises(internal_config, fake_session):
    session = fake_session({"/0h/": requests.exceptions.ConnectionError("refused")})
    fetcher = TileFetcher(internal_config, session=session)

    with pytest.raises(TileFetchError) as excinfo:
        fetcher.fetch(URL)
    assert excinfo.value.url == URL
    assert isinstance(excinfo.value.__cause__, requests.exceptions.ConnectionError)


def test_timeout_raises(internal_config, fake_session):
    session = fake_session({"/0h/": requests.exceptions.Timeout("slow")})
    fetcher = TileFetcher(internal_config, session=session)

    with pytest.raises(TileFetchError):
        fetcher.fetch(URL)


def test_close_closes_session(internal_config, fake_session):
    session = fake_session()
    TileFetcher(internal_config, session=session).close()
    assert session.closed


def test_default_session_is_requests_session(internal_config):
    fetcher = TileFetcher(internal_config)
    try:
        assert isinstance(fetcher.session, requests.Session)
    finally:
        fetcher.close()
