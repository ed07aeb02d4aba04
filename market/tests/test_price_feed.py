"""Tests for FinnhubPriceFeed with a mocked HTTP session."""

from unittest.mock import MagicMock

import pytest
import requests

from market.feed import FinnhubPriceFeed
from models.config import FeedConfig
from utility.errors import RateLimitExceeded, TransientFeedError


def _response(status: int = 200, body=None, json_error: bool = False) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 400
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


@pytest.fixture
def feed(session) -> FinnhubPriceFeed:
    config = FeedConfig(base_url="https://example.test/api/v1/", timeout_seconds=3)
    return FinnhubPriceFeed(config, api_key="secret", session=session)


def test_fetch_quote_parses_current_price(feed, session):
    session.get.return_value = _response(body={"c": 187.5, "h": 190.0})
    assert feed.fetch_quote("AAPL") == 187.5
    session.get.assert_called_once_with(
        "https://example.test/api/v1/quote",
        params={"symbol": "AAPL", "token": "secret"},
        timeout=3,
    )


def test_fetch_profile_parses_name_and_industry(feed, session):
    session.get.return_value = _response(body={"name": "Apple Inc", "finnhubIndustry": "Technology"})
    profile = feed.fetch_profile("AAPL")
    assert profile.company == "Apple Inc"
    assert profile.industry == "Technology"
    assert session.get.call_args.args[0].endswith("/stock/profile2")


def test_profile_with_missing_fields(feed, session):
    session.get.return_value = _response(body={"name": "Apple Inc", "finnhubIndustry": ""})
    profile = feed.fetch_profile("AAPL")
    assert profile.company == "Apple Inc"
    assert profile.industry is None


def test_empty_profile_is_transient(feed, session):
    session.get.return_value = _response(body={})
    with pytest.raises(TransientFeedError):
        feed.fetch_profile("NOPE")


@pytest.mark.parametrize("method", ["fetch_quote", "fetch_profile"])
def test_http_429_raises_rate_limit(feed, session, method):
    session.get.return_value = _response(status=429)
    with pytest.raises(RateLimitExceeded) as excinfo:
        getattr(feed, method)("AAPL")
    assert excinfo.value.ticker == "AAPL"


def test_http_error_is_transient(feed, session):
    session.get.return_value = _response(status=500)
    with pytest.raises(TransientFeedError):
        feed.fetch_quote("AAPL")


def test_timeout_is_transient(feed, session):
    session.get.side_effect = requests.Timeout("slow")
    with pytest.raises(TransientFeedError):
        feed.fetch_quote("AAPL")


def test_non_json_body_is_transient(feed, session):
    session.get.return_value = _response(json_error=True)
    with pytest.raises(TransientFeedError):
        feed.fetch_quote("AAPL")


@pytest.mark.parametrize(
    "body",
    [{"d": 1.0}, {"c": None}, {"c": "abc"}, {"c": -1.0}, {"c": float("nan")}, {"c": float("inf")}, ["c"]],
)
def test_malformed_quote_is_transient(feed, session, body):
    session.get.return_value = _response(body=body)
    with pytest.raises(TransientFeedError):
        feed.fetch_quote("AAPL")


def test_rate_limit_is_not_a_transient_error(feed, session):
    session.get.return_value = _response(status=429)
    with pytest.raises(RateLimitExceeded):
        try:
            feed.fetch_quote("AAPL")
        except TransientFeedError:
            pytest.fail("rate limit must not be reported as transient")


def test_api_key_not_in_error_messages(feed, session):
    session.get.side_effect = requests.ConnectionError("boom")
    with pytest.raises(TransientFeedError) as excinfo:
        feed.fetch_quote("AAPL")
    assert "secret" not in str(excinfo.value)
