from unittest.mock import Mock

import pytest
import requests

from splitter.errors import NetworkError, ParseError
from splitter.services.rate_source import HTTPRateSource, fetch_with_retry, parse_rate_response

TEMPLATE = "https://rates.example/{base}.json"


def _session(status=200, payload=None, json_error=None, exc=None):
    session = Mock()
    if exc is not None:
        session.get.side_effect = exc
        return session
    response = Mock(status_code=status)
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    session.get.return_value = response
    return session


def test_parse_rate_response():
    table = parse_rate_response("TWD", {"date": "2025-12-06", "twd": {"usd": 0.03125, "jpy": 4.5}})
    assert table.base == "twd"
    assert table.date == "2025-12-06"
    assert table.rates["usd"] == 0.03125
    assert table.rates["jpy"] == 4.5
    assert table.rates["twd"] == 1.0


def test_parse_forces_base_rate():
    table = parse_rate_response("eur", {"date": "2025-01-01", "eur": {"eur": 3.0, "usd": 1.1}})
    assert table.rates["eur"] == 1.0


def test_parse_without_date():
    table = parse_rate_response("eur", {"eur": {"usd": 1.1}})
    assert table.date == ""


def test_parse_missing_base_key():
    with pytest.raises(ParseError):
        parse_rate_response("twd", {"date": "2025-01-01", "usd": {"twd": 32.0}})


@pytest.mark.parametrize("payload", [
    [1, 2, 3],
    {"twd": "not-a-table"},
    {"twd": {"usd": "fast"}},
])
def test_parse_rejects_malformed_documents(payload):
    with pytest.raises(ParseError):
        parse_rate_response("twd", payload)


def test_fetch_lowercases_base_in_url():
    session = _session(payload={"date": "2025-12-06", "twd": {"usd": 0.03}})
    table = HTTPRateSource(TEMPLATE, timeout=5, session=session).fetch("TWD")
    session.get.assert_called_once_with("https://rates.example/twd.json", timeout=5)
    assert table.rates == {"usd": 0.03, "twd": 1.0}
    assert table.fetched_at > 0


def test_fetch_non_200_is_network_error():
    source = HTTPRateSource(TEMPLATE, session=_session(status=503))
    with pytest.raises(NetworkError, match="503"):
        source.fetch("twd")


def test_fetch_transport_error_is_network_error():
    source = HTTPRateSource(TEMPLATE, session=_session(exc=requests.ConnectionError("refused")))
    with pytest.raises(NetworkError):
        source.fetch("twd")


def test_fetch_invalid_json_is_parse_error():
    source = HTTPRateSource(TEMPLATE, session=_session(json_error=ValueError("Expecting value")))
    with pytest.raises(ParseError):
        source.fetch("twd")


def test_retry_succeeds_on_second_attempt(rate_source):
    good = parse_rate_response("twd", {"twd": {"usd": 0.03}})
    outcomes = [NetworkError("timeout"), good]
    rate_source.fetch = Mock(side_effect=outcomes)
    sleeps = []

    assert fetch_with_retry(rate_source, "twd", sleep=sleeps.append) is good
    assert sleeps == [0.2]


def test_retry_raises_last_error(rate_source):
    rate_source.fetch = Mock(side_effect=[NetworkError("first"), ParseError("second")])
    sleeps = []

    with pytest.raises(ParseError, match="second"):
        fetch_with_retry(rate_source, "twd", sleep=sleeps.append)
    assert rate_source.fetch.call_count == 2
    assert sleeps == [0.2]


def test_retry_backoff_grows_linearly(rate_source):
    sleeps = []
    with pytest.raises(NetworkError):
        fetch_with_retry(rate_source, "twd", attempts=3, sleep=sleeps.append)
    assert sleeps == pytest.approx([0.2, 0.4])
    assert rate_source.calls == ["twd", "twd", "twd"]


def test_parse_rejects_rates_too_large_for_float():
    with pytest.raises(ParseError, match="usd"):
        parse_rate_response("twd", {"date": "d", "twd": {"usd": 10 ** 400}})
