from unittest.mock import MagicMock, patch

import numpy as np
import pytest
import requests

from fetch_data import FetchError, fetch_indicators, fetch_medal_events

MEDALS_CSV = """id,name,team,noc,year,sport,event,medal
1,A,United States,USA,2016,Swimming,100m,Gold
2,B,Kenya,KEN,2016,Athletics,800m,NA
3,C,Germany,GER,2016,Rowing,Eight,Silver
"""


def _response(text=None, payload=None):
    resp = MagicMock()
    resp.text = text
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def _wb_row(iso2, iso3, name, value):
    return {
        "indicator": {"id": "X", "value": "x"},
        "country": {"id": iso2, "value": name},
        "countryiso3code": iso3,
        "date": "2016",
        "value": value,
    }


# ---------------------------------------------------------------------------
# medal events
# ---------------------------------------------------------------------------

@patch("fetch_data.requests.get")
def test_fetch_medal_events_parses_csv(mock_get):
    mock_get.return_value = _response(text=MEDALS_CSV)
    events = fetch_medal_events("http://example/olympics.csv", timeout=5)

    assert list(events["noc"]) == ["USA", "KEN", "GER"]
    assert events["medal"].isna().sum() == 1
    mock_get.assert_called_once_with("http://example/olympics.csv", params=None, timeout=5)


@patch("fetch_data.requests.get")
def test_fetch_medal_events_missing_column(mock_get):
    mock_get.return_value = _response(text="id,noc\n1,USA\n")
    with pytest.raises(FetchError) as exc:
        fetch_medal_events("http://example/olympics.csv")
    assert exc.value.source == "medals"
    assert not exc.value.retriable
    assert "medal" in str(exc.value)


@patch("fetch_data.requests.get")
def test_fetch_medal_events_empty_payload(mock_get):
    mock_get.return_value = _response(text="")
    with pytest.raises(FetchError):
        fetch_medal_events("http://example/olympics.csv")


@patch("fetch_data.requests.get")
def test_network_failure_is_retriable(mock_get):
    mock_get.side_effect = requests.exceptions.ConnectionError("down")
    with pytest.raises(FetchError) as exc:
        fetch_medal_events("http://example/olympics.csv")
    assert exc.value.retriable
    assert "http://example/olympics.csv" in str(exc.value)


@patch("fetch_data.requests.get")
def test_http_status_classification(mock_get):
    resp = _response(text="")
    resp.raise_for_status.side_effect = requests.exceptions.HTTPError(response=MagicMock(status_code=404))
    mock_get.return_value = resp
    with pytest.raises(FetchError) as exc:
        fetch_medal_events("http://example/olympics.csv")
    assert not exc.value.retriable

    resp.raise_for_status.side_effect = requests.exceptions.HTTPError(response=MagicMock(status_code=503))
    with pytest.raises(FetchError) as exc:
        fetch_medal_events("http://example/olympics.csv")
    assert exc.value.retriable


# ---------------------------------------------------------------------------
# World Bank indicators
# ---------------------------------------------------------------------------

@patch("fetch_data.requests.get")
def test_fetch_indicators_restricts_and_merges(mock_get):
    pop = [{"page": 1, "pages": 1}, [
        _wb_row("US", "USA", "United States", 323000000),
        _wb_row("DE", "DEU", "Germany", 82000000),
        _wb_row("FR", "FRA", "France", 66000000),
        _wb_row("1A", "ARB", "Arab World", 400000000),
    ]]
    gdp = [{"page": 1, "pages": 1}, [
        _wb_row("US", "USA", "United States", 52000.5),
        _wb_row("DE", "DEU", "Germany", None),
        _wb_row("FR", "FRA", "France", 36000),
        _wb_row("1A", "ARB", "Arab World", 6000),
    ]]
    mock_get.side_effect = [_response(payload=pop), _response(payload=gdp)]

    table = fetch_indicators(["USA", "GER", "KEN"], 2016,
                             {"population": "SP.POP.TOTL", "gdp_pc": "NY.GDP.PCAP.KD"},
                             base_url="http://wb", noc_aliases={"GER": "DEU"})

    assert sorted(table["iso2c"]) == ["DE", "US"]
    de = table.set_index("iso2c").loc["DE"]
    assert de["population"] == 82000000.0
    assert np.isnan(de["gdp_pc"])

    url, = mock_get.call_args_list[0].args
    assert url == "http://wb/country/all/indicator/SP.POP.TOTL"
    assert mock_get.call_args_list[0].kwargs["params"]["date"] == "2016:2016"


@patch("fetch_data.requests.get")
def test_fetch_indicators_follows_pages(mock_get):
    page1 = [{"page": 1, "pages": 2}, [_wb_row("US", "USA", "United States", 1)]]
    page2 = [{"page": 2, "pages": 2}, [_wb_row("KE", "KEN", "Kenya", 2)]]
    mock_get.side_effect = [_response(payload=page1), _response(payload=page2)]

    table = fetch_indicators(["USA", "KEN"], 2016, {"population": "SP.POP.TOTL"}, base_url="http://wb")

    assert sorted(table["iso3c"]) == ["KEN", "USA"]
    assert [c.kwargs["params"]["page"] for c in mock_get.call_args_list] == [1, 2]


@patch("fetch_data.requests.get")
def test_fetch_indicators_api_error_message(mock_get):
    mock_get.return_value = _response(payload=[{"message": [{"id": "120", "value": "Invalid value"}]}])
    with pytest.raises(FetchError) as exc:
        fetch_indicators(["USA"], 2016, {"population": "SP.POP.TOTL"}, base_url="http://wb")
    assert exc.value.source == "indicators"
    assert "API error" in str(exc.value)


@patch("fetch_data.requests.get")
def test_fetch_indicators_no_rows_at_all(mock_get):
    mock_get.return_value = _response(payload=[{"page": 1, "pages": 0}, None])
    with pytest.raises(FetchError):
        fetch_indicators(["USA"], 2016, {"population": "SP.POP.TOTL"}, base_url="http://wb")
