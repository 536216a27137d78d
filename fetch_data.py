"""
Download the two inputs of the medal efficiency analysis.

1. The TidyTuesday ``olympics.csv`` table (one row per athlete and event).
2. Population and GDP per capita for one reference year from the World Bank API v2.

A single attempt is made for every request. Any failure raises ``FetchError``,
which aborts the run; a requested code the World Bank has no row for is not a
failure, it only leaves that country unmatched downstream.
"""

import io
import logging

import numpy as np
import pandas as pd
import requests

logger = logging.getLogger(__name__)

MEDALS_URL = "https://raw.githubusercontent.com/rfordatascience/tidytuesday/master/data/2021/2021-07-27/olympics.csv"
WB_API_URL = "https://api.worldbank.org/v2"
INDICATORS = {"population": "SP.POP.TOTL", "gdp_pc": "NY.GDP.PCAP.KD"}
HTTP_TIMEOUT = 30
PER_PAGE = 1000

MEDAL_COLUMNS = ("noc", "medal")


class FetchError(RuntimeError):
    """A fetch of one of the external sources failed.

    ``retriable`` is True for timeouts, connection errors and HTTP 5xx; the
    pipeline itself never retries.
    """

    def __init__(self, source, url, reason, params=None, retriable=False):
        self.source = source
        self.url = url
        self.params = params
        self.reason = reason
        self.retriable = retriable
        msg = f"{source} fetch failed: {reason} (url={url}"
        if params:
            msg += f", params={params}"
        super().__init__(msg + ")")


def _get(source, url, params=None, timeout=HTTP_TIMEOUT):
    try:
        response = requests.get(url, params=params, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        status = getattr(e.response, "status_code", None)
        retriable = isinstance(status, int) and status >= 500
        raise FetchError(source, url, f"HTTP {status}", params, retriable=retriable) from e
    except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
        raise FetchError(source, url, f"network error: {e}", params, retriable=True) from e
    except requests.exceptions.RequestException as e:
        raise FetchError(source, url, f"request error: {e}", params) from e
    return response


# =========================================================
# 1) 奖牌数据 (event-level)
# =========================================================
def fetch_medal_events(url=MEDALS_URL, timeout=HTTP_TIMEOUT):
    logger.info("Downloading medal events from %s", url)
    response = _get("medals", url, timeout=timeout)

    try:
        events = pd.read_csv(io.StringIO(response.text))
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise FetchError("medals", url, f"malformed CSV payload: {e}") from e

    missing = [c for c in MEDAL_COLUMNS if c not in events.columns]
    if missing:
        raise FetchError("medals", url, f"payload is missing columns {missing}")
    if events.empty:
        raise FetchError("medals", url, "payload has no rows")

    logger.info("Fetched %d medal events covering %d NOCs", len(events), events["noc"].nunique())
    return events


# =========================================================
# 2) World Bank 指标 (population, GDP per capita)
# =========================================================
def _fetch_indicator_rows(indicator, year, base_url=WB_API_URL, timeout=HTTP_TIMEOUT):
    url = f"{base_url}/country/all/indicator/{indicator}"
    params = {"format": "json", "date": f"{year}:{year}", "per_page": PER_PAGE, "page": 1}
    rows = []

    while True:
        response = _get("indicators", url, dict(params), timeout)
        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError("indicators", url, "response is not JSON", dict(params)) from e

        if not isinstance(payload, list) or len(payload) < 2:
            reason = "unexpected payload shape"
            if isinstance(payload, list) and payload and isinstance(payload[0], dict) and "message" in payload[0]:
                reason = f"API error {payload[0]['message']}"
            raise FetchError("indicators", url, reason, dict(params))

        meta, page_rows = payload[0], payload[1] or []
        rows.extend(page_rows)
        if params["page"] >= int(meta.get("pages") or 1):
            break
        params["page"] += 1

    if not rows:
        raise FetchError("indicators", url, f"no rows for {indicator} in {year}", params)
    return rows


def _rows_to_frame(rows, column):
    records = []
    for row in rows:
        country = row.get("country") or {}
        value = row.get("value")
        records.append({
            "iso2c": country.get("id"),
            "iso3c": row.get("countryiso3code") or None,
            "country": country.get("value"),
            column: np.nan if value is None else float(value),
        })
    return pd.DataFrame(records, columns=["iso2c", "iso3c", "country", column])


def fetch_indicators(codes, year, indicators=None, base_url=WB_API_URL,
                     timeout=HTTP_TIMEOUT, noc_aliases=None):
    """Indicator table for ``year`` restricted to the requested codes.

    ``codes`` are the medal table's NOCs. A row is kept when its ISO3 or ISO2
    code is requested, or when its ISO3 is the alias target of a requested NOC.
    Returns columns ``iso2c, iso3c, country`` plus one column per indicator.
    """
    indicators = indicators or INDICATORS
    codes = {c for c in codes if isinstance(c, str)}
    aliases = noc_aliases or {}
    wanted = codes | {aliases[c] for c in codes if c in aliases}

    table = None
    for column, indicator in indicators.items():
        logger.info("Querying World Bank %s (%s) for %d", indicator, column, year)
        frame = _rows_to_frame(_fetch_indicator_rows(indicator, year, base_url, timeout), column)
        frame = frame.drop_duplicates(subset=["iso2c"], keep="first")
        if table is None:
            table = frame
        else:
            table = table.merge(frame[["iso2c", column]], on="iso2c", how="outer")

    table = table[table["iso3c"].isin(wanted) | table["iso2c"].isin(wanted)].reset_index(drop=True)

    found = set(table["iso3c"].dropna()) | set(table["iso2c"].dropna())
    n_missing = sum(1 for c in codes if c not in found and aliases.get(c) not in found)
    if n_missing:
        logger.warning("World Bank returned no %d row for %d of %d requested codes", year, n_missing, len(codes))
    return table
