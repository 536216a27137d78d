import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from country_codes import CountryCodeTable


@pytest.fixture
def events():
    return pd.DataFrame({
        "noc": ["USA", "USA", "USA", "KEN", None],
        "medal": ["Gold", "Gold", "Silver", "Bronze", "Gold"],
        "team": ["United States", "United States", "United States", "Kenya", "Mixed"],
    })


@pytest.fixture
def code_table():
    return CountryCodeTable(
        iso2_to_iso3={"US": "USA", "KE": "KEN", "DE": "DEU", "NL": "NLD"},
        iso3_to_name={"USA": "United States", "KEN": "Kenya", "DEU": "Germany", "NLD": "Netherlands"},
        noc_aliases={"GER": "DEU", "NED": "NLD"},
        version="test",
    )


@pytest.fixture
def indicators():
    return pd.DataFrame({
        "iso2c": ["US", "DE"],
        "iso3c": ["USA", "DEU"],
        "country": ["United States", "Germany"],
        "population": [323_000_000.0, 82_000_000.0],
        "gdp_pc": [52_000.0, np.nan],
    })


@pytest.fixture
def profile_table():
    """Synthetic joined table large enough for regression and k-means."""
    rng = np.random.default_rng(0)
    n = 40
    population = rng.uniform(1e6, 3e8, n)
    gdp_pc = rng.uniform(1e3, 8e4, n)
    gold = rng.integers(0, 50, n)
    silver = rng.integers(0, 50, n)
    bronze = rng.integers(0, 50, n)
    total = gold + silver + bronze
    df = pd.DataFrame({
        "noc": [f"C{i:02d}" for i in range(n)],
        "country": [f"Country {i}" for i in range(n)],
        "gold": gold, "silver": silver, "bronze": bronze, "total": total,
        "population": population, "gdp_pc": gdp_pc,
        "has_indicator_data": True,
    })
    df["medals_per_million"] = df["total"] / (df["population"] / 1e6)
    df["medals_per_gdp1000"] = df["total"] / (df["gdp_pc"] / 1e3)
    df.loc[[3, 7], ["population", "gdp_pc", "medals_per_million", "medals_per_gdp1000"]] = np.nan
    df.loc[[3, 7], "has_indicator_data"] = False
    return df
