import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

POPULATION_SCALE = 1e6   # medals per million people
GDP_SCALE = 1e3          # medals per USD 1,000 GDP per capita


def safe_ratio(numerator, denominator, scale=1.0):
    """numerator / (denominator / scale) where denominator > 0, NaN elsewhere."""
    den = pd.to_numeric(denominator, errors="coerce")
    valid = den.notna() & (den > 0)
    out = pd.Series(np.nan, index=numerator.index, dtype="float64")
    out[valid] = numerator[valid].astype("float64") / (den[valid] / scale)
    return out


def add_efficiency_metrics(profiles):
    """Add ``medals_per_million`` and ``medals_per_gdp1000`` to a CountryProfile table.

    A ratio is only filled when its denominator is present and strictly positive,
    so NaN means "no denominator", never a zero rate.
    """
    df = profiles.copy()
    df["medals_per_million"] = safe_ratio(df["total"], df["population"], POPULATION_SCALE)
    df["medals_per_gdp1000"] = safe_ratio(df["total"], df["gdp_pc"], GDP_SCALE)

    for column, source in [("medals_per_million", "population"), ("medals_per_gdp1000", "gdp_pc")]:
        n_missing = int(df[column].isna().sum())
        if n_missing:
            logger.warning("%s undefined for %d NOCs (no positive %s)", column, n_missing, source)
    return df


def top_n(profiles, column, n=10):
    """Top ``n`` rows by ``column`` descending; ties keep their original order, NaN rows are skipped."""
    ranked = profiles.dropna(subset=[column])
    return ranked.sort_values(column, ascending=False, kind="mergesort").head(n)
