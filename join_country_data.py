import logging

import pandas as pd

logger = logging.getLogger(__name__)

UNMATCHED_POLICIES = ("retain", "drop")
INDICATOR_COLUMNS = ["population", "gdp_pc"]


# =========================================================
# 1) 指标表: ISO2 -> ISO3 -> NOC
# =========================================================
def harmonize_indicators(indicators, code_table):
    """Re-key the indicator table from ISO2 to NOC.

    Rows whose ISO2 code is not in the table are dropped from the indicator side.
    When several rows land on the same NOC the first one wins.
    """
    ind = indicators.copy()
    ind["iso3"] = ind["iso2c"].map(code_table.iso3)

    untranslated = ind["iso3"].isna()
    if untranslated.any():
        logger.warning("%d indicator rows have no ISO3 translation: %s",
                       int(untranslated.sum()), sorted(ind.loc[untranslated, "iso2c"].fillna("<NA>").astype(str))[:10])
    ind = ind[~untranslated].copy()

    ind["noc"] = ind["iso3"].map(code_table.iso3_to_noc)
    dup = ind.duplicated(subset=["noc"], keep="first")
    if dup.any():
        logger.warning("%d duplicate indicator rows after harmonization, keeping first match", int(dup.sum()))

    columns = ["noc"] + [c for c in INDICATOR_COLUMNS if c in ind.columns]
    return ind.loc[~dup, columns].reset_index(drop=True)


# =========================================================
# 2) 左连接: 每个奖牌国家恰好一行
# =========================================================
def join_profiles(aggregates, indicators, code_table, unmatched="retain", fallback_names=None):
    """CountryMedalAggregate ⨝ CountryIndicator, left join on NOC.

    ``unmatched="retain"`` keeps NOCs without an indicator match with NaN
    population/GDP; ``"drop"`` removes them. ``has_indicator_data`` marks the
    matched rows. ``country`` comes from the code table, then from
    ``fallback_names`` (NOC -> name) when given.
    """
    if unmatched not in UNMATCHED_POLICIES:
        raise ValueError(f"unmatched must be one of {UNMATCHED_POLICIES}, got {unmatched!r}")

    ind = harmonize_indicators(indicators, code_table)
    for column in INDICATOR_COLUMNS:
        if column not in ind.columns:
            ind[column] = float("nan")

    profiles = aggregates.merge(ind, on="noc", how="left", validate="one_to_one")
    profiles["has_indicator_data"] = profiles["noc"].isin(ind["noc"])

    n_unmatched = int((~profiles["has_indicator_data"]).sum())
    if n_unmatched:
        sample = profiles.loc[~profiles["has_indicator_data"], "noc"].tolist()[:10]
        logger.warning("%d of %d NOCs have no indicator match (e.g. %s)", n_unmatched, len(profiles), sample)
        if unmatched == "drop":
            logger.warning("Dropping %d unmatched NOCs", n_unmatched)
            profiles = profiles[profiles["has_indicator_data"]].reset_index(drop=True)

    names = profiles["noc"].map(code_table.display_name)
    if fallback_names is not None:
        names = names.fillna(profiles["noc"].map(fallback_names))
    profiles.insert(1, "country", names)

    return profiles[["noc", "country", "gold", "silver", "bronze", "total",
                     "population", "gdp_pc", "has_indicator_data"]]
