"""Aggregate event-level Olympic results into one medal count row per NOC."""

import logging

import pandas as pd

logger = logging.getLogger(__name__)

MEDAL_TYPES = ("Gold", "Silver", "Bronze")
COUNT_COLUMNS = ["gold", "silver", "bronze"]


def aggregate_medals(events, medalists_only=False):
    """Fold MedalEvents into ``noc, gold, silver, bronze, total``.

    Rows with a null ``noc`` are excluded from every count. Only the exact,
    case-sensitive labels in ``MEDAL_TYPES`` are counted; anything else in the
    ``medal`` column counts towards nothing. ``total`` is always derived from the
    three typed counts. With ``medalists_only`` NOCs whose total is 0 are left out.
    """
    null_codes = events["noc"].isna()
    if null_codes.any():
        logger.warning("Excluding %d medal events with no NOC", int(null_codes.sum()))
    df = events.loc[~null_codes, ["noc", "medal"]]

    # 每种奖牌一个 0/1 指示列，再按 NOC 求和
    counts = pd.DataFrame({"noc": df["noc"]})
    for medal, column in zip(MEDAL_TYPES, COUNT_COLUMNS):
        counts[column] = (df["medal"] == medal).astype("int64")

    agg = counts.groupby("noc", sort=True)[COUNT_COLUMNS].sum().reset_index()
    agg[COUNT_COLUMNS] = agg[COUNT_COLUMNS].astype("int64")
    agg["total"] = agg["gold"] + agg["silver"] + agg["bronze"]

    if medalists_only:
        agg = agg[agg["total"] > 0].reset_index(drop=True)

    logger.info("Aggregated %d events into %d NOCs (%d medals)", len(df), len(agg), int(agg["total"].sum()))
    return agg


def team_names(events):
    """NOC -> most frequent ``team`` label, used as a fallback display name."""
    if "team" not in events.columns:
        return {}
    teams = events.dropna(subset=["noc", "team"])
    return teams.groupby("noc")["team"].agg(lambda x: x.mode()[0]).to_dict()
