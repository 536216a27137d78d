"""
Olympic medal efficiency analysis.

Downloads the TidyTuesday athlete/event table, adds World Bank population and
GDP per capita for one reference year, and computes medals per million people
and medals per USD 1,000 GDP per capita for every NOC. The finished table feeds
the charts, an OLS regression and a k-means clustering.

Run as:
    python medal_analysis.py
    python medal_analysis.py --year 2016 --clusters 4 --unmatched drop --out-dir outputs

By default every NOC in the event table is reported, including NOCs that never
won a medal, so the charts, regression and clusters differ from an analysis
restricted to medal winners. Pass --medalists-only (or set MEDALISTS_ONLY) for that.
"""

import argparse
import logging
import os
import sys

from aggregate_medals import aggregate_medals, team_names
from country_codes import NOC_TO_ISO3, CountryCodeTable
from efficiency_metrics import add_efficiency_metrics, top_n
from fetch_data import HTTP_TIMEOUT, INDICATORS, MEDALS_URL, WB_API_URL, FetchError, fetch_indicators, fetch_medal_events
from join_country_data import UNMATCHED_POLICIES, join_profiles
import plot_medal_efficiency as pm
from regression_cluster import attach_clusters, correlation_matrix, fit_medal_regression, kmeans_clusters

# =========================================================
# 0) 配置区
# =========================================================
REFERENCE_YEAR = 2016
UNMATCHED_POLICY = "retain"   # "retain": 保留无指标国家 (NaN); "drop": 剔除
MEDALISTS_ONLY = False        # True: 只保留至少拿过一枚奖牌的 NOC
N_CLUSTERS = 4
N_INIT = 25
RANDOM_SEED = 123
TOP_N = 10
OUT_DIR = "outputs"

PROFILE_CSV = "country_profiles.csv"
CODE_TABLE_CSV = "country_code_table.csv"

logger = logging.getLogger("medal_analysis")


# =========================================================
# 1) 核心流程: 聚合 -> 连接 -> 指标
# =========================================================
def build_country_profiles(events, indicators, code_table, unmatched=UNMATCHED_POLICY,
                           medalists_only=MEDALISTS_ONLY):
    """Aggregator + Joiner + Metrics on already fetched inputs. Pure, sorted by NOC."""
    aggregates = aggregate_medals(events, medalists_only=medalists_only)
    profiles = join_profiles(aggregates, indicators, code_table, unmatched=unmatched,
                             fallback_names=team_names(events))
    profiles = add_efficiency_metrics(profiles)
    return profiles.sort_values("noc", kind="mergesort").reset_index(drop=True)


def fetch_inputs(year=REFERENCE_YEAR, medals_url=MEDALS_URL, wb_url=WB_API_URL, timeout=HTTP_TIMEOUT):
    events = fetch_medal_events(medals_url, timeout=timeout)
    # 指标查询的国家集合来自奖牌表
    codes = events["noc"].dropna().unique()
    indicators = fetch_indicators(codes, year, INDICATORS, base_url=wb_url, timeout=timeout,
                                  noc_aliases=NOC_TO_ISO3)
    code_table = CountryCodeTable.from_indicator_rows(indicators, NOC_TO_ISO3, version=f"worldbank-{year}")
    return events, indicators, code_table


# =========================================================
# 2) 报告: 图表 / 回归 / 聚类
# =========================================================
def run_reports(profiles, out_dir=OUT_DIR, year=REFERENCE_YEAR, k=N_CLUSTERS, n_init=N_INIT,
                seed=RANDOM_SEED, plots=True):
    print("\n--- Top 10 NOCs by total medals ---")
    print(top_n(profiles, "total", TOP_N)[["noc", "country", "gold", "silver", "bronze", "total"]].to_string(index=False))
    print("\n--- Top 10 NOCs by medals per million people ---")
    print(top_n(profiles, "medals_per_million", TOP_N)[["noc", "country", "total", "population", "medals_per_million"]]
          .to_string(index=False))

    corr = correlation_matrix(profiles)
    model = fit_medal_regression(profiles)
    print("\n=== Linear Regression Summary ===")
    print(model.summary())

    clusters = kmeans_clusters(profiles, k=k, n_init=n_init, seed=seed)
    profiles = attach_clusters(profiles, clusters)
    print("\n--- Cluster sizes ---")
    print(profiles["cluster"].value_counts(dropna=False).sort_index().to_string())

    if plots:
        def path(name):
            return os.path.join(out_dir, name)

        pm.plot_top_bar(profiles, "total", "Top 10 NOCs by All-Time Olympic Medals", "Total Medals",
                        path("top10_total.png"), n=TOP_N)
        pm.plot_top_bar(profiles, "medals_per_million", "Top 10 NOCs by Medals per Million People",
                        "Medals per Million", path("top10_per_million.png"), n=TOP_N)
        pm.plot_medal_map(profiles, path("medal_map.html"))
        pm.plot_medal_pie(profiles, path("medal_type_pie.png"))
        pm.plot_total_hist(profiles, path("total_medals_hist.png"))
        pm.plot_scatter_fit(profiles, "gold", "silver", "Gold vs Silver Medals by NOC", "Gold", "Silver",
                            path("gold_vs_silver.png"))
        pm.plot_scatter_fit(profiles, "population", "total", f"Total Medals vs Population ({year})",
                            "Population (log scale)", "Total Medals", path("total_vs_population.png"),
                            logx=True, color='darkgreen')
        pm.plot_scatter_fit(profiles, "gdp_pc", "medals_per_million",
                            f"Medals per Million vs GDP per Capita ({year})", "GDP per Capita (log scale)",
                            "Medals per Million", path("efficiency_vs_gdp.png"), logx=True, color='purple')
        pm.plot_correlation_heatmap(corr, path("correlation_heatmap.png"))
        pm.plot_residuals(model, path("regression_residuals.png"))
        pm.plot_clusters(clusters, path("kmeans_clusters.png"))

    return profiles, model, clusters


# =========================================================
# 3) 主程序
# =========================================================
def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Olympic medal efficiency analysis")
    parser.add_argument("--year", type=int, default=REFERENCE_YEAR, help="World Bank reference year")
    parser.add_argument("--clusters", type=int, default=N_CLUSTERS, help="k for k-means")
    parser.add_argument("--unmatched", choices=UNMATCHED_POLICIES, default=UNMATCHED_POLICY,
                        help="keep or drop NOCs without indicator data")
    parser.add_argument("--medalists-only", action="store_true", default=MEDALISTS_ONLY,
                        help="leave out NOCs that never won a medal")
    parser.add_argument("--out-dir", default=OUT_DIR)
    parser.add_argument("--no-plots", dest="plots", action="store_false")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(message)s')

    try:
        events, indicators, code_table = fetch_inputs(args.year)
    except FetchError as e:
        logger.error("Aborting run: %s (retriable=%s)", e, e.retriable)
        return 1

    profiles = build_country_profiles(events, indicators, code_table, unmatched=args.unmatched,
                                      medalists_only=args.medalists_only)
    profiles, _, _ = run_reports(profiles, out_dir=args.out_dir, year=args.year, k=args.clusters,
                                 plots=args.plots)

    os.makedirs(args.out_dir, exist_ok=True)
    profiles.to_csv(os.path.join(args.out_dir, PROFILE_CSV), index=False)
    code_table.to_frame().to_csv(os.path.join(args.out_dir, CODE_TABLE_CSV), index=False)

    matched = int(profiles["has_indicator_data"].sum())
    print(f"\n完成：{len(profiles)} 个 NOC，其中 {matched} 个有人口/GDP 数据")
    print(f"结果已保存到 {args.out_dir}/")
    return 0


if __name__ == "__main__":
    sys.exit(main())
