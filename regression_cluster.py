import logging
from collections import namedtuple

import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy.cluster.vq import kmeans2

logger = logging.getLogger(__name__)

CORR_VARS = ["gold", "silver", "bronze", "total", "medals_per_million", "medals_per_gdp1000"]
REGRESSION_TERMS = ["population", "gdp_pc", "medals_per_million"]

ClusterResult = namedtuple("ClusterResult", ["labels", "centroids", "inertia", "projection", "explained"])


# =========================================================
# 1) 相关系数 (pairwise complete)
# =========================================================
def correlation_matrix(profiles, columns=CORR_VARS):
    return profiles[columns].astype(float).corr(method="pearson")


# =========================================================
# 2) OLS: total ~ population + gdp_pc + medals_per_million
# =========================================================
def fit_medal_regression(profiles, response="total", terms=REGRESSION_TERMS):
    missing = [c for c in [response] + list(terms) if c not in profiles.columns]
    if missing:
        raise ValueError(f"regression columns not in table: {missing}")

    data = profiles[[response] + list(terms)].astype(float).dropna()
    if len(data) <= len(terms) + 1:
        raise ValueError(f"only {len(data)} complete rows for {len(terms)} regressors")
    logger.info("Fitting OLS %s ~ %s on %d NOCs", response, " + ".join(terms), len(data))

    X = sm.add_constant(data[list(terms)])
    return sm.OLS(data[response], X).fit()


# =========================================================
# 3) K-means (多次随机初始化，取 inertia 最小的一次)
# =========================================================
def standardize(data):
    # 与 R scale() 一致: 样本标准差 (ddof=1)；常数列不缩放
    std = data.std(ddof=1).replace(0, 1.0)
    return (data - data.mean()) / std


def pca_projection(scaled, n_components=2):
    centered = scaled - scaled.mean(axis=0)
    _, s, vt = np.linalg.svd(centered, full_matrices=False)
    coords = centered @ vt[:n_components].T
    explained = (s ** 2) / (s ** 2).sum() if s.sum() > 0 else np.zeros_like(s)
    return coords, explained[:n_components]


def kmeans_clusters(profiles, columns=CORR_VARS, k=4, n_init=25, seed=123):
    """K-means on z-scored ``columns`` over the rows with no NaN in them.

    Each restart starts from ``k`` distinct random rows; the restart with the
    lowest within-cluster sum of squares is returned. Labels are 1..k and
    indexed like ``profiles``.
    """
    if k < 1 or n_init < 1:
        raise ValueError(f"k and n_init must be positive, got k={k}, n_init={n_init}")
    data = profiles[columns].astype(float).dropna()
    if len(data) < k:
        raise ValueError(f"only {len(data)} complete rows for k={k} clusters")

    scaled = standardize(data).to_numpy()
    rng = np.random.default_rng(seed)

    best = None
    for _ in range(n_init):
        start = scaled[rng.choice(len(scaled), size=k, replace=False)]
        centroids, labels = kmeans2(scaled, start, minit="matrix", missing="warn")
        inertia = float(((scaled - centroids[labels]) ** 2).sum())
        if best is None or inertia < best[0]:
            best = (inertia, centroids, labels)

    inertia, centroids, labels = best
    coords, explained = pca_projection(scaled)
    logger.info("K-means k=%d on %d NOCs, best inertia %.3f over %d restarts", k, len(data), inertia, n_init)

    return ClusterResult(
        labels=pd.Series(labels + 1, index=data.index, name="cluster"),
        centroids=pd.DataFrame(centroids, columns=columns),
        inertia=inertia,
        projection=pd.DataFrame(coords, index=data.index, columns=["PC1", "PC2"][:coords.shape[1]]),
        explained=explained,
    )


def attach_clusters(profiles, result):
    df = profiles.copy()
    df["cluster"] = result.labels.reindex(df.index).astype("Int64")
    return df
