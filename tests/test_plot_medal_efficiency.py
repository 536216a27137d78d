import plot_medal_efficiency as pm
from regression_cluster import correlation_matrix, fit_medal_regression, kmeans_clusters


def test_bar_and_distribution_charts(profile_table, tmp_path):
    paths = [
        pm.plot_top_bar(profile_table, "total", "Top", "Total", str(tmp_path / "top.png")),
        pm.plot_top_bar(profile_table, "medals_per_million", "Top", "Rate", str(tmp_path / "rate.png")),
        pm.plot_medal_pie(profile_table, str(tmp_path / "pie.png")),
        pm.plot_total_hist(profile_table, str(tmp_path / "hist.png")),
        pm.plot_scatter_fit(profile_table, "population", "total", "t", "x", "y",
                            str(tmp_path / "scatter.png"), logx=True),
    ]
    for path in paths:
        assert (tmp_path / path.split("/")[-1]).stat().st_size > 0


def test_model_charts(profile_table, tmp_path):
    pm.plot_correlation_heatmap(correlation_matrix(profile_table), str(tmp_path / "corr.png"))
    pm.plot_residuals(fit_medal_regression(profile_table), str(tmp_path / "resid.png"))
    pm.plot_clusters(kmeans_clusters(profile_table, k=3, n_init=3), str(tmp_path / "clusters.png"))
    assert {p.name for p in tmp_path.iterdir()} == {"corr.png", "resid.png", "clusters.png"}


def test_medal_map_html(profile_table, tmp_path):
    out = tmp_path / "map" / "medal_map.html"
    pm.plot_medal_map(profile_table, str(out))
    assert "Country 0" in out.read_text(encoding="utf-8")
