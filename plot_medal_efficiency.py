import os

import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns
from pyecharts import options as opts
from pyecharts.charts import Map

from efficiency_metrics import top_n

plt.rcParams['axes.unicode_minus'] = False

# =========================
# 地图名称映射
# World Bank 名称 -> pyecharts world 地图名称，不一致的国家无法着色
# =========================
MAP_NAME_MAPPING = {
    "United States": "United States",
    "Russian Federation": "Russia",
    "Korea, Rep.": "Korea",
    "Korea, Dem. People's Rep.": "Dem. Rep. Korea",
    "Iran, Islamic Rep.": "Iran",
    "Egypt, Arab Rep.": "Egypt",
    "Venezuela, RB": "Venezuela",
    "Slovak Republic": "Slovakia",
    "Czechia": "Czech Rep.",
    "Kyrgyz Republic": "Kyrgyzstan",
    "Turkiye": "Turkey",
    "Syrian Arab Republic": "Syria",
    "Bahamas, The": "Bahamas",
    "Dominican Republic": "Dominican Rep.",
    "Cote d'Ivoire": "Côte d'Ivoire",
}


def _save(fig, out_path):
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    fig.savefig(out_path, dpi=300, bbox_inches='tight')
    plt.close(fig)
    print(f"图表已保存为 {out_path}")
    return out_path


def _labels(df):
    return df['country'].fillna(df['noc']) if 'country' in df.columns else df['noc']


# =========================
# 1) Top-N 横向柱状图
# =========================
def plot_top_bar(profiles, column, title, xlabel, out_path, n=10):
    top = top_n(profiles, column, n).iloc[::-1]

    fig, ax = plt.subplots(figsize=(10, 6))
    colors = sns.color_palette("viridis", len(top))
    ax.barh(_labels(top), top[column], color=colors, edgecolor='black', linewidth=0.5)
    for y, value in enumerate(top[column]):
        ax.text(value, y, f' {value:,.2f}' if value % 1 else f' {int(value)}', va='center', fontsize=9)

    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.set_xlabel(xlabel)
    ax.grid(axis='x', alpha=0.3, linestyle='--')
    ax.set_axisbelow(True)
    return _save(fig, out_path)


# =========================
# 2) 世界地图 (choropleth)
# =========================
def plot_medal_map(profiles, out_path, column='total'):
    df = profiles.dropna(subset=['country', column])
    names = df['country'].replace(MAP_NAME_MAPPING)
    data_pair = [[name, int(v) if float(v).is_integer() else round(float(v), 2)]
                 for name, v in zip(names, df[column])]
    max_value = float(df[column].max()) if len(df) else 1.0

    world_map = (
        Map(init_opts=opts.InitOpts(width="1000px", height="600px", bg_color="#FFFFFF", renderer="svg"))
        .add(
            series_name="Total Medals",
            data_pair=data_pair,
            maptype="world",
            is_map_symbol_show=False,
            label_opts=opts.LabelOpts(is_show=False),
            itemstyle_opts=opts.ItemStyleOpts(border_width=0.5, border_color="rgba(0,0,0,0.2)"),
            zoom=1.2,
            tooltip_opts=opts.TooltipOpts(trigger="item", formatter="{b}: {c}"),
        )
        .set_global_opts(
            title_opts=opts.TitleOpts(title="All-Time Olympic Medals by Country", pos_left="center"),
            visualmap_opts=opts.VisualMapOpts(
                max_=max_value,
                min_=0,
                range_color=["#440154", "#21908d", "#fde725"],
                orient="horizontal",
                pos_left="center",
                pos_bottom="10%",
            ),
            legend_opts=opts.LegendOpts(is_show=False),
        )
    )
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    world_map.render(out_path)
    print(f"地图已生成：{out_path}")
    return out_path


# =========================
# 3) 奖牌类型饼图 / 总数直方图
# =========================
def plot_medal_pie(profiles, out_path):
    counts = profiles[['gold', 'silver', 'bronze']].sum()
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.pie(counts.values, labels=['Gold', 'Silver', 'Bronze'], autopct='%1.1f%%',
           colors=sns.color_palette("plasma", 3), startangle=90)
    ax.set_title('Overall Medal-Type Distribution')
    return _save(fig, out_path)


def plot_total_hist(profiles, out_path):
    totals = profiles['total']
    fig, ax = plt.subplots(figsize=(10, 6))
    bins = np.arange(totals.min(), totals.max() + 2) - 0.5
    ax.hist(totals, bins=bins, color='steelblue', edgecolor='white')
    ax.set_title('Distribution of Total Medals Across NOCs')
    ax.set_xlabel('Total Medals')
    ax.set_ylabel('Frequency')
    return _save(fig, out_path)


# =========================
# 4) 散点 + 线性拟合
# =========================
def plot_scatter_fit(profiles, x, y, title, xlabel, ylabel, out_path, logx=False, color='darkred'):
    df = profiles.dropna(subset=[x, y])
    if logx:
        df = df[df[x] > 0]

    fig, ax = plt.subplots(figsize=(8, 6))
    sns.regplot(data=df, x=x, y=y, logx=logx, ci=None, ax=ax,
                scatter_kws={'alpha': 0.7}, line_kws={'color': color})
    if logx:
        ax.set_xscale('log')
    ax.set_title(title)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    return _save(fig, out_path)


# =========================
# 5) 相关系数热力图 (上三角)
# =========================
def plot_correlation_heatmap(corr, out_path):
    mask = np.tril(np.ones_like(corr, dtype=bool), k=-1)
    fig, ax = plt.subplots(figsize=(8, 7))
    sns.heatmap(corr, mask=mask, cmap='coolwarm', vmin=-1, vmax=1, annot=True, fmt='.2f',
                square=True, linewidths=0.5, cbar_kws={'shrink': 0.8}, ax=ax)
    ax.set_title('Correlation Matrix: Medals & Efficiency')
    return _save(fig, out_path)


# =========================
# 6) 回归残差 / 聚类 PCA 投影
# =========================
def plot_residuals(model, out_path):
    fig, ax = plt.subplots(figsize=(8, 6))
    ax.scatter(model.fittedvalues, model.resid, alpha=0.7)
    ax.axhline(y=0, color='grey', linestyle='--', linewidth=1)
    ax.set_title('Residuals vs Fitted')
    ax.set_xlabel('Fitted values')
    ax.set_ylabel('Residuals')
    return _save(fig, out_path)


def plot_clusters(result, out_path):
    proj = result.projection
    labels = result.labels.loc[proj.index]

    fig, ax = plt.subplots(figsize=(8, 6))
    palette = sns.color_palette("Set1", labels.nunique())
    for color, (cluster, idx) in zip(palette, proj.groupby(labels).groups.items()):
        ax.scatter(proj.loc[idx, 'PC1'], proj.loc[idx, 'PC2'], color=color, alpha=0.8,
                   label=f'Cluster {cluster}')

    dims = [f'Dim{i + 1} ({v * 100:.1f}%)' for i, v in enumerate(result.explained)]
    ax.set_xlabel(dims[0] if dims else 'PC1')
    ax.set_ylabel(dims[1] if len(dims) > 1 else 'PC2')
    ax.set_title('K-means Clusters of NOCs by Medal Profile')
    ax.legend(loc='best', framealpha=0.9)
    ax.grid(alpha=0.3, linestyle='--')
    return _save(fig, out_path)
