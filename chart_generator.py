#!/usr/bin/env python3
"""
Chart generation for exported issues

Derives three aggregates from the issue set (state distribution, top labels,
monthly creation counts) with pandas, renders each as a standalone Altair
HTML page under <output>/charts and adds an index page linking them.
"""

import logging
from pathlib import Path
from typing import Sequence, Union

import altair as alt
import pandas as pd

from config import CHARTS_SUBDIR, MAX_CHART_LABELS, NO_LABEL_BUCKET
from errors import ChartRenderError
from models import Issue
from utils_dates import month_key

logger = logging.getLogger(__name__)

STATUS_CHART_FILE = "status_chart.html"
LABELS_CHART_FILE = "labels_chart.html"
TIMELINE_CHART_FILE = "timeline_chart.html"
INDEX_FILE = "index.html"

INDEX_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{title}</title>
</head>
<body>
    <div style="margin: 20px; text-align: center;">
        <h1>{title}</h1>
        <div style="display: flex; flex-direction: column; gap: 15px; margin-top: 30px;">
{links}
        </div>
    </div>
</body>
</html>
"""

INDEX_LINK = ('            <a href="{href}" style="font-size: 18px; padding: 10px; background-color: #f0f0f0; '
              'border-radius: 5px; text-decoration: none; color: #333;">{label}</a>')


def _count_values(values: Sequence[str], column: str) -> pd.DataFrame:
    """Count occurrences, most frequent first, ties by name"""
    counts = pd.Series(list(values), dtype='object').value_counts()
    df = counts.rename_axis(column).reset_index(name='count')
    return df.sort_values(['count', column], ascending=[False, True], ignore_index=True)


def status_counts(issues: Sequence[Issue]) -> pd.DataFrame:
    """Issues per state with the share of the total in percent"""
    df = _count_values([issue.state for issue in issues], 'state')
    total = df['count'].sum()
    df['percent'] = (df['count'] / total * 100).round(1) if total else 0.0
    df['label'] = [f"{state}: {count} ({percent:.1f}%)"
                   for state, count, percent in zip(df['state'], df['count'], df['percent'])]
    return df


def label_counts(issues: Sequence[Issue], top_n: int = MAX_CHART_LABELS) -> pd.DataFrame:
    """Issues per label, unlabeled issues counted under NO_LABEL_BUCKET, top_n at most"""
    names = []
    for issue in issues:
        names.extend(issue.labels or [NO_LABEL_BUCKET])
    return _count_values(names, 'label').head(top_n)


def monthly_counts(issues: Sequence[Issue]) -> pd.DataFrame:
    """Issues created per month, every month from first to last present"""
    if not issues:
        return pd.DataFrame({'month': pd.Series(dtype='object'), 'count': pd.Series(dtype='int64')})

    months = pd.Series([month_key(issue.created_at) for issue in issues])
    all_months = pd.period_range(start=months.min(), end=months.max(), freq='M').strftime('%Y-%m')
    counts = months.value_counts().reindex(all_months, fill_value=0)

    return pd.DataFrame({'month': list(all_months), 'count': counts.to_numpy().astype('int64')})


def status_chart(df: pd.DataFrame) -> alt.Chart:
    base = alt.Chart(df).encode(
        theta=alt.Theta('count:Q').stack(True),
        color=alt.Color('state:N').legend(title='State'),
        tooltip=[
            alt.Tooltip('state:N', title='State'),
            alt.Tooltip('count:Q', title='Issues'),
            alt.Tooltip('percent:Q', title='Percent', format='.1f'),
        ],
    )
    pie = base.mark_arc(innerRadius=110, outerRadius=200)
    text = base.mark_text(radius=240, size=13).encode(text='label:N')

    return (pie + text).properties(
        width=600,
        height=500,
        title=alt.TitleParams('Issue State Distribution', subtitle=f"Total: {int(df['count'].sum())}"),
    )


def labels_chart(df: pd.DataFrame) -> alt.Chart:
    x = alt.X('label:N', sort=list(df['label']), title='Label', axis=alt.Axis(labelAngle=-45))
    base = alt.Chart(df).encode(x=x, y=alt.Y('count:Q', title='Issues'))

    bars = base.mark_bar().encode(tooltip=[
        alt.Tooltip('label:N', title='Label'),
        alt.Tooltip('count:Q', title='Issues'),
    ])
    values = base.mark_text(dy=-8).encode(text='count:Q')

    return (bars + values).properties(
        width=800,
        height=400,
        title=alt.TitleParams('Issue Label Distribution', subtitle=f"Top {len(df)} labels"),
    )


def timeline_chart(df: pd.DataFrame) -> alt.VConcatChart:
    """Smoothed monthly line with max/min markers, an average rule and a zoom brush"""
    df = df.assign(date=pd.to_datetime(df['month'], format='%Y-%m'))
    brush = alt.selection_interval(encodings=['x'])

    x_zoomed = alt.X('date:T', title='Month', axis=alt.Axis(format='%Y-%m', labelAngle=-45)).scale(domain=brush)
    y = alt.Y('count:Q', title='New issues')
    tooltip = [alt.Tooltip('month:N', title='Month'), alt.Tooltip('count:Q', title='Issues')]

    line = alt.Chart(df).mark_line(interpolate='monotone', point=True, clip=True).encode(
        x=x_zoomed, y=y, tooltip=tooltip)
    values = alt.Chart(df).mark_text(dy=-10, clip=True).encode(x=x_zoomed, y=y, text='count:Q')
    average = alt.Chart(df).mark_rule(color='gray', strokeDash=[6, 4]).encode(y='mean(count):Q')
    layers = [line, values, average]

    if not df.empty:
        extremes = pd.concat([
            df.loc[[df['count'].idxmax()]].assign(marker='max'),
            df.loc[[df['count'].idxmin()]].assign(marker='min'),
        ], ignore_index=True)
        markers = alt.Chart(extremes).mark_point(shape='triangle-down', size=200, filled=True, clip=True).encode(
            x=x_zoomed,
            y=y,
            color=alt.Color('marker:N').legend(title='Marker'),
            tooltip=tooltip + [alt.Tooltip('marker:N', title='Marker')],
        )
        layers.append(markers)
        subtitle = f"From {df['month'].iloc[0]} to {df['month'].iloc[-1]}"
    else:
        subtitle = "No issues"

    detail = alt.layer(*layers).properties(
        width=900,
        height=350,
        title=alt.TitleParams('Issue Creation Trend', subtitle=subtitle),
    )
    overview = alt.Chart(df).mark_area(interpolate='monotone', opacity=0.4).encode(
        x=alt.X('date:T', title=None, axis=alt.Axis(format='%Y-%m')),
        y=alt.Y('count:Q', title=None),
    ).add_params(brush).properties(width=900, height=60)

    return alt.vconcat(detail, overview)


def render_index_page(title: str = "GitHub Issues Charts") -> str:
    links = [
        (STATUS_CHART_FILE, "State distribution"),
        (LABELS_CHART_FILE, "Label distribution"),
        (TIMELINE_CHART_FILE, "Creation trend"),
    ]
    rendered = "\n".join(INDEX_LINK.format(href=href, label=label) for href, label in links)
    return INDEX_TEMPLATE.format(title=title, links=rendered)


def _save_chart(chart, path: Path, description: str):
    try:
        chart.save(str(path))
    except Exception as e:
        raise ChartRenderError(f"Failed to render {description} to {path}: {e}") from e
    logger.debug("Wrote %s to %s", description, path)


def generate_charts(issues: Sequence[Issue], output_dir: Union[str, Path]) -> Path:
    """
    Write the three chart pages and the index into <output_dir>/charts.

    Returns:
        The charts directory

    Raises:
        ChartRenderError: directory creation, rendering or writing failed
    """
    charts_dir = Path(output_dir) / CHARTS_SUBDIR
    try:
        charts_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ChartRenderError(f"Failed to create charts directory {charts_dir}: {e}") from e

    _save_chart(status_chart(status_counts(issues)), charts_dir / STATUS_CHART_FILE, "state chart")
    _save_chart(labels_chart(label_counts(issues)), charts_dir / LABELS_CHART_FILE, "label chart")
    _save_chart(timeline_chart(monthly_counts(issues)), charts_dir / TIMELINE_CHART_FILE, "timeline chart")

    index_path = charts_dir / INDEX_FILE
    try:
        index_path.write_text(render_index_page(), encoding='utf-8')
    except OSError as e:
        raise ChartRenderError(f"Failed to write chart index {index_path}: {e}") from e

    return charts_dir
