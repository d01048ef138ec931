# render.py
# Plotly bar charts for the long-form report tables.

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd
import plotly.express as px

from .config import BED_TYPE_ORDER, ICU_SICU_ORDER
from .queries import ReportQuery

logger = logging.getLogger(__name__)


def bar_chart(query: ReportQuery, long: pd.DataFrame):
    title = f"Figure {query.figure}: {query.title}"
    hospitals = list(dict.fromkeys(long["hospital_name"]))
    orders = {"hospital_name": hospitals, "bed_type": BED_TYPE_ORDER, "icu_sicu": ICU_SICU_ORDER}

    if query.shape == "composite":
        fig = px.bar(
            long, x="hospital_name", y="bed_count", color="bed_type",
            facet_row="icu_sicu", barmode="group", category_orders=orders, title=title,
        )
    else:
        if query.shape == "split":
            orders["bed_type"] = ICU_SICU_ORDER
        fig = px.bar(
            long, x="hospital_name", y="bed_count", color="bed_type",
            barmode="group", category_orders=orders, title=title,
        )
    fig.update_layout(xaxis_title="Hospital", yaxis_title="Beds", legend_title_text="")
    return fig


def write_figure(fig, out_dir: Path, name: str) -> Path:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{name}.html"
    fig.write_html(path.as_posix(), include_plotlyjs="cdn")
    logger.info("Wrote %s", path)
    return path
