# queries.py
# The fixed battery of ICU/SICU bed reports over combined_table.

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .config import MEASURES, TOP_N

logger = logging.getLogger(__name__)

SUBTYPES = ("ICU", "SICU")


@dataclass(frozen=True)
class ReportQuery:
    """
    One report. `shape` is one of:
      "split"     - ICU, SICU and total of a single measure
      "composite" - ICU, SICU and Total of all three measures (nine sums)
      "totals"    - one grand total per measure
    """
    figure: int
    name: str
    title: str
    shape: str = "split"
    measure: Optional[str] = None
    min_presence: bool = False


REPORTS = [
    ReportQuery(1, "top_icu_sicu_license", "Top 10 Hospitals by ICU/SICU License Beds", measure="License"),
    ReportQuery(2, "top_icu_sicu_census", "Top 10 Hospitals by ICU/SICU Census Beds", measure="Census"),
    ReportQuery(3, "top_icu_sicu_staffed", "Top 10 Hospitals by ICU/SICU Staffed Beds", measure="Staffed"),
    ReportQuery(
        4, "both_icu_sicu_license", "Top 10 Hospitals with ICU and SICU: License Beds",
        measure="License", min_presence=True,
    ),
    ReportQuery(
        5, "both_icu_sicu_census", "Top 10 Hospitals with ICU and SICU: Census Beds",
        measure="Census", min_presence=True,
    ),
    ReportQuery(
        6, "both_icu_sicu_staffed", "Top 10 Hospitals with ICU and SICU: Staffed Beds",
        measure="Staffed", min_presence=True,
    ),
    ReportQuery(
        7, "both_icu_sicu_all_measures", "License, Census and Staffed ICU/SICU Beds",
        shape="composite", min_presence=True,
    ),
    ReportQuery(
        8, "both_icu_sicu_measure_totals", "ICU+SICU Bed Totals by Measure",
        shape="totals", min_presence=True,
    ),
]

REPORTS_BY_NAME = {q.name: q for q in REPORTS}


def _conditional_sum(column: str, subtype: str) -> str:
    return f"SUM(CASE WHEN bed_category = '{subtype}' THEN {column} ELSE 0 END)"


def _measure_column(label: str) -> str:
    if label not in MEASURES:
        raise ValueError(f"Unknown measure {label!r}. Allowed: {list(MEASURES)}")
    return MEASURES[label]


def build_sql(query: ReportQuery) -> str:
    """
    SQL for one report, sorted by total descending with ties kept in
    first-seen (combined_table insertion) order. No LIMIT; see run_query.
    """
    if query.shape == "split":
        col = _measure_column(query.measure)
        selects = [f'{_conditional_sum(col, s)} AS "{s}"' for s in SUBTYPES]
        total = f"SUM({col})"
    elif query.shape == "composite":
        selects = []
        for label, col in MEASURES.items():
            selects += [f'{_conditional_sum(col, s)} AS "{label} {s}"' for s in SUBTYPES]
            selects.append(f'SUM({col}) AS "{label} Total"')
        total = " + ".join(f"SUM({col})" for col in MEASURES.values())
    elif query.shape == "totals":
        selects = [f'SUM({col}) AS "{label}"' for label, col in MEASURES.items()]
        total = " + ".join(f"SUM({col})" for col in MEASURES.values())
    else:
        raise ValueError(f"Unknown report shape: {query.shape}")

    having = ""
    if query.min_presence:
        having = "HAVING " + "\n   AND ".join(
            f"COUNT(CASE WHEN bed_category = '{s}' THEN 1 END) > 0" for s in SUBTYPES
        )

    select_list = ",\n    ".join(["business_name AS hospital_name", *selects])
    return f"""
SELECT
    {select_list},
    {total} AS total,
    MIN(rowid) AS first_seen
FROM combined_table
WHERE bed_category IN ('ICU', 'SICU')
GROUP BY business_name
{having}
ORDER BY total DESC, first_seen ASC
"""


def run_query(con: sqlite3.Connection, query: ReportQuery, top_n: int = TOP_N) -> pd.DataFrame:
    """Wide report: hospital_name, value columns, total; at most `top_n` rows."""
    df = pd.read_sql(build_sql(query), con)
    df = df.drop(columns="first_seen").head(top_n).reset_index(drop=True)
    logger.info("Figure %d (%s): %d hospitals", query.figure, query.name, len(df))
    return df


def run_all(con: sqlite3.Connection, top_n: int = TOP_N) -> dict[str, pd.DataFrame]:
    return {q.name: run_query(con, q, top_n=top_n) for q in REPORTS}
