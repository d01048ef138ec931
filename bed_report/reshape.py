# reshape.py
# Wide report tables -> long (hospital, category, value) rows for charting.

from __future__ import annotations

import pandas as pd

from .config import BED_TYPE_ORDER, ICU_SICU_ORDER
from .queries import ReportQuery

# Exact whole-name matches only; the wrapped label never matches a key again.
HOSPITAL_LABELS = {
    "Vanderbilt University Medical Center": "Vanderbilt University<br>Medical Center",
    "Ronald Reagan UCLA Medical Center": "Ronald Reagan<br>UCLA Medical Center",
    "Memorial Hermann Texas Medical Center": "Memorial Hermann<br>Texas Medical Center",
    "NewYork-Presbyterian Weill Cornell Medical Center": "NewYork-Presbyterian<br>Weill Cornell Medical Center",
}


def wrap_hospital_names(df: pd.DataFrame, column: str = "hospital_name") -> pd.DataFrame:
    out = df.copy()
    out[column] = out[column].replace(HOSPITAL_LABELS)
    return out


def to_long(wide: pd.DataFrame, value_columns: list[str], var_name: str = "bed_type") -> pd.DataFrame:
    """
    One row per (hospital, column) with the value copied as-is.
    Hospitals keep their report rank; categories follow `value_columns`.
    """
    ranked = wrap_hospital_names(wide).assign(_rank=range(len(wide)))
    long = ranked.melt(
        id_vars=["hospital_name", "_rank"],
        value_vars=value_columns,
        var_name=var_name,
        value_name="bed_count",
    )
    long[var_name] = pd.Categorical(long[var_name], categories=value_columns, ordered=True)
    long = long.sort_values(["_rank", var_name], kind="mergesort")
    return long.drop(columns="_rank").reset_index(drop=True)


def composite_columns(wide: pd.DataFrame) -> list[str]:
    """Columns named "<Measure> <ICU|SICU>", in declared display order."""
    return [
        f"{m} {s}" for m in BED_TYPE_ORDER for s in ICU_SICU_ORDER if f"{m} {s}" in wide.columns
    ]


def to_long_composite(wide: pd.DataFrame) -> pd.DataFrame:
    long = to_long(wide, composite_columns(wide), var_name="column")
    parts = long["column"].astype(str).str.split(" ", n=1)
    long["bed_type"] = pd.Categorical(parts.str[0], categories=BED_TYPE_ORDER, ordered=True)
    long["icu_sicu"] = pd.Categorical(parts.str[-1], categories=ICU_SICU_ORDER, ordered=True)
    return long[["hospital_name", "bed_type", "icu_sicu", "bed_count"]]


def reshape_report(query: ReportQuery, wide: pd.DataFrame) -> pd.DataFrame:
    if query.shape == "composite":
        return to_long_composite(wide)
    if query.shape == "totals":
        return to_long(wide, BED_TYPE_ORDER)
    return to_long(wide, ICU_SICU_ORDER)
