# integrity.py
# Advisory data checks. Nothing here raises on bad data or changes the store.

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass

import numpy as np
import pandas as pd

from . import store
from .config import ICU_BED_ID, SICU_BED_ID

logger = logging.getLogger(__name__)

SOURCE_KEYS = {
    "bed_fact_table": ("ims_org_id", "bed_id"),
    "business_table": ("ims_org_id", "bed_cluster_id"),
}

# An org listed under two bed clusters passes the business key check but
# joins every one of its facts twice.
COMBINED_KEY = ("ims_org_id", "bed_id")


@dataclass(frozen=True)
class UniquenessCheck:
    table: str
    key_columns: tuple
    offending_rows: pd.DataFrame

    @property
    def is_unique(self) -> bool:
        return self.offending_rows.empty

    @property
    def status(self) -> str:
        return "ok" if self.is_unique else "violations-found"

    def summary(self) -> str:
        keys = ", ".join(self.key_columns)
        if self.is_unique:
            return f"{self.table}: ({keys}) is unique."
        return (
            f"{self.table}: {len(self.offending_rows)} duplicated ({keys}) key(s):\n"
            f"{self.offending_rows.to_string(index=False)}"
        )


def check_unique(con: sqlite3.Connection, table: str, key_columns) -> UniquenessCheck:
    """Group `table` by `key_columns` and return every group with more than one row."""
    key_columns = tuple(key_columns)
    store.validate_table_name(table)
    known = [r[1] for r in con.execute(f"PRAGMA table_info({table})")]
    unknown = [c for c in key_columns if c not in known]
    if unknown or not key_columns:
        raise ValueError(f"Unknown key column(s) {unknown} for {table}. Columns: {known}")
    cols = ", ".join(key_columns)
    q = f"""
        SELECT {cols}, COUNT(*) AS row_count
        FROM {table}
        GROUP BY {cols}
        HAVING COUNT(*) > 1
        ORDER BY MIN(rowid)
    """
    dups = pd.read_sql(q, con)
    return UniquenessCheck(table=table, key_columns=key_columns, offending_rows=dups)


def _log_check(res: UniquenessCheck) -> None:
    if res.is_unique:
        logger.info("%s", res.summary())
    else:
        logger.warning("%s", res.summary())


def check_source_keys(con: sqlite3.Connection) -> list[UniquenessCheck]:
    results = []
    for table, keys in SOURCE_KEYS.items():
        res = check_unique(con, table, keys)
        _log_check(res)
        results.append(res)
    return results


def check_combined_key(con: sqlite3.Connection) -> UniquenessCheck:
    """combined_table must hold one row per (ims_org_id, bed_id) fact."""
    res = check_unique(con, "combined_table", COMBINED_KEY)
    _log_check(res)
    return res


def check_bed_keying(con: sqlite3.Connection) -> pd.DataFrame:
    """
    Bed types whose id-based category (4 -> ICU, 15 -> SICU) disagrees with
    their description. Empty when the two keying schemes line up.
    """
    bed_types = store.read_table(con, "bed_type_table")
    by_id = np.select(
        [bed_types["bed_id"] == ICU_BED_ID, bed_types["bed_id"] == SICU_BED_ID],
        ["ICU", "SICU"],
        default="Other",
    )
    desc = bed_types["bed_desc"].fillna("").str.strip().str.upper()
    by_desc = np.where(desc.isin(["ICU", "SICU"]), desc, "Other")

    out = bed_types.assign(category_by_id=by_id, category_by_desc=by_desc)
    out = out.loc[out["category_by_id"] != out["category_by_desc"]].reset_index(drop=True)
    if not out.empty:
        logger.warning(
            "bed_id and bed_desc disagree on ICU/SICU for %d bed type(s):\n%s",
            len(out),
            out.to_string(index=False),
        )
    return out
