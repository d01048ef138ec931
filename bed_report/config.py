# config.py
# Paths and fixed report constants. Paths can be overridden from the environment.

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# ---------- Paths ----------
BASE = Path(__file__).resolve().parent.parent
DB_PATH = Path(os.getenv("BED_REPORT_DB", BASE / "hospital_beds.db"))
DATA_DIR = Path(os.getenv("BED_REPORT_DATA", BASE / "data"))
OUTPUT_DIR = Path(os.getenv("BED_REPORT_OUTPUT", BASE / "reports"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# ---------- Bed types ----------
ICU_BED_ID = 4
SICU_BED_ID = 15

# ---------- Reports ----------
TOP_N = 10

# display label -> bed_fact_table column
MEASURES = {
    "License": "license_beds",
    "Census": "census_beds",
    "Staffed": "staffed_beds",
}
BED_TYPE_ORDER = list(MEASURES)
ICU_SICU_ORDER = ["ICU", "SICU"]


@dataclass(frozen=True)
class ReportPaths:
    db_path: Path
    data_dir: Path
    output_dir: Path

    @classmethod
    def default(cls) -> "ReportPaths":
        return cls(db_path=DB_PATH, data_dir=DATA_DIR, output_dir=OUTPUT_DIR)
