# quick_check.py
from bed_report.config import DB_PATH
from bed_report.store import open_store, row_counts

with open_store(DB_PATH) as con:
    for t, n in row_counts(con).items():
        print(t, n)
