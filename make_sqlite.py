# make_sqlite.py
# Build hospital_beds.db from the CSVs in data/ and materialize combined_table.

from bed_report.config import DB_PATH
from bed_report.pipeline import build_database, setup_logging

setup_logging()
status = build_database(check_sources=True)
print(f"SQLite database ready: {DB_PATH.name} (combined_table {status})")
