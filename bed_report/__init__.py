"""ICU/SICU bed capacity reporting over a SQLite star schema."""
