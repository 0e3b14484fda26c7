"""Local, non-authoritative preference storage (DuckDB)."""
