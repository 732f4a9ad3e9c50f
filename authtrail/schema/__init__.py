"""Database schema (schema.sql) - the source of truth for the data model."""

from pathlib import Path

SCHEMA_PATH = Path(__file__).parent / "schema.sql"
