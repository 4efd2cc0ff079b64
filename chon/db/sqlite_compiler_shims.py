"""
SQLite compilation shims for PostgreSQL-only column types.

The test suite runs against in-memory SQLite while deployments use
PostgreSQL; JSONB columns are emitted as plain JSON there.
"""
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_, compiler, **kw):  # pragma: no cover - trivial
    return "JSON"
