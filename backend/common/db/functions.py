"""Dialect-aware SQL functions."""

from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement
from sqlalchemy.types import Date


class utc_date(FunctionElement):
    """Calendar day of a timestamp, evaluated in UTC."""

    type = Date()
    name = "utc_date"
    inherit_cache = True


@compiles(utc_date)
def _compile_utc_date_default(element, compiler, **kw):
    # SQLite stores naive UTC timestamps
    return f"date({compiler.process(element.clauses, **kw)})"


@compiles(utc_date, "postgresql")
def _compile_utc_date_postgresql(element, compiler, **kw):
    return f"date(timezone('UTC', {compiler.process(element.clauses, **kw)}))"
