"""Additive schema migrations.

Compares every mapped table against the live database and adds any column
the database is missing with ALTER TABLE ... ADD COLUMN. Never drops,
renames or retypes anything, so it is safe to run on every startup, on a
fresh database and on one created by an older version.
"""

import logging

from sqlalchemy import Column, MetaData, inspect, text
from sqlalchemy.engine import Dialect, Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.sql.elements import TextClause

from schedule_hub.store.tables import Base

logger = logging.getLogger(__name__)

# SQLite only accepts constant defaults on ADD COLUMN
NON_CONSTANT_DEFAULTS = {"CURRENT_TIMESTAMP", "CURRENT_DATE", "CURRENT_TIME"}


def _default_sql(column: Column) -> str | None:
    default = column.server_default
    if default is None:
        return None
    arg = getattr(default, "arg", None)
    if isinstance(arg, TextClause):
        return arg.text
    if isinstance(arg, str):
        return "'" + arg.replace("'", "''") + "'"
    return None


def _is_non_constant(default_sql: str | None) -> bool:
    return default_sql is not None and default_sql.upper() in NON_CONSTANT_DEFAULTS


def add_column_ddl(table_name: str, column: Column, dialect: Dialect) -> str:
    """Build the ADD COLUMN statement for one mapped column.

    SQLite refuses to add a NOT NULL column without a constant default, so
    NOT NULL is only kept when the column carries one. Columns defaulting to
    CURRENT_TIMESTAMP and friends are added bare and filled by
    ``backfill_sql``.
    """
    column_type = column.type.compile(dialect=dialect)
    ddl = f'ALTER TABLE "{table_name}" ADD COLUMN "{column.name}" {column_type}'
    default_sql = _default_sql(column)
    if default_sql is not None and not _is_non_constant(default_sql):
        ddl += f" DEFAULT {default_sql}"
        if not column.nullable:
            ddl += " NOT NULL"
    return ddl


def backfill_sql(table_name: str, column: Column) -> str | None:
    """UPDATE that gives existing rows a non-constant default, or None."""
    default_sql = _default_sql(column)
    if not _is_non_constant(default_sql):
        return None
    return (
        f'UPDATE "{table_name}" SET "{column.name}" = {default_sql} '
        f'WHERE "{column.name}" IS NULL'
    )


def apply_additive_migrations(engine: Engine, metadata: MetaData = Base.metadata) -> list[str]:
    """Add missing columns to existing tables. Idempotent.

    Tables that do not exist yet are left to ``metadata.create_all``.

    Returns:
        ``table.column`` names that were added, in the order they were added.
    """
    added: list[str] = []
    with engine.begin() as conn:
        inspector = inspect(conn)
        existing_tables = set(inspector.get_table_names())

        for table in metadata.sorted_tables:
            if table.name not in existing_tables:
                continue
            existing_columns = {col["name"] for col in inspector.get_columns(table.name)}

            for column in table.columns:
                if column.name in existing_columns:
                    continue
                ddl = add_column_ddl(table.name, column, conn.dialect)
                try:
                    conn.execute(text(ddl))
                except OperationalError as exc:
                    if "duplicate column" in str(exc).lower():
                        logger.debug("Column %s.%s already exists", table.name, column.name)
                        continue
                    raise
                backfill = backfill_sql(table.name, column)
                if backfill is not None:
                    conn.execute(text(backfill))
                added.append(f"{table.name}.{column.name}")
                logger.info("Added column %s.%s", table.name, column.name)

    return added
