# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Relational schema for people, duty history and the astronaut status projection.

The indexes carry the ledger invariants at the store level:
  * one name per person
  * one status row per person
  * one duty per (person, title, start date)
  * at most one open duty (duty_end_date IS NULL) per person
"""

from sqlalchemy import text
from sqlalchemy.engine import Engine

from stargate.core.logging import get_logger

logger = get_logger(__name__)

TABLES: tuple[str, ...] = ("astronaut_status", "astronaut_duty", "person")

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS person (
        id          VARCHAR(36)  PRIMARY KEY,
        name        VARCHAR(255) NOT NULL,
        created_at  TIMESTAMPTZ  NOT NULL,
        updated_at  TIMESTAMPTZ  NOT NULL
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_person_name ON person (name)",
    """
    CREATE TABLE IF NOT EXISTS astronaut_duty (
        id               VARCHAR(36)  PRIMARY KEY,
        person_id        VARCHAR(36)  NOT NULL REFERENCES person (id) ON DELETE CASCADE,
        rank             VARCHAR(100) NOT NULL,
        duty_title       VARCHAR(255) NOT NULL,
        duty_start_date  DATE         NOT NULL,
        duty_end_date    DATE,
        created_at       TIMESTAMPTZ  NOT NULL
    )
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS ux_duty_title_start
        ON astronaut_duty (person_id, duty_title, duty_start_date)
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS ux_duty_open
        ON astronaut_duty (person_id) WHERE duty_end_date IS NULL
    """,
    """
    CREATE TABLE IF NOT EXISTS astronaut_status (
        id                  VARCHAR(36)  PRIMARY KEY,
        person_id           VARCHAR(36)  NOT NULL REFERENCES person (id) ON DELETE CASCADE,
        current_rank        VARCHAR(100) NOT NULL,
        current_duty_title  VARCHAR(255) NOT NULL,
        career_start_date   DATE         NOT NULL,
        career_end_date     DATE,
        current_duty_id     VARCHAR(36)  REFERENCES astronaut_duty (id),
        updated_at          TIMESTAMPTZ  NOT NULL
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_status_person ON astronaut_status (person_id)",
)


def init_schema(engine: Engine) -> None:
    """Create tables and indexes if missing. Safe to call on every startup."""
    with engine.begin() as conn:
        for statement in SCHEMA_STATEMENTS:
            conn.execute(text(statement))
    logger.info("Database schema verified (%d statements)", len(SCHEMA_STATEMENTS))


def clear_all(engine: Engine) -> None:
    """Delete every row, children first. Used by tests and local resets."""
    with engine.begin() as conn:
        for table in TABLES:
            conn.execute(text(f"DELETE FROM {table}"))
