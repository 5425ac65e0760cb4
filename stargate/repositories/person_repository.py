# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Person data access.
Pure CRUD over the person table — NO business rules here.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from stargate.core.database import supports_row_locks
from stargate.services.dates import as_date, as_iso

PERSON_PROJECTION_SQL = """
    SELECT p.id AS person_id, p.name, p.created_at, p.updated_at,
           s.current_rank, s.current_duty_title,
           s.career_start_date, s.career_end_date
    FROM person p
    LEFT JOIN astronaut_status s ON s.person_id = p.id
"""


def projection_to_dict(row) -> Dict[str, Any]:
    career_end = as_date(row["career_end_date"])
    return {
        "person_id": str(row["person_id"]),
        "name": row["name"],
        "current_rank": row["current_rank"] or "",
        "current_duty_title": row["current_duty_title"] or "",
        "career_start_date": as_date(row["career_start_date"]),
        "career_end_date": career_end,
        "is_retired": career_end is not None,
        "created_at": as_iso(row["created_at"]),
        "updated_at": as_iso(row["updated_at"]),
    }


class PersonRepository:
    """Handles all direct database operations for people."""

    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Write ──

    def create_person(self, person_id: str, name: str, now: datetime) -> Dict[str, Any]:
        """Insert a person. A name clash surfaces as IntegrityError."""
        with self._engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO person (id, name, created_at, updated_at)
                    VALUES (:id, :name, :ts, :ts)
                """),
                {"id": person_id, "name": name, "ts": now.isoformat()},
            )
        return {
            "person_id": person_id, "name": name,
            "current_rank": "", "current_duty_title": "",
            "career_start_date": None, "career_end_date": None,
            "is_retired": False,
            "created_at": now.isoformat(), "updated_at": now.isoformat(),
        }

    # ── Read ──

    def get_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        """Person joined with its status projection, or None."""
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"{PERSON_PROJECTION_SQL} WHERE p.name = :name"),
                {"name": name},
            ).mappings().first()
        return projection_to_dict(row) if row else None

    def list_people(self) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"{PERSON_PROJECTION_SQL} ORDER BY p.name")
            ).mappings().all()
        return [projection_to_dict(r) for r in rows]

    def count(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(text("SELECT COUNT(*) FROM person")).scalar() or 0

    # ── Transactional (caller owns the connection) ──

    def find_for_update(self, conn: Connection, name: str) -> Optional[Dict[str, Any]]:
        """
        Look up a person by exact name inside an open transaction.
        Takes a row lock where the dialect supports it, serialising writers
        for the same person while leaving other people untouched.
        """
        lock = " FOR UPDATE" if supports_row_locks(self._engine) else ""
        row = conn.execute(
            text(f"SELECT id, name FROM person WHERE name = :name{lock}"),
            {"name": name},
        ).mappings().first()
        if not row:
            return None
        return {"id": str(row["id"]), "name": row["name"]}

    # ── Infrastructure ──

    def verify_connection(self):
        """Verify database connectivity."""
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self):
        """Dispose the connection pool."""
        self._engine.dispose()
