# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Duty history ledger.
Append-mostly: rows are inserted open and later closed by setting
duty_end_date. Nothing is ever deleted here.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from stargate.repositories.person_repository import projection_to_dict
from stargate.services.dates import as_date, as_iso

DUTY_COLS = (
    "id, person_id, rank, duty_title, duty_start_date, duty_end_date, created_at"
)

HISTORY_SQL = """
    SELECT p.id AS person_id, p.name, p.created_at, p.updated_at,
           s.current_rank, s.current_duty_title,
           s.career_start_date, s.career_end_date,
           d.id AS duty_id, d.rank AS duty_rank, d.duty_title,
           d.duty_start_date, d.duty_end_date, d.created_at AS duty_created_at
    FROM person p
    LEFT JOIN astronaut_status s ON s.person_id = p.id
    LEFT JOIN astronaut_duty d ON d.person_id = p.id
    WHERE p.name = :name
    ORDER BY d.duty_start_date DESC, d.created_at DESC
"""


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": str(row["id"]),
        "person_id": str(row["person_id"]),
        "rank": row["rank"],
        "duty_title": row["duty_title"],
        "duty_start_date": as_date(row["duty_start_date"]),
        "duty_end_date": as_date(row["duty_end_date"]),
        "created_at": as_iso(row["created_at"]),
    }


class DutyRepository:
    """Handles all direct database operations for astronaut duties."""

    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Read ──

    def history_by_name(self, name: str) -> Optional[Tuple[Dict[str, Any], List[Dict[str, Any]]]]:
        """
        Person projection plus full duty history, most recent start first.
        One statement, so the projection and the ledger come from the same
        snapshot even while another writer commits.
        """
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(HISTORY_SQL), {"name": name},
            ).mappings().all()
        if not rows:
            return None
        person = projection_to_dict(rows[0])
        duties = [
            {
                "id": str(r["duty_id"]),
                "person_id": person["person_id"],
                "rank": r["duty_rank"],
                "duty_title": r["duty_title"],
                "duty_start_date": as_date(r["duty_start_date"]),
                "duty_end_date": as_date(r["duty_end_date"]),
                "created_at": as_iso(r["duty_created_at"]),
            }
            for r in rows if r["duty_id"] is not None
        ]
        return person, duties

    # ── Transactional (caller owns the connection) ──

    def exists(self, conn: Connection, person_id: str, duty_title: str,
               duty_start: date) -> bool:
        row = conn.execute(
            text("""
                SELECT 1 FROM astronaut_duty
                WHERE person_id = :pid AND duty_title = :title AND duty_start_date = :start
            """),
            {"pid": person_id, "title": duty_title, "start": duty_start.isoformat()},
        ).first()
        return row is not None

    def get_open_by_id(self, conn: Connection, duty_id: str) -> Optional[Dict[str, Any]]:
        row = conn.execute(
            text(f"""
                SELECT {DUTY_COLS} FROM astronaut_duty
                WHERE id = :id AND duty_end_date IS NULL
            """),
            {"id": duty_id},
        ).mappings().first()
        return _row_to_dict(row) if row else None

    def find_open(self, conn: Connection, person_id: str) -> Optional[Dict[str, Any]]:
        """Scan for the open duty when no status pointer is available."""
        row = conn.execute(
            text(f"""
                SELECT {DUTY_COLS} FROM astronaut_duty
                WHERE person_id = :pid AND duty_end_date IS NULL
                ORDER BY duty_start_date DESC
            """),
            {"pid": person_id},
        ).mappings().first()
        return _row_to_dict(row) if row else None

    def earliest_start(self, conn: Connection, person_id: str) -> Optional[date]:
        value = conn.execute(
            text("SELECT MIN(duty_start_date) FROM astronaut_duty WHERE person_id = :pid"),
            {"pid": person_id},
        ).scalar()
        return as_date(value)

    def close(self, conn: Connection, duty_id: str, end_date: date) -> bool:
        """Close an open duty. False when another writer already closed it."""
        result = conn.execute(
            text("""
                UPDATE astronaut_duty SET duty_end_date = :end
                WHERE id = :id AND duty_end_date IS NULL
            """),
            {"id": duty_id, "end": end_date.isoformat()},
        )
        return result.rowcount == 1

    def insert_open(self, conn: Connection, duty_id: str, person_id: str,
                    rank: str, duty_title: str, duty_start: date,
                    now: datetime) -> None:
        conn.execute(
            text("""
                INSERT INTO astronaut_duty
                    (id, person_id, rank, duty_title, duty_start_date, duty_end_date, created_at)
                VALUES
                    (:id, :pid, :rank, :title, :start, NULL, :ts)
            """),
            {"id": duty_id, "pid": person_id, "rank": rank, "title": duty_title,
             "start": duty_start.isoformat(), "ts": now.isoformat()},
        )

    # ── Infrastructure ──

    def begin_transaction(self):
        """Return a transactional connection context."""
        return self._engine.begin()
