# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Astronaut status projection.
One row per person, derived from the duty ledger and written only by the
duty lifecycle service inside its transaction.
"""

from datetime import date, datetime
from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

from stargate.services.dates import as_date, as_iso

STATUS_COLS = (
    "id, person_id, current_rank, current_duty_title, "
    "career_start_date, career_end_date, current_duty_id, updated_at"
)


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": str(row["id"]),
        "person_id": str(row["person_id"]),
        "current_rank": row["current_rank"],
        "current_duty_title": row["current_duty_title"],
        "career_start_date": as_date(row["career_start_date"]),
        "career_end_date": as_date(row["career_end_date"]),
        "current_duty_id": str(row["current_duty_id"]) if row["current_duty_id"] else None,
        "updated_at": as_iso(row["updated_at"]),
    }


def _iso_or_none(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


class StatusRepository:
    """Reads and upserts for astronaut_status. Caller owns the connection."""

    def get_by_person(self, conn: Connection, person_id: str) -> Optional[Dict[str, Any]]:
        row = conn.execute(
            text(f"SELECT {STATUS_COLS} FROM astronaut_status WHERE person_id = :pid"),
            {"pid": person_id},
        ).mappings().first()
        return _row_to_dict(row) if row else None

    def insert(self, conn: Connection, status_id: str, person_id: str,
               rank: str, duty_title: str, career_start: date,
               career_end: Optional[date], current_duty_id: str,
               now: datetime) -> None:
        conn.execute(
            text("""
                INSERT INTO astronaut_status
                    (id, person_id, current_rank, current_duty_title,
                     career_start_date, career_end_date, current_duty_id, updated_at)
                VALUES
                    (:id, :pid, :rank, :title, :start, :end, :duty_id, :ts)
            """),
            {"id": status_id, "pid": person_id, "rank": rank, "title": duty_title,
             "start": career_start.isoformat(), "end": _iso_or_none(career_end),
             "duty_id": current_duty_id, "ts": now.isoformat()},
        )

    def update_current(self, conn: Connection, person_id: str, rank: str,
                       duty_title: str, career_end: Optional[date],
                       current_duty_id: str, now: datetime) -> None:
        """Move the projection to a new current duty. Career start is never touched."""
        conn.execute(
            text("""
                UPDATE astronaut_status
                SET current_rank = :rank,
                    current_duty_title = :title,
                    career_end_date = :end,
                    current_duty_id = :duty_id,
                    updated_at = :ts
                WHERE person_id = :pid
            """),
            {"pid": person_id, "rank": rank, "title": duty_title,
             "end": _iso_or_none(career_end), "duty_id": current_duty_id,
             "ts": now.isoformat()},
        )
