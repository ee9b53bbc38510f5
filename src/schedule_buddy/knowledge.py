"""Knowledge point storage and manual status changes."""
from datetime import datetime

from schedule_buddy.db import get_connection
from schedule_buddy.models import KnowledgePoint
from schedule_buddy.status import KnowledgeStatus, next_status


def _row_to_point(row) -> KnowledgePoint:
    return KnowledgePoint(
        id=row["id"],
        course_id=row["course_id"],
        title=row["title"],
        mastery_level=row["mastery_level"],
        is_key_point=bool(row["is_key_point"]),
        last_reviewed_at=(
            datetime.fromisoformat(row["last_reviewed_at"]) if row["last_reviewed_at"] else None
        ),
    )


def add_point(db_path: str, course_id: int, title: str, is_key_point: bool = False,
              mastery_level: int = KnowledgeStatus.NOT_STARTED.level) -> int:
    if not title.strip():
        raise ValueError("Knowledge point title must not be empty")
    if not 0 <= mastery_level <= 100:
        raise ValueError(f"mastery_level must be between 0 and 100, got {mastery_level}")
    conn = get_connection(db_path)
    cur = conn.execute(
        "INSERT INTO knowledge_points (course_id, title, mastery_level, is_key_point) VALUES (?, ?, ?, ?)",
        (course_id, title.strip(), mastery_level, int(is_key_point)),
    )
    conn.commit()
    point_id = cur.lastrowid
    conn.close()
    return point_id


def add_points(db_path: str, course_id: int, titles: list[str]) -> int:
    """Bulk-add not-started points; blank titles are skipped. Returns the number added."""
    rows = [(course_id, t.strip()) for t in titles if t.strip()]
    if not rows:
        return 0
    conn = get_connection(db_path)
    conn.executemany(
        "INSERT INTO knowledge_points (course_id, title, mastery_level, is_key_point) VALUES (?, ?, 0, 0)",
        rows,
    )
    conn.commit()
    conn.close()
    return len(rows)


def get_point(db_path: str, point_id: int) -> KnowledgePoint | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM knowledge_points WHERE id = ?", (point_id,)).fetchone()
    conn.close()
    return _row_to_point(row) if row else None


def get_points(db_path: str, course_id: int) -> list[KnowledgePoint]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM knowledge_points WHERE course_id = ? ORDER BY id", (course_id,)
    ).fetchall()
    conn.close()
    return [_row_to_point(r) for r in rows]


def update_point(db_path: str, point: KnowledgePoint) -> None:
    if not 0 <= point.mastery_level <= 100:
        raise ValueError(f"mastery_level must be between 0 and 100, got {point.mastery_level}")
    conn = get_connection(db_path)
    conn.execute(
        """UPDATE knowledge_points SET title=?, mastery_level=?, is_key_point=?, last_reviewed_at=?
        WHERE id=?""",
        (point.title, point.mastery_level, int(point.is_key_point),
         point.last_reviewed_at.isoformat() if point.last_reviewed_at else None, point.id),
    )
    conn.commit()
    conn.close()


def delete_point(db_path: str, point_id: int) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM knowledge_points WHERE id = ?", (point_id,))
    conn.commit()
    conn.close()


def set_status(db_path: str, point_id: int, status: KnowledgeStatus,
               reviewed_at: datetime | None = None) -> None:
    """Store the status's representative level and stamp the review time."""
    reviewed_at = reviewed_at or datetime.now().astimezone()
    conn = get_connection(db_path)
    conn.execute(
        "UPDATE knowledge_points SET mastery_level=?, last_reviewed_at=? WHERE id=?",
        (status.level, reviewed_at.isoformat(), point_id),
    )
    conn.commit()
    conn.close()


def toggle_status(db_path: str, point_id: int) -> KnowledgeStatus:
    """Advance a point to its next status; returns the new status."""
    point = get_point(db_path, point_id)
    if point is None:
        raise ValueError(f"Knowledge point {point_id} not found")
    status = next_status(KnowledgeStatus.from_level(point.mastery_level))
    set_status(db_path, point_id, status)
    return status
