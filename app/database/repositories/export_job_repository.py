from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.database.models import ExportJobRecord
from app.exports.models import ProgressState


class ExportJobRepository:
    """Database operations for the code_export_jobs table."""

    def claim_next_job(self, conn: psycopg.Connection[Any]) -> ExportJobRecord | None:
        """Claim the next pending job using SELECT FOR UPDATE SKIP LOCKED."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT id, building_ids, status
                FROM code_export_jobs
                WHERE status = 'pending'
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """
            )
            row = cur.fetchone()

        if row is None:
            return None

        conn.execute(
            """
            UPDATE code_export_jobs
            SET status = 'processing', locked_at = NOW(), updated_at = NOW()
            WHERE id = %s
            """,
            (row["id"],),
        )
        conn.commit()

        return ExportJobRecord(
            id=row["id"],
            building_ids=[str(b) for b in row["building_ids"] or []],
            status="processing",
        )

    def update_progress(self, job_id: int, progress: ProgressState) -> None:
        """Store the latest progress snapshot for the job."""
        payload = {
            "current": progress.current,
            "total": progress.total,
            "phase": progress.phase.value,
        }
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE code_export_jobs
                SET progress = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (Jsonb(payload), job_id),
            )
            conn.commit()

    def mark_done(self, job_id: int, archive_paths: list[str]) -> None:
        """Mark a job as done and record where its archives were delivered."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE code_export_jobs
                SET status = 'done', archive_paths = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (archive_paths, job_id),
            )
            conn.commit()

    def mark_failed(
        self, job_id: int, error: str, archive_paths: list[str] | None = None
    ) -> None:
        """Mark a job as failed, keeping archives delivered before the failure.

        Export jobs are never re-queued.
        """
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE code_export_jobs
                SET status = 'failed', error_message = %s, archive_paths = %s,
                    updated_at = NOW()
                WHERE id = %s
                """,
                (error, archive_paths or [], job_id),
            )
            conn.commit()

    def find_by_id(self, job_id: int) -> ExportJobRecord | None:
        """Find a job by ID. Useful for tests."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, building_ids, status, error_message, progress,
                           archive_paths, locked_at, created_at, updated_at
                    FROM code_export_jobs
                    WHERE id = %s
                    """,
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return ExportJobRecord(
            id=row["id"],
            building_ids=[str(b) for b in row["building_ids"] or []],
            status=row["status"],
            error_message=row["error_message"],
            progress=row["progress"],
            archive_paths=list(row["archive_paths"] or []),
            locked_at=row["locked_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
