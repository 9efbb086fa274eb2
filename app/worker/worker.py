import time

from app.config.settings import Settings
from app.database.connection import get_connection
from app.database.models import ExportJobRecord
from app.database.repositories.export_job_repository import ExportJobRepository
from app.logging.logger import Log
from app.worker.job_runner import JobRunner


class Worker:
    """Poll loop: sleep -> claim -> dispatch."""

    def __init__(
        self,
        job_repo: ExportJobRepository,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings

    def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_jobs is set, stop after processing that many jobs (for testing).
        """
        Log.info("Export worker started, polling for jobs")
        jobs_done = 0
        try:
            while max_jobs is None or jobs_done < max_jobs:
                job = self._try_claim_job()
                if job is None:
                    interval = self._settings.job_poll_interval_seconds
                    Log.debug(
                        f"No pending export jobs after {jobs_done} handled, "
                        f"polling again in {interval}s"
                    )
                    time.sleep(interval)
                    continue
                Log.info(f"Claimed export job {job.id} ({len(job.building_ids)} building(s))")
                self._job_runner.run(job)
                jobs_done += 1
        except KeyboardInterrupt:
            Log.info(f"Export worker shutting down after {jobs_done} job(s)")

    def _try_claim_job(self) -> ExportJobRecord | None:
        """Attempt to claim the next pending job. Gracefully handle DB errors."""
        try:
            with get_connection() as conn:
                return self._job_repo.claim_next_job(conn)
        except Exception as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return None
