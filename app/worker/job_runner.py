import asyncio

from app.database.models import ExportJobRecord
from app.database.repositories.export_job_repository import ExportJobRepository
from app.exports.exporter import BatchExporter
from app.exports.models import BatchResult, ExportRequest
from app.logging.logger import Log
from app.worker.progress import JobProgressReporter


class JobRunner:
    """Run one export job and record its outcome. Failed jobs are not retried."""

    def __init__(
        self,
        exporter: BatchExporter,
        job_repo: ExportJobRepository,
    ) -> None:
        self._exporter = exporter
        self._job_repo = job_repo

    def run(self, job: ExportJobRecord) -> None:
        """Execute a single job with error handling."""
        Log.info(f"Running export job {job.id} for {len(job.building_ids)} building(s)")
        delivered: list[BatchResult] = []
        try:
            request = ExportRequest(building_ids=tuple(job.building_ids))
            reporter = JobProgressReporter(self._job_repo, job.id)
            results = asyncio.run(
                self._exporter.run_batch_export(request, reporter, delivered=delivered)
            )
            archive_paths = _archive_paths(results)
            self._job_repo.mark_done(job.id, archive_paths)
            skipped = sum(r.skipped_count for r in results)
            Log.info(
                f"Job {job.id} completed: {len(archive_paths)} archive(s), "
                f"{skipped} apartment(s) skipped"
            )
        except Exception as exc:
            self._handle_failure(job, exc, delivered)

    def _handle_failure(
        self, job: ExportJobRecord, exc: Exception, delivered: list[BatchResult]
    ) -> None:
        archive_paths = _archive_paths(delivered)
        Log.error(
            f"Job {job.id} failed after {len(archive_paths)} delivered archive(s): {exc}"
        )
        self._job_repo.mark_failed(job.id, str(exc), archive_paths)


def _archive_paths(results: list[BatchResult]) -> list[str]:
    return [str(r.location) for r in results if r.location is not None]
