import time
from collections.abc import Callable

from app.database.repositories.export_job_repository import ExportJobRepository
from app.exports.models import Phase, ProgressState
from app.logging.logger import Log

PHASE_LABELS = {
    Phase.TOKENS: "Creating invitation codes",
    Phase.PDFS: "Rendering PDFs",
    Phase.ZIP: "Building ZIP archive",
}


class JobProgressReporter:
    """Progress sink for one export job: logs each update and stores progress on the job.

    Runs on the event loop, so database writes are throttled: a state is stored
    when its phase starts or finishes, or once `min_interval_seconds` has passed
    since the last stored state.
    """

    def __init__(
        self,
        job_repo: ExportJobRepository,
        job_id: int,
        min_interval_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._job_repo = job_repo
        self._job_id = job_id
        self._min_interval = min_interval_seconds
        self._clock = clock
        self._stored_at: float | None = None
        self._stored_phase: Phase | None = None
        self.last: ProgressState | None = None

    def __call__(self, progress: ProgressState) -> None:
        self.last = progress
        unit = "%" if progress.phase is Phase.ZIP else f" of {progress.total}"
        Log.debug(
            f"Job {self._job_id}: {PHASE_LABELS[progress.phase]} "
            f"{progress.current}{unit}"
        )
        now = self._clock()
        if not self._should_store(progress, now):
            return
        try:
            self._job_repo.update_progress(self._job_id, progress)
        except Exception as exc:
            Log.warning(f"Could not store progress for job {self._job_id}: {exc}")
            return
        self._stored_at = now
        self._stored_phase = progress.phase

    def _should_store(self, progress: ProgressState, now: float) -> bool:
        if self._stored_at is None or progress.phase is not self._stored_phase:
            return True
        if progress.current >= progress.total:
            return True
        return now - self._stored_at >= self._min_interval
