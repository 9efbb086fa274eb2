import argparse
import asyncio
from collections.abc import Sequence

from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.database.repositories.export_job_repository import ExportJobRepository
from app.exports.exporter import BatchExporter, build_exporter
from app.exports.models import ExportRequest, ProgressState
from app.logging.logger import Log
from app.worker.job_runner import JobRunner
from app.worker.worker import Worker


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Invitation code export worker. Without options, polls for export jobs."
    )
    parser.add_argument(
        "--building",
        action="append",
        dest="buildings",
        metavar="BUILDING_ID",
        help="Export one building's codes and exit (repeatable)",
    )
    parser.add_argument("--apartment", help="Export a single apartment's letter and exit")
    parser.add_argument("--company", help="Company owning --apartment")
    args = parser.parse_args(argv)
    if args.apartment and not args.company:
        parser.error("--apartment requires --company")
    return args


def _log_progress(progress: ProgressState) -> None:
    Log.info(f"[{progress.phase.value}] {progress.current}/{progress.total}")


def _run_once(exporter: BatchExporter, args: argparse.Namespace) -> None:
    if args.apartment:
        asyncio.run(exporter.export_single(args.apartment, args.company))
        return
    request = ExportRequest(building_ids=tuple(args.buildings))
    asyncio.run(exporter.run_batch_export(request, _log_progress))


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point: initialize pool -> build dependencies -> run once or start worker loop."""
    args = _parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        exporter = build_exporter(settings)
        if args.buildings or args.apartment:
            _run_once(exporter, args)
            return
        job_repo = ExportJobRepository()
        job_runner = JobRunner(exporter, job_repo)
        worker = Worker(job_repo, job_runner, settings)
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
