import asyncio
from pathlib import Path

from app.cache.expiring_cache import ExpiringCache
from app.config.settings import Settings
from app.database.repositories.apartment_repository import ApartmentRepository
from app.exports.exceptions import NoApartmentsAvailableError
from app.exports.models import (
    BatchResult,
    ExportRequest,
    ProgressCallback,
    document_filename,
)
from app.exports.pipeline import ExportContext, ExportStep
from app.exports.steps import (
    DeliverArchiveStep,
    IssueTokensStep,
    LoadApartmentsStep,
    PackageArchiveStep,
    RenderArtifactsStep,
)
from app.issuer.base import BaseTokenIssuer
from app.issuer.factory import TokenIssuerFactory
from app.logging.logger import Log
from app.packaging.packager import ArchivePackager
from app.packaging.sink import BaseArchiveSink, FileSystemArchiveSink
from app.pdf.base import BaseDocumentRenderer
from app.pdf.qr import QrEncoder
from app.pdf.reportlab_renderer import ReportLabRenderer


class BatchExporter:
    """Runs the invitation export pipeline.

    Pipeline per building: load apartments -> issue tokens -> render letters
    -> pack archive -> deliver. Buildings are exported one after another,
    each with its own archive and progress stream.
    """

    def __init__(
        self,
        apartment_repo: ApartmentRepository,
        issuer: BaseTokenIssuer,
        renderer: BaseDocumentRenderer,
        packager: ArchivePackager,
        sink: BaseArchiveSink,
        render_concurrency: int = 3,
    ) -> None:
        self._apartment_repo = apartment_repo
        self._issuer = issuer
        self._renderer = renderer
        self._sink = sink
        self._steps: list[ExportStep] = [
            LoadApartmentsStep(apartment_repo),
            IssueTokensStep(issuer),
            RenderArtifactsStep(renderer, render_concurrency),
            PackageArchiveStep(packager),
            DeliverArchiveStep(sink),
        ]

    async def run_batch_export(
        self,
        request: ExportRequest,
        on_progress: ProgressCallback | None = None,
        delivered: list[BatchResult] | None = None,
    ) -> list[BatchResult]:
        """Export every requested building in order.

        The first fatal error stops the run; archives of earlier buildings
        have already been delivered by then. Pass `delivered` to keep hold of
        those results when the run raises.
        """
        results = delivered if delivered is not None else []
        async with self._issuer:
            for building_id in request.building_ids:
                results.append(await self.export_building(building_id, on_progress))
        return results

    async def export_building(
        self,
        building_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> BatchResult:
        Log.info(f"Exporting invitation codes for building {building_id}")
        context = ExportContext(building_id=building_id, on_progress=on_progress)
        for step in self._steps:
            context = await step.run(context)

        result = BatchResult(
            building_id=building_id,
            archive_name=context.archive_name,
            archive=context.archive,
            location=context.location,
            issued_count=len(context.tokens),
            skipped_apartment_ids=list(context.skipped_apartment_ids),
            render_failed_apartment_ids=list(context.render_failed_apartment_ids),
        )
        Log.info(
            f"Building {building_id} exported: {len(context.artifacts)} documents, "
            f"{result.skipped_count} skipped"
        )
        return result

    async def export_single(self, apartment_id: str, company_id: str) -> Path:
        """Issue a token for one apartment and deliver its letter as a PDF.

        Unlike batch runs, every failure is raised, including a QR code that
        cannot be encoded.
        """
        apartment = await asyncio.to_thread(self._apartment_repo.find_by_id, apartment_id)
        if apartment is None:
            raise NoApartmentsAvailableError(f"Apartment {apartment_id} not found")

        async with self._issuer:
            token = await self._issuer.issue_token(apartment.id, company_id)
        content = await asyncio.to_thread(
            self._renderer.render, token, apartment, strict_qr=True
        )
        location = await asyncio.to_thread(
            self._sink.deliver, document_filename(apartment), content
        )
        Log.info(f"Delivered invitation for apartment {apartment_id} to {location}")
        return location


def build_exporter(settings: Settings, output_dir: Path | None = None) -> BatchExporter:
    """Build a BatchExporter with all required adapters."""
    apartment_repo = ApartmentRepository(
        cache=ExpiringCache(ttl_seconds=settings.apartment_cache_ttl_seconds)
    )
    return BatchExporter(
        apartment_repo=apartment_repo,
        issuer=TokenIssuerFactory.create(settings, apartment_repo=apartment_repo),
        renderer=ReportLabRenderer(QrEncoder(min_size_px=settings.qr_min_size_px)),
        packager=ArchivePackager(),
        sink=FileSystemArchiveSink(output_dir or Path(settings.export_output_dir)),
        render_concurrency=settings.render_concurrency,
    )
