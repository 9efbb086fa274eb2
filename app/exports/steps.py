import asyncio

from app.database.repositories.apartment_repository import ApartmentRepository
from app.exports.exceptions import (
    IssuanceError,
    NoApartmentsAvailableError,
    PackagingError,
    RenderError,
)
from app.exports.models import (
    IssuedToken,
    Phase,
    RenderedArtifact,
    archive_filename,
    document_filename,
)
from app.exports.pipeline import ExportContext, ExportStep
from app.issuer.base import BaseTokenIssuer
from app.logging.logger import Log
from app.packaging.packager import ArchivePackager
from app.packaging.sink import BaseArchiveSink
from app.pdf.base import BaseDocumentRenderer


class LoadApartmentsStep(ExportStep):
    def __init__(self, apartment_repo: ApartmentRepository) -> None:
        self._apartment_repo = apartment_repo

    async def run(self, context: ExportContext) -> ExportContext:
        context.apartments = await asyncio.to_thread(
            self._apartment_repo.list_by_building, context.building_id
        )
        if not context.apartments:
            raise NoApartmentsAvailableError(
                f"No apartments found for building {context.building_id}"
            )
        Log.info(
            f"Loaded {len(context.apartments)} apartments for building {context.building_id}"
        )
        return context


class IssueTokensStep(ExportStep):
    """Issues one token per apartment, strictly one request at a time."""

    def __init__(self, issuer: BaseTokenIssuer) -> None:
        self._issuer = issuer

    async def run(self, context: ExportContext) -> ExportContext:
        total = len(context.apartments)
        for processed, apartment in enumerate(context.apartments, start=1):
            try:
                token = await self._issuer.issue_token(
                    apartment.id, apartment.building.company_id
                )
            except IssuanceError as exc:
                Log.error(
                    f"Skipping apartment {apartment.name} ({apartment.id}): {exc}"
                )
                context.skipped_apartment_ids.append(apartment.id)
            else:
                context.tokens.append(IssuedToken(token=token, apartment=apartment))
            context.report(processed, total, Phase.TOKENS)

        if not context.tokens:
            raise NoApartmentsAvailableError(
                f"No invitation token could be issued for building {context.building_id}"
            )
        Log.info(
            f"Issued {len(context.tokens)} of {total} tokens for building "
            f"{context.building_id}"
        )
        return context


class RenderArtifactsStep(ExportStep):
    """Renders letters in fixed-size chunks; each chunk finishes before the next starts."""

    def __init__(self, renderer: BaseDocumentRenderer, concurrency: int) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._renderer = renderer
        self._concurrency = concurrency

    async def run(self, context: ExportContext) -> ExportContext:
        total = len(context.tokens)
        results: list[RenderedArtifact | None] = [None] * total

        for offset in range(0, total, self._concurrency):
            chunk = context.tokens[offset : offset + self._concurrency]
            outcomes = await asyncio.gather(
                *(self._render(issued) for issued in chunk),
                return_exceptions=True,
            )
            for index, (issued, outcome) in enumerate(zip(chunk, outcomes), start=offset):
                if isinstance(outcome, RenderError):
                    Log.error(
                        f"Skipping apartment {issued.apartment.name} "
                        f"({issued.apartment.id}): {outcome}"
                    )
                    context.render_failed_apartment_ids.append(issued.apartment.id)
                elif isinstance(outcome, BaseException):
                    raise outcome
                else:
                    results[index] = outcome
            context.report(min(offset + self._concurrency, total), total, Phase.PDFS)

        context.artifacts = [artifact for artifact in results if artifact is not None]
        Log.info(
            f"Rendered {len(context.artifacts)} documents for building {context.building_id}"
        )
        return context

    async def _render(self, issued: IssuedToken) -> RenderedArtifact:
        content = await asyncio.to_thread(
            self._renderer.render, issued.token, issued.apartment
        )
        return RenderedArtifact(filename=document_filename(issued.apartment), content=content)


class PackageArchiveStep(ExportStep):
    def __init__(self, packager: ArchivePackager) -> None:
        self._packager = packager

    async def run(self, context: ExportContext) -> ExportContext:
        if not context.artifacts:
            raise PackagingError(
                f"No documents were rendered for building {context.building_id}"
            )
        context.archive_name = archive_filename(context.apartments[0].building)
        context.archive = await self._packager.pack(
            context.artifacts,
            on_progress=lambda percent: context.report(percent, 100, Phase.ZIP),
        )
        Log.info(
            f"Packed {len(context.artifacts)} documents into {context.archive_name} "
            f"({len(context.archive)} bytes)"
        )
        return context


class DeliverArchiveStep(ExportStep):
    def __init__(self, sink: BaseArchiveSink) -> None:
        self._sink = sink

    async def run(self, context: ExportContext) -> ExportContext:
        context.location = await asyncio.to_thread(
            self._sink.deliver, context.archive_name, context.archive
        )
        Log.info(f"Delivered {context.archive_name} to {context.location}")
        return context
