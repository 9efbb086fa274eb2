from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from app.exports.models import (
    Apartment,
    IssuedToken,
    Phase,
    ProgressCallback,
    ProgressState,
    RenderedArtifact,
)


@dataclass(slots=True)
class ExportContext:
    """State of one building's batch run as it moves through the steps."""

    building_id: str
    on_progress: ProgressCallback | None = None
    apartments: list[Apartment] = field(default_factory=list)
    tokens: list[IssuedToken] = field(default_factory=list)
    skipped_apartment_ids: list[str] = field(default_factory=list)
    artifacts: list[RenderedArtifact] = field(default_factory=list)
    render_failed_apartment_ids: list[str] = field(default_factory=list)
    archive_name: str = ""
    archive: bytes = b""
    location: Path | None = None

    def report(self, current: int, total: int, phase: Phase) -> None:
        if self.on_progress is not None:
            self.on_progress(ProgressState(current=current, total=total, phase=phase))


class ExportStep(ABC):
    @abstractmethod
    async def run(self, context: ExportContext) -> ExportContext:
        raise NotImplementedError
