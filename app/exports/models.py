from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

DOCUMENT_PREFIX = "Registrierung"
ARCHIVE_PREFIX = "Registrierungscodes"


@dataclass(frozen=True)
class Building:
    """A property ("object") owned by a company."""

    id: str
    name: str
    street: str
    company_id: str
    zip_code: int | None = None


@dataclass(frozen=True)
class Apartment:
    """A leasable unit together with its owning building."""

    id: str
    name: str
    building: Building


@dataclass(frozen=True)
class IssuedToken:
    token: str
    apartment: Apartment


@dataclass(frozen=True)
class RenderedArtifact:
    """Encoded PDF bytes of one invitation letter and its archive filename."""

    filename: str
    content: bytes


class Phase(str, Enum):
    TOKENS = "tokens"
    PDFS = "pdfs"
    ZIP = "zip"


@dataclass(frozen=True)
class ProgressState:
    current: int
    total: int
    phase: Phase


ProgressCallback = Callable[[ProgressState], None]


@dataclass(frozen=True)
class ExportRequest:
    """Immutable selection of buildings to export, processed in order."""

    building_ids: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.building_ids:
            raise ValueError("ExportRequest requires at least one building id")


@dataclass
class BatchResult:
    """Outcome of one building's batch run."""

    building_id: str
    archive_name: str
    archive: bytes
    location: Path | None = None
    issued_count: int = 0
    skipped_apartment_ids: list[str] = field(default_factory=list)
    render_failed_apartment_ids: list[str] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_apartment_ids)


def safe_name_part(value: str) -> str:
    """Replace path separators so a name part cannot leave its directory."""
    return value.replace("/", "_").replace("\\", "_")


def document_filename(apartment: Apartment) -> str:
    """Registrierung_<BuildingName>_<ApartmentName>.pdf"""
    building_name = safe_name_part(apartment.building.name)
    apartment_name = safe_name_part(apartment.name)
    return f"{DOCUMENT_PREFIX}_{building_name}_{apartment_name}.pdf"


def archive_filename(building: Building) -> str:
    """Registrierungscodes_<BuildingName>.zip"""
    return f"{ARCHIVE_PREFIX}_{safe_name_part(building.name)}.zip"
