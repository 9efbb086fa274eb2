from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class ExportJobRecord:
    """Represents a row from the code_export_jobs table."""

    id: int
    building_ids: list[str]
    status: str
    error_message: str | None = None
    progress: dict[str, Any] | None = None
    archive_paths: list[str] = field(default_factory=list)
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
