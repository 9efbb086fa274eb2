import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from app.exports.exceptions import PackagingError
from app.exports.models import safe_name_part


class BaseArchiveSink(ABC):
    """Contract for delivering finished files to the requester."""

    @abstractmethod
    def deliver(self, filename: str, content: bytes) -> Path:
        """Make content available under filename and return its location.

        Raises:
            PackagingError: if delivery fails.
        """


class FileSystemArchiveSink(BaseArchiveSink):
    """Writes deliverables into an output directory, replacing existing files."""

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir

    def deliver(self, filename: str, content: bytes) -> Path:
        target = self._output_dir / safe_name_part(filename)
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._output_dir, suffix=".part")
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(content)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PackagingError(f"Failed to deliver {filename}: {exc}") from exc
        return target
