import asyncio
import io
import zipfile
from collections.abc import Callable, Sequence

from app.exports.exceptions import PackagingError
from app.exports.models import RenderedArtifact

PercentCallback = Callable[[int], None]


class ArchivePackager:
    """Bundles rendered artifacts into one deflate-compressed ZIP archive."""

    async def pack(
        self,
        files: Sequence[RenderedArtifact],
        on_progress: PercentCallback | None = None,
    ) -> bytes:
        """Build the archive, reporting percent complete from 0 to 100.

        Entries are compressed in a worker thread one at a time; percent
        callbacks run on the event loop. A filename seen twice keeps only the
        later content.

        Raises:
            PackagingError: if there is nothing to pack or writing fails.
        """
        entries: dict[str, bytes] = {}
        for artifact in files:
            entries[artifact.filename] = artifact.content
        if not entries:
            raise PackagingError("No documents to package")

        self._report(on_progress, 0)
        buf = io.BytesIO()
        try:
            with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for index, (name, content) in enumerate(entries.items(), start=1):
                    await asyncio.to_thread(zf.writestr, name, content)
                    self._report(on_progress, index * 100 // len(entries))
        except (OSError, ValueError, zipfile.LargeZipFile) as exc:
            raise PackagingError(f"Failed to build archive: {exc}") from exc
        return buf.getvalue()

    @staticmethod
    def _report(on_progress: PercentCallback | None, percent: int) -> None:
        if on_progress is not None:
            on_progress(percent)
