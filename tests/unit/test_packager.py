import asyncio
import io
import threading
import zipfile
from unittest.mock import patch

import pytest

from app.exports.exceptions import PackagingError
from app.exports.models import RenderedArtifact
from app.packaging.packager import ArchivePackager


def _artifacts(count: int) -> list[RenderedArtifact]:
    return [
        RenderedArtifact(filename=f"Registrierung_Elmstreet 5_Top {i}.pdf", content=f"PDF {i}".encode())
        for i in range(1, count + 1)
    ]


def _entries(archive: bytes) -> dict[str, bytes]:
    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


class TestArchivePackager:
    def test_packs_every_artifact_under_its_filename(self) -> None:
        archive = asyncio.run(ArchivePackager().pack(_artifacts(3)))

        assert _entries(archive) == {
            "Registrierung_Elmstreet 5_Top 1.pdf": b"PDF 1",
            "Registrierung_Elmstreet 5_Top 2.pdf": b"PDF 2",
            "Registrierung_Elmstreet 5_Top 3.pdf": b"PDF 3",
        }

    def test_entries_are_deflated(self) -> None:
        archive = asyncio.run(ArchivePackager().pack(_artifacts(1)))

        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            assert zf.infolist()[0].compress_type == zipfile.ZIP_DEFLATED

    def test_reports_percent_from_zero_to_hundred(self) -> None:
        percents: list[int] = []

        asyncio.run(ArchivePackager().pack(_artifacts(4), on_progress=percents.append))

        assert percents == [0, 25, 50, 75, 100]

    def test_compresses_off_loop_and_reports_on_loop(self) -> None:
        loop_thread = threading.get_ident()
        write_threads: list[int] = []
        report_threads: list[int] = []
        original_writestr = zipfile.ZipFile.writestr

        def recording_writestr(zf, name, data, *args, **kwargs):
            write_threads.append(threading.get_ident())
            return original_writestr(zf, name, data, *args, **kwargs)

        with patch.object(zipfile.ZipFile, "writestr", recording_writestr):
            asyncio.run(
                ArchivePackager().pack(
                    _artifacts(3), on_progress=lambda _p: report_threads.append(threading.get_ident())
                )
            )

        assert len(write_threads) == 3
        assert loop_thread not in write_threads
        assert report_threads == [loop_thread] * 4

    def test_duplicate_filename_overwrites(self) -> None:
        files = [
            RenderedArtifact(filename="a.pdf", content=b"old"),
            RenderedArtifact(filename="b.pdf", content=b"b"),
            RenderedArtifact(filename="a.pdf", content=b"new"),
        ]

        archive = asyncio.run(ArchivePackager().pack(files))

        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            assert zf.namelist() == ["a.pdf", "b.pdf"]
            assert zf.read("a.pdf") == b"new"

    def test_nothing_to_pack_raises(self) -> None:
        with pytest.raises(PackagingError, match="No documents"):
            asyncio.run(ArchivePackager().pack([]))
