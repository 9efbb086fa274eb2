import io
from unittest.mock import MagicMock

import pdfplumber
import pymupdf
import pytest
import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_H

from app.exports.exceptions import QrEncodingError, RenderError
from app.exports.models import Apartment, Building
from app.pdf.qr import QrEncoder
from app.pdf.reportlab_renderer import ReportLabRenderer

TOKEN = "3f2a9c1e-7b4d-4e8a-9c2f-1a2b3c4d5e6f"


def _apartment(name: str = "Top 1") -> Apartment:
    return Apartment(
        id="a-1",
        name=name,
        building=Building(
            id="b-1",
            name="Elmstreet 5",
            street="Elmstreet 5",
            company_id="c-1",
            zip_code=10115,
        ),
    )


def _page_text(pdf_bytes: bytes) -> str:
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        assert len(pdf.pages) == 1
        return pdf.pages[0].extract_text() or ""


def _embedded_images(pdf_bytes: bytes) -> list[Image.Image]:
    images = []
    with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:
        for info in doc[0].get_images(full=True):
            extracted = doc.extract_image(info[0])
            images.append(Image.open(io.BytesIO(extracted["image"])).convert("L"))
    return images


def _failing_encoder() -> MagicMock:
    encoder = MagicMock(spec=QrEncoder)
    encoder.encode.side_effect = QrEncodingError("QR encoding failed: boom")
    return encoder


class TestRenderContent:
    def test_returns_pdf_with_letter_text(self) -> None:
        pdf_bytes = ReportLabRenderer(QrEncoder()).render(TOKEN, _apartment())

        assert pdf_bytes.startswith(b"%PDF")
        text = _page_text(pdf_bytes)
        assert "Einladungscode:" in text
        assert TOKEN in text
        assert "Objekt: Elmstreet 5" in text
        assert "Wohnung: Top 1" in text
        assert "Adresse: Elmstreet 5, 10115" in text

    def test_same_input_renders_identical_bytes(self) -> None:
        renderer = ReportLabRenderer(QrEncoder())

        assert renderer.render(TOKEN, _apartment()) == renderer.render(TOKEN, _apartment())

    def test_embedded_qr_encodes_the_token(self) -> None:
        pdf_bytes = ReportLabRenderer(QrEncoder(min_size_px=1000)).render(TOKEN, _apartment())

        images = _embedded_images(pdf_bytes)
        assert len(images) == 1
        image = images[0]
        assert image.width >= 1000

        expected = qrcode.QRCode(error_correction=ERROR_CORRECT_H, border=QrEncoder.BORDER)
        expected.add_data(TOKEN)
        expected.make(fit=True)
        matrix = expected.get_matrix()
        box = image.width // len(matrix)
        assert box * len(matrix) == image.width

        decoded = [
            [image.getpixel((c * box + box // 2, r * box + box // 2)) < 128 for c in range(len(row))]
            for r, row in enumerate(matrix)
        ]
        assert decoded == matrix


class TestQrFailure:
    def test_batch_mode_renders_without_qr(self) -> None:
        pdf_bytes = ReportLabRenderer(_failing_encoder()).render(TOKEN, _apartment())

        assert TOKEN in _page_text(pdf_bytes)
        assert _embedded_images(pdf_bytes) == []

    def test_strict_mode_raises(self) -> None:
        renderer = ReportLabRenderer(_failing_encoder())

        with pytest.raises(QrEncodingError, match="boom"):
            renderer.render(TOKEN, _apartment(), strict_qr=True)


class TestRenderErrors:
    def test_missing_apartment_name(self) -> None:
        with pytest.raises(RenderError, match="has no name"):
            ReportLabRenderer(QrEncoder()).render(TOKEN, _apartment(name=""))

    def test_missing_token(self) -> None:
        with pytest.raises(RenderError, match="no token"):
            ReportLabRenderer(QrEncoder()).render("", _apartment())
