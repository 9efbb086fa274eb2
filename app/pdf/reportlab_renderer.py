import io

from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from app.exports.exceptions import QrEncodingError, RenderError
from app.exports.models import Apartment
from app.logging.logger import Log
from app.pdf.base import BaseDocumentRenderer
from app.pdf.layout import (
    BOX_FILL_COLOR,
    BOX_STROKE_COLOR,
    TEXT_COLOR,
    TOKEN_BOX_RADIUS_MM,
    Box,
    PagePlan,
    plan_page,
)
from app.pdf.qr import QrEncoder


def _rgb(color: tuple[int, int, int]) -> tuple[float, float, float]:
    return (color[0] / 255, color[1] / 255, color[2] / 255)


class ReportLabRenderer(BaseDocumentRenderer):
    """Renders invitation letters as single-page A4 PDFs with reportlab.

    Output is produced in reportlab's invariant mode, so equal input yields
    byte-identical documents.
    """

    def __init__(self, qr_encoder: QrEncoder) -> None:
        self._qr_encoder = qr_encoder

    def render(self, token: str, apartment: Apartment, *, strict_qr: bool = False) -> bytes:
        self._validate(token, apartment)
        qr_image = self._encode_qr(token, apartment, strict_qr=strict_qr)
        plan = plan_page(token, apartment)
        try:
            return self._draw(plan, qr_image, apartment)
        except Exception as exc:
            raise RenderError(
                f"Rendering failed for apartment {apartment.id}: {exc}"
            ) from exc

    def _validate(self, token: str, apartment: Apartment) -> None:
        if not token:
            raise RenderError(f"Apartment {apartment.id} has no token to render")
        if not apartment.name:
            raise RenderError(f"Apartment {apartment.id} has no name")
        if not apartment.building.name:
            raise RenderError(f"Building of apartment {apartment.id} has no name")

    def _encode_qr(
        self, token: str, apartment: Apartment, *, strict_qr: bool
    ) -> Image.Image | None:
        try:
            return self._qr_encoder.encode(token)
        except QrEncodingError as exc:
            if strict_qr:
                raise
            Log.warning(
                f"Rendering apartment {apartment.id} without QR code: {exc}"
            )
            return None

    def _draw(self, plan: PagePlan, qr_image: Image.Image | None, apartment: Apartment) -> bytes:
        buf = io.BytesIO()
        pdf = canvas.Canvas(buf, pagesize=A4, invariant=1)
        pdf.setTitle(f"Einladung {apartment.building.name} {apartment.name}")

        self._draw_token_box(pdf, plan.token_box)
        for line in plan.lines:
            pdf.setFont(line.font, line.size)
            pdf.setFillColorRGB(*_rgb(line.color))
            pdf.drawString(line.x * mm, self._top_down(line.y), line.text)

        if qr_image is not None:
            box = plan.qr_box
            pdf.drawImage(
                ImageReader(qr_image),
                box.x * mm,
                self._top_down(box.y + box.height),
                width=box.width * mm,
                height=box.height * mm,
            )

        pdf.showPage()
        pdf.save()
        return buf.getvalue()

    def _draw_token_box(self, pdf: canvas.Canvas, box: Box) -> None:
        pdf.setStrokeColorRGB(*_rgb(BOX_STROKE_COLOR))
        pdf.setFillColorRGB(*_rgb(BOX_FILL_COLOR))
        pdf.roundRect(
            box.x * mm,
            self._top_down(box.y + box.height),
            box.width * mm,
            box.height * mm,
            TOKEN_BOX_RADIUS_MM * mm,
            stroke=1,
            fill=1,
        )
        pdf.setFillColorRGB(*_rgb(TEXT_COLOR))

    @staticmethod
    def _top_down(y_mm: float) -> float:
        return A4[1] - y_mm * mm
