import math

import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_H
from qrcode.image.pil import PilImage

from app.exports.exceptions import QrEncodingError


class QrEncoder:
    """Encodes a token as a high-resolution QR bitmap.

    Uses the highest error-correction level and scales modules so the image is
    at least min_size_px square; the renderer shrinks it onto the page.
    """

    BORDER = 4

    def __init__(self, min_size_px: int = 1000) -> None:
        self._min_size_px = min_size_px

    def encode(self, data: str) -> Image.Image:
        """Return a grayscale QR image for data.

        Raises:
            QrEncodingError: if data is empty or cannot be encoded.
        """
        if not data:
            raise QrEncodingError("Cannot encode an empty token as QR code")
        try:
            qr = qrcode.QRCode(
                error_correction=ERROR_CORRECT_H,
                box_size=1,
                border=self.BORDER,
            )
            qr.add_data(data)
            qr.make(fit=True)
            qr.box_size = self.box_size_for(qr.modules_count)
            image = qr.make_image(
                image_factory=PilImage, fill_color="black", back_color="white"
            )
            return image.get_image().convert("L")
        except QrEncodingError:
            raise
        except Exception as exc:
            raise QrEncodingError(f"QR encoding failed: {exc}") from exc

    def box_size_for(self, modules_count: int) -> int:
        """Pixels per module so the bordered symbol reaches min_size_px."""
        return math.ceil(self._min_size_px / (modules_count + 2 * self.BORDER))
