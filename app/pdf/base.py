from abc import ABC, abstractmethod

from app.exports.models import Apartment


class BaseDocumentRenderer(ABC):
    """Contract for invitation letter renderers."""

    @abstractmethod
    def render(self, token: str, apartment: Apartment, *, strict_qr: bool = False) -> bytes:
        """Render the invitation letter for one apartment.

        Args:
            token: Issued invitation token printed in the token box and QR code.
            apartment: Apartment and building metadata printed on the letter.
            strict_qr: Raise when the QR code cannot be produced instead of
                rendering the letter without it.

        Returns:
            Encoded PDF bytes.

        Raises:
            QrEncodingError: only when strict_qr is set.
            RenderError: if the letter cannot be rendered.
        """
