class ExportError(Exception):
    """Base exception for all invitation export errors."""


class IssuanceError(ExportError):
    """Raised when an invitation token cannot be issued for an apartment."""


class RenderError(ExportError):
    """Raised when an invitation document cannot be rendered."""


class QrEncodingError(RenderError):
    """Raised when the token cannot be encoded as a QR image."""


class NoApartmentsAvailableError(ExportError):
    """Raised when a building yields no apartment with an issued token."""


class PackagingError(ExportError):
    """Raised when the archive cannot be built or delivered."""
