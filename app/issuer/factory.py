from app.config.settings import Settings
from app.database.repositories.apartment_repository import ApartmentRepository
from app.database.repositories.invitation_token_repository import InvitationTokenRepository
from app.issuer.base import BaseTokenIssuer
from app.issuer.database_issuer import DatabaseTokenIssuer
from app.issuer.http_issuer import HttpTokenIssuer


class TokenIssuerFactory:
    """Creates the token issuer selected by settings."""

    ISSUERS = ("http", "database")

    @classmethod
    def create(
        cls,
        settings: Settings,
        apartment_repo: ApartmentRepository | None = None,
    ) -> BaseTokenIssuer:
        issuer = settings.token_issuer.lower()
        if issuer == "http":
            return HttpTokenIssuer(
                base_url=settings.issuer_base_url,
                api_key=settings.issuer_api_key,
                timeout_seconds=settings.issuer_timeout_seconds,
            )
        if issuer == "database":
            return DatabaseTokenIssuer(
                apartment_repo=apartment_repo or ApartmentRepository(),
                token_repo=InvitationTokenRepository(),
            )
        raise ValueError(
            f"Unknown token issuer '{issuer}'. Choose from: {list(cls.ISSUERS)}"
        )
