import asyncio

import psycopg

from app.database.repositories.apartment_repository import ApartmentRepository
from app.database.repositories.invitation_token_repository import InvitationTokenRepository
from app.exports.exceptions import IssuanceError
from app.issuer.base import BaseTokenIssuer


class DatabaseTokenIssuer(BaseTokenIssuer):
    """Issues tokens directly against the relational store.

    Applies the same checks as the create-invitation service: the apartment
    must exist and its building must belong to the given company.
    """

    def __init__(
        self,
        apartment_repo: ApartmentRepository,
        token_repo: InvitationTokenRepository,
    ) -> None:
        self._apartment_repo = apartment_repo
        self._token_repo = token_repo

    async def issue_token(self, apartment_id: str, company_id: str) -> str:
        if not apartment_id or not company_id:
            raise IssuanceError("Missing required fields")
        return await asyncio.to_thread(self._issue, apartment_id, company_id)

    def _issue(self, apartment_id: str, company_id: str) -> str:
        try:
            apartment = self._apartment_repo.find_by_id(apartment_id)
        except psycopg.Error as exc:
            raise IssuanceError(f"Verification failed: {exc}") from exc
        if apartment is None or apartment.building.company_id != company_id:
            raise IssuanceError("Invalid apartment or company relationship")

        try:
            token = self._token_repo.create(apartment_id, company_id)
        except psycopg.Error as exc:
            raise IssuanceError(f"Failed to create invitation: {exc}") from exc
        if token is None:
            raise IssuanceError("No invitation data returned")
        return token
