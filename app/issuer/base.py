from abc import ABC, abstractmethod
from types import TracebackType


class BaseTokenIssuer(ABC):
    """Contract for invitation token issuance adapters.

    Issuers are async context managers so adapters holding connections can
    keep them open for the length of one batch run.
    """

    @abstractmethod
    async def issue_token(self, apartment_id: str, company_id: str) -> str:
        """Create a new single-use invitation token for an apartment.

        Args:
            apartment_id: Apartment the token is bound to.
            company_id: Company that must own the apartment's building.

        Returns:
            The opaque token string. Every call yields a distinct token.

        Raises:
            IssuanceError: on any failure, including a rejected
                apartment/company relationship.
        """

    async def aclose(self) -> None:
        """Release resources held by the adapter."""

    async def __aenter__(self) -> "BaseTokenIssuer":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
