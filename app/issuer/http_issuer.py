from typing import Any

import httpx

from app.exports.exceptions import IssuanceError
from app.issuer.base import BaseTokenIssuer


class HttpTokenIssuer(BaseTokenIssuer):
    """Issues tokens through the create-invitation edge function."""

    ENDPOINT = "/functions/v1/create-invitation"
    DEFAULT_ERROR = "Failed to create invitation"

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout_seconds: int,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("issuer_base_url is required for token_issuer=http")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HttpTokenIssuer":
        if self._client is None:
            self._client = self._new_client()
        return self

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def issue_token(self, apartment_id: str, company_id: str) -> str:
        if not apartment_id or not company_id:
            raise IssuanceError("Missing required fields")

        if self._client is not None:
            response = await self._post(self._client, apartment_id, company_id)
        else:
            async with self._new_client() as client:
                response = await self._post(client, apartment_id, company_id)

        if not response.is_success:
            raise IssuanceError(self._error_message(response))

        try:
            data = response.json()
        except ValueError as exc:
            raise IssuanceError(f"Invitation service returned invalid JSON: {exc}") from exc
        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise IssuanceError("Invitation service returned no token")
        return token

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

    async def _post(
        self, client: httpx.AsyncClient, apartment_id: str, company_id: str
    ) -> httpx.Response:
        try:
            return await client.post(
                self.ENDPOINT,
                json={"apartmentId": apartment_id, "companyId": company_id},
            )
        except httpx.HTTPError as exc:
            raise IssuanceError(f"Invitation service request failed: {exc}") from exc

    def _error_message(self, response: httpx.Response) -> str:
        try:
            body: Any = response.json()
        except ValueError:
            return self.DEFAULT_ERROR
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return self.DEFAULT_ERROR
