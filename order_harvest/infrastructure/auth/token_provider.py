"""
Order service credential providers.

RefreshTokenProvider exchanges the refresh token for a fresh id token once
per run; StaticTokenProvider hands out a pre-issued token.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from order_harvest.config import Settings
from order_harvest.domain.models import Credential, CredentialError

logger = logging.getLogger(__name__)


class StaticTokenProvider:
    def __init__(self, token: str):
        self._token = (token or "").strip()

    async def acquire_token(self) -> Credential:
        if not self._token:
            raise CredentialError("No id token configured")
        return Credential(token=self._token)


class RefreshTokenProvider:
    def __init__(
        self,
        api_base_url: str,
        user_id: str,
        id_token: str,
        refresh_token: str,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base_url = api_base_url.rstrip("/")
        self.user_id = user_id
        self.id_token = (id_token or "").strip()
        self.refresh_token = (refresh_token or "").strip()
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def refresh_url(self) -> str:
        return f"{self.api_base_url}/user-management/api/v1/users/{self.user_id}/refreshToken"

    async def acquire_token(self) -> Credential:
        if not self.refresh_token:
            raise CredentialError("Refresh token missing; cannot refresh id token")

        logger.info("Refreshing authentication token...")
        headers = {
            "Idtoken": self.id_token,
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.post(
                    self.refresh_url,
                    headers=headers,
                    json={"refreshToken": self.refresh_token},
                )
        except httpx.HTTPError as exc:
            raise CredentialError(f"Token refresh failed: {exc}") from exc

        if not response.is_success:
            raise CredentialError(f"Token refresh failed: {response.status_code} - {response.text}")

        try:
            token = response.json()["data"]["idToken"]
        except (ValueError, KeyError, TypeError) as exc:
            raise CredentialError("Token refresh response has no data.idToken") from exc

        token = str(token or "").strip()
        if not token:
            raise CredentialError("Token refresh returned an empty id token")

        # Later refreshes in this process present the newest id token
        self.id_token = token
        logger.info("Token refreshed successfully.")
        return Credential(token=token)


def build_credential_provider(settings: Settings):
    """Refresh flow when a refresh token is configured, static id token otherwise."""
    if settings.ORDER_API_REFRESH_TOKEN.strip():
        return RefreshTokenProvider(
            api_base_url=settings.ORDER_API_BASE_URL,
            user_id=settings.ORDER_API_USER_ID,
            id_token=settings.ORDER_API_ID_TOKEN,
            refresh_token=settings.ORDER_API_REFRESH_TOKEN,
            timeout_seconds=settings.FETCH_TIMEOUT_SECONDS,
        )
    return StaticTokenProvider(settings.ORDER_API_ID_TOKEN)
