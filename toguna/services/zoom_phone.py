"""Zoom Phone click-to-call integration using server-to-server OAuth."""

import logging
import re
import time
from typing import Any

import httpx

from toguna.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

ZOOM_TOKEN_URL = "https://zoom.us/oauth/token"
ZOOM_API_BASE = "https://api.zoom.us/v2"
TOKEN_REFRESH_MARGIN_SECONDS = 60
DEFAULT_COUNTRY_CODE = "+81"


def format_phone_e164(phone_number: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Normalize a domestic number to E.164.

    >>> format_phone_e164("03-1234-5678")
    '+81312345678'
    """
    if phone_number.startswith("+"):
        return phone_number
    cleaned = re.sub(r"[-\s()]", "", phone_number)
    if cleaned.startswith("0"):
        cleaned = cleaned[1:]
    return f"{country_code}{cleaned}"


class ZoomPhoneService:
    """Thin client over the Zoom Phone REST API."""

    def __init__(self):
        self.account_id = settings.zoom_account_id
        self.client_id = settings.zoom_client_id
        self.client_secret = settings.zoom_client_secret
        self._token: str | None = None
        self._token_expires_at: float = 0.0

    @property
    def is_configured(self) -> bool:
        return bool(self.account_id and self.client_id and self.client_secret)

    async def get_access_token(self) -> str:
        """Fetch an account token, reusing the cached one until shortly before expiry."""
        if not self.is_configured:
            raise ValueError("Zoom Phone credentials not configured")

        if self._token and time.time() < self._token_expires_at - TOKEN_REFRESH_MARGIN_SECONDS:
            return self._token

        async with httpx.AsyncClient() as client:
            response = await client.post(
                ZOOM_TOKEN_URL,
                params={"grant_type": "account_credentials", "account_id": self.account_id},
                auth=(self.client_id, self.client_secret),
                timeout=30.0,
            )
            response.raise_for_status()
            data = response.json()

        self._token = data["access_token"]
        self._token_expires_at = time.time() + int(data.get("expires_in", 3600))
        return self._token

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        token = await self.get_access_token()
        async with httpx.AsyncClient() as client:
            response = await client.request(
                method,
                f"{ZOOM_API_BASE}{endpoint}",
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                },
                timeout=30.0,
                **kwargs,
            )
            response.raise_for_status()
            if response.status_code == 204 or not response.content:
                return {}
            return response.json()

    async def list_phone_users(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/phone/users")
        return data.get("users", [])

    async def initiate_call(
        self,
        user_id: str,
        phone_number: str,
        caller_number: str | None = None,
    ) -> dict[str, Any]:
        callee = format_phone_e164(phone_number)
        payload = {"callee_number": callee}
        if caller_number:
            payload["caller_number"] = caller_number
        data = await self._request("POST", f"/phone/users/{user_id}/phone_calls", json=payload)
        logger.info(f"Zoom call initiated for user {user_id} to {callee}")
        return data

    async def get_call_status(self, user_id: str, call_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/phone/users/{user_id}/phone_calls/{call_id}")

    async def hold_call(self, user_id: str, call_id: str) -> dict[str, Any]:
        return await self._request(
            "PATCH", f"/phone/users/{user_id}/phone_calls/{call_id}", json={"action": "hold"}
        )

    async def resume_call(self, user_id: str, call_id: str) -> dict[str, Any]:
        return await self._request(
            "PATCH", f"/phone/users/{user_id}/phone_calls/{call_id}", json={"action": "unhold"}
        )

    async def disconnect_call(self, user_id: str, call_id: str) -> None:
        await self._request("DELETE", f"/phone/users/{user_id}/phone_calls/{call_id}")
        logger.info(f"Zoom call {call_id} disconnected")

    async def get_call_logs(
        self,
        user_id: str,
        date_from: str | None = None,
        date_to: str | None = None,
        log_type: str | None = None,
        page_size: int = 30,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"page_size": page_size}
        if date_from:
            params["from"] = date_from
        if date_to:
            params["to"] = date_to
        if log_type:
            params["type"] = log_type
        data = await self._request("GET", f"/phone/users/{user_id}/call_logs", params=params)
        return data.get("call_logs", [])


_zoom: ZoomPhoneService | None = None


def get_zoom_phone_service() -> ZoomPhoneService:
    """Shared instance so the access token cache survives between requests."""
    global _zoom
    if _zoom is None:
        _zoom = ZoomPhoneService()
    return _zoom
