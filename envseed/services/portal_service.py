from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import Any, Optional
from urllib.parse import quote

import aiohttp

from envseed.models.platform import Organization
from envseed.services.config import PortalConfig
from envseed.services.platform_service import RemoteOperationError


logger = logging.getLogger(__name__)


class PortalServiceError(RemoteOperationError):
    pass


class PortalService:
    """Developer portal: exchanges portal credentials for organization-scoped tokens."""

    def __init__(self, config: PortalConfig, *, session: aiohttp.ClientSession) -> None:
        self._config = config
        self._session = session

    async def _json_request(
        self,
        *,
        method: str,
        path: str,
        access_token: Optional[str] = None,
        form: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        url = f"{self._config.base_url}{path}"
        headers: dict[str, str] = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        try:
            async with self._session.request(
                method,
                url,
                data=form,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self._config.timeout_seconds),
            ) as resp:
                status = resp.status
                payload = await resp.read() or b""
        except Exception as exc:
            logger.exception("Portal request failed (method=%s path=%s)", method, path)
            raise PortalServiceError(f"Portal request failed ({method} {path})") from exc

        if status != HTTPStatus.OK:
            raise PortalServiceError(f"Portal call failed ({method} {path}) HTTP {status}", status=status)

        try:
            parsed = json.loads(payload.decode("utf-8")) if payload else {}
        except Exception as exc:
            raise PortalServiceError(f"Portal returned an unreadable response ({method} {path})") from exc
        return parsed if isinstance(parsed, dict) else {}

    async def login(self, username: str, password: str) -> str:
        """Password grant against the portal; returns a developer token."""

        body = await self._json_request(
            method="POST",
            path="/oauth/token",
            form={"grant_type": "password", "username": username, "password": password},
        )
        token = body.get("access_token")
        if not token:
            raise PortalServiceError("Portal login response did not include an access_token")
        return str(token)

    async def get_organization(self, org_id: str, dev_token: str) -> Organization:
        body = await self._json_request(
            method="GET", path=f"/organizations/{quote(org_id, safe='')}", access_token=dev_token
        )
        return Organization.model_validate(body)

    async def get_org_token(self, org_id: str, dev_token: str) -> str:
        body = await self._json_request(
            method="GET", path=f"/organizations/{quote(org_id, safe='')}/token", access_token=dev_token
        )
        token = body.get("access_token")
        if not token:
            raise PortalServiceError(f"Portal did not issue a token for organization {org_id}")
        return str(token)
