from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import Any, Optional, TypeVar
from urllib.parse import quote

import aiohttp

from envseed.models.platform import (
    AdminUser,
    ApiClient,
    Buyer,
    Incrementor,
    IntegrationEvent,
    ListMeta,
    MessageSender,
    MessageSenderAssignment,
    PlatformModel,
    SecurityProfile,
    SecurityProfileAssignment,
    Supplier,
    XpIndex,
)
from envseed.services.config import PlatformConfig


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=PlatformModel)


class RemoteOperationError(RuntimeError):
    """A call against a remote API failed or returned a non-success status."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class PlatformService:
    """Async client for the commerce platform REST API.

    Every resource call takes the bearer token explicitly: the seed flow runs with an
    organization token obtained through the portal, the staging restore with the
    middleware client's own token.
    """

    _PAGE_SIZE: int = 100

    def __init__(self, config: PlatformConfig, *, session: aiohttp.ClientSession) -> None:
        self._config = config
        self._session = session

    async def _request(
        self,
        *,
        method: str,
        url: str,
        access_token: Optional[str] = None,
        json_body: Any = None,
        form: Optional[dict[str, str]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> tuple[int, bytes]:
        headers: dict[str, str] = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        try:
            async with self._session.request(
                method.upper(),
                url,
                json=json_body,
                data=form,
                params=params,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self._config.timeout_seconds),
            ) as resp:
                return (resp.status, await resp.read() or b"")
        except Exception as exc:
            logger.exception("Platform request failed (method=%s url=%s)", method, url)
            raise RemoteOperationError(f"Platform request failed ({method.upper()} {url})") from exc

    async def _api_request(
        self,
        *,
        method: str,
        path: str,
        access_token: str,
        json_body: Any = None,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        if not path.startswith("/"):
            path = "/" + path

        status, payload = await self._request(
            method=method,
            url=f"{self._config.api_url}/v1{path}",
            access_token=access_token,
            json_body=json_body,
            params=params,
        )

        if status >= HTTPStatus.BAD_REQUEST:
            try:
                details = payload.decode("utf-8") if payload else ""
            except Exception:
                details = ""
            raise RemoteOperationError(
                f"Platform call failed ({method.upper()} {path}) HTTP {status} {details}".strip(),
                status=status,
            )

        if not payload:
            return None
        return self._decode_json(payload, status=status, context=f"{method.upper()} {path}")

    async def _api_object(self, *, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """`_api_request` for endpoints that always answer with a JSON object."""

        body = await self._api_request(method=method, path=path, **kwargs)
        if not isinstance(body, dict):
            raise RemoteOperationError(f"Platform returned an unexpected response ({method.upper()} {path})")
        return body

    @staticmethod
    def _decode_json(payload: bytes, *, status: int, context: str) -> Any:
        try:
            return json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise RemoteOperationError(
                f"Platform returned an unreadable response ({context}) HTTP {status}", status=status
            ) from exc

    async def authenticate(self) -> str:
        """Client-credentials grant for the configured middleware client."""

        status, payload = await self._request(
            method="POST",
            url=f"{self._config.auth_url}/oauth/token",
            form={
                "grant_type": "client_credentials",
                "client_id": self._config.client_id,
                "client_secret": self._config.client_secret,
                "scope": "FullAccess",
            },
        )
        if status != HTTPStatus.OK:
            raise RemoteOperationError(f"Platform authentication failed HTTP {status}", status=status)

        body = self._decode_json(payload, status=status, context="POST /oauth/token") if payload else None
        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise RemoteOperationError("Platform authentication response did not include an access_token")
        return str(token)

    async def list_all(
        self,
        path: str,
        model: type[ModelT],
        *,
        access_token: str,
        filters: Optional[dict[str, str]] = None,
    ) -> list[ModelT]:
        """Collect every page of a list endpoint.

        `filters` are passed through as query-string equality filters; values may use the
        platform's `*` wildcard (e.g. ``{"AppName": "Storefront - *"}``).
        """

        items: list[ModelT] = []
        page = 1
        while True:
            params = {"page": str(page), "pageSize": str(self._PAGE_SIZE)}
            if filters:
                params.update(filters)

            body = await self._api_object(method="GET", path=path, access_token=access_token, params=params)
            items.extend(model.model_validate(item) for item in body.get("Items") or [])

            meta = ListMeta.model_validate(body.get("Meta") or {})
            if page >= meta.total_pages:
                return items
            page += 1

    # -----------------
    # API clients
    # -----------------

    async def list_api_clients(self, *, access_token: str, filters: Optional[dict[str, str]] = None) -> list[ApiClient]:
        return await self.list_all("/apiclients", ApiClient, access_token=access_token, filters=filters)

    async def create_api_client(self, client: ApiClient, *, access_token: str) -> ApiClient:
        body = await self._api_object(
            method="POST", path="/apiclients", access_token=access_token, json_body=client.to_payload()
        )
        return ApiClient.model_validate(body)

    async def save_api_client(self, client_id: str, client: ApiClient, *, access_token: str) -> ApiClient:
        body = await self._api_object(
            method="PUT",
            path=f"/apiclients/{quote(client_id, safe='')}",
            access_token=access_token,
            json_body=client.model_copy(update={"id": client_id}).to_payload(),
        )
        return ApiClient.model_validate(body)

    async def patch_api_client(self, client_id: str, patch: dict[str, Any], *, access_token: str) -> None:
        # Raw dict so explicit nulls (detaching an integration event) reach the platform.
        await self._api_request(
            method="PATCH", path=f"/apiclients/{quote(client_id, safe='')}", access_token=access_token, json_body=patch
        )

    # -----------------
    # Admin users
    # -----------------

    async def list_admin_users(self, *, access_token: str, filters: Optional[dict[str, str]] = None) -> list[AdminUser]:
        return await self.list_all("/adminusers", AdminUser, access_token=access_token, filters=filters)

    async def save_admin_user(self, user_id: str, user: AdminUser, *, access_token: str) -> AdminUser:
        body = await self._api_object(
            method="PUT",
            path=f"/adminusers/{quote(user_id, safe='')}",
            access_token=access_token,
            json_body=user.model_copy(update={"id": user_id}).to_payload(),
        )
        return AdminUser.model_validate(body)

    # -----------------
    # Security profiles
    # -----------------

    async def save_security_profile(self, profile_id: str, profile: SecurityProfile, *, access_token: str) -> None:
        await self._api_request(
            method="PUT",
            path=f"/securityprofiles/{quote(profile_id, safe='')}",
            access_token=access_token,
            json_body=profile.to_payload(),
        )

    async def save_security_profile_assignment(
        self, assignment: SecurityProfileAssignment, *, access_token: str
    ) -> None:
        await self._api_request(
            method="POST",
            path="/securityprofiles/assignments",
            access_token=access_token,
            json_body=assignment.to_payload(),
        )

    # -----------------
    # Incrementors / xp indices
    # -----------------

    async def save_incrementor(self, incrementor_id: str, incrementor: Incrementor, *, access_token: str) -> None:
        await self._api_request(
            method="PUT",
            path=f"/incrementors/{quote(incrementor_id, safe='')}",
            access_token=access_token,
            json_body=incrementor.to_payload(),
        )

    async def put_xp_index(self, index: XpIndex, *, access_token: str) -> None:
        await self._api_request(method="PUT", path="/xpindices", access_token=access_token, json_body=index.to_payload())

    # -----------------
    # Message senders
    # -----------------

    async def list_message_senders(self, *, access_token: str) -> list[MessageSender]:
        return await self.list_all("/messagesenders", MessageSender, access_token=access_token)

    async def save_message_sender(self, sender_id: str, sender: MessageSender, *, access_token: str) -> MessageSender:
        body = await self._api_request(
            method="PUT",
            path=f"/messagesenders/{quote(sender_id, safe='')}",
            access_token=access_token,
            json_body=sender.to_payload(),
        )
        return MessageSender.model_validate(body) if body else sender

    async def save_message_sender_assignment(self, assignment: MessageSenderAssignment, *, access_token: str) -> None:
        await self._api_request(
            method="POST",
            path="/messagesenders/assignments",
            access_token=access_token,
            json_body=assignment.to_payload(),
        )

    async def delete_message_sender(self, sender_id: str, *, access_token: str) -> None:
        await self._api_request(
            method="DELETE", path=f"/messagesenders/{quote(sender_id, safe='')}", access_token=access_token
        )

    # -----------------
    # Buyers / suppliers
    # -----------------

    async def list_buyers(self, *, access_token: str, filters: Optional[dict[str, str]] = None) -> list[Buyer]:
        return await self.list_all("/buyers", Buyer, access_token=access_token, filters=filters)

    async def create_buyer(self, buyer: Buyer, *, access_token: str) -> Buyer:
        body = await self._api_object(method="POST", path="/buyers", access_token=access_token, json_body=buyer.to_payload())
        return Buyer.model_validate(body)

    async def list_suppliers(self, *, access_token: str, filters: Optional[dict[str, str]] = None) -> list[Supplier]:
        return await self.list_all("/suppliers", Supplier, access_token=access_token, filters=filters)

    async def create_supplier(self, supplier: Supplier, *, access_token: str) -> Supplier:
        body = await self._api_object(
            method="POST", path="/suppliers", access_token=access_token, json_body=supplier.to_payload()
        )
        return Supplier.model_validate(body)

    async def patch_supplier(self, supplier_id: str, patch: dict[str, Any], *, access_token: str) -> None:
        await self._api_request(
            method="PATCH", path=f"/suppliers/{quote(supplier_id, safe='')}", access_token=access_token, json_body=patch
        )

    # -----------------
    # Integration events
    # -----------------

    async def list_integration_events(self, *, access_token: str) -> list[IntegrationEvent]:
        return await self.list_all("/integrationEvents", IntegrationEvent, access_token=access_token)

    async def save_integration_event(self, event_id: str, event: IntegrationEvent, *, access_token: str) -> None:
        await self._api_request(
            method="PUT",
            path=f"/integrationEvents/{quote(event_id, safe='')}",
            access_token=access_token,
            json_body=event.to_payload(),
        )

    async def delete_integration_event(self, event_id: str, *, access_token: str) -> None:
        await self._api_request(
            method="DELETE", path=f"/integrationEvents/{quote(event_id, safe='')}", access_token=access_token
        )
