from __future__ import annotations

import asyncio
import itertools
from pathlib import Path
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from envseed.models.platform import (
    AdminUser,
    ApiClient,
    Buyer,
    IntegrationEvent,
    MessageSender,
    Organization,
    PlatformModel,
    Supplier,
)
from envseed.models.seed import EnvironmentSeed
from envseed.services.batch_runner import BatchRunner
from envseed.services.buyer_service import BuyerService
from envseed.services.config import BatchRunnerConfig, EnvironmentConfig, PlatformConfig
from envseed.services.platform_service import RemoteOperationError
from envseed.services.portal_service import PortalServiceError
from envseed.services.setup.environment_seed_service import EnvironmentSeedService
from envseed.services.supplier_service import SupplierService


def _matches(model: PlatformModel, filters: Optional[dict[str, str]]) -> bool:
    """Loose filter matching, like the platform: case-insensitive, trimmed, `*` wildcards."""

    if not filters:
        return True
    data = model.model_dump(by_alias=True)
    for field, expected in filters.items():
        actual = data.get(field)
        if expected == "*":
            if actual is None:
                return False
            continue
        if actual is None:
            return False
        actual_norm = str(actual).strip().lower()
        expected_norm = expected.strip().lower()
        if expected_norm.endswith("*"):
            if not actual_norm.startswith(expected_norm[:-1]):
                return False
        elif actual_norm != expected_norm:
            return False
    return True


class FakePlatform:
    """In-memory platform that records every call in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.api_clients: dict[str, ApiClient] = {}
        self.admin_users: dict[str, AdminUser] = {}
        self.security_profiles: dict[str, Any] = {}
        self.security_profile_assignments: list[Any] = []
        self.incrementors: dict[str, Any] = {}
        self.xp_indices: list[Any] = []
        self.message_senders: dict[str, MessageSender] = {}
        self.message_sender_assignments: list[Any] = []
        self.buyers: dict[str, Buyer] = {}
        self.suppliers: dict[str, Supplier] = {}
        self.integration_events: dict[str, IntegrationEvent] = {}
        self.failing_xp_keys: set[str] = set()
        self._ids = itertools.count(1)

    async def _record(self, *call: Any) -> None:
        self.calls.append(call)
        await asyncio.sleep(0)

    def calls_named(self, name: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == name]

    async def authenticate(self) -> str:
        await self._record("authenticate")
        return "middleware-token"

    # api clients
    async def list_api_clients(self, *, access_token: str, filters: Optional[dict[str, str]] = None) -> list[ApiClient]:
        await self._record("list_api_clients", filters)
        return [c for c in self.api_clients.values() if _matches(c, filters)]

    async def create_api_client(self, client: ApiClient, *, access_token: str) -> ApiClient:
        await self._record("create_api_client", client.app_name)
        created = client.model_copy(update={"id": f"client-{next(self._ids)}"})
        self.api_clients[created.id] = created
        return created

    async def save_api_client(self, client_id: str, client: ApiClient, *, access_token: str) -> ApiClient:
        await self._record("save_api_client", client_id, client.app_name)
        saved = client.model_copy(update={"id": client_id})
        self.api_clients[client_id] = saved
        return saved

    async def patch_api_client(self, client_id: str, patch: dict[str, Any], *, access_token: str) -> None:
        await self._record("patch_api_client", client_id, patch)
        if client_id in self.api_clients:
            event_id = patch.get("OrderCheckoutIntegrationEventID")
            self.api_clients[client_id] = self.api_clients[client_id].model_copy(
                update={"order_checkout_integration_event_id": event_id}
            )

    # admin users
    async def list_admin_users(self, *, access_token: str, filters: Optional[dict[str, str]] = None) -> list[AdminUser]:
        await self._record("list_admin_users", filters)
        return [u for u in self.admin_users.values() if _matches(u, filters)]

    async def save_admin_user(self, user_id: str, user: AdminUser, *, access_token: str) -> AdminUser:
        await self._record("save_admin_user", user_id)
        saved = user.model_copy(update={"id": user_id})
        self.admin_users[user_id] = saved
        return saved

    # security profiles
    async def save_security_profile(self, profile_id: str, profile: Any, *, access_token: str) -> None:
        await self._record("save_security_profile", profile_id)
        self.security_profiles[profile_id] = profile

    async def save_security_profile_assignment(self, assignment: Any, *, access_token: str) -> None:
        await self._record("save_security_profile_assignment", assignment)
        self.security_profile_assignments.append(assignment)

    # incrementors / xp indices
    async def save_incrementor(self, incrementor_id: str, incrementor: Any, *, access_token: str) -> None:
        await self._record("save_incrementor", incrementor_id)
        self.incrementors[incrementor_id] = incrementor

    async def put_xp_index(self, index: Any, *, access_token: str) -> None:
        await self._record("put_xp_index", index.thing_type, index.key)
        if index.key in self.failing_xp_keys:
            raise RemoteOperationError("duplicate ID", status=409)
        self.xp_indices.append(index)

    # message senders
    async def list_message_senders(self, *, access_token: str) -> list[MessageSender]:
        await self._record("list_message_senders")
        return list(self.message_senders.values())

    async def save_message_sender(self, sender_id: str, sender: MessageSender, *, access_token: str) -> MessageSender:
        await self._record("save_message_sender", sender_id)
        self.message_senders[sender_id] = sender
        return sender

    async def save_message_sender_assignment(self, assignment: Any, *, access_token: str) -> None:
        await self._record("save_message_sender_assignment", assignment)
        self.message_sender_assignments.append(assignment)

    async def delete_message_sender(self, sender_id: str, *, access_token: str) -> None:
        await self._record("delete_message_sender", sender_id)
        self.message_senders.pop(sender_id, None)

    # buyers / suppliers
    async def list_buyers(self, *, access_token: str, filters: Optional[dict[str, str]] = None) -> list[Buyer]:
        await self._record("list_buyers", filters)
        return [b for b in self.buyers.values() if _matches(b, filters)]

    async def create_buyer(self, buyer: Buyer, *, access_token: str) -> Buyer:
        await self._record("create_buyer", buyer.name)
        buyer_id = buyer.id if buyer.id and not buyer.id.startswith("{") else f"{next(self._ids):04d}"
        created = buyer.model_copy(update={"id": buyer_id})
        self.buyers[buyer_id] = created
        return created

    async def list_suppliers(self, *, access_token: str, filters: Optional[dict[str, str]] = None) -> list[Supplier]:
        await self._record("list_suppliers", filters)
        return [s for s in self.suppliers.values() if _matches(s, filters)]

    async def create_supplier(self, supplier: Supplier, *, access_token: str) -> Supplier:
        await self._record("create_supplier", supplier.name)
        supplier_id = supplier.id if supplier.id and not supplier.id.startswith("{") else f"{next(self._ids):03d}"
        created = supplier.model_copy(update={"id": supplier_id})
        self.suppliers[supplier_id] = created
        return created

    async def patch_supplier(self, supplier_id: str, patch: dict[str, Any], *, access_token: str) -> None:
        await self._record("patch_supplier", supplier_id, patch)
        if supplier_id in self.suppliers:
            current = self.suppliers[supplier_id]
            self.suppliers[supplier_id] = current.model_copy(update={"xp": {**current.xp, **patch.get("xp", {})}})

    # integration events
    async def list_integration_events(self, *, access_token: str) -> list[IntegrationEvent]:
        await self._record("list_integration_events")
        return list(self.integration_events.values())

    async def save_integration_event(self, event_id: str, event: IntegrationEvent, *, access_token: str) -> None:
        await self._record("save_integration_event", event_id)
        self.integration_events[event_id] = event

    async def delete_integration_event(self, event_id: str, *, access_token: str) -> None:
        await self._record("delete_integration_event", event_id)
        self.integration_events.pop(event_id, None)


class FakePortal:
    def __init__(self, *, known_orgs: Optional[set[str]] = None) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.known_orgs = known_orgs if known_orgs is not None else {"seller-org"}

    async def login(self, username: str, password: str) -> str:
        self.calls.append(("login", username))
        return "dev-token"

    async def get_organization(self, org_id: str, dev_token: str) -> Organization:
        self.calls.append(("get_organization", org_id))
        if org_id not in self.known_orgs:
            raise PortalServiceError(f"Portal call failed (GET /organizations/{org_id}) HTTP 404", status=404)
        return Organization(id=org_id, name="Seller")

    async def get_org_token(self, org_id: str, dev_token: str) -> str:
        self.calls.append(("get_org_token", org_id))
        return "org-token"


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def portal() -> FakePortal:
    return FakePortal()


@pytest.fixture
def platform_config() -> PlatformConfig:
    return PlatformConfig(
        api_url="https://sandboxapi.example.test",
        auth_url="https://sandboxauth.example.test",
        client_id="middleware-client",
        client_secret="middleware-secret",
        webhook_hash_key="hash-key",
    )


@pytest.fixture
def environment_config() -> EnvironmentConfig:
    return EnvironmentConfig(middleware_base_url="https://middleware.example.test")


@pytest.fixture
def runner() -> BatchRunner:
    return BatchRunner(BatchRunnerConfig(max_concurrency=4, batch_size=4, min_pause_seconds=0))


@pytest.fixture
def exchange_rates() -> MagicMock:
    svc = MagicMock()
    svc.update = AsyncMock(return_value=["USD.json"])
    return svc


@pytest.fixture
def translations() -> MagicMock:
    storage = MagicMock()
    storage.upload_local_file = AsyncMock(side_effect=lambda **kwargs: kwargs["key"])
    return storage


@pytest.fixture
def make_service(platform, portal, platform_config, environment_config, runner, exchange_rates, translations):
    def _make(**overrides: Any) -> EnvironmentSeedService:
        kwargs: dict[str, Any] = dict(
            platform=platform,
            portal=portal,
            buyers=BuyerService(platform),
            suppliers=SupplierService(platform),
            exchange_rates=exchange_rates,
            translations=translations,
            platform_config=platform_config,
            environment_config=environment_config,
            runner=runner,
            translations_path=Path("english-translations.json"),
        )
        kwargs.update(overrides)
        return EnvironmentSeedService(**kwargs)

    return _make


@pytest.fixture
def service(make_service) -> EnvironmentSeedService:
    return make_service()


@pytest.fixture
def seed_request() -> EnvironmentSeed:
    return EnvironmentSeed(
        portal_username="dev@example.test",
        portal_password="portal-pass",
        seller_org_id="seller-org",
        initial_admin_username="admin",
        initial_admin_password="admin-pass",
        buyers=[Buyer(name="Acme Buyer")],
        suppliers=[Supplier(name="Parts Co")],
    )
