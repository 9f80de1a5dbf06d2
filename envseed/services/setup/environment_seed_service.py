from __future__ import annotations

import asyncio
import logging
import secrets
import string
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import aiohttp

from envseed.models.platform import (
    AdminUser,
    ApiClient,
    Buyer,
    Incrementor,
    IntegrationEvent,
    MessageSender,
    MessageSenderAssignment,
    SecurityProfile,
    SecurityProfileAssignment,
    Supplier,
    XpIndex,
)
from envseed.models.seed import ApiClientCredentials, EnvironmentSeed, EnvironmentSeedResponse
from envseed.services.batch_runner import BatchRunner
from envseed.services.buyer_service import BuyerService
from envseed.services.config import (
    BatchRunnerConfig,
    EnvironmentConfig,
    ExchangeRatesConfig,
    PlatformConfig,
    PortalConfig,
    S3Config,
)
from envseed.services.exchange_rates_service import ExchangeRatesService
from envseed.services.platform_service import PlatformService, RemoteOperationError
from envseed.services.portal_service import PortalService
from envseed.services.s3_service import S3Service
from envseed.services.setup import seed_catalog as catalog
from envseed.services.supplier_service import SupplierService


logger = logging.getLogger(__name__)


async def _gather_all(*aws: Any) -> list[Any]:
    """Await every request of a step, then raise the first failure, if any.

    Sibling requests are never left running when a step fails.
    """

    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


class EnvironmentSeedError(RuntimeError):
    pass


class ConfigurationError(EnvironmentSeedError):
    pass


class OrganizationNotFoundError(EnvironmentSeedError):
    pass


class MissingApiClientError(EnvironmentSeedError):
    pass


@dataclass(frozen=True)
class ApiClientSet:
    admin_ui: ApiClient
    buyer_ui: ApiClient
    buyer_local_ui: ApiClient
    middleware: ApiClient


@dataclass(frozen=True)
class BestEffortResult:
    """Outcome of one call in a step whose failures are tolerated."""

    item: Any
    ok: bool
    error: Optional[RemoteOperationError] = None


class EnvironmentSeedService:
    """Provisions a seller organization on the commerce platform.

    `seed` runs every setup step in dependency order; each step is awaited before the
    next starts, and requests issued within one step are awaited together. Every step is
    an upsert by stable ID, except buyers and suppliers, which are looked up by exact name
    before being created. Re-running `seed` is the recovery path after a failed run.

    `post_staging_restore` re-creates the environment-specific checkout wiring after the
    staging organization has been restored from production.
    """

    _DEFAULT_TRANSLATIONS_PATH: Path = Path(__file__).resolve().parents[2] / "assets" / "english-translations.json"
    _CLIENT_SECRET_ALPHABET: str = string.ascii_letters + string.digits

    def __init__(
        self,
        *,
        platform: PlatformService,
        portal: PortalService,
        buyers: BuyerService,
        suppliers: SupplierService,
        exchange_rates: ExchangeRatesService,
        translations: S3Service,
        platform_config: PlatformConfig,
        environment_config: EnvironmentConfig,
        runner: Optional[BatchRunner] = None,
        translations_path: Optional[Path] = None,
    ) -> None:
        self._platform = platform
        self._portal = portal
        self._buyers = buyers
        self._suppliers = suppliers
        self._exchange_rates = exchange_rates
        self._translations = translations
        self._platform_config = platform_config
        self._environment_config = environment_config
        self._runner = runner or BatchRunner()
        self._translations_path = translations_path or self._DEFAULT_TRANSLATIONS_PATH

    @staticmethod
    def from_env(*, session: aiohttp.ClientSession) -> "EnvironmentSeedService":
        platform_config = PlatformConfig.from_env()
        platform = PlatformService(platform_config, session=session)
        runner = BatchRunner(BatchRunnerConfig.from_env())

        return EnvironmentSeedService(
            platform=platform,
            portal=PortalService(PortalConfig.from_env(), session=session),
            buyers=BuyerService(platform),
            suppliers=SupplierService(platform),
            exchange_rates=ExchangeRatesService(
                ExchangeRatesConfig.from_env(),
                session=session,
                storage=S3Service(S3Config.from_env_exchange_rates()),
                runner=runner,
            ),
            translations=S3Service(S3Config.from_env_translations()),
            platform_config=platform_config,
            environment_config=EnvironmentConfig.from_env(),
            runner=runner,
        )

    # -----------------
    # Entry points
    # -----------------

    async def seed(self, seed: EnvironmentSeed) -> EnvironmentSeedResponse:
        self._validate_settings()

        logger.info("Seeding organization %s", seed.seller_org_id)
        portal_token = await self._portal.login(seed.portal_username, seed.portal_password)
        await self.verify_org_exists(seed.seller_org_id, portal_token)
        org_token = await self._portal.get_org_token(seed.seller_org_id, portal_token)

        # Run-local copy: the caller's seed is never mutated.
        buyers = [*seed.buyers, self.default_buyer()]
        suppliers = list(seed.suppliers)

        await self.create_default_seller_users(seed, org_token)
        await self.create_api_clients(org_token)
        await self.create_security_profiles(org_token)
        existing_buyers = await self.resolve_existing_buyers(buyers, org_token)
        await self.assign_security_profiles(existing_buyers, org_token)

        api_clients = await self.get_api_clients(org_token)
        await self.create_incrementors(org_token)  # must precede create_buyers / create_suppliers
        existing_suppliers = await self.resolve_existing_suppliers(suppliers, org_token)
        await self.create_message_senders(existing_buyers, existing_suppliers, org_token)  # same

        await self.create_buyers(buyers, org_token)
        await self.create_xp_indices(org_token)
        await self.create_and_assign_integration_events(
            [self._client_id(api_clients.buyer_ui)],
            self._client_id(api_clients.buyer_local_ui),
            org_token,
        )
        await self.create_suppliers(suppliers, org_token)

        await self._exchange_rates.update()
        await self.publish_default_translations()

        logger.info("Seeding organization %s complete", seed.seller_org_id)
        return EnvironmentSeedResponse(
            comments=catalog.SEED_SUCCESS_COMMENTS,
            api_clients={
                "Middleware": ApiClientCredentials(
                    client_id=self._client_id(api_clients.middleware),
                    client_secret=api_clients.middleware.client_secret,
                ),
                "Seller": ApiClientCredentials(client_id=self._client_id(api_clients.admin_ui)),
                "Buyer": ApiClientCredentials(client_id=self._client_id(api_clients.buyer_ui)),
            },
        )

    async def post_staging_restore(self) -> None:
        """Restore checkout wiring after a production-to-staging restore.

        The restore switches off integration events and message senders so staging cannot
        contact production customers. Integration events are rebuilt with this
        environment's URLs, and supplier notification recipients are cleared.
        """

        self._validate_settings()

        token = await self._platform.authenticate()
        api_clients = await self.get_api_clients(token)
        storefront_client_ids = await self.get_storefront_client_ids(token)

        await self.delete_all_integration_events(token)

        await _gather_all(
            self.create_and_assign_integration_events(
                storefront_client_ids, self._client_id(api_clients.buyer_local_ui), token
            ),
            self.shut_off_supplier_emails(token),
        )
        logger.info("Post staging restore complete (storefront clients=%d)", len(storefront_client_ids))

    async def remove_message_senders(self) -> int:
        """Delete every message sender with the middleware client's own token; returns the count."""

        self._validate_settings()

        token = await self._platform.authenticate()
        return await self.delete_all_message_senders(token)

    # -----------------
    # Organization / users
    # -----------------

    def _validate_settings(self) -> None:
        required = {
            "PLATFORM_API_URL": self._platform_config.api_url,
            "PLATFORM_WEBHOOK_HASH_KEY": self._platform_config.webhook_hash_key,
            "MIDDLEWARE_BASE_URL": self._environment_config.middleware_base_url,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigurationError(f"Missing required app setting(s): {', '.join(missing)}")

    async def verify_org_exists(self, org_id: str, dev_token: str) -> None:
        try:
            await self._portal.get_organization(org_id, dev_token)
        except RemoteOperationError as exc:
            raise OrganizationNotFoundError(
                f"Failed to retrieve seller organization {org_id!r}. "
                "The organization must be created in the portal before it can be seeded"
            ) from exc

    async def create_default_seller_users(self, seed: EnvironmentSeed, token: str) -> None:
        # The middleware API client uses this user as its default context user.
        middleware_user = AdminUser(
            id=catalog.MIDDLEWARE_USER_ID,
            username=catalog.MIDDLEWARE_USERNAME,
            email=catalog.BOOTSTRAP_USER_EMAIL,
            active=True,
            first_name="Default",
            last_name="User",
        )
        await self._platform.save_admin_user(middleware_user.id or "", middleware_user, access_token=token)

        initial_admin = AdminUser(
            id=catalog.INITIAL_ADMIN_USER_ID,
            username=seed.initial_admin_username,
            password=seed.initial_admin_password,
            email=catalog.BOOTSTRAP_USER_EMAIL,
            active=True,
            first_name="Initial",
            last_name="User",
        )
        await self._platform.save_admin_user(initial_admin.id or "", initial_admin, access_token=token)
        logger.info("Saved bootstrap admin users")

    # -----------------
    # API clients
    # -----------------

    def _generate_client_secret(self) -> str:
        return "".join(secrets.choice(self._CLIENT_SECRET_ALPHABET) for _ in range(catalog.CLIENT_SECRET_LENGTH))

    def api_client_definitions(self) -> list[ApiClient]:
        clients = []
        for app_name, access in catalog.API_CLIENTS.items():
            client = ApiClient(
                app_name=app_name,
                active=True,
                access_token_duration=catalog.ACCESS_TOKEN_DURATION_MINUTES,
                refresh_token_duration=catalog.REFRESH_TOKEN_DURATION_MINUTES,
                **access,
            )
            if app_name in catalog.API_CLIENTS_WITH_SECRET:
                client = client.model_copy(update={"client_secret": self._generate_client_secret()})
            clients.append(client)
        return clients

    async def _upsert_api_client(self, existing: list[ApiClient], client: ApiClient, token: str) -> ApiClient:
        match = next((c for c in existing if c.app_name == client.app_name and c.id), None)
        if match is not None:
            return await self._platform.save_api_client(match.id or "", client, access_token=token)
        return await self._platform.create_api_client(client, access_token=token)

    async def create_api_clients(self, token: str) -> None:
        existing = await self._platform.list_api_clients(access_token=token)
        await _gather_all(
            *(self._upsert_api_client(existing, client, token) for client in self.api_client_definitions())
        )
        logger.info("Upserted %d API clients", len(catalog.API_CLIENTS))

    async def get_api_clients(self, token: str) -> ApiClientSet:
        clients = await self._platform.list_api_clients(access_token=token)

        def _by_name(app_name: str) -> ApiClient:
            match = next((c for c in clients if c.app_name == app_name), None)
            if match is None:
                raise MissingApiClientError(f"API client {app_name!r} not found; run the seed first")
            return match

        return ApiClientSet(
            admin_ui=_by_name(catalog.SELLER_API_CLIENT_NAME),
            buyer_ui=_by_name(catalog.BUYER_API_CLIENT_NAME),
            buyer_local_ui=_by_name(catalog.BUYER_LOCAL_API_CLIENT_NAME),
            middleware=_by_name(catalog.MIDDLEWARE_API_CLIENT_NAME),
        )

    async def get_storefront_client_ids(self, token: str) -> list[str]:
        clients = await self._platform.list_api_clients(
            access_token=token, filters={"AppName": catalog.STOREFRONT_API_CLIENT_FILTER}
        )
        return [c.id for c in clients if c.id]

    @staticmethod
    def _client_id(client: ApiClient) -> str:
        if not client.id:
            raise MissingApiClientError(f"API client {client.app_name!r} has no ID")
        return client.id

    # -----------------
    # Security profiles
    # -----------------

    async def create_security_profiles(self, token: str) -> None:
        profiles = [
            SecurityProfile(id=profile_id, name=profile_id, roles=attrs["roles"], custom_roles=attrs["custom_roles"])
            for profile_id, attrs in catalog.SECURITY_PROFILES.items()
        ]
        profiles.append(
            SecurityProfile(
                id=catalog.FULL_ACCESS_SECURITY_PROFILE,
                name=catalog.FULL_ACCESS_SECURITY_PROFILE,
                roles=[catalog.FULL_ACCESS_ROLE],
            )
        )

        await _gather_all(
            *(self._platform.save_security_profile(p.id, p, access_token=token) for p in profiles)
        )
        logger.info("Saved %d security profiles", len(profiles))

    async def assign_security_profiles(self, existing_buyers: list[Buyer], token: str) -> None:
        """Assign profiles at buyer, organization and user scope in one batch.

        Buyers created later in the run receive the base-buyer profile from the buyer
        creation step.
        """

        admin_users = await self._platform.list_admin_users(
            access_token=token, filters={"Username": catalog.MIDDLEWARE_USERNAME}
        )
        default_admin = next(
            (u for u in admin_users if u.username == catalog.MIDDLEWARE_USERNAME and u.id), None
        )
        if default_admin is None:
            raise EnvironmentSeedError(f"Admin user {catalog.MIDDLEWARE_USERNAME!r} not found")

        assignments = [
            SecurityProfileAssignment(security_profile_id=catalog.BASE_BUYER_ROLE, buyer_id=buyer.id)
            for buyer in existing_buyers
            if buyer.id
        ]
        assignments.extend(SecurityProfileAssignment(security_profile_id=role) for role in catalog.SELLER_ROLES)
        assignments.append(
            SecurityProfileAssignment(
                security_profile_id=catalog.FULL_ACCESS_SECURITY_PROFILE, user_id=default_admin.id
            )
        )

        await _gather_all(
            *(self._platform.save_security_profile_assignment(a, access_token=token) for a in assignments)
        )
        logger.info("Saved %d security profile assignments", len(assignments))

    # -----------------
    # Incrementors / message senders / xp indices
    # -----------------

    async def create_incrementors(self, token: str) -> None:
        for incrementor_id, attrs in catalog.INCREMENTORS.items():
            incrementor = Incrementor(id=incrementor_id, **attrs)
            await self._platform.save_incrementor(incrementor_id, incrementor, access_token=token)
        logger.info("Saved %d incrementors", len(catalog.INCREMENTORS))

    def message_sender_definitions(self) -> list[tuple[MessageSender, str]]:
        url = self._environment_config.middleware_base_url + catalog.MESSAGE_SENDER_URL_PATH
        return [
            (
                MessageSender(
                    id=sender_id,
                    name=attrs["name"],
                    message_types=list(attrs["message_types"]),
                    url=url,
                    shared_key=self._platform_config.webhook_hash_key,
                ),
                attrs["scope"],
            )
            for sender_id, attrs in catalog.MESSAGE_SENDERS.items()
        ]

    async def create_message_senders(
        self, existing_buyers: list[Buyer], existing_suppliers: list[Supplier], token: str
    ) -> None:
        """Save the message senders and bind them to the entities that already exist.

        Buyers and suppliers created later in the run are bound by their creation step.
        """

        for definition, scope in self.message_sender_definitions():
            sender = await self._platform.save_message_sender(definition.id, definition, access_token=token)

            if scope == "organization":
                assignments = [MessageSenderAssignment(message_sender_id=sender.id)]
            elif scope == "buyer":
                assignments = [
                    MessageSenderAssignment(message_sender_id=sender.id, buyer_id=b.id) for b in existing_buyers if b.id
                ]
            elif scope == "supplier":
                assignments = [
                    MessageSenderAssignment(message_sender_id=sender.id, supplier_id=s.id)
                    for s in existing_suppliers
                    if s.id
                ]
            else:
                raise ValueError(f"Unknown message sender scope: {scope!r}")

            for assignment in assignments:
                await self._platform.save_message_sender_assignment(assignment, access_token=token)

        logger.info("Saved %d message senders", len(catalog.MESSAGE_SENDERS))

    async def delete_all_message_senders(self, token: str) -> int:
        senders = await self._platform.list_message_senders(access_token=token)
        await self._runner.run(
            senders,
            lambda sender: self._platform.delete_message_sender(sender.id, access_token=token),
            desc="Deleting message senders",
        )
        logger.info("Deleted %d message senders", len(senders))
        return len(senders)

    async def create_xp_indices(self, token: str) -> list[BestEffortResult]:
        """Upsert every xp index, tolerating failures.

        The platform can answer a successful index PUT with a duplicate-ID error, so a
        failure here does not mean the index is missing. This is the only step whose remote
        errors are not propagated.
        """

        results: list[BestEffortResult] = []
        for thing_type, key in catalog.XP_INDICES:
            index = XpIndex(thing_type=thing_type, key=key)
            try:
                await self._platform.put_xp_index(index, access_token=token)
                results.append(BestEffortResult(item=index, ok=True))
            except RemoteOperationError as exc:
                logger.warning("xp index %s.%s not saved: %s", thing_type, key, exc)
                results.append(BestEffortResult(item=index, ok=False, error=exc))

        failed = sum(1 for r in results if not r.ok)
        logger.info("Saved xp indices (total=%d, failed=%d)", len(results), failed)
        return results

    # -----------------
    # Buyers / suppliers
    # -----------------

    @staticmethod
    def default_buyer() -> Buyer:
        return Buyer(name=catalog.DEFAULT_BUYER_NAME, active=True, xp={"MarkupPercent": 0})

    async def find_buyer(self, name: str, token: str) -> Optional[Buyer]:
        # The name filter may match loosely (wildcards, case); only an exact name counts.
        candidates = await self._platform.list_buyers(access_token=token, filters={"Name": name})
        return next((b for b in candidates if b.name == name), None)

    async def buyer_exists(self, name: str, token: str) -> bool:
        return await self.find_buyer(name, token) is not None

    async def find_supplier(self, name: str, token: str) -> Optional[Supplier]:
        candidates = await self._platform.list_suppliers(access_token=token, filters={"Name": name})
        return next((s for s in candidates if s.name == name), None)

    async def supplier_exists(self, name: str, token: str) -> bool:
        return await self.find_supplier(name, token) is not None

    async def resolve_existing_buyers(self, buyers: list[Buyer], token: str) -> list[Buyer]:
        found = await _gather_all(*(self.find_buyer(b.name, token) for b in buyers))
        return [b for b in found if b is not None]

    async def resolve_existing_suppliers(self, suppliers: list[Supplier], token: str) -> list[Supplier]:
        found = await _gather_all(*(self.find_supplier(s.name, token) for s in suppliers))
        return [s for s in found if s is not None]

    async def create_buyers(self, buyers: list[Buyer], token: str) -> list[Buyer]:
        created: list[Buyer] = []
        for buyer in buyers:
            if await self.buyer_exists(buyer.name, token):
                logger.info("Buyer %r already exists, skipping", buyer.name)
                continue
            created.append(await self._buyers.create(buyer, access_token=token, markup_percent=0.0))
        return created

    async def create_suppliers(self, suppliers: list[Supplier], token: str) -> list[Supplier]:
        created: list[Supplier] = []
        for supplier in suppliers:
            if await self.supplier_exists(supplier.name, token):
                logger.info("Supplier %r already exists, skipping", supplier.name)
                continue
            created.append(await self._suppliers.create(supplier, access_token=token))
        return created

    async def shut_off_supplier_emails(self, token: str) -> None:
        suppliers = await self._platform.list_suppliers(access_token=token)
        await self._runner.run(
            suppliers,
            lambda supplier: self._platform.patch_supplier(
                supplier.id or "", {"xp": {"NotificationRcpts": []}}, access_token=token
            ),
            desc="Clearing supplier notification recipients",
        )

    # -----------------
    # Integration events
    # -----------------

    def _checkout_event(self, event_id: str, name: str, url: str) -> IntegrationEvent:
        return IntegrationEvent(
            id=event_id,
            name=name,
            event_type=catalog.CHECKOUT_EVENT_TYPE,
            custom_implementation_url=url,
            hash_key=self._platform_config.webhook_hash_key,
            elevated_roles=[catalog.FULL_ACCESS_ROLE],
            config_data=dict(catalog.CHECKOUT_CONFIG_DATA),
        )

    async def create_and_assign_integration_events(
        self, buyer_client_ids: list[str], local_buyer_client_id: str, token: str
    ) -> None:
        checkout = self._checkout_event(
            catalog.CHECKOUT_EVENT_ID, "HeadStart Checkout", self._environment_config.middleware_base_url
        )
        await self._platform.save_integration_event(checkout.id, checkout, access_token=token)

        local_checkout = self._checkout_event(
            catalog.CHECKOUT_LOCAL_EVENT_ID, "HeadStart Checkout LOCAL", self._environment_config.local_middleware_url
        )
        await self._platform.save_integration_event(local_checkout.id, local_checkout, access_token=token)

        await self._platform.patch_api_client(
            local_buyer_client_id,
            {"OrderCheckoutIntegrationEventID": catalog.CHECKOUT_LOCAL_EVENT_ID},
            access_token=token,
        )
        await self._runner.run(
            buyer_client_ids,
            lambda client_id: self._platform.patch_api_client(
                client_id, {"OrderCheckoutIntegrationEventID": catalog.CHECKOUT_EVENT_ID}, access_token=token
            ),
            desc="Assigning checkout integration event",
        )
        logger.info("Checkout integration events assigned (clients=%d + local)", len(buyer_client_ids))

    async def delete_all_integration_events(self, token: str) -> None:
        # An event still referenced by an API client cannot be deleted; detach first.
        attached = await self._platform.list_api_clients(
            access_token=token, filters={"OrderCheckoutIntegrationEventID": "*"}
        )
        await self._runner.run(
            attached,
            lambda client: self._platform.patch_api_client(
                client.id or "", {"OrderCheckoutIntegrationEventID": None}, access_token=token
            ),
            desc="Detaching checkout integration events",
        )

        events = await self._platform.list_integration_events(access_token=token)
        await self._runner.run(
            events,
            lambda event: self._platform.delete_integration_event(event.id, access_token=token),
            desc="Deleting integration events",
        )
        logger.info("Deleted %d integration events (detached clients=%d)", len(events), len(attached))

    # -----------------
    # Assets
    # -----------------

    async def publish_default_translations(self) -> str:
        # Other languages are published alongside as i18n/<lang>.json.
        return await self._translations.upload_local_file(
            path=self._translations_path,
            key=catalog.TRANSLATIONS_BLOB_KEY,
            content_type="application/json",
        )
