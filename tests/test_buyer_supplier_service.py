from __future__ import annotations

import pytest

from envseed.models.platform import Buyer, Supplier
from envseed.services.buyer_service import BuyerService
from envseed.services.platform_service import RemoteOperationError
from envseed.services.setup import seed_catalog as catalog
from envseed.services.supplier_service import SupplierService


async def test_create_buyer_draws_id_from_incrementor(platform):
    created = await BuyerService(platform).create(Buyer(name="Acme", xp={"Region": "EU"}), access_token="tok")

    assert created.id and not created.id.startswith("{")
    assert created.xp == {"Region": "EU", "MarkupPercent": 0.0}
    assert platform.calls_named("create_buyer") == [("create_buyer", "Acme")]


async def test_create_buyer_assigns_profile_and_sender(platform):
    created = await BuyerService(platform).create(Buyer(id="acme", name="Acme"), access_token="tok", markup_percent=12.5)

    assert created.id == "acme"
    assert created.xp["MarkupPercent"] == 12.5
    [profile] = platform.security_profile_assignments
    assert (profile.security_profile_id, profile.buyer_id) == (catalog.BASE_BUYER_ROLE, "acme")
    [sender] = platform.message_sender_assignments
    assert (sender.message_sender_id, sender.buyer_id) == (catalog.BUYER_EMAILS_SENDER, "acme")


async def test_create_buyer_without_returned_id_raises(platform):
    async def _create(buyer, *, access_token):
        return buyer.model_copy(update={"id": None})

    platform.create_buyer = _create

    with pytest.raises(RemoteOperationError):
        await BuyerService(platform).create(Buyer(name="Acme"), access_token="tok")

    assert platform.security_profile_assignments == []


async def test_create_supplier_defaults_notification_recipients(platform):
    created = await SupplierService(platform).create(Supplier(name="Parts Co"), access_token="tok")

    assert created.xp == {"NotificationRcpts": []}
    [sender] = platform.message_sender_assignments
    assert (sender.message_sender_id, sender.supplier_id) == (catalog.SUPPLIER_EMAILS_SENDER, created.id)


async def test_create_supplier_keeps_caller_recipients(platform):
    supplier = Supplier(name="Parts Co", xp={"NotificationRcpts": ["ops@parts.example"]})

    created = await SupplierService(platform).create(supplier, access_token="tok")

    assert created.xp["NotificationRcpts"] == ["ops@parts.example"]
    assert supplier.id is None
