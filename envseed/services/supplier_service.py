from __future__ import annotations

import logging

from envseed.models.platform import MessageSenderAssignment, Supplier
from envseed.services.platform_service import PlatformService, RemoteOperationError
from envseed.services.setup.seed_catalog import SUPPLIER_EMAILS_SENDER, SUPPLIER_INCREMENTOR


logger = logging.getLogger(__name__)


class SupplierService:
    def __init__(self, platform: PlatformService) -> None:
        self._platform = platform

    async def create(self, supplier: Supplier, *, access_token: str) -> Supplier:
        """Create a supplier and bind it to the supplier-facing message sender."""

        xp = {"NotificationRcpts": [], **supplier.xp}
        draft = supplier.model_copy(update={"id": supplier.id or "{" + SUPPLIER_INCREMENTOR + "}", "xp": xp})
        created = await self._platform.create_supplier(draft, access_token=access_token)
        if not created.id:
            raise RemoteOperationError(f"Platform did not return an ID for supplier {supplier.name!r}")

        await self._platform.save_message_sender_assignment(
            MessageSenderAssignment(message_sender_id=SUPPLIER_EMAILS_SENDER, supplier_id=created.id),
            access_token=access_token,
        )

        logger.info("Created supplier %r (id=%s)", created.name, created.id)
        return created
