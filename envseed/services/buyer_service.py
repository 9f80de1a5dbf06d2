from __future__ import annotations

import logging

from envseed.models.platform import Buyer, MessageSenderAssignment, SecurityProfileAssignment
from envseed.services.platform_service import PlatformService, RemoteOperationError
from envseed.services.setup.seed_catalog import BASE_BUYER_ROLE, BUYER_EMAILS_SENDER, BUYER_INCREMENTOR


logger = logging.getLogger(__name__)


class BuyerService:
    """Creates buyer organizations with the access every buyer needs to check out.

    A buyer without a caller-supplied ID draws one from the buyer incrementor, so the
    incrementor must exist before the first buyer is created. The buyer-facing message
    sender must exist too: each new buyer is bound to it here.
    """

    def __init__(self, platform: PlatformService) -> None:
        self._platform = platform

    async def create(self, buyer: Buyer, *, access_token: str, markup_percent: float = 0.0) -> Buyer:
        draft = buyer.model_copy(
            update={
                "id": buyer.id or "{" + BUYER_INCREMENTOR + "}",
                "xp": {**buyer.xp, "MarkupPercent": markup_percent},
            }
        )
        created = await self._platform.create_buyer(draft, access_token=access_token)
        if not created.id:
            raise RemoteOperationError(f"Platform did not return an ID for buyer {buyer.name!r}")

        await self._platform.save_security_profile_assignment(
            SecurityProfileAssignment(security_profile_id=BASE_BUYER_ROLE, buyer_id=created.id),
            access_token=access_token,
        )
        await self._platform.save_message_sender_assignment(
            MessageSenderAssignment(message_sender_id=BUYER_EMAILS_SENDER, buyer_id=created.id),
            access_token=access_token,
        )

        logger.info("Created buyer %r (id=%s, markup=%s%%)", created.name, created.id, markup_percent)
        return created
