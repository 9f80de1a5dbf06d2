from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal


class PlatformModel(BaseModel):
    """Base for commerce platform resources.

    The platform speaks PascalCase JSON (`AppName`, `AccessTokenDuration`); identifier
    fields keep the platform's upper-case `ID` suffix via explicit aliases. Unknown fields
    returned by the platform are preserved.
    """

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, extra="allow")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ListMeta(PlatformModel):
    page: int = 1
    page_size: int = 20
    total_count: int = 0
    total_pages: int = 1


class ApiClient(PlatformModel):
    id: Optional[str] = Field(default=None, alias="ID")
    app_name: str
    active: bool = True
    allow_any_buyer: bool = False
    allow_any_supplier: bool = False
    allow_seller: bool = False
    access_token_duration: int = 600
    refresh_token_duration: int = 0
    default_context_user_name: Optional[str] = None
    client_secret: Optional[str] = None
    order_checkout_integration_event_id: Optional[str] = Field(default=None, alias="OrderCheckoutIntegrationEventID")


class AdminUser(PlatformModel):
    id: Optional[str] = Field(default=None, alias="ID")
    username: str
    password: Optional[str] = None
    email: Optional[str] = None
    active: bool = True
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class SecurityProfile(PlatformModel):
    id: str = Field(alias="ID")
    name: str
    roles: list[str] = Field(default_factory=list)
    custom_roles: list[str] = Field(default_factory=list)


class SecurityProfileAssignment(PlatformModel):
    """Binds a profile to the organization (no scope IDs), a buyer, a supplier or a user."""

    security_profile_id: str = Field(alias="SecurityProfileID")
    buyer_id: Optional[str] = Field(default=None, alias="BuyerID")
    supplier_id: Optional[str] = Field(default=None, alias="SupplierID")
    user_id: Optional[str] = Field(default=None, alias="UserID")


class Incrementor(PlatformModel):
    id: str = Field(alias="ID")
    name: str
    last_number: int = 0
    left_padding_count: int = 0


class MessageSender(PlatformModel):
    id: str = Field(alias="ID")
    name: str
    message_types: list[str] = Field(default_factory=list)
    url: Optional[str] = Field(default=None, alias="URL")
    shared_key: Optional[str] = None


class MessageSenderAssignment(PlatformModel):
    message_sender_id: str = Field(alias="MessageSenderID")
    buyer_id: Optional[str] = Field(default=None, alias="BuyerID")
    supplier_id: Optional[str] = Field(default=None, alias="SupplierID")


class IntegrationEvent(PlatformModel):
    id: str = Field(alias="ID")
    name: Optional[str] = None
    event_type: Optional[str] = None
    custom_implementation_url: Optional[str] = None
    hash_key: Optional[str] = None
    elevated_roles: list[str] = Field(default_factory=list)
    config_data: Optional[dict[str, Any]] = None


class XpIndex(PlatformModel):
    thing_type: str
    key: str


class Buyer(PlatformModel):
    id: Optional[str] = Field(default=None, alias="ID")
    name: str
    active: bool = True
    xp: dict[str, Any] = Field(default_factory=dict, alias="xp")


class Supplier(PlatformModel):
    id: Optional[str] = Field(default=None, alias="ID")
    name: str
    active: bool = True
    xp: dict[str, Any] = Field(default_factory=dict, alias="xp")


class Organization(PlatformModel):
    """Portal view of an organization (the portal uses `Id`, not `ID`)."""

    id: Optional[str] = None
    name: Optional[str] = None
