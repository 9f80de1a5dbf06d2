from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal

from envseed.models.platform import Buyer, Supplier


class EnvironmentSeed(BaseModel):
    """Request body for seeding an organization.

    Field names follow the platform's PascalCase convention so the same payload works
    against the legacy seeding endpoint.
    """

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    portal_username: str
    portal_password: str
    seller_org_id: str = Field(alias="SellerOrgID")
    initial_admin_username: str
    initial_admin_password: str
    buyers: list[Buyer] = Field(default_factory=list)
    suppliers: list[Supplier] = Field(default_factory=list)


class ApiClientCredentials(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(alias="ClientID")
    client_secret: Optional[str] = Field(default=None, alias="ClientSecret")


class EnvironmentSeedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    comments: str = Field(alias="Comments")
    api_clients: dict[str, ApiClientCredentials] = Field(alias="ApiClients")


class PostStagingRestoreResponse(BaseModel):
    detail: str


class DeleteMessageSendersResponse(BaseModel):
    deleted: int
