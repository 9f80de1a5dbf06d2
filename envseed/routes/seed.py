from __future__ import annotations

from fastapi import APIRouter, Depends

from envseed.models.seed import (
    DeleteMessageSendersResponse,
    EnvironmentSeed,
    EnvironmentSeedResponse,
    PostStagingRestoreResponse,
)
from envseed.services.dependencies import get_environment_seed_service
from envseed.services.setup.environment_seed_service import EnvironmentSeedService

router = APIRouter(prefix="/seed", tags=["seed"])


@router.post("", response_model=EnvironmentSeedResponse, response_model_exclude_none=True)
async def seed_environment(
    payload: EnvironmentSeed,
    svc: EnvironmentSeedService = Depends(get_environment_seed_service),
) -> EnvironmentSeedResponse:
    return await svc.seed(payload)


@router.post("/post-staging-restore", response_model=PostStagingRestoreResponse)
async def post_staging_restore(
    svc: EnvironmentSeedService = Depends(get_environment_seed_service),
) -> PostStagingRestoreResponse:
    await svc.post_staging_restore()
    return PostStagingRestoreResponse(detail="Staging environment restored")


@router.post("/delete-message-senders", response_model=DeleteMessageSendersResponse)
async def delete_message_senders(
    svc: EnvironmentSeedService = Depends(get_environment_seed_service),
) -> DeleteMessageSendersResponse:
    deleted = await svc.remove_message_senders()
    return DeleteMessageSendersResponse(deleted=deleted)
