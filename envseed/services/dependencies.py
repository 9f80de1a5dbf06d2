from __future__ import annotations

import aiohttp
from fastapi import FastAPI, Request

from envseed.services.setup.environment_seed_service import EnvironmentSeedService


def get_http_session_from_app(app: FastAPI) -> aiohttp.ClientSession:
    session = getattr(app.state, "http_session", None)
    if session is None:
        raise RuntimeError("HTTP session not initialized (app.state.http_session)")
    if not isinstance(session, aiohttp.ClientSession):
        raise RuntimeError("Unexpected http_session type")
    return session


def get_http_session(request: Request) -> aiohttp.ClientSession:
    return get_http_session_from_app(request.app)


def get_environment_seed_service(request: Request) -> EnvironmentSeedService:
    """Dependency provider for the environment seed orchestrator.

    Platform, portal and exchange-rate clients share the app-wide HTTP session; blob
    storage goes through aioboto3 sessions of its own.
    """

    return EnvironmentSeedService.from_env(session=get_http_session(request))
