from contextlib import asynccontextmanager
import logging

import aiohttp
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status

from envseed.routes.seed import router as seed_router
from envseed.services.batch_runner import BatchOperationError
from envseed.services.exchange_rates_service import ExchangeRatesServiceError
from envseed.services.platform_service import RemoteOperationError
from envseed.services.s3_service import S3ServiceError
from envseed.services.setup.environment_seed_service import (
    ConfigurationError,
    EnvironmentSeedError,
    OrganizationNotFoundError,
)


def _ensure_logging() -> None:
    formatter = logging.Formatter("%(levelname)s: %(message)s")
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    else:
        root.setLevel(logging.INFO)
        for handler in root.handlers:
            handler.setFormatter(formatter)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _ensure_logging()
    app.state.http_session = aiohttp.ClientSession()
    try:
        yield
    finally:
        await app.state.http_session.close()


app = FastAPI(lifespan=lifespan)

app.include_router(seed_router)


def _detail(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    """Missing app settings are a deployment problem, not a caller problem."""
    return _detail(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)


@app.exception_handler(OrganizationNotFoundError)
async def organization_not_found_handler(request: Request, exc: OrganizationNotFoundError) -> JSONResponse:
    return _detail(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(EnvironmentSeedError)
async def environment_seed_error_handler(request: Request, exc: EnvironmentSeedError) -> JSONResponse:
    return _detail(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)


@app.exception_handler(RemoteOperationError)
@app.exception_handler(BatchOperationError)
@app.exception_handler(S3ServiceError)
@app.exception_handler(ExchangeRatesServiceError)
async def upstream_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map failures of the platform, portal, blob storage or rate provider to 502.

    Returns:
        502 Bad Gateway with a JSON body: {"detail": "..."}
    """
    return _detail(status.HTTP_502_BAD_GATEWAY, exc)


@app.get("/")
async def root():
    return {"message": "Hello World! Environment seed service is running."}
