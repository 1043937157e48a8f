"""FastAPI application entry point for the meeting governance engine."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI

from src.api.dependencies.governance import get_proxy_expiry_worker
from src.api.middleware import LoggingMiddleware
from src.api.routes.health import router as health_router
from src.api.routes.meetings import router as meetings_router
from src.api.routes.meetings import workflow_router
from src.api.routes.proxies import grant_router as proxy_grant_router
from src.api.routes.proxies import router as proxies_router
from src.api.routes.resolutions import resolution_router
from src.api.routes.resolutions import router as resolutions_router
from src.api.routes.roles import router as roles_router
from src.api.routes.voting import router as voting_router
from src.api.startup import configure_logging, validate_governance_config_at_startup


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    configure_logging()
    validate_governance_config_at_startup()
    worker = get_proxy_expiry_worker()
    await worker.start()
    yield
    await worker.stop()


app = FastAPI(
    title="Meeting Governance Engine",
    description="Meeting workflow, proxy delegation and weighted voting",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)

app.include_router(health_router)
app.include_router(meetings_router)
app.include_router(workflow_router)
app.include_router(roles_router)
app.include_router(proxies_router)
app.include_router(proxy_grant_router)
app.include_router(resolutions_router)
app.include_router(resolution_router)
app.include_router(voting_router)


def serve() -> None:
    """Run the API with uvicorn. Host and port come from API_HOST and API_PORT."""
    uvicorn.run(
        "src.api.main:app",
        host=os.getenv("API_HOST", "127.0.0.1"),
        port=int(os.getenv("API_PORT", "8000")),
    )


if __name__ == "__main__":
    serve()
