import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI, Request

from . import __version__
from .api import analytics_router, auth_router, register_exception_handlers
from .settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    db = getattr(app.state, "db", None)
    if db is not None:
        await db.close()


app = FastAPI(title="Slingshot API", version=__version__, lifespan=lifespan)

register_exception_handlers(app)

# Include routers
app.include_router(auth_router)
app.include_router(analytics_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Tag each request with a short id for log correlation."""
    request_id = uuid.uuid4().hex[:6]
    request.state.request_id = request_id
    logger.info(f"[{request_id}] {request.method} {request.url.path}")
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.get("/health")
async def health():
    """Liveness check."""
    return {"status": "OK", "timestamp": datetime.now(UTC).isoformat()}


def main():
    """Main entry point for the web server."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Starting Slingshot API")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
