"""
Compression Relay Server

Run with:
    cd backend
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from compression_relay import relay, router as relay_router
from compression_relay.config import SERVICE_VERSION

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"[Server] Compression relay starting (transcoder: {relay.transcoder.name})")
    yield
    await relay.close()


app = FastAPI(
    title="Compression Relay",
    description="Serves remote images re-encoded as small WebP, or redirects to the original.",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)
app.include_router(relay_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )
