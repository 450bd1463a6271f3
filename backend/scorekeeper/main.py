from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scorekeeper.settings import settings
from scorekeeper.api.routes import router as http_router
from scorekeeper.api.ws import router as ws_router
from scorekeeper.engine.remote import InMemoryRemoteStore

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Shared game records; None means the hub is switched off
    app.state.remote_store = InMemoryRemoteStore() if settings.remote_enabled else None
    logger.info("Game hub %s", "enabled" if settings.remote_enabled else "disabled")

    yield

    app.state.remote_store = None


app = FastAPI(title="Judgement Scorekeeper", debug=settings.debug, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(http_router)
app.include_router(ws_router)
