# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from looptrainer import __version__
from looptrainer.config import get_str_env
from looptrainer.server.session.dependencies import (
    initialise_session_store,
    set_session_store,
)
from looptrainer.server.session.router import router as session_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    session_store = initialise_session_store()
    await session_store.init()
    set_session_store(session_store)
    try:
        yield
    finally:
        await session_store.close()


app = FastAPI(
    title="Loop Trainer API",
    description="Persistence API for video loop practice sessions",
    version=__version__,
    lifespan=lifespan,
)

allowed_origins_str = get_str_env("ALLOWED_ORIGINS", "http://localhost:3000")
allowed_origins = [origin.strip() for origin in allowed_origins_str.split(",") if origin.strip()]

logger.info("Allowed origins: %s", allowed_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(session_router)


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}
