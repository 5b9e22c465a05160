from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CONFIG
from .db import initialize_db
from .routes import babies as babies_routes
from .routes import insights as insights_routes
from .routes import logs as logs_routes
from .routes import voice as voice_routes

logging.basicConfig(level=CONFIG.log_level.upper())
logger = logging.getLogger(__name__)

initialize_db()

app = FastAPI(
    title="BabyLog API",
    version="0.1.0",
    description="Turns spoken baby-care notes into feeding, sleep, diaper, and note logs",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

app.include_router(voice_routes.router)
app.include_router(logs_routes.router)
app.include_router(babies_routes.router)
app.include_router(insights_routes.router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
