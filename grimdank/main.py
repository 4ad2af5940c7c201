from __future__ import annotations

import logging

from fastapi import FastAPI

from .config import DEBUG, LOG_LEVEL
from .db import init_db
from .routers import points

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(debug=DEBUG, title="Grimdank points")


@app.on_event("startup")
def startup_event() -> None:
    init_db()
    logger.info("Application started")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(points.router)
