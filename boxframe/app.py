"""FastAPI entry point: CORS and routers."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import CORS_ORIGINS, LOG_LEVEL
from .routers import generate, health, parts

# Configure logging so app-level logs appear in uvicorn output
logging.basicConfig(level=LOG_LEVEL, format="%(name)s %(levelname)s: %(message)s")

app = FastAPI(title="boxframe", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(parts.router)
app.include_router(generate.router)
