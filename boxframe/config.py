"""Configuration: environment variables and path resolution."""
import os
from pathlib import Path

# Paths
OUT_DIR = Path(os.environ.get("BOXFRAME_OUT_DIR", Path.cwd() / "out"))

# Generation
EXEC_TIMEOUT = int(os.environ.get("EXEC_TIMEOUT", "120"))  # [s]
STL_TOLERANCE = float(os.environ.get("STL_TOLERANCE", "0.05"))  # [mm] linear deflection

# Logging
LOG_LEVEL = os.environ.get("BOXFRAME_LOG_LEVEL", "INFO").upper()

# Server
HOST = os.environ.get("HOST", "127.0.0.1")
PORT = int(os.environ.get("PORT", "8420"))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "CORS_ORIGINS", "http://localhost:3000,http://localhost:8420"
    ).split(",")
    if origin.strip()
]
