"""Health check endpoint."""
import cadquery as cq
from fastapi import APIRouter

from .. import __version__

router = APIRouter()


@router.get("/api/health")
async def health():
    # Kernel round-trip: a solid that cannot be built means a broken OCC install
    try:
        cq_ok = cq.Workplane("XY").box(1, 1, 1).val().isValid()
    except Exception:
        cq_ok = False
    return {"status": "ok", "cadquery": cq_ok, "version": __version__}
