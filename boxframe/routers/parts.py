"""Parts endpoint: selectable parts, radius policies and default parameters."""
from fastapi import APIRouter

from ..params import SCREW_TABLE, FrameConfig, Part, RadiusPolicy
from ..parts import EXPECTED_SOLIDS

router = APIRouter()


@router.get("/api/parts")
async def get_parts():
    return {
        "parts": [
            {"id": part.value, "solids": EXPECTED_SOLIDS[part]} for part in Part
        ],
        "radius_policies": [policy.value for policy in RadiusPolicy],
        "screws": sorted(SCREW_TABLE),
        "defaults": FrameConfig().model_dump(mode="json"),
    }
