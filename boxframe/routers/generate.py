"""Generate endpoints: parameter check and part generation to STEP/STL."""
import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..params import FrameConfig, load_config
from ..services.generation import generate_and_export
from ..validation import check_config

router = APIRouter()
log = logging.getLogger(__name__)


class GenerateRequest(BaseModel):
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Frame parameters by name or short alias; legacy print_* flags accepted",
    )
    screw: str | None = Field(default=None, description="Screw size from the screw table")


class Derived(BaseModel):
    outer_size: list[float]
    corner_radius: float


class CheckResponse(BaseModel):
    config: dict
    derived: Derived
    findings: list[dict]


class GenerateResponse(BaseModel):
    success: bool
    part: str
    step_base64: str | None = None
    stl_base64: str | None = None
    filename: str | None = None
    metrics: dict | None = None
    findings: list[dict] = []
    error: str | None = None


def _config_from(req: GenerateRequest) -> FrameConfig:
    overrides = dict(req.params)
    if req.screw is not None:
        overrides["screw"] = req.screw
    try:
        return load_config(overrides=overrides)
    except ValueError as e:  # ValidationError and ConfigError
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/api/check", response_model=CheckResponse)
async def check(req: GenerateRequest):
    config = _config_from(req)
    return CheckResponse(
        config=config.model_dump(mode="json"),
        derived=Derived(
            outer_size=list(config.outer_size),
            corner_radius=config.corner_radius,
        ),
        findings=[f.to_dict() for f in check_config(config)],
    )


@router.post("/api/generate", response_model=GenerateResponse)
async def generate(req: GenerateRequest):
    config = _config_from(req)
    part = config.part.value
    log.info("Generating %s (r=%.2f mm)", part, config.corner_radius)

    result = await generate_and_export(config)
    if not result["success"]:
        log.info("Generation of %s failed: %s", part, (result["error"] or "")[:80])
        return GenerateResponse(
            success=False,
            part=part,
            metrics=result["metrics"],
            findings=result["findings"],
            error=result["error"],
        )

    return GenerateResponse(
        success=True,
        part=part,
        step_base64=result["step_base64"],
        stl_base64=result["stl_base64"],
        filename=f"{part}.step",
        metrics=result["metrics"],
        findings=result["findings"],
    )
