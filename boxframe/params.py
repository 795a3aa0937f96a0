"""Frame parameters: immutable configuration, part selector and radius policies.

All lengths are in millimetres. Every field accepts its short name
(``w``, ``shd``, ``gde`` ...) as an alias so parameter files written against
the short names keep working.
"""
from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# === CONSTANTS ===
SCREW_WALL_MARGIN = 0.2  # [mm] material kept between head recess and rounding


class ConfigError(ValueError):
    """Parameters that cannot be turned into exactly one part."""


class Part(str, Enum):
    FRAME = "frame"
    FRONT = "front"
    BACK = "back"
    SHELL = "shell"
    TOP = "top"
    BOTTOM = "bottom"
    WIDTH_RAIL = "width_rail"
    LENGTH_RAIL = "length_rail"
    HEIGHT_RAIL = "height_rail"


class RadiusPolicy(str, Enum):
    """How the corner radius is derived from the other parameters."""

    SCREW = "screw"
    INNER_PANEL_EDGE = "inner_panel_edge"
    OUTER_PANEL_EDGE = "outer_panel_edge"
    FIXED = "fixed"


# Legacy one-flag-per-part surface
PART_FLAGS = {
    "print_preview": Part.FRAME,
    "print_front": Part.FRONT,
    "print_back": Part.BACK,
    "print_shell": Part.SHELL,
    "print_top": Part.TOP,
    "print_bottom": Part.BOTTOM,
    "print_width_rail": Part.WIDTH_RAIL,
    "print_length_rail": Part.LENGTH_RAIL,
    "print_height_rail": Part.HEIGHT_RAIL,
}

# === SCREW TABLE ===
# name: (head_diameter, head_height, shank_diameter, thread_diameter) [mm]
SCREW_TABLE = {
    "M2":   (4.0, 2.0, 2.4, 1.7),
    "M2.5": (5.0, 2.5, 2.9, 2.1),
    "M3":   (6.4, 3.0, 3.4, 2.6),
    "M4":   (8.0, 4.0, 4.5, 3.4),
}


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


class FrameConfig(BaseModel):
    """Immutable parameter set for one generation run."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    # Interior
    width: float = Field(75.0, gt=0, alias="w")        # [mm] X
    length: float = Field(120.0, gt=0, alias="l")      # [mm] Y, screw axis
    height: float = Field(50.0, gt=0, alias="h")       # [mm] Z
    thickness: float = Field(10.0, gt=0, alias="t")    # [mm] rail cross-section side

    # Screws
    head_diameter: float = Field(6.4, gt=0, alias="shd")    # [mm]
    head_height: float = Field(3.0, gt=0, alias="shh")      # [mm]
    shank_diameter: float = Field(3.4, gt=0, alias="ssd")   # [mm] clearance bore
    thread_diameter: float = Field(2.6, gt=0, alias="std")  # [mm] engagement bore
    thread_length: float = Field(16.0, gt=0, alias="stl")   # [mm] length under the head
    shank_recess: float = Field(0.5, ge=0, alias="sr")      # [mm] clearance bore into the mating rail

    # Tolerances
    tolerance: float = Field(0.2, ge=0, alias="lt")  # [mm] trim at rail joints

    # Panel grooves
    groove_width: float = Field(3.0, gt=0, alias="gw")          # [mm] panel thickness
    groove_depth: float = Field(2.0, gt=0, alias="gd")          # [mm]
    groove_offset: float = Field(3.5, ge=0, alias="go")         # [mm] from the outer face
    groove_width_extra: float = Field(0.2, ge=0, alias="gwe")   # [mm] each side
    groove_depth_extra: float = Field(0.5, ge=0, alias="gde")   # [mm]
    panel: bool = True

    # Rounding
    radius_policy: RadiusPolicy = RadiusPolicy.SCREW
    radius: float | None = Field(None, ge=0, alias="r")          # [mm] fixed policy only
    rounding_resolution: int = Field(24, ge=3, alias="rres")
    screw_resolution: int = Field(32, ge=3, alias="sres")

    part: Part = Part.FRAME

    @model_validator(mode="before")
    @classmethod
    def _radius_override(cls, data: Any) -> Any:
        # An explicit radius without a policy overrides the derived one
        if isinstance(data, dict) and "radius_policy" not in data:
            if data.get("r", data.get("radius")) is not None:
                data = {**data, "radius_policy": RadiusPolicy.FIXED}
        return data

    @model_validator(mode="after")
    def _check_radius(self) -> "FrameConfig":
        if self.radius_policy is RadiusPolicy.FIXED and self.radius is None:
            raise ValueError("radius policy 'fixed' needs a radius")
        if self.radius_policy is not RadiusPolicy.FIXED and self.radius is not None:
            raise ValueError(
                f"radius {self.radius} mm conflicts with radius policy "
                f"'{self.radius_policy.value}'; use policy 'fixed' or drop the radius"
            )
        r = self.corner_radius
        if r < 0:
            raise ValueError(
                f"corner radius {r:.3f} mm from policy '{self.radius_policy.value}' "
                "is negative"
            )
        if r >= self.thickness / 2:
            raise ValueError(
                f"corner radius {r:.3f} mm must stay below half the rail "
                f"thickness ({self.thickness / 2:.3f} mm)"
            )
        return self

    # === DERIVED PARAMETERS ===

    @property
    def outer_size(self) -> tuple[float, float, float]:
        t2 = 2 * self.thickness
        return (self.width + t2, self.length + t2, self.height + t2)

    @property
    def corner_radius(self) -> float:
        t = self.thickness
        policy = self.radius_policy
        if policy is RadiusPolicy.SCREW:
            return (t - self.head_diameter - 2 * SCREW_WALL_MARGIN) / 2
        if policy is RadiusPolicy.INNER_PANEL_EDGE:
            return t - (self.groove_offset + self.groove_width + self.groove_width_extra)
        if policy is RadiusPolicy.OUTER_PANEL_EDGE:
            return self.groove_offset - self.groove_width_extra
        return self.radius

    @property
    def groove_reach(self) -> float:
        """Depth the groove goes into the rail, tolerance included."""
        return self.groove_depth + self.groove_depth_extra

    @property
    def screw_reach(self) -> float:
        """Distance from the outer face to the screw tip."""
        return self.thread_length + self.head_height

    # === CONSTRUCTORS ===

    @classmethod
    def _by_field_name(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Rewrite short names to field names so later keys override earlier ones."""
        aliases = {f.alias: name for name, f in cls.model_fields.items() if f.alias}
        return {aliases.get(k, k): v for k, v in values.items()}

    @classmethod
    def from_flags(cls, **values: Any) -> "FrameConfig":
        """Build a config from the legacy ``print_*`` flag surface.

        At most one flag may be true; none selects the full frame preview.
        """
        values = cls._by_field_name(values)
        selected = []
        for key in [k for k in values if k.startswith("print_")]:
            if key not in PART_FLAGS:
                raise ConfigError(f"Unknown part flag: {key}")
            if _truthy(values.pop(key)):
                selected.append(key)

        if len(selected) > 1:
            raise ConfigError(
                "Only one part can be printed at a time, got: " + ", ".join(selected)
            )
        if selected:
            flagged = PART_FLAGS[selected[0]]
            if "part" in values and Part(values["part"]) is not flagged:
                raise ConfigError(
                    f"part={Part(values['part']).value} conflicts with {selected[0]}"
                )
            values["part"] = flagged
        return cls(**values)

    @classmethod
    def for_screw(cls, size: str, **values: Any) -> "FrameConfig":
        """Config with the screw geometry of a standard metric size."""
        try:
            shd, shh, ssd, std = SCREW_TABLE[size]
        except KeyError:
            raise ConfigError(
                f"Unknown screw size {size!r}, expected one of {sorted(SCREW_TABLE)}"
            ) from None
        screw = {
            "head_diameter": shd,
            "head_height": shh,
            "shank_diameter": ssd,
            "thread_diameter": std,
        }
        return cls.from_flags(**{**screw, **cls._by_field_name(values)})

    def with_part(self, part: Part | str) -> "FrameConfig":
        return self.model_copy(update={"part": Part(part)})


def parse_overrides(pairs: list[str]) -> dict[str, str]:
    """Parse ``key=value`` strings; values are coerced later by the model."""
    overrides = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ConfigError(f"Expected key=value, got {pair!r}")
        overrides[key.strip()] = value.strip()
    return overrides


def load_config(path: Path | str | None = None, overrides: dict | None = None) -> FrameConfig:
    """Load a JSON parameter file, apply overrides and build the config."""
    data: dict[str, Any] = {}
    if path is not None:
        data = json.loads(Path(path).read_text())
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a JSON object of parameters")
    values = {**data, **(overrides or {})}
    screw = values.pop("screw", None)
    if screw is not None:
        return FrameConfig.for_screw(screw, **values)
    return FrameConfig.from_flags(**values)
