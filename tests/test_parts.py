"""Tests for part extraction and print placement."""

import cadquery as cq
import pytest

from boxframe.frame import CutKind, build_frame
from boxframe.metrics import measure
from boxframe.params import FrameConfig, Part
from boxframe.parts import (
    EXPECTED_SOLIDS,
    GenerationError,
    extract_part,
    generate,
    region_cuts,
)


@pytest.fixture(scope="module")
def built(small_config: FrameConfig) -> dict:
    """Every part of the small frame, keyed by Part."""
    return {part: generate(small_config.with_part(part)) for part in Part}


# Outer size 40 x 50 x 40, t = 10, lt = 0.2
PRINT_SIZES = {
    Part.FRAME: (40, 50, 40),
    Part.FRONT: (40, 10, 40),
    Part.BACK: (40, 10, 40),
    Part.SHELL: (40, 30, 40),
    Part.TOP: (40, 30, 10),
    Part.BOTTOM: (40, 30, 10),
    Part.WIDTH_RAIL: (19.6, 10, 10),
    Part.LENGTH_RAIL: (10, 30, 10),
    Part.HEIGHT_RAIL: (39.6, 10, 10),
}


class TestRegions:
    """Region cut lists."""

    def test_frame_keeps_everything(self, small_config: FrameConfig) -> None:
        assert region_cuts(Part.FRAME, small_config) == []

    @pytest.mark.parametrize("part", [p for p in Part if p is not Part.FRAME])
    def test_regions_are_region_cuts(self, part: Part, small_config: FrameConfig) -> None:
        cuts = region_cuts(part, small_config)
        assert cuts
        assert all(c.kind is CutKind.REGION for c in cuts)

    def test_width_rail_trimmed_by_tolerance(self, small_config: FrameConfig) -> None:
        cuts = {c.name: c for c in region_cuts(Part.WIDTH_RAIL, small_config)}
        assert cuts["left_trim"].hi[0] == pytest.approx(10.2)
        assert cuts["right_trim"].lo[0] == pytest.approx(29.8)

    def test_width_rail_drops_lower_head_blocks(self, small_config: FrameConfig) -> None:
        cuts = {c.name: c for c in region_cuts(Part.WIDTH_RAIL, small_config)}
        assert cuts["left_head_block"].hi[0] == pytest.approx(10)
        assert cuts["right_head_block"].lo[0] == pytest.approx(30)
        assert cuts["above_bottom_rails"].lo[2] == pytest.approx(10)

    def test_height_rail_trimmed_at_both_ends(self, small_config: FrameConfig) -> None:
        cuts = {c.name: c for c in region_cuts(Part.HEIGHT_RAIL, small_config)}
        assert cuts["bottom_trim"].hi[2] == pytest.approx(0.2)
        assert cuts["top_trim"].lo[2] == pytest.approx(39.8)


class TestExtractedParts:
    """Parts built by the kernel, in print position."""

    @pytest.mark.parametrize("part", list(Part))
    def test_print_size(self, built: dict, part: Part) -> None:
        assert measure(built[part])["size"] == pytest.approx(PRINT_SIZES[part], abs=1e-3)

    @pytest.mark.parametrize("part", list(Part))
    def test_solid_count(self, built: dict, part: Part) -> None:
        assert measure(built[part])["solid_count"] == EXPECTED_SOLIDS[part]

    @pytest.mark.parametrize(
        "part", [Part.TOP, Part.BOTTOM, Part.LENGTH_RAIL, Part.WIDTH_RAIL, Part.HEIGHT_RAIL]
    )
    def test_on_build_plate(self, built: dict, part: Part) -> None:
        assert measure(built[part])["bounding_box"]["min"][2] == pytest.approx(0, abs=1e-3)

    def test_rails_start_at_origin(self, built: dict) -> None:
        assert measure(built[Part.HEIGHT_RAIL])["bounding_box"]["min"] == pytest.approx(
            [0, 0, 0], abs=1e-3
        )
        assert measure(built[Part.WIDTH_RAIL])["bounding_box"]["min"][0] == pytest.approx(
            0, abs=1e-3
        )

    def test_slices_add_up_to_frame(self, built: dict) -> None:
        total = sum(measure(built[p])["volume"] for p in (Part.FRONT, Part.BACK, Part.SHELL))
        assert total == pytest.approx(measure(built[Part.FRAME])["volume"], rel=1e-4)

    def test_top_and_bottom_are_mirror_images(self, built: dict) -> None:
        assert measure(built[Part.TOP])["volume"] == pytest.approx(
            measure(built[Part.BOTTOM])["volume"], rel=1e-6
        )

    def test_back_turned_to_face_the_plate(self, built: dict, small_config: FrameConfig) -> None:
        W, L, _ = small_config.outer_size
        back = built[Part.BACK]
        assert measure(back)["bounding_box"]["min"][1] == pytest.approx(0, abs=1e-3)

        # Turning it back puts the ring at the far end of the frame
        restored = back.rotate((W / 2, L / 2, 0), (W / 2, L / 2, 1), 180)
        bb = measure(restored)["bounding_box"]
        assert (bb["min"][1], bb["max"][1]) == pytest.approx((L - 10, L), abs=1e-3)

    def test_back_matches_front(self, built: dict) -> None:
        front, back = measure(built[Part.FRONT]), measure(built[Part.BACK])
        assert back["volume"] == pytest.approx(front["volume"], rel=1e-6)
        assert back["bounding_box"]["min"] == pytest.approx(front["bounding_box"]["min"], abs=1e-3)
        assert back["bounding_box"]["max"] == pytest.approx(front["bounding_box"]["max"], abs=1e-3)

    def test_extract_accepts_part_name(self, small_config: FrameConfig, built: dict) -> None:
        front = extract_part("front", small_config)
        assert measure(front)["volume"] == pytest.approx(measure(built[Part.FRONT])["volume"])


class TestGenerate:
    """generate() hooks and failures."""

    def test_custom_add(self, small_config: FrameConfig) -> None:
        def standoff(config: FrameConfig) -> cq.Workplane:
            return cq.Workplane("XY").box(4, 4, 6, centered=False).translate((18, 3, -5))

        solid = generate(small_config.with_part(Part.FRONT), custom_add=standoff)
        metrics = measure(solid)
        assert metrics["bounding_box"]["min"][2] == pytest.approx(-5)
        assert metrics["solid_count"] == 1

    def test_custom_remove(self, small_config: FrameConfig, built: dict) -> None:
        def tie_hole(config: FrameConfig) -> cq.Workplane:
            return cq.Workplane("XY").box(2, 2, 50, centered=False).translate((19, 4, -1))

        solid = generate(small_config.with_part(Part.FRONT), custom_remove=tie_hole)
        assert measure(solid)["volume"] < measure(built[Part.FRONT])["volume"]

    def test_nothing_left(self, small_config: FrameConfig) -> None:
        def everything(config: FrameConfig) -> cq.Workplane:
            return cq.Workplane("XY").box(200, 200, 200)

        with pytest.raises(GenerationError, match="no solid"):
            generate(small_config.with_part(Part.FRONT), custom_remove=everything)

    def test_findings_are_logged(self, caplog) -> None:
        config = FrameConfig(w=20, l=30, h=20, gd=4.5, gde=0.5, part="height_rail")
        with caplog.at_level("WARNING", logger="boxframe.parts"):
            generate(config)
        assert "groove_screw_interference" in caplog.text

    def test_frame_part_is_the_frame(self, small_config: FrameConfig, built: dict) -> None:
        frame = build_frame(small_config)
        assert measure(built[Part.FRAME]) == measure(frame)
