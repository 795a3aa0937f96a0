"""Tests for frame parameters, part selection and config loading."""

import json

import pytest
from pydantic import ValidationError

from boxframe.params import (
    PART_FLAGS,
    ConfigError,
    FrameConfig,
    Part,
    RadiusPolicy,
    load_config,
    parse_overrides,
)


class TestFrameConfig:
    """FrameConfig construction and derived values."""

    def test_defaults(self, default_config: FrameConfig) -> None:
        assert default_config.outer_size == (95.0, 140.0, 70.0)
        assert default_config.corner_radius == pytest.approx(1.6)
        assert default_config.part is Part.FRAME
        assert default_config.panel is True

    def test_short_names_and_field_names(self) -> None:
        assert FrameConfig(w=80).width == 80
        assert FrameConfig(width=80).width == 80
        assert FrameConfig(gde=0.3).groove_depth_extra == 0.3

    def test_frozen(self, default_config: FrameConfig) -> None:
        with pytest.raises(ValidationError):
            default_config.width = 10

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FrameConfig(depth=10)

    def test_non_positive_dimension_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FrameConfig(w=0)
        with pytest.raises(ValidationError):
            FrameConfig(t=-1)

    def test_string_values_coerced(self) -> None:
        config = FrameConfig(w="90", panel="false", rres="48")
        assert config.width == 90.0
        assert config.panel is False
        assert config.rounding_resolution == 48

    def test_derived_reaches(self, default_config: FrameConfig) -> None:
        assert default_config.groove_reach == pytest.approx(2.5)
        assert default_config.screw_reach == pytest.approx(19.0)

    def test_with_part(self, default_config: FrameConfig) -> None:
        top = default_config.with_part("top")
        assert top.part is Part.TOP
        assert default_config.part is Part.FRAME
        assert top.width == default_config.width


class TestRadiusPolicy:
    """Corner radius derivation and its bounds."""

    @pytest.mark.parametrize(
        "policy, expected",
        [
            (RadiusPolicy.SCREW, (10 - 6.4 - 0.4) / 2),
            (RadiusPolicy.INNER_PANEL_EDGE, 10 - (2.5 + 3.0 + 0.2)),
            (RadiusPolicy.OUTER_PANEL_EDGE, 2.5 - 0.2),
        ],
    )
    def test_policies(self, policy: RadiusPolicy, expected: float) -> None:
        config = FrameConfig(radius_policy=policy, go=2.5)
        assert config.corner_radius == pytest.approx(expected)

    def test_fixed(self) -> None:
        config = FrameConfig(radius_policy="fixed", r=2.0)
        assert config.corner_radius == 2.0

    def test_fixed_zero_is_sharp(self) -> None:
        assert FrameConfig(radius_policy="fixed", r=0).corner_radius == 0

    def test_fixed_needs_radius(self) -> None:
        with pytest.raises(ValidationError, match="needs a radius"):
            FrameConfig(radius_policy="fixed")

    def test_radius_below_half_thickness(self) -> None:
        FrameConfig(radius_policy="fixed", r=4.9)
        with pytest.raises(ValidationError, match="half the rail"):
            FrameConfig(radius_policy="fixed", r=5.0)

    @pytest.mark.parametrize("key", ["r", "radius"])
    def test_radius_alone_is_fixed(self, key: str) -> None:
        config = FrameConfig(**{key: 2.0})
        assert config.radius_policy is RadiusPolicy.FIXED
        assert config.corner_radius == 2.0

    def test_radius_with_derived_policy_rejected(self) -> None:
        with pytest.raises(ValidationError, match="conflicts with radius policy 'screw'"):
            FrameConfig(r=2.0, radius_policy="screw")

    def test_radius_override_from_strings(self) -> None:
        config = load_config(overrides={"r": "2"})
        assert config.radius_policy is RadiusPolicy.FIXED
        assert config.corner_radius == 2.0

    def test_radius_none_keeps_policy(self) -> None:
        assert FrameConfig(r=None).radius_policy is RadiusPolicy.SCREW

    def test_negative_derived_radius(self) -> None:
        # Head wider than the rail leaves no room for rounding
        with pytest.raises(ValidationError, match="negative"):
            FrameConfig(shd=10)


class TestPartFlags:
    """Legacy print_* flag surface."""

    @pytest.mark.parametrize("flag, part", sorted(PART_FLAGS.items()))
    def test_single_flag(self, flag: str, part: Part) -> None:
        assert FrameConfig.from_flags(**{flag: True}).part is part

    def test_no_flag_is_frame(self) -> None:
        assert FrameConfig.from_flags(w=80).part is Part.FRAME

    def test_false_flags_ignored(self) -> None:
        config = FrameConfig.from_flags(print_top="false", print_back=0, print_front="1")
        assert config.part is Part.FRONT

    def test_two_flags_rejected(self) -> None:
        with pytest.raises(ConfigError, match="Only one part"):
            FrameConfig.from_flags(print_top=True, print_bottom=True)

    def test_flag_conflicts_with_part(self) -> None:
        with pytest.raises(ConfigError, match="conflicts"):
            FrameConfig.from_flags(print_top=True, part="front")

    def test_flag_agrees_with_part(self) -> None:
        assert FrameConfig.from_flags(print_top=True, part="top").part is Part.TOP

    def test_unknown_flag(self) -> None:
        with pytest.raises(ConfigError, match="Unknown part flag"):
            FrameConfig.from_flags(print_lid=True)


class TestScrews:
    """Screw table lookup."""

    def test_m4(self) -> None:
        config = FrameConfig.for_screw("M4")
        assert config.head_diameter == 8.0
        assert config.thread_diameter == 3.4
        assert config.corner_radius == pytest.approx(0.8)

    def test_explicit_values_win(self) -> None:
        config = FrameConfig.for_screw("M3", shh=2.5)
        assert config.head_height == 2.5

    def test_unknown_size(self) -> None:
        with pytest.raises(ConfigError, match="Unknown screw size"):
            FrameConfig.for_screw("M5")


class TestLoading:
    """Parameter files and command line overrides."""

    def test_parse_overrides(self) -> None:
        assert parse_overrides(["w=90", " part = top "]) == {"w": "90", "part": "top"}

    @pytest.mark.parametrize("pair", ["w", "=3", " =3"])
    def test_parse_overrides_malformed(self, pair: str) -> None:
        with pytest.raises(ConfigError):
            parse_overrides([pair])

    def test_load_defaults(self) -> None:
        assert load_config() == FrameConfig()

    def test_load_file_with_overrides(self, tmp_path) -> None:
        path = tmp_path / "frame.json"
        path.write_text(json.dumps({"w": 90, "screw": "M2", "print_top": True}))

        config = load_config(path, {"h": "40"})

        assert config.width == 90
        assert config.height == 40
        assert config.head_diameter == 4.0
        assert config.part is Part.TOP

    def test_load_rejects_non_object(self, tmp_path) -> None:
        path = tmp_path / "frame.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError, match="JSON object"):
            load_config(path)
