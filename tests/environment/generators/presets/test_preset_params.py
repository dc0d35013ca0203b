"""Tests for preset parameter schemas and resolution."""

from __future__ import annotations

import logging

import pytest

from cryptforge.environment.generators.presets import (
    ParamSpec,
    PresetParameterError,
    resolve_params,
)

SCHEMA = {
    "count": ParamSpec("int", 8, 3, 20),
    "density": ParamSpec("float", 0.3, 0.1, 0.8),
    "has_well": ParamSpec("bool", True),
    "material": ParamSpec("str", "dirt", choices=("dirt", "cobblestone")),
    "tree_types": ParamSpec("list"),
    "center_x": ParamSpec("int"),
}


class TestResolveParams:
    """Tests for resolve_params."""

    def test_defaults(self) -> None:
        """Without overrides every parameter takes its default."""
        resolved = resolve_params(SCHEMA)

        assert resolved == {
            "count": 8,
            "density": 0.3,
            "has_well": True,
            "material": "dirt",
            "tree_types": None,
            "center_x": None,
            "seed": None,
        }

    def test_caller_values_override_defaults(self) -> None:
        """Given values replace defaults."""
        resolved = resolve_params(SCHEMA, {"count": 5, "has_well": False})

        assert resolved["count"] == 5
        assert resolved["has_well"] is False

    def test_none_means_default(self) -> None:
        """An explicit None falls back to the default."""
        assert resolve_params(SCHEMA, {"count": None})["count"] == 8

    def test_camel_case_names(self) -> None:
        """camelCase caller names match snake_case schema names."""
        assert resolve_params(SCHEMA, {"centerX": 12})["center_x"] == 12

    def test_unknown_params_pass_through(self) -> None:
        """Names outside the schema are kept."""
        assert resolve_params(SCHEMA, {"flavor": "spooky"})["flavor"] == "spooky"

    def test_unknown_params_keep_their_names(self) -> None:
        """Undeclared camelCase names are not rewritten."""
        resolved = resolve_params(SCHEMA, {"centerX": 4, "torchColor": "amber"})

        assert resolved["center_x"] == 4
        assert resolved["torchColor"] == "amber"
        assert "torch_color" not in resolved

    def test_explicit_seed_wins(self) -> None:
        """The seed argument overrides a seed in the params."""
        assert resolve_params(SCHEMA, {"seed": 1}, seed=2)["seed"] == 2
        assert resolve_params(SCHEMA, {"seed": 1})["seed"] == 1

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(25, 20), (1, 3), (10.0, 10)],
    )
    def test_int_values_are_coerced_and_clamped(
        self, value: float, expected: int
    ) -> None:
        """Out-of-range numbers are clamped; integral floats become ints."""
        resolved = resolve_params(SCHEMA, {"count": value})

        assert resolved["count"] == expected
        assert isinstance(resolved["count"], int)

    def test_clamping_logs_a_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        """Clamping is reported."""
        with caplog.at_level(logging.WARNING):
            resolve_params(SCHEMA, {"density": 2})

        assert "clamped" in caplog.text

    def test_float_accepts_int(self) -> None:
        """Ints are accepted for float parameters."""
        resolved = resolve_params(SCHEMA, {"density": 0})

        assert resolved["density"] == 0.1
        assert isinstance(resolved["density"], float)

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("count", "many"),
            ("count", True),
            ("count", 2.5),
            ("has_well", 1),
            ("material", 3),
            ("tree_types", "oak"),
        ],
    )
    def test_wrong_types_raise(self, name: str, value: object) -> None:
        """Values of the wrong kind are rejected."""
        with pytest.raises(PresetParameterError, match=name):
            resolve_params(SCHEMA, {name: value})

    def test_choices_enforced(self) -> None:
        """Values outside the allowed choices are rejected."""
        with pytest.raises(PresetParameterError, match="must be one of"):
            resolve_params(SCHEMA, {"material": "marble"})

    def test_required_parameter_missing(self) -> None:
        """Required parameters must be supplied."""
        schema = {"center_x": ParamSpec("int", required=True)}

        with pytest.raises(PresetParameterError, match="Missing required parameter"):
            resolve_params(schema, {})

    def test_parameter_error_is_value_error(self) -> None:
        """Callers catching ValueError see parameter errors too."""
        assert issubclass(PresetParameterError, ValueError)


def test_param_spec_to_dict() -> None:
    """The plain-data schema lists only the set fields."""
    assert ParamSpec("int", 8, 3, 20, description="Houses").to_dict() == {
        "type": "int",
        "default": 8,
        "min": 3,
        "max": 20,
        "description": "Houses",
    }
    assert ParamSpec("str", "dirt", choices=("dirt",), required=True).to_dict() == {
        "type": "str",
        "default": "dirt",
        "enum": ["dirt"],
        "required": True,
    }
