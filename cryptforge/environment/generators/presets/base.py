"""Preset definitions and parameter resolution.

A preset is a named, parametrized stamp: given a canvas, resolved parameters
and a random source, it draws something self-contained (a cluster of houses,
a group of monsters) and returns a plain record of what it did.

Parameters are declared with ParamSpec schemas and resolved once per call:

    schema defaults < caller params < explicit seed

Caller params may use camelCase names ("centerX"); they are matched against
the snake_case schema. Names the schema does not know are passed through
unchanged so presets stay forward-compatible with newer callers.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Literal, TypeAlias

from cryptforge.environment.tile_types import DEFAULT_PALETTE, TilePalette
from cryptforge.types import RandomSeed, WorldTilePos
from cryptforge.util.naming import normalize_option_names

if TYPE_CHECKING:
    from cryptforge.environment.canvas import Canvas
    from cryptforge.util.rng import SeededRandom

logger = logging.getLogger(__name__)

ParamKind: TypeAlias = Literal["int", "float", "bool", "str", "list"]


class PresetParameterError(ValueError):
    """A preset parameter is missing, of the wrong type, or not an allowed choice."""


@dataclass(frozen=True)
class ParamSpec:
    """Declarative description of one preset parameter.

    Attributes:
        kind: Expected value type.
        default: Value used when the caller gives none. None means "unset".
        minimum: Numeric lower bound; smaller values are clamped.
        maximum: Numeric upper bound; larger values are clamped.
        choices: Allowed values, if restricted.
        required: Whether the caller must supply a value.
        description: Human-readable help text.
    """

    kind: ParamKind
    default: Any = None
    minimum: float | None = None
    maximum: float | None = None
    choices: tuple[Any, ...] | None = None
    required: bool = False
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.kind, "default": self.default}
        if self.minimum is not None:
            data["min"] = self.minimum
        if self.maximum is not None:
            data["max"] = self.maximum
        if self.choices is not None:
            data["enum"] = list(self.choices)
        if self.required:
            data["required"] = True
        if self.description:
            data["description"] = self.description
        return data


def _coerce(name: str, spec: ParamSpec, value: Any) -> Any:
    """Check a value against its declared kind, converting where lossless."""
    kind = spec.kind
    if kind == "bool":
        if isinstance(value, bool):
            return value
    elif kind == "int":
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    elif kind == "float":
        if isinstance(value, int | float) and not isinstance(value, bool):
            return float(value)
    elif kind == "str":
        if isinstance(value, str):
            return value
    elif kind == "list":
        if isinstance(value, list | tuple):
            return list(value)
    raise PresetParameterError(
        f"Parameter {name!r} expects {kind}, got {type(value).__name__}: {value!r}"
    )


def _clamp(name: str, spec: ParamSpec, value: int | float) -> int | float:
    clamped = value
    if spec.minimum is not None and clamped < spec.minimum:
        clamped = spec.minimum
    if spec.maximum is not None and clamped > spec.maximum:
        clamped = spec.maximum
    if clamped != value:
        logger.warning(
            "Parameter %r=%r outside [%s, %s]; clamped to %r",
            name,
            value,
            spec.minimum,
            spec.maximum,
            clamped,
        )
    return int(clamped) if spec.kind == "int" else float(clamped)


def resolve_params(
    schema: Mapping[str, ParamSpec],
    overrides: Mapping[str, Any] | None = None,
    *,
    seed: RandomSeed = None,
) -> dict[str, Any]:
    """Merge schema defaults, caller params and an explicit seed.

    A caller value of None counts as "not given" and falls back to the
    default. Numbers outside the declared range are clamped with a warning.

    Args:
        schema: Parameter name -> ParamSpec.
        overrides: Caller-supplied params, snake_case or camelCase.
        seed: Explicit seed. Wins over any ``seed`` in ``overrides``.

    Returns:
        The resolved parameters, including unknown extras and ``seed``.

    Raises:
        PresetParameterError: If a required parameter is missing, a value has
            the wrong type, or a value is not one of the allowed choices.
    """
    given = normalize_option_names(overrides or {}, known={*schema, "seed"})
    resolved: dict[str, Any] = {}

    for name, spec in schema.items():
        value = given.get(name)
        if value is None:
            if spec.required:
                raise PresetParameterError(f"Missing required parameter: {name!r}")
            resolved[name] = spec.default
            continue

        value = _coerce(name, spec, value)
        if spec.choices is not None and value not in spec.choices:
            raise PresetParameterError(
                f"Parameter {name!r} must be one of {list(spec.choices)}, got {value!r}"
            )
        if spec.kind in ("int", "float"):
            value = _clamp(name, spec, value)
        resolved[name] = value

    for name, value in given.items():
        if name not in schema:
            resolved[name] = value

    if seed is not None:
        resolved["seed"] = seed
    else:
        resolved.setdefault("seed", None)
    return resolved


class PresetDefinition(abc.ABC):
    """A named, parametrized stamp that draws onto a canvas.

    Subclasses declare ``name``, ``category``, ``description`` and a
    ``params`` schema as class attributes and implement generate().
    Instances hold the tile palette they draw with.
    """

    name: ClassVar[str]
    category: ClassVar[str]
    description: ClassVar[str] = ""
    params: ClassVar[Mapping[str, ParamSpec]] = {}

    def __init__(self, palette: TilePalette | None = None) -> None:
        self.palette = palette or DEFAULT_PALETTE

    @abc.abstractmethod
    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        """Draw the preset onto the canvas.

        Args:
            canvas: Canvas to mutate in place.
            params: Resolved parameters (see resolve_params).
            rng: The random source for this instantiation.

        Returns:
            A plain record of what was placed.
        """
        raise NotImplementedError

    def describe(self) -> dict[str, Any]:
        """Name, category, description and parameter schema as plain data."""
        return {
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "params": [
                {"name": key, **spec.to_dict()} for key, spec in self.params.items()
            ],
        }

    @staticmethod
    def anchor(canvas: Canvas, params: Mapping[str, Any]) -> WorldTilePos:
        """``center_x``/``center_y`` from params, defaulting to the canvas center."""
        cx = params.get("center_x")
        cy = params.get("center_y")
        return (
            canvas.width // 2 if cx is None else int(cx),
            canvas.height // 2 if cy is None else int(cy),
        )


@dataclass(frozen=True)
class PresetCall:
    """A request to instantiate a preset, as parsed from shorthand or blueprints."""

    preset: str
    params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> PresetCall:
        """Build a call from {"preset" or "name", "params"}.

        Raises:
            TypeError: If data is not a mapping.
            ValueError: If it names no preset.
        """
        if not isinstance(data, Mapping):
            raise TypeError(
                f"Preset calls must be mappings, got {type(data).__name__}: {data!r}"
            )
        name = data.get("preset") or data.get("name")
        if not name:
            raise ValueError(f"Preset call without a preset name: {dict(data)!r}")
        return cls(str(name), dict(data.get("params") or {}))


@dataclass
class PresetInstance:
    """What one preset instantiation did.

    Attributes:
        preset: Preset name.
        params: The resolved parameters.
        seed: The seed the instantiation actually ran with. When no seed was
            given this is the entropy-drawn value, so the run can be repeated.
        result: The preset's own record.
        success: False if the instantiation raised.
        error: The error message when success is False.
    """

    preset: str
    params: dict[str, Any]
    seed: int | None
    result: dict[str, Any]
    success: bool = True
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "preset": self.preset,
            "params": self.params,
            "seed": self.seed,
            "result": self.result,
            "success": self.success,
        }
        if self.error is not None:
            data["error"] = self.error
        return data
