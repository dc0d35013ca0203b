"""Abstract base class for compositor layers.

Each layer generator handles one LayerType. The compositor calls generate()
once per blueprint layer with the shared canvas, the layer's params and the
run's shared random source. Layers mutate the canvas in place and return a
plain record of what they did.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from cryptforge.environment.canvas import CellTag
from cryptforge.environment.generators.presets.base import PresetCall
from cryptforge.environment.generators.presets.shorthand import parse_preset_shorthand
from cryptforge.environment.tile_types import DEFAULT_PALETTE, TilePalette
from cryptforge.util.naming import normalize_option_names

if TYPE_CHECKING:
    from cryptforge.environment.canvas import Canvas
    from cryptforge.environment.generators.presets.engine import PresetEngine
    from cryptforge.util.rng import SeededRandom

logger = logging.getLogger(__name__)

# Upper bound for per-preset seeds drawn from the shared stream
PRESET_SEED_RANGE = 1_000_000


class LayerGenerator(ABC):
    """Abstract base class for compositor layers.

    Subclasses set ``layer_type`` and implement generate(). They receive the
    compositor's preset engine and palette so preset-driven layers and
    tile-writing layers agree on materials.
    """

    layer_type: ClassVar[str] = ""

    def __init__(
        self, engine: PresetEngine | None = None, palette: TilePalette | None = None
    ) -> None:
        self.engine = engine
        self.palette = palette or DEFAULT_PALETTE

    @abstractmethod
    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        """Apply this layer to the canvas.

        Args:
            canvas: The shared canvas, modified in place.
            params: The layer's blueprint params.
            rng: The run's shared random source.

        Returns:
            A plain record of what the layer did.
        """
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # Helpers shared by the concrete layers
    # -------------------------------------------------------------------------

    @staticmethod
    def options(params: Mapping[str, Any] | None) -> dict[str, Any]:
        """Layer params with camelCase names folded to snake_case."""
        return normalize_option_names(params or {})

    @staticmethod
    def avoid_tags(value: Iterable[CellTag | str] | None, default: CellTag) -> CellTag:
        if value is None:
            return default
        return CellTag.combine(value)

    def apply_presets(
        self,
        canvas: Canvas,
        requests: Iterable[Any] | None,
        rng: SeededRandom,
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        """Instantiate a layer's preset requests.

        A request is one of:
        - ``"name"`` or ``"name:count"``: run the preset ``count`` times
        - ``"@name:key=value,..."``: preset shorthand
        - ``{"name" | "preset", "count", "params"}``

        Every instantiation draws its seed from the shared stream, so the run
        stays reproducible; a ``seed`` in the request's params takes priority.
        Failures are logged and recorded, never raised.

        Returns:
            (applied instance records, failure records)
        """
        applied: list[dict[str, Any]] = []
        failures: list[dict[str, Any]] = []
        if not requests:
            return applied, failures
        if self.engine is None:
            raise RuntimeError(
                f"{type(self).__name__} needs a PresetEngine to run presets"
            )

        for request in requests:
            try:
                call, count = _parse_request(request)
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping preset request %r: %s", request, exc)
                failures.append({"preset": str(request), "error": str(exc)})
                continue

            for _ in range(count):
                seed = rng.randint(0, PRESET_SEED_RANGE)
                params = {"seed": seed, **call.params}
                try:
                    instance = self.engine.instantiate(canvas, call.preset, params)
                except Exception as exc:
                    logger.warning(
                        "Preset %r failed in %s layer: %s",
                        call.preset,
                        self.layer_type,
                        exc,
                    )
                    failures.append({"preset": call.preset, "error": str(exc)})
                    continue
                applied.append(instance.to_dict())
        return applied, failures


def _parse_request(request: Any) -> tuple[PresetCall, int]:
    if isinstance(request, PresetCall):
        return request, 1
    if isinstance(request, str):
        text = request.strip()
        if text.startswith("@"):
            call = parse_preset_shorthand(text)
            if call is None:
                raise ValueError("Malformed preset shorthand")
            return call, 1
        name, _, count = text.partition(":")
        if not name:
            raise ValueError("Empty preset name")
        return PresetCall(name), int(count) if count else 1
    if isinstance(request, Mapping):
        return PresetCall.from_mapping(request), int(request.get("count", 1))
    raise ValueError(f"Unsupported preset request type {type(request).__name__}")
