"""
Configuration records and global constants
==========================================

All recognized options of the engine live here, together with the numeric
tolerances shared by the projection, tessellation and slicing code.

Option names accepted by ``KernelConfig.from_mapping`` follow the host
application's settings keys (``reuse``, ``split``, ``colorGenerator``,
``palette``, ``fov``, ``w``, ``cellSizePercent``, ``cells``, ``edges``,
``points``); their snake_case spellings are accepted as well.
"""
import logging
import math
from enum import Enum
from typing import Any, Dict, Mapping, NamedTuple, Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)


# Numerical tolerances
ZOOM_EPSILON = 1e-6     # |zoom| below this is clamped to keep x/zoom finite
SLICE_MERGE_DECIMALS = 9  # crossing points equal after rounding are one point
PLANE_EPSILON = 1e-12   # "is this polygon degenerate?" for slice ordering

# Projection defaults (camera distance along w and field of view along w)
DEFAULT_FOV = math.pi / 2
DEFAULT_W = 10.0

# Cell scaling: even at 100% a seam stays visible between adjacent cells
MAX_CELL_SCALE = 0.999
DEFAULT_CELL_SIZE_PERCENT = 100.0

TWO_PI = 2 * math.pi


class Reuse(str, Enum):
    """How projected vertices are shared inside a batch."""
    ALL = "all"
    FACES = "faces"
    NONE = "none"


class Split(str, Enum):
    """How the polytope is divided into draw batches."""
    NONE = "none"
    CELLS = "cells"
    FACES = "faces"


class ColorStrategy(str, Enum):
    """Palette lookup rule for each emitted vertex."""
    UNIFORM = "uniform"
    CELL = "cell"
    FACE = "face"
    DEPTH = "depth"
    W_DEPTH = "wDepth"


class Channel(str, Enum):
    """Render channels derived from one polytope."""
    CELLS = "cells"
    EDGES = "edges"
    POINTS = "points"


class ProjectionConfig(NamedTuple):
    """Perspective along the fourth axis.

    Attributes:
        fov: Field of view along w (radians)
        w: Camera distance along w
    """
    fov: float = DEFAULT_FOV
    w: float = DEFAULT_W


class TessellationConfig(NamedTuple):
    """Options for one channel derivation."""
    reuse: Reuse = Reuse.ALL
    split: Split = Split.CELLS
    color_generator: ColorStrategy = ColorStrategy.CELL
    palette: str = "material"
    cell_size_percent: float = DEFAULT_CELL_SIZE_PERCENT


def _coerce(enum_cls, value: Any, option: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigError(
            f"Unknown value {value!r} for option '{option}' (expected one of: {choices})"
        ) from None


def _coerce_float(value: Any, option: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Option '{option}' expects a number, got {value!r}") from None


_ALIASES = {
    "colorGenerator": "color_generator",
    "cellSizePercent": "cell_size_percent",
}


class KernelConfig(NamedTuple):
    """Every option the host may set on the engine.

    Attributes:
        reuse: Vertex sharing policy
        split: Batch splitting policy
        color_generator: Default color strategy for all channels
        channel_colors: Per-channel strategy overrides (channel -> strategy)
        palette: Name of the palette in the host's palette table
        fov: Field of view along w
        w: Camera distance along w
        cell_size_percent: Uniform batch scale in percent
        cells: Whether the filled-cell channel is derived
        edges: Whether the edge channel is derived
        points: Whether the point channel is derived
    """
    reuse: Reuse = Reuse.ALL
    split: Split = Split.CELLS
    color_generator: ColorStrategy = ColorStrategy.CELL
    channel_colors: Optional[Dict[Channel, ColorStrategy]] = None
    palette: str = "material"
    fov: float = DEFAULT_FOV
    w: float = DEFAULT_W
    cell_size_percent: float = DEFAULT_CELL_SIZE_PERCENT
    cells: bool = True
    edges: bool = True
    points: bool = False

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "KernelConfig":
        """Validate a plain settings mapping.

        ``colorGenerator`` may be a single strategy name or a mapping of
        channel name to strategy name.

        Raises:
            ConfigError: on unknown keys or values
        """
        values: Dict[str, Any] = {}
        for key, value in options.items():
            name = _ALIASES.get(key, key)
            if name not in cls._fields or name == "channel_colors":
                raise ConfigError(f"Unknown option '{key}'")
            values[name] = value

        if "reuse" in values:
            values["reuse"] = _coerce(Reuse, values["reuse"], "reuse")
        if "split" in values:
            values["split"] = _coerce(Split, values["split"], "split")
        if "color_generator" in values:
            generator = values["color_generator"]
            if isinstance(generator, Mapping):
                overrides = {
                    _coerce(Channel, channel, "colorGenerator"):
                        _coerce(ColorStrategy, strategy, "colorGenerator")
                    for channel, strategy in generator.items()
                }
                values["color_generator"] = overrides.pop(Channel.CELLS, ColorStrategy.CELL)
                values["channel_colors"] = overrides
            else:
                values["color_generator"] = _coerce(ColorStrategy, generator, "colorGenerator")
        for name in ("fov", "w", "cell_size_percent"):
            if name in values:
                values[name] = _coerce_float(values[name], name)
        for name in ("cells", "edges", "points"):
            if name in values:
                values[name] = bool(values[name])
        if "palette" in values:
            values["palette"] = str(values["palette"])

        config = cls(**values)
        logger.debug(f"Kernel configuration accepted: {config}")
        return config

    @property
    def projection(self) -> ProjectionConfig:
        return ProjectionConfig(fov=self.fov, w=self.w)

    def enabled_channels(self):
        """Channels the host asked for, in derivation order."""
        flags = {Channel.CELLS: self.cells, Channel.EDGES: self.edges, Channel.POINTS: self.points}
        return [channel for channel, enabled in flags.items() if enabled]

    def tessellation(self, channel: Channel) -> TessellationConfig:
        """Tessellation options for one channel."""
        channel = _coerce(Channel, channel, "channel")
        strategy = self.color_generator
        if self.channel_colors and channel in self.channel_colors:
            strategy = self.channel_colors[channel]
        return TessellationConfig(
            reuse=self.reuse,
            split=self.split,
            color_generator=strategy,
            palette=self.palette,
            cell_size_percent=self.cell_size_percent,
        )
