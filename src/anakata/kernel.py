"""
Host-facing entry points.

The functions here are what a host application calls once per frame:

- ``rotate``: advance the rotation state by per-plane angular speeds
- ``derive`` / ``derive_all``: project and tessellate a polytope into buffers
- ``slice`` / ``derive_slices``: cut the polytope with the hyperplane
  w = w_slice and tessellate the cut
- ``shift_slice``: animate the hyperplane offset between two bounds

``Kernel`` bundles a polytope, a KernelConfig and one Tessellator per enabled
channel, so repeated frames re-project into the same buffers instead of
rebuilding topology.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .config import Channel, KernelConfig, ProjectionConfig, TessellationConfig
from .polytope_core.polytope import Polytope
from .projection.projector import Projector
from .projection.rotation import RotationState
from .projection.rotation import rotate as _rotate
from .tessellation.buffers import RenderBuffer
from .tessellation.coloring import PALETTES
from .tessellation.cross_section import CellSlice, SliceState, slice_polytope, tessellate_slices
from .tessellation.cross_section import shift_slice as _shift_slice
from .tessellation.tessellator import Tessellator, tessellate

logger = logging.getLogger(__name__)


def rotate(rotation: RotationState, deltas: Mapping[str, float], elapsed_ms: float = 1.0) -> RotationState:
    """Advance ``rotation`` in place by ``delta * elapsed_ms`` per plane."""
    return _rotate(rotation, deltas, elapsed_ms)


def derive(polytope: Polytope,
           rotation: RotationState,
           projection: ProjectionConfig = None,
           tessellation: TessellationConfig = None,
           channel: Channel = Channel.CELLS,
           palettes: Mapping[str, Sequence] = None) -> RenderBuffer:
    """Project and tessellate one channel of a polytope.

    Args:
        polytope: Shape to draw
        rotation: Current rotation state (read only)
        projection: fov and camera distance along w
        tessellation: Reuse, split, color and scale options
        channel: cells, edges or points
        palettes: Host palette table

    Returns:
        Freshly allocated RenderBuffer
    """
    projector = Projector(rotation, projection)
    return tessellate(polytope, projector, channel, tessellation, palettes)


def derive_all(polytope: Polytope,
               rotation: RotationState,
               config: Union[KernelConfig, Mapping[str, Any]] = None,
               palettes: Mapping[str, Sequence] = None) -> Dict[Channel, RenderBuffer]:
    """Buffers of every enabled channel; disabled channels are absent."""
    config = _as_config(config)
    projector = Projector(rotation, config.projection)
    return {
        channel: tessellate(polytope, projector, channel, config.tessellation(channel), palettes)
        for channel in config.enabled_channels()
    }


def slice(polytope: Polytope,
          w_slice: float,
          rotation: Optional[RotationState] = None) -> List[CellSlice]:
    """Cross-section of every cell at w = w_slice (see ``slice_polytope``)."""
    return slice_polytope(polytope, w_slice, rotation)


def derive_slices(polytope: Polytope,
                  w_slice: float,
                  rotation: Optional[RotationState] = None,
                  config: Union[KernelConfig, Mapping[str, Any]] = None,
                  palettes: Mapping[str, Sequence] = None) -> Dict[Channel, RenderBuffer]:
    """Slice once and tessellate the cut for every enabled channel."""
    config = _as_config(config)
    slices = slice_polytope(polytope, w_slice, rotation)
    return {
        channel: tessellate_slices(slices, channel, config.tessellation(channel), palettes, polytope, w_slice)
        for channel in config.enabled_channels()
    }


def shift_slice(state: SliceState, speed: float, lo: float, hi: float, elapsed: float = 1.0) -> SliceState:
    """Advance the slice offset in place, bouncing between ``lo`` and ``hi``."""
    return _shift_slice(state, speed, lo, hi, elapsed)


def _as_config(config) -> KernelConfig:
    if config is None:
        return KernelConfig()
    if isinstance(config, KernelConfig):
        return config
    return KernelConfig.from_mapping(config)


class Kernel:
    """A polytope and its configuration, with per-channel buffers kept alive.

    Args:
        polytope: Shape to draw
        config: KernelConfig or plain settings mapping
        palettes: Host palette table
        rotation: Initial rotation state (a zero state when omitted)
    """

    def __init__(self,
                 polytope: Polytope,
                 config: Union[KernelConfig, Mapping[str, Any]] = None,
                 palettes: Mapping[str, Sequence] = None,
                 rotation: RotationState = None):
        self.config = _as_config(config)
        self.palettes = palettes if palettes is not None else PALETTES
        self.rotation = rotation if rotation is not None else RotationState()
        self.polytope = polytope
        self.tessellators: Dict[Channel, Tessellator] = {}
        self._sync_channels()

    def _sync_channels(self):
        enabled = self.config.enabled_channels()
        for channel in list(self.tessellators):
            if channel not in enabled:
                del self.tessellators[channel]
        for channel in enabled:
            tessellation = self.config.tessellation(channel)
            if channel in self.tessellators:
                self.tessellators[channel].configure(self.polytope, tessellation)
            else:
                self.tessellators[channel] = Tessellator(self.polytope, channel, tessellation, self.palettes)

    def configure(self,
                  polytope: Polytope = None,
                  config: Union[KernelConfig, Mapping[str, Any]] = None) -> None:
        """Swap the shape or the options; topology is kept where it still applies."""
        if polytope is not None:
            self.polytope = polytope
        if config is not None:
            self.config = _as_config(config)
        self._sync_channels()
        logger.debug(f"Kernel configured for '{self.polytope.name}': {self.config}")

    def rotate(self, deltas: Mapping[str, float], elapsed_ms: float = 1.0) -> RotationState:
        return self.rotation.rotate(deltas, elapsed_ms)

    def frame(self) -> Dict[Channel, RenderBuffer]:
        """Buffers for the current rotation, updated in place after the first call."""
        projector = Projector(self.rotation, self.config.projection)
        return {channel: tessellator.update(projector)
                for channel, tessellator in self.tessellators.items()}

    def slice_frame(self, w_slice: float, rotate_first: bool = False) -> Dict[Channel, RenderBuffer]:
        """Cross-section buffers at ``w_slice``, optionally of the rotated shape."""
        rotation = self.rotation if rotate_first else None
        return derive_slices(self.polytope, w_slice, rotation, self.config, self.palettes)
