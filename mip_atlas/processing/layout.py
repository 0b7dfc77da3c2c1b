"""
Layout arithmetic: packing rectangles for entries and texcoords for placements.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Hashable, Tuple

import numpy as np

from ..providers.base import PackRequest, PackedPlacement
from .options import MipOption


@dataclass(frozen=True)
class Texcoord32:
    """An element coordinate normalized to [0, 1] in 32-bit precision."""
    page: int
    min_x: np.float32
    min_y: np.float32
    max_x: np.float32
    max_y: np.float32


@dataclass(frozen=True)
class Texcoord64:
    """An element coordinate normalized to [0, 1] in 64-bit precision."""
    page: int
    min_x: float
    min_y: float
    max_x: float
    max_y: float


@dataclass(frozen=True)
class Texcoord:
    """Pixel rectangle of an entry's live content, relative to the level-0 page size."""
    page: int
    min_x: int
    min_y: int
    max_x: int
    max_y: int
    size: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    def to_f32(self) -> Texcoord32:
        """Returns a normalized texcoord using float32."""
        size = np.float32(self.size)
        return Texcoord32(
            page=self.page,
            min_x=np.float32(self.min_x) / size,
            min_y=np.float32(self.min_y) / size,
            max_x=np.float32(self.max_x) / size,
            max_y=np.float32(self.max_y) / size,
        )

    def to_f64(self) -> Texcoord64:
        """Returns a normalized texcoord using float64."""
        return Texcoord64(
            page=self.page,
            min_x=self.min_x / self.size,
            min_y=self.min_y / self.size,
            max_x=self.max_x / self.size,
            max_y=self.max_y / self.size,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AtlasLayoutEngine:
    """Converts entries to packing rectangles and placements back to texcoords."""

    def __init__(self, mip: MipOption, size: int):
        """Initialize layout engine for one mip option and page size."""
        self.mip = mip
        self.size = size
        self.padding = mip.padding

    @property
    def bin_size(self) -> int:
        """Edge length of a page in packing units (pixels, or blocks in block mode)."""
        if self.mip.block_confined:
            return self.size // self.mip.block_size
        return self.size

    def pack_request(self, id: Hashable, width: int, height: int) -> PackRequest:
        """
        Size the packing rectangle for an entry of ``width`` x ``height`` pixels.

        Padding modes inflate the entry by the padding on every edge. Block mode
        measures in blocks: the entry plus one block (half a block per edge),
        rounded up to whole blocks.
        """
        if self.mip.block_confined:
            block_size = self.mip.block_size
            return PackRequest(
                id,
                -(-(width + block_size) // block_size),
                -(-(height + block_size) // block_size),
            )
        return PackRequest(id, width + self.padding * 2, height + self.padding * 2)

    def pixel_rect(self, placement: PackedPlacement) -> Tuple[int, int, int, int]:
        """Return the (x, y, width, height) a placement covers on the level-0 page."""
        if self.mip.block_confined:
            block_size = self.mip.block_size
            return (
                placement.x * block_size,
                placement.y * block_size,
                placement.width * block_size,
                placement.height * block_size,
            )
        return placement.x, placement.y, placement.width, placement.height

    def texcoord(self, placement: PackedPlacement, width: int, height: int) -> Texcoord:
        """
        Compute the live-content rectangle of an entry from its placement.

        In block mode the rectangle spans the entry's original dimensions, not
        the block-rounded placement.
        """
        padding = self.padding

        if self.mip.block_confined:
            min_x = placement.x * self.mip.block_size + padding
            min_y = placement.y * self.mip.block_size + padding
            return Texcoord(
                page=placement.page,
                min_x=min_x,
                min_y=min_y,
                max_x=min_x + width,
                max_y=min_y + height,
                size=self.size,
            )

        return Texcoord(
            page=placement.page,
            min_x=placement.x + padding,
            min_y=placement.y + padding,
            max_x=placement.x + placement.width - padding,
            max_y=placement.y + placement.height - padding,
            size=self.size,
        )
