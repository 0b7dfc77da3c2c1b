"""
Mip pyramid construction for atlas pages.

Two strategies are supported:

- Whole page: entries are composited into level 0, then every further level is
  downsampled from the previous level of the full page.
- Block confined: every entry builds a private mip chain from its own padded
  source and each private level is composited into the matching page level.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from PIL import Image

from ..providers.base import PackedPlacement
from ..utils.image import ImageUtils
from .options import MipOption

logger = logging.getLogger(__name__)


@dataclass
class Texture:
    """A baked page: level 0 is ``size`` x ``size``, level n is ``size >> n``."""
    size: int
    mip_level_count: int
    mip_maps: List[Image.Image] = field(default_factory=list)

    @classmethod
    def new(cls, size: int, mip_level_count: int, mode: str) -> "Texture":
        """Allocate a zero-filled texture with every mip level."""
        mip_maps = [
            ImageUtils.new_buffer(mode, size >> level, size >> level)
            for level in range(mip_level_count)
        ]
        return cls(size, mip_level_count, mip_maps)

    @property
    def mode(self) -> str:
        return self.mip_maps[0].mode

    def __getitem__(self, level: int) -> Image.Image:
        return self.mip_maps[level]

    def __len__(self) -> int:
        return len(self.mip_maps)


class MipPyramidBuilder:
    """Writes dilated entries into page textures and fills their mip levels."""

    def __init__(self, mip: MipOption, size: int):
        """Initialize builder for one mip option and page size."""
        self.mip = mip
        self.size = size
        self.mip_level_count = mip.mip_level_count(size)

    def allocate_pages(self, page_count: int, mode: str) -> List[Texture]:
        """Create ``page_count`` empty textures in the given pixel mode."""
        return [Texture.new(self.size, self.mip_level_count, mode) for _ in range(page_count)]

    def write_entry(self, texture: Texture, dilated: Image.Image, placement: PackedPlacement) -> None:
        """
        Composite one dilated entry into its page.

        Args:
            texture: Page the placement belongs to
            dilated: Padded entry covering the whole placement rectangle
            placement: Placement in packing units
        """
        if self.mip.block_confined:
            self._write_block_chain(texture, dilated, placement)
            return

        ImageUtils.blit(texture.mip_maps[0], dilated, placement.x, placement.y)

    def _write_block_chain(self, texture: Texture, dilated: Image.Image, placement: PackedPlacement) -> None:
        block_size = self.mip.block_size

        # The dilated buffer is a whole number of blocks, so each level divides evenly.
        for level in range(self.mip_level_count):
            width = dilated.width >> level
            height = dilated.height >> level
            mip_map = ImageUtils.resize(dilated, width, height, self.mip.filter)

            x = placement.x * (block_size >> level)
            y = placement.y * (block_size >> level)
            ImageUtils.blit(texture.mip_maps[level], mip_map, x, y)

    def finish_pages(self, textures: List[Texture]) -> None:
        """
        Downsample whole pages for the whole-page strategy.

        Must run only after every entry has been written to level 0.
        """
        if not self.mip.generates_mips or self.mip.block_confined:
            return

        for page, texture in enumerate(textures):
            for level in range(1, self.mip_level_count):
                level_size = self.size >> level
                previous = texture.mip_maps[level - 1]
                mip_map = ImageUtils.resize(previous, level_size, level_size, self.mip.filter)
                ImageUtils.blit(texture.mip_maps[level], mip_map, 0, 0)
            logger.debug(f"Downsampled page {page} into {self.mip_level_count} mip levels")
