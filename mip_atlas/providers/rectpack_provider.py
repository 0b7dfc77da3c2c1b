"""
Placement provider backed by the rectpack library.
"""

import logging
from typing import Dict, Hashable, Sequence

from rectpack import newPacker, PackingMode, PackingBin, SORT_AREA
from rectpack import maxrects

from .base import PlacementProvider, PackRequest, PackedPlacement, PackingError

logger = logging.getLogger(__name__)


class RectpackProvider(PlacementProvider):
    """
    Offline MaxRects packer.

    Rectangles are sorted by area (largest first) and each goes into the open
    bin that fits it best; a new bin is opened only when no open bin can take
    it. Rotation is disabled because texel orientation must be preserved.
    """

    def __init__(self, pack_algo=maxrects.MaxRectsBssf, sort_algo=SORT_AREA,
                 bin_algo=PackingBin.BBF):
        """Initialize provider with rectpack algorithm choices."""
        self.pack_algo = pack_algo
        self.sort_algo = sort_algo
        self.bin_algo = bin_algo

    def place(self, requests: Sequence[PackRequest], bin_width: int, bin_height: int,
              max_bins: int) -> Dict[Hashable, PackedPlacement]:
        packer = newPacker(
            mode=PackingMode.Offline,
            bin_algo=self.bin_algo,
            pack_algo=self.pack_algo,
            sort_algo=self.sort_algo,
            rotation=False,
        )
        packer.add_bin(bin_width, bin_height, count=max_bins)

        # rectpack reports rectangles by rid; map back to caller ids by position.
        for rid, request in enumerate(requests):
            packer.add_rect(request.width, request.height, rid=rid)
        packer.pack()

        placements = {}
        for bin_index, x, y, width, height, rid in packer.rect_list():
            placements[requests[rid].id] = PackedPlacement(
                page=int(bin_index),
                x=int(x),
                y=int(y),
                width=int(width),
                height=int(height),
            )

        unplaced = [request.id for request in requests if request.id not in placements]
        if unplaced:
            logger.debug(f"rectpack left {len(unplaced)} rectangle(s) unplaced")
            raise PackingError(unplaced, bin_width, bin_height, max_bins)

        return placements
