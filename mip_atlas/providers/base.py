"""
Abstract base classes for placement providers.
Defines the interface that every bin-packing backend must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Sequence


@dataclass(frozen=True)
class PackRequest:
    """A rectangle to place, in the units of the target bin."""
    id: Hashable
    width: int
    height: int

    def __post_init__(self):
        """Validate request dimensions after initialization."""
        if self.width < 0 or self.height < 0:
            raise ValueError(f"rectangle dimensions cannot be negative, got {self.width}x{self.height}")


@dataclass(frozen=True)
class PackedPlacement:
    """Where a rectangle ended up: bin index (page) and top-left corner."""
    page: int
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def intersects(self, other: 'PackedPlacement') -> bool:
        """Check if this placement overlaps another one on the same page."""
        if self.page != other.page:
            return False
        return not (self.right <= other.x or other.right <= self.x or
                    self.bottom <= other.y or other.bottom <= self.y)


class PackingError(Exception):
    """Raised when rectangles cannot be placed within the bin budget."""

    def __init__(self, unplaced: Sequence[Hashable], bin_width: int, bin_height: int, max_bins: int):
        self.unplaced = list(unplaced)
        self.bin_width = bin_width
        self.bin_height = bin_height
        self.max_bins = max_bins
        super().__init__(
            f"could not place {len(self.unplaced)} rectangle(s) into {max_bins} "
            f"bin(s) of {bin_width}x{bin_height}: {self.unplaced}"
        )


class PlacementProvider(ABC):
    """Abstract base class for bin-packing placement services."""

    @abstractmethod
    def place(self, requests: Sequence[PackRequest], bin_width: int, bin_height: int,
              max_bins: int) -> Dict[Hashable, PackedPlacement]:
        """
        Place every request into at most ``max_bins`` bins.

        Args:
            requests: Rectangles to place, ids must be unique
            bin_width: Width of each bin
            bin_height: Height of each bin
            max_bins: Maximum number of bins that may be opened

        Returns:
            Mapping of request id to its placement; placements on the same
            bin never overlap and bins are numbered from 0 without gaps

        Raises:
            PackingError: If any request cannot be placed
        """
        pass

    def validate_placements(self, requests: Sequence[PackRequest],
                            placements: Dict[Hashable, PackedPlacement],
                            bin_width: int, bin_height: int,
                            max_bins: Optional[int] = None) -> List[str]:
        """
        Check a provider result against the placement contract.

        Args:
            requests: Rectangles that were submitted
            placements: Result of :meth:`place`
            bin_width: Width of each bin
            bin_height: Height of each bin
            max_bins: Bin budget; when given, pages must lie in ``[0, max_bins)``

        Returns:
            List of violation messages (empty if the result is sound)
        """
        errors = []

        for request in requests:
            placement = placements.get(request.id)
            if placement is None:
                errors.append(f"Rectangle {request.id!r} was not placed")
                continue
            if (placement.width, placement.height) != (request.width, request.height):
                errors.append(
                    f"Rectangle {request.id!r} placed as {placement.width}x{placement.height}, "
                    f"requested {request.width}x{request.height}"
                )
            if placement.x < 0 or placement.y < 0 or placement.right > bin_width or placement.bottom > bin_height:
                errors.append(f"Rectangle {request.id!r} extends beyond its bin")
            if placement.page < 0 or (max_bins is not None and placement.page >= max_bins):
                errors.append(f"Rectangle {request.id!r} is on invalid bin {placement.page}")

        items = list(placements.items())
        for i, (first_id, first) in enumerate(items):
            for second_id, second in items[i + 1:]:
                if first.intersects(second):
                    errors.append(f"Rectangles {first_id!r} and {second_id!r} overlap")

        return errors
