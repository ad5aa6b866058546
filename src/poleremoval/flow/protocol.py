"""Protocol definition for optical flow providers."""

from enum import Enum
from typing import Protocol, runtime_checkable

import numpy as np


class DirectionHint(str, Enum):
    """Coarse prior on the expected motion direction between two images.

    Image coordinates: +x is right, +y is down.
    """

    NONE = "none"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def vector(self) -> np.ndarray:
        """Unit (dx, dy) direction, or zeros for NONE."""
        return np.array(_HINT_VECTORS[self], dtype=np.float32)


_HINT_VECTORS = {
    DirectionHint.NONE: (0.0, 0.0),
    DirectionHint.UP: (0.0, -1.0),
    DirectionHint.DOWN: (0.0, 1.0),
    DirectionHint.LEFT: (-1.0, 0.0),
    DirectionHint.RIGHT: (1.0, 0.0),
}


@runtime_checkable
class FlowProvider(Protocol):
    """Protocol for dense optical flow algorithms.

    Implementations compute a displacement field mapping ``image_b`` onto
    ``image_a``: the value stored at pixel (x, y) of the field names the
    source coordinate ``(x + dx, y + dy)`` in ``image_b`` whose content
    belongs at (x, y) in ``image_a``.
    """

    def compute_flow(
        self,
        image_a: np.ndarray,
        image_b: np.ndarray,
        prior_flow: np.ndarray | None,
        prior_a: np.ndarray | None,
        prior_b: np.ndarray | None,
        hint: DirectionHint,
    ) -> np.ndarray:
        """Compute the displacement field from image_a to image_b.

        Args:
            image_a: Reference BGRA image (H, W, 4) uint8.
            image_b: Image to align onto image_a, BGRA (H, W, 4) uint8.
            prior_flow: Previous frame's field (H, W, 2) float32, or None.
            prior_a: Previous frame's image_a, or None.
            prior_b: Previous frame's image_b, or None.
            hint: Expected motion direction prior.

        Returns:
            Displacement field (H, W, 2) float32 as (dx, dy).

        Raises:
            FlowComputationError: If the algorithm fails.
        """
        ...

    def close(self) -> None:
        """Release any resources held by the provider."""
        ...
