"""Debug image dumps."""

import logging
from pathlib import Path

import matplotlib
import numpy as np

from .io import write_image

logger = logging.getLogger(__name__)


def flow_to_color(flow: np.ndarray, max_magnitude: float | None = None) -> np.ndarray:
    """Render displacement magnitude with the viridis colormap.

    Args:
        flow: Displacement field (H, W, 2).
        max_magnitude: Magnitude mapped to the top of the colormap. Defaults
            to the field's maximum.

    Returns:
        BGR image (H, W, 3) uint8.
    """
    magnitude = np.linalg.norm(flow.astype(np.float64), axis=2)
    if max_magnitude is None:
        max_magnitude = float(magnitude.max())
    normalized = magnitude / max(max_magnitude, 1e-6)

    cmap = matplotlib.colormaps["viridis"]
    colored = cmap(np.clip(normalized, 0.0, 1.0))  # (H, W, 4) RGBA float [0, 1]
    return (colored[:, :, :3][:, :, ::-1] * 255).astype(np.uint8)


def save_debug_images(output_dir: str | Path, images: dict[str, np.ndarray]) -> None:
    """Write named debug images as PNGs into output_dir.

    Args:
        output_dir: Destination directory (created if needed).
        images: Mapping from file stem to image array.
    """
    output_dir = Path(output_dir)
    for name, image in images.items():
        write_image(output_dir / f"{name}.png", image)
    logger.debug("Saved %d debug image(s) to %s", len(images), output_dir)


__all__ = ["flow_to_color", "save_debug_images"]
