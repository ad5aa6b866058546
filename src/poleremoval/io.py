"""Image read/write helpers that fail loudly."""

import logging
from enum import IntEnum
from pathlib import Path

import cv2
import numpy as np

from .errors import ResourceError

logger = logging.getLogger(__name__)


class ImreadMode(IntEnum):
    """Decode modes accepted by read_image (thin aliases of cv2 flags)."""

    UNCHANGED = cv2.IMREAD_UNCHANGED
    GRAYSCALE = cv2.IMREAD_GRAYSCALE
    COLOR = cv2.IMREAD_COLOR


def read_image(path: str | Path, mode: ImreadMode = ImreadMode.COLOR) -> np.ndarray:
    """Read an image from disk.

    Args:
        path: Image file path.
        mode: Decode mode. COLOR yields BGR (H, W, 3), UNCHANGED keeps an
            alpha channel if the file has one.

    Returns:
        Decoded image, uint8.

    Raises:
        ResourceError: If the file cannot be read or decodes to zero size.
    """
    path = Path(path)
    image = cv2.imread(str(path), int(mode))
    if image is None or image.size == 0:
        raise ResourceError(f"Failed to read image: {path}")
    logger.debug("Read %s %s", path, image.shape)
    return image


def write_image(path: str | Path, image: np.ndarray) -> None:
    """Write an image to disk, creating parent directories.

    Raises:
        ResourceError: If encoding or writing fails.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        ok = cv2.imwrite(str(path), image)
    except (OSError, cv2.error) as e:
        raise ResourceError(f"Failed to write image {path}: {e}") from e
    if not ok:
        raise ResourceError(f"Failed to write image: {path}")
    logger.debug("Wrote %s", path)


def list_frame_dirs(root: str | Path) -> list[Path]:
    """List per-frame image directories under a sequence root.

    Args:
        root: Directory whose sub-directories each hold one frame's images.

    Returns:
        Sub-directories sorted by name.

    Raises:
        ResourceError: If root does not exist or has no sub-directories.
    """
    root = Path(root)
    if not root.is_dir():
        raise ResourceError(f"Frame root is not a directory: {root}")

    frame_dirs = sorted((p for p in root.iterdir() if p.is_dir()), key=lambda p: p.name)
    if not frame_dirs:
        raise ResourceError(f"No frame directories found in {root}")

    logger.info("Detected %d frames in %s", len(frame_dirs), root)
    return frame_dirs


__all__ = ["ImreadMode", "read_image", "write_image", "list_frame_dirs"]
