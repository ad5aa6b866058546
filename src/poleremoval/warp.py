"""Resample an image through a dense displacement field."""

import cv2
import numpy as np

from .errors import DimensionMismatchError


def build_remap_grid(flow: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Absolute source coordinates for cv2.remap.

    Args:
        flow: Displacement field (H, W, 2) as (dx, dy).

    Returns:
        Tuple of (map_x, map_y), each (H, W) float32, where
        map_x[y, x] = x + dx[y, x] and map_y[y, x] = y + dy[y, x].
    """
    H, W = flow.shape[:2]
    xx, yy = np.meshgrid(
        np.arange(W, dtype=np.float32), np.arange(H, dtype=np.float32)
    )
    map_x = xx + flow[:, :, 0].astype(np.float32)
    map_y = yy + flow[:, :, 1].astype(np.float32)
    return map_x, map_y


def warp_image(image: np.ndarray, flow: np.ndarray) -> np.ndarray:
    """Warp an image so that out[y, x] = image sampled at (x + dx, y + dy).

    Uses bicubic interpolation; samples outside the image are filled with
    zeros (black, fully transparent for BGRA input).

    Args:
        image: Source image (H, W, C) uint8.
        flow: Displacement field (H, W, 2) float32.

    Returns:
        Warped image with the same shape and dtype as the input.

    Raises:
        DimensionMismatchError: If the field and image differ in size.
    """
    if flow.shape[:2] != image.shape[:2]:
        raise DimensionMismatchError(
            f"Displacement field size {flow.shape[:2]} does not match "
            f"image size {image.shape[:2]}"
        )

    map_x, map_y = build_remap_grid(flow)
    return cv2.remap(
        image,
        map_x,
        map_y,
        interpolation=cv2.INTER_CUBIC,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=0,
    )


__all__ = ["build_remap_grid", "warp_image"]
