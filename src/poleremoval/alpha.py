"""Alpha channel construction: usable-circle cut, pole mask cut, feathering."""

import logging
from pathlib import Path

import cv2
import numpy as np
from scipy.ndimage import distance_transform_edt

from .errors import DimensionMismatchError
from .io import ImreadMode, read_image

logger = logging.getLogger(__name__)

# Pole masks are painted in pure red; anything this close counts as painted.
RED_CHANNEL_MIN = 128
OTHER_CHANNEL_MAX = 127


def add_alpha_channel(image: np.ndarray) -> np.ndarray:
    """Convert a BGR image to BGRA with a fully opaque alpha channel.

    BGRA input is returned as a copy with its alpha channel preserved.
    """
    if image.ndim == 3 and image.shape[2] == 4:
        return image.copy()
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)


def circle_alpha_cut(image: np.ndarray, radius: float) -> np.ndarray:
    """Set alpha to 255 inside the usable circle and 0 outside, in place.

    The circle is centred at (cols / 2, rows / 2) in pixel coordinates.

    Args:
        image: BGRA image (H, W, 4) uint8, modified in place.
        radius: Usable-pixel radius in pixels.

    Returns:
        The same image, for chaining.
    """
    H, W = image.shape[:2]
    yy, xx = np.mgrid[0:H, 0:W].astype(np.float32)
    dist = np.hypot(xx - W / 2.0, yy - H / 2.0)
    image[:, :, 3] = np.where(dist <= radius, 255, 0).astype(np.uint8)
    return image


def pole_pixels(pole_mask: np.ndarray) -> np.ndarray:
    """Boolean map of pixels marked as pole in a painted mask.

    Colour masks mark the pole in red; single-channel masks mark it with
    any bright value.

    Args:
        pole_mask: Mask image, (H, W) or (H, W, 3|4) uint8 in BGR order.

    Returns:
        Boolean array (H, W), True on pole pixels.
    """
    if pole_mask.ndim == 2:
        return pole_mask >= RED_CHANNEL_MIN

    b = pole_mask[:, :, 0]
    g = pole_mask[:, :, 1]
    r = pole_mask[:, :, 2]
    return (r >= RED_CHANNEL_MIN) & (g <= OTHER_CHANNEL_MAX) & (b <= OTHER_CHANNEL_MAX)


def cut_pole_mask(image: np.ndarray, pole_mask: np.ndarray) -> np.ndarray:
    """Zero the alpha channel wherever the pole mask is painted, in place.

    Args:
        image: BGRA image (H, W, 4) uint8, modified in place.
        pole_mask: Painted pole mask with the same (H, W) as image.

    Returns:
        The same image, for chaining.

    Raises:
        DimensionMismatchError: If the mask size differs from the image size.
    """
    if pole_mask.shape[:2] != image.shape[:2]:
        raise DimensionMismatchError(
            f"Pole mask size {pole_mask.shape[:2]} does not match "
            f"image size {image.shape[:2]}"
        )
    image[pole_pixels(pole_mask), 3] = 0
    return image


def feather_alpha_channel(image: np.ndarray, feather_size: int) -> np.ndarray:
    """Smooth hard alpha edges into a linear ramp.

    Each pixel's alpha becomes ``min(alpha, 255 * d / feather_size)``, where
    ``d`` is the Euclidean distance to the nearest fully transparent pixel.
    Alpha therefore rises monotonically moving inward across a band of
    ``feather_size`` pixels and is untouched beyond it.

    Args:
        image: BGRA image (H, W, 4) uint8. Not modified.
        feather_size: Width of the ramp in pixels. Values <= 0 disable
            feathering.

    Returns:
        New BGRA image with the feathered alpha channel.
    """
    result = image.copy()
    alpha = image[:, :, 3]
    if feather_size <= 0 or not np.any(alpha == 0):
        return result

    dist = distance_transform_edt(alpha > 0)
    ramp = np.clip(255.0 * dist / feather_size, 0.0, 255.0)
    result[:, :, 3] = np.minimum(alpha.astype(np.float64), ramp).astype(np.uint8)
    return result


def load_pole_mask(path: str | Path) -> np.ndarray:
    """Load a painted pole mask as BGR.

    Raises:
        ResourceError: If the mask is missing, unreadable or zero-size.
    """
    return read_image(path, ImreadMode.COLOR)


def build_alpha_image(
    image: np.ndarray,
    usable_pixels_radius: float,
    pole_mask: np.ndarray,
    feather_size: int,
) -> np.ndarray:
    """Build the feathered, pole-masked BGRA image for one bottom camera.

    Args:
        image: BGR image (H, W, 3) uint8.
        usable_pixels_radius: Usable-pixel radius of the camera.
        pole_mask: Painted pole mask (H, W[, 3]).
        feather_size: Feather ramp width in pixels.

    Returns:
        BGRA image (H, W, 4) uint8.
    """
    bgra = add_alpha_channel(image)
    circle_alpha_cut(bgra, usable_pixels_radius)
    cut_pole_mask(bgra, pole_mask)
    return feather_alpha_channel(bgra, feather_size)


__all__ = [
    "add_alpha_channel",
    "circle_alpha_cut",
    "pole_pixels",
    "cut_pole_mask",
    "feather_alpha_channel",
    "load_pole_mask",
    "build_alpha_image",
]
