"""Alpha-weighted fill of the primary bottom image from the secondary."""

import numpy as np

from .alpha import circle_alpha_cut, feather_alpha_channel
from .errors import DimensionMismatchError


def composite_images(primary: np.ndarray, secondary: np.ndarray) -> np.ndarray:
    """Fill gaps in the primary image with the secondary image, in place.

    Let a1 and a2 be the primary and secondary alpha in [0, 1]. Where
    ``a1 < 1`` and ``a2 > 0`` the colour becomes
    ``a1 * primary + (1 - a1) * secondary`` and alpha becomes 255. All other
    pixels are left untouched, alpha included.

    The primary is trusted exactly as much as its alpha claims; the
    secondary's alpha only gates whether it contributes, its magnitude is
    not used as a weight.

    Args:
        primary: Primary BGRA image (H, W, 4) uint8, modified in place.
        secondary: Colour-corrected, warped secondary BGRA image (H, W, 4).

    Returns:
        The primary image.

    Raises:
        DimensionMismatchError: If the images differ in size.
    """
    if primary.shape != secondary.shape:
        raise DimensionMismatchError(
            f"Cannot composite {secondary.shape} onto {primary.shape}"
        )

    a1 = primary[:, :, 3].astype(np.float32) / 255.0
    a2 = secondary[:, :, 3].astype(np.float32) / 255.0
    fill = (a1 < 1.0) & (a2 > 0.0)
    if not np.any(fill):
        return primary

    w = a1[fill][:, None]
    blended = w * primary[fill][:, :3] + (1.0 - w) * secondary[fill][:, :3]

    # uint8 conversion truncates, like a float-to-byte cast
    primary[fill, :3] = blended.astype(np.uint8)
    primary[fill, 3] = 255
    return primary


def repair_alpha_hole(
    image: np.ndarray, usable_pixels_radius: float, feather_size: int
) -> np.ndarray:
    """Redo the usable-circle alpha and feathering on a composite.

    Closes the transparent hole left where both cameras' pole masks overlap.

    Returns:
        New BGRA image with a clean circular, feathered alpha channel.
    """
    circle_alpha_cut(image, usable_pixels_radius)
    return feather_alpha_channel(image, feather_size)


__all__ = ["composite_images", "repair_alpha_hole"]
