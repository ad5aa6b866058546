"""Photometric matching of the warped secondary image to the primary image."""

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

VALID_COLOR_METHODS = ["mean_std", "histogram"]

NUM_BINS = 256

# Channels whose standard deviation falls below this are treated as uniform.
MIN_CHANNEL_STD = 1e-3


@dataclass
class ColorAdjustmentModel:
    """Per-channel lookup tables mapping secondary colors onto the primary.

    Attributes:
        luts: Lookup tables, shape (3, 256) uint8, one per BGR channel.
        method: Fitting method that produced the tables.
        num_samples: Number of overlapping pixels the fit used.
    """

    luts: np.ndarray
    method: str = "mean_std"
    num_samples: int = 0

    @classmethod
    def identity(cls, method: str = "mean_std") -> "ColorAdjustmentModel":
        luts = np.tile(np.arange(NUM_BINS, dtype=np.uint8), (3, 1))
        return cls(luts=luts, method=method, num_samples=0)

    @property
    def is_identity(self) -> bool:
        return bool(np.all(self.luts == np.arange(NUM_BINS, dtype=np.uint8)))


def _overlap_samples(
    primary: np.ndarray, secondary: np.ndarray, min_samples: int
) -> tuple[np.ndarray, np.ndarray]:
    """Colour samples (N, 3) from pixels where both images carry data.

    Prefers pixels where both are fully opaque; falls back to any non-zero
    alpha overlap when that leaves fewer than min_samples pixels.
    """
    alpha_p = primary[:, :, 3]
    alpha_s = secondary[:, :, 3]

    overlap = (alpha_p == 255) & (alpha_s == 255)
    if np.count_nonzero(overlap) < min_samples:
        overlap = (alpha_p > 0) & (alpha_s > 0)

    return primary[overlap][:, :3], secondary[overlap][:, :3]


def _fit_mean_std(target: np.ndarray, source: np.ndarray) -> np.ndarray:
    """Per-channel LUTs matching source mean and std to target's."""
    levels = np.arange(NUM_BINS, dtype=np.float64)
    luts = np.tile(levels, (3, 1))

    for c in range(3):
        src = source[:, c].astype(np.float64)
        tgt = target[:, c].astype(np.float64)
        src_std = src.std()
        if src_std < MIN_CHANNEL_STD:
            logger.debug("Channel %d is uniform, leaving unchanged", c)
            continue
        gain = tgt.std() / src_std
        luts[c] = (levels - src.mean()) * gain + tgt.mean()

    return np.clip(np.rint(luts), 0, 255).astype(np.uint8)


def _fit_histogram(target: np.ndarray, source: np.ndarray) -> np.ndarray:
    """Per-channel LUTs matching source CDF to target CDF."""
    luts = np.tile(np.arange(NUM_BINS, dtype=np.uint8), (3, 1))

    for c in range(3):
        src_hist = np.histogram(source[:, c], bins=NUM_BINS, range=(0, 256))[0]
        tgt_hist = np.histogram(target[:, c], bins=NUM_BINS, range=(0, 256))[0]
        if np.count_nonzero(src_hist) <= 1:
            logger.debug("Channel %d is uniform, leaving unchanged", c)
            continue

        src_cdf = np.cumsum(src_hist).astype(np.float64)
        src_cdf /= src_cdf[-1] + 1e-8
        tgt_cdf = np.cumsum(tgt_hist).astype(np.float64)
        tgt_cdf /= tgt_cdf[-1] + 1e-8

        # For each source level, the target level with the closest CDF value
        luts[c] = np.argmin(np.abs(tgt_cdf[None, :] - src_cdf[:, None]), axis=1)

    return luts


def build_color_adjustment_model(
    primary: np.ndarray,
    warped_secondary: np.ndarray,
    method: str = "mean_std",
    min_samples: int = 64,
) -> ColorAdjustmentModel:
    """Fit a color model mapping the warped secondary onto the primary.

    Statistics are taken only over pixels where both images have data.

    Args:
        primary: Primary BGRA image (H, W, 4) uint8.
        warped_secondary: Secondary BGRA image warped onto the primary,
            (H, W, 4) uint8.
        method: "mean_std" (per-channel mean/variance matching) or
            "histogram" (per-channel histogram matching).
        min_samples: Minimum number of overlapping pixels needed for a fit.
            Below this the identity model is returned.

    Returns:
        Fitted ColorAdjustmentModel.

    Raises:
        ValueError: If method is not recognized.
    """
    if method not in VALID_COLOR_METHODS:
        raise ValueError(
            f"Invalid color method: {method!r}. Must be one of {VALID_COLOR_METHODS}."
        )

    target, source = _overlap_samples(primary, warped_secondary, min_samples)
    num_samples = target.shape[0]
    if num_samples < max(min_samples, 1):
        logger.warning(
            "Only %d overlapping pixels for color matching (need %d); "
            "skipping color adjustment",
            num_samples,
            min_samples,
        )
        return ColorAdjustmentModel.identity(method)

    if method == "mean_std":
        luts = _fit_mean_std(target, source)
    else:  # histogram
        luts = _fit_histogram(target, source)

    logger.debug("Fitted %s color model on %d pixels", method, num_samples)
    return ColorAdjustmentModel(luts=luts, method=method, num_samples=num_samples)


def apply_color_adjustment_model(
    image: np.ndarray, model: ColorAdjustmentModel
) -> np.ndarray:
    """Apply per-channel LUTs to the colour channels of an image.

    Args:
        image: BGR or BGRA image (H, W, 3|4) uint8. Not modified.
        model: Fitted color model.

    Returns:
        Adjusted copy of the image; any alpha channel is unchanged.
    """
    adjusted = image.copy()
    for c in range(3):
        adjusted[:, :, c] = model.luts[c][image[:, :, c]]
    return adjusted


__all__ = [
    "VALID_COLOR_METHODS",
    "ColorAdjustmentModel",
    "build_color_adjustment_model",
    "apply_color_adjustment_model",
]
