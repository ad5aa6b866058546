"""Compositing stage: fill the primary's pole region from the secondary."""

import logging

import numpy as np

from ...composite import composite_images, repair_alpha_hole
from ...profiling import timed_stage
from ..context import PipelineContext

logger = logging.getLogger(__name__)


def run_composite_stage(
    primary: np.ndarray,
    adjusted_secondary: np.ndarray,
    ctx: PipelineContext,
) -> np.ndarray:
    """Blend the corrected secondary into the primary and clean up alpha.

    The primary buffer is modified in place by the blend.

    Returns:
        Combined BGRA bottom image (H, W, 4) uint8.
    """
    with timed_stage("composite", logger):
        logger.info("Combining the primary bottom image and the secondary warped image")
        composite_images(primary, adjusted_secondary)

        # Pole masks overlap at the very bottom and leave an alpha hole
        return repair_alpha_hole(
            primary,
            ctx.primary_camera.usable_pixels_radius,
            ctx.config.blending.alpha_feather_size,
        )
