"""Warp stage: resample the secondary image onto the primary."""

import logging

import numpy as np

from ...profiling import timed_stage
from ...warp import warp_image

logger = logging.getLogger(__name__)


def run_warp_stage(secondary: np.ndarray, flow: np.ndarray) -> np.ndarray:
    """Warp the secondary bottom image through the displacement field.

    Raises:
        DimensionMismatchError: If the field and image differ in size.
    """
    with timed_stage("warp", logger):
        logger.info("Warping secondary bottom camera to align with primary")
        return warp_image(secondary, flow)
