"""Color transfer stage."""

import logging

import numpy as np

from ...color import apply_color_adjustment_model, build_color_adjustment_model
from ...profiling import timed_stage
from ..context import PipelineContext

logger = logging.getLogger(__name__)


def run_color_stage(
    primary: np.ndarray,
    warped_secondary: np.ndarray,
    ctx: PipelineContext,
) -> np.ndarray:
    """Match the warped secondary's colours to the primary's.

    Returns:
        Colour-corrected copy of warped_secondary.
    """
    with timed_stage("color_transfer", logger):
        blending = ctx.config.blending
        model = build_color_adjustment_model(
            primary,
            warped_secondary,
            method=blending.color_method,
            min_samples=blending.color_min_samples,
        )
        return apply_color_adjustment_model(warped_secondary, model)
