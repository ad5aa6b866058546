"""Optical flow alignment stage."""

import logging
from pathlib import Path

import numpy as np

from ...flow import flow_provider
from ...flow_cache import load_frame_cache
from ...profiling import timed_stage
from ..context import PipelineContext

logger = logging.getLogger(__name__)


def run_alignment_stage(
    primary: np.ndarray,
    secondary: np.ndarray,
    ctx: PipelineContext,
    prev_frame_dir: Path | None = None,
) -> np.ndarray:
    """Compute the displacement field aligning the secondary onto the primary.

    When prev_frame_dir is given, the previous frame's flow and images seed
    the solver. The flow provider is held only for the duration of the
    computation.

    Args:
        primary: Primary BGRA image (H, W, 4) uint8.
        secondary: Secondary BGRA image (H, W, 4) uint8.
        ctx: Pipeline context.
        prev_frame_dir: Previous frame's output directory, or None.

    Returns:
        Displacement field (H, W, 2) float32.

    Raises:
        ResourceError: If the previous frame cache cannot be read.
        FlowComputationError: If the flow provider fails.
    """
    with timed_stage("alignment", logger):
        alignment = ctx.config.alignment

        cache = load_frame_cache(prev_frame_dir)

        logger.info(
            "Computing %s optical flow to merge bottom camera images",
            alignment.flow_algorithm,
        )
        with flow_provider(
            alignment.flow_algorithm,
            hint_seed=alignment.hint_seed,
            static_threshold=alignment.static_threshold,
        ) as provider:
            flow = provider.compute_flow(
                primary,
                secondary,
                cache.flow,
                cache.primary,
                cache.secondary,
                alignment.direction_hint,
            )

        return flow
