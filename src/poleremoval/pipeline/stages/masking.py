"""Input loading and alpha mask construction stage."""

import logging
from pathlib import Path

import cv2
import numpy as np

from ...alpha import build_alpha_image, load_pole_mask
from ...errors import DimensionMismatchError, ResourceError
from ...io import ImreadMode, read_image
from ...profiling import timed_stage
from ..context import PipelineContext

logger = logging.getLogger(__name__)


def _load_pole_masks(
    ctx: PipelineContext, pole_mask_dir: Path
) -> tuple[np.ndarray, np.ndarray]:
    """Load both pole masks; any failure names both mask paths."""
    path = pole_mask_dir / f"{ctx.primary_camera.camera_id}.png"
    path2 = pole_mask_dir / f"{ctx.secondary_camera.camera_id}.png"
    try:
        return load_pole_mask(path), load_pole_mask(path2)
    except ResourceError as e:
        raise ResourceError(f"missing or bad pole mask: {path}, {path2}") from e


def run_masking_stage(
    ctx: PipelineContext,
    images_dir: Path,
) -> tuple[np.ndarray, np.ndarray]:
    """Read both bottom images and build their feathered alpha channels.

    The secondary image is rotated 180 degrees afterwards when its camera
    is mounted flipped.

    Args:
        ctx: Pipeline context.
        images_dir: Directory holding {camera_id}.png for both cameras.

    Returns:
        Tuple of (primary, secondary) BGRA images (H, W, 4) uint8.

    Raises:
        ResourceError: If an image or pole mask is missing or unreadable.
        DimensionMismatchError: If the two images differ in size.
    """
    with timed_stage("masking", logger):
        config = ctx.config
        primary_cam = ctx.primary_camera
        secondary_cam = ctx.secondary_camera

        primary = read_image(
            images_dir / f"{primary_cam.camera_id}.png", ImreadMode.COLOR
        )
        secondary = read_image(
            images_dir / f"{secondary_cam.camera_id}.png", ImreadMode.COLOR
        )
        if primary.shape != secondary.shape:
            raise DimensionMismatchError(
                f"Bottom images differ in size: {primary_cam.camera_id} is "
                f"{primary.shape[1]}x{primary.shape[0]}, {secondary_cam.camera_id} is "
                f"{secondary.shape[1]}x{secondary.shape[0]}"
            )

        pole_mask, pole_mask2 = _load_pole_masks(ctx, Path(config.paths.pole_mask_dir))

        logger.info("Building alpha channels from usable radius and pole masks")
        feather = config.blending.alpha_feather_size
        primary = build_alpha_image(
            primary, primary_cam.usable_pixels_radius, pole_mask, feather
        )
        secondary = build_alpha_image(
            secondary, secondary_cam.usable_pixels_radius, pole_mask2, feather
        )

        if secondary_cam.flip180:
            secondary = cv2.flip(secondary, -1)

        return primary, secondary
