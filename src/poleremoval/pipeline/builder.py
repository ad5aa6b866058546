"""Pipeline context builder for one-time initialization."""

import logging

from ..camera import CameraModel, get_bottom_cameras, load_camera_rig
from ..config import PoleRemovalConfig
from .context import PipelineContext

logger = logging.getLogger(__name__)


def build_pipeline_context(
    config: PoleRemovalConfig,
    cameras: dict[str, CameraModel] | None = None,
) -> PipelineContext:
    """Resolve the primary and secondary bottom cameras for a run.

    Args:
        config: Full pipeline configuration.
        cameras: Camera models keyed by id. Loaded from
            ``config.paths.rig_path`` when omitted.

    Returns:
        PipelineContext for the run.
    """
    if cameras is None:
        logger.info("Loading camera rig from %s", config.paths.rig_path)
        cameras = load_camera_rig(config.paths.rig_path)

    primary, secondary = get_bottom_cameras(
        cameras,
        primary_id=config.cameras.primary_camera_id,
        secondary_id=config.cameras.secondary_camera_id,
    )
    logger.info(
        "Bottom cameras: primary=%s (radius %.1f), secondary=%s (radius %.1f%s)",
        primary.camera_id,
        primary.usable_pixels_radius,
        secondary.camera_id,
        secondary.usable_pixels_radius,
        ", flipped" if secondary.flip180 else "",
    )

    return PipelineContext(
        config=config,
        primary_camera=primary,
        secondary_camera=secondary,
    )
