"""Pipeline runner: orchestrates stage execution and provides public API."""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from tqdm import tqdm

from ..camera import CameraModel
from ..config import PoleRemovalConfig
from ..errors import PoleRemovalError
from ..flow_cache import save_frame_cache
from ..io import list_frame_dirs, write_image
from ..visualization import flow_to_color, save_debug_images
from .builder import build_pipeline_context
from .context import PipelineContext
from .stages.alignment import run_alignment_stage
from .stages.color_transfer import run_color_stage
from .stages.compositing import run_composite_stage
from .stages.masking import run_masking_stage
from .stages.warping import run_warp_stage

logger = logging.getLogger(__name__)

OUTPUT_FILENAME = "bottom.png"


@dataclass
class PoleRemovalResult:
    """Output of one frame.

    Attributes:
        image: Combined BGRA bottom image (H, W, 4) uint8.
        primary_camera: Camera the combined image is aligned with.
        flow: Displacement field used to warp the secondary image.
    """

    image: np.ndarray
    primary_camera: CameraModel
    flow: np.ndarray


def process_frame(
    ctx: PipelineContext,
    images_dir: Path,
    output_dir: Path,
    prev_frame_dir: Path | None = None,
) -> PoleRemovalResult:
    """Fuse the two bottom camera images of one frame, removing the pole.

    Stages: alpha masks, optical flow alignment, warp, colour transfer,
    compositing. Only the flow cache and debug images (when enabled) are
    written; the combined image is returned, not saved. The flow cache is
    written only once compositing has succeeded.

    Args:
        ctx: Pipeline context from build_pipeline_context().
        images_dir: Directory with this frame's {camera_id}.png images.
        output_dir: Directory for this frame's debug images and flow cache.
        prev_frame_dir: Previous frame's output directory for temporal warm
            start, or None when there is no previous frame.

    Returns:
        PoleRemovalResult for the frame.

    Raises:
        ResourceError: Missing or unreadable image, mask or cache file.
        DimensionMismatchError: Bottom images differ in size.
        FlowComputationError: The flow provider failed.
    """
    config = ctx.config
    save_debug = config.runtime.save_debug_images

    # --- Stage 1: Alpha masks ---
    primary, secondary = run_masking_stage(ctx, Path(images_dir))

    # --- Stage 2: Alignment ---
    flow = run_alignment_stage(primary, secondary, ctx, prev_frame_dir)

    # --- Stage 3: Warp ---
    warped = run_warp_stage(secondary, flow)

    if save_debug:
        save_debug_images(
            output_dir,
            {
                "bottomImage": primary,
                "bottomImage2": secondary,
                "bottomWarp2": warped,
                "bottomFlow": flow_to_color(flow),
            },
        )

    # --- Stage 4: Colour transfer ---
    adjusted = run_color_stage(primary, warped, ctx)

    # Compositing fills the primary in place; the cache keeps the flow input.
    cache_primary = primary.copy() if config.runtime.save_flow_for_next_frame else None

    # --- Stage 5: Composite ---
    combined = run_composite_stage(primary, adjusted, ctx)

    if cache_primary is not None:
        save_frame_cache(output_dir, flow, cache_primary, secondary)

    if save_debug:
        save_debug_images(output_dir, {"_bottomCombined": combined})

    return PoleRemovalResult(
        image=combined,
        primary_camera=ctx.primary_camera,
        flow=flow,
    )


def run_pipeline(config: PoleRemovalConfig) -> Path:
    """Run pole removal on a single frame described by the config.

    Writes the combined bottom image to ``{output_dir}/bottom.png`` and a
    copy of the config next to it.

    Args:
        config: Full pipeline configuration.

    Returns:
        Path of the written bottom image.
    """
    ctx = build_pipeline_context(config)
    paths = config.paths
    output_dir = Path(paths.output_dir)
    prev_frame_dir = Path(paths.prev_frame_dir) if paths.prev_frame_dir else None

    result = process_frame(ctx, Path(paths.images_dir), output_dir, prev_frame_dir)

    output_path = output_dir / OUTPUT_FILENAME
    write_image(output_path, result.image)
    config.to_yaml(output_dir / "config.yaml")
    logger.info("Bottom image saved to %s", output_path)
    return output_path


def run_sequence(config: PoleRemovalConfig, frames_root: str | Path) -> list[Path]:
    """Run pole removal over a sequence of frame directories.

    Each sub-directory of frames_root holds one frame's images and gets a
    matching sub-directory under ``output_dir``. With temporal caching
    enabled, each frame warm-starts from the previous frame's flow; the
    first frame uses ``paths.prev_frame_dir`` (usually None). Any frame
    failure aborts the sequence.

    Args:
        config: Full pipeline configuration.
        frames_root: Directory of per-frame image directories.

    Returns:
        Paths of the written bottom images, in frame order.
    """
    ctx = build_pipeline_context(config)
    frame_dirs = list_frame_dirs(frames_root)
    output_root = Path(config.paths.output_dir)
    temporal = config.runtime.save_flow_for_next_frame

    prev_frame_dir = (
        Path(config.paths.prev_frame_dir) if config.paths.prev_frame_dir else None
    )
    outputs = []

    for frame_dir in tqdm(
        frame_dirs,
        desc="Removing pole",
        disable=config.runtime.quiet or not sys.stderr.isatty(),
        unit="frame",
    ):
        frame_output = output_root / frame_dir.name
        try:
            result = process_frame(ctx, frame_dir, frame_output, prev_frame_dir)
        except PoleRemovalError:
            logger.error("Frame %s: pole removal failed, aborting", frame_dir.name)
            raise

        output_path = frame_output / OUTPUT_FILENAME
        write_image(output_path, result.image)
        outputs.append(output_path)
        logger.info("Frame %s: complete", frame_dir.name)

        prev_frame_dir = frame_output if temporal else None

    config.to_yaml(output_root / "config.yaml")
    logger.info("Sequence complete: %d frame(s)", len(outputs))
    return outputs
