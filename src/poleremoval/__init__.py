"""Bottom image fusion with support pole removal for panoramic camera rigs."""

from .alpha import (
    build_alpha_image,
    circle_alpha_cut,
    cut_pole_mask,
    feather_alpha_channel,
)
from .camera import CameraModel, get_bottom_cameras, load_camera_rig
from .color import (
    ColorAdjustmentModel,
    apply_color_adjustment_model,
    build_color_adjustment_model,
)
from .composite import composite_images, repair_alpha_hole
from .config import PoleRemovalConfig
from .errors import (
    DimensionMismatchError,
    FlowComputationError,
    PoleRemovalError,
    ResourceError,
)
from .flow import (
    DirectionHint,
    FlowProvider,
    available_flow_providers,
    flow_provider,
    make_flow_provider,
    register_flow_provider,
)
from .flow_cache import (
    FrameCache,
    load_flow,
    load_frame_cache,
    save_flow,
    save_frame_cache,
)
from .pipeline import (
    PipelineContext,
    PoleRemovalResult,
    build_pipeline_context,
    process_frame,
    run_pipeline,
    run_sequence,
)
from .warp import warp_image

__version__ = "0.1.0"

__all__ = [
    "PoleRemovalConfig",
    "CameraModel",
    "load_camera_rig",
    "get_bottom_cameras",
    "PoleRemovalError",
    "ResourceError",
    "DimensionMismatchError",
    "FlowComputationError",
    "build_alpha_image",
    "circle_alpha_cut",
    "cut_pole_mask",
    "feather_alpha_channel",
    "DirectionHint",
    "FlowProvider",
    "available_flow_providers",
    "flow_provider",
    "make_flow_provider",
    "register_flow_provider",
    "FrameCache",
    "save_flow",
    "load_flow",
    "load_frame_cache",
    "save_frame_cache",
    "warp_image",
    "ColorAdjustmentModel",
    "build_color_adjustment_model",
    "apply_color_adjustment_model",
    "composite_images",
    "repair_alpha_hole",
    "PipelineContext",
    "PoleRemovalResult",
    "build_pipeline_context",
    "process_frame",
    "run_pipeline",
    "run_sequence",
]
