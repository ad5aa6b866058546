"""Pipeline context dataclass for per-run constant data."""

from dataclasses import dataclass

from ..camera import CameraModel
from ..config import PoleRemovalConfig


@dataclass
class PipelineContext:
    """Data that is constant across all frames of a run.

    Created once by build_pipeline_context() and reused for every frame.
    """

    config: PoleRemovalConfig
    primary_camera: CameraModel
    secondary_camera: CameraModel
