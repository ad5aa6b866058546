"""Pipeline orchestration package for bottom image pole removal.

Provides the pipeline context, builder, and runner functions.
"""

from .builder import build_pipeline_context
from .context import PipelineContext
from .runner import PoleRemovalResult, process_frame, run_pipeline, run_sequence

__all__ = [
    "PipelineContext",
    "PoleRemovalResult",
    "build_pipeline_context",
    "process_frame",
    "run_pipeline",
    "run_sequence",
]
