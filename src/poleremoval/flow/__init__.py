"""Pluggable dense optical flow providers."""

from .opencv_flow import (
    DISFlowProvider,
    FarnebackFlowProvider,
    OpenCVFlowProvider,
    hint_seed_flow,
    to_flow_gray,
)
from .protocol import DirectionHint, FlowProvider
from .registry import (
    available_flow_providers,
    flow_provider,
    make_flow_provider,
    register_flow_provider,
    unregister_flow_provider,
)

__all__ = [
    "DirectionHint",
    "FlowProvider",
    "OpenCVFlowProvider",
    "FarnebackFlowProvider",
    "DISFlowProvider",
    "hint_seed_flow",
    "to_flow_gray",
    "available_flow_providers",
    "flow_provider",
    "make_flow_provider",
    "register_flow_provider",
    "unregister_flow_provider",
]
