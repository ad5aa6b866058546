"""Exception taxonomy for the pole removal pipeline.

Every error is fatal for the frame being processed: there is no partial
success and no retry anywhere in the pipeline.
"""


class PoleRemovalError(Exception):
    """Base class for all pole removal failures."""


class ResourceError(PoleRemovalError):
    """An image, mask or cache file is missing, unreadable or zero-size.

    Also raised when an output file cannot be written.
    """


class DimensionMismatchError(PoleRemovalError):
    """Two arrays that must share spatial dimensions do not.

    Raised for primary/secondary image size mismatches, pole masks that do
    not match their image, and displacement fields that do not match the
    image they warp. Indicates an upstream capture or calibration failure.
    """


class FlowComputationError(PoleRemovalError):
    """The optical flow provider failed internally."""


__all__ = [
    "PoleRemovalError",
    "ResourceError",
    "DimensionMismatchError",
    "FlowComputationError",
]
