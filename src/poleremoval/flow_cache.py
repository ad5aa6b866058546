"""On-disk cache of the previous frame's flow and flow input images."""

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .errors import ResourceError
from .io import ImreadMode, read_image, write_image

logger = logging.getLogger(__name__)

FLOW_FILENAME = Path("flow") / "flow_bottom_secondary.bin"
PRIMARY_FILENAME = Path("flow_images") / "bottomImage.png"
SECONDARY_FILENAME = Path("flow_images") / "bottomImage2.png"

_HEADER_DTYPE = np.dtype("<i4")
_FLOW_DTYPE = np.dtype("<f4")


def save_flow(path: str | Path, flow: np.ndarray) -> None:
    """Serialize a displacement field.

    Layout: int32 rows, int32 cols, then rows * cols * 2 float32 values
    (dx, dy interleaved, row-major), all little-endian.

    Args:
        path: Output file path.
        flow: Displacement field (H, W, 2).
    """
    if flow.ndim != 3 or flow.shape[2] != 2:
        raise ValueError(f"Expected flow of shape (H, W, 2), got {flow.shape}")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows, cols = flow.shape[:2]
    try:
        with open(path, "wb") as f:
            f.write(np.array([rows, cols], dtype=_HEADER_DTYPE).tobytes())
            f.write(np.ascontiguousarray(flow, dtype=_FLOW_DTYPE).tobytes())
    except OSError as e:
        raise ResourceError(f"Failed to write flow file {path}: {e}") from e


def load_flow(path: str | Path) -> np.ndarray:
    """Deserialize a displacement field written by save_flow.

    Returns:
        Displacement field (H, W, 2) float32.

    Raises:
        ResourceError: If the file is missing, truncated or has a bad header.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ResourceError(f"Failed to read flow file {path}: {e}") from e

    header_size = 2 * _HEADER_DTYPE.itemsize
    if len(data) < header_size:
        raise ResourceError(f"Flow file too short for header: {path}")

    header = np.frombuffer(data[:header_size], dtype=_HEADER_DTYPE)
    rows, cols = int(header[0]), int(header[1])
    if rows <= 0 or cols <= 0:
        raise ResourceError(f"Flow file has invalid size {rows}x{cols}: {path}")

    expected = rows * cols * 2 * _FLOW_DTYPE.itemsize
    payload = data[header_size:]
    if len(payload) != expected:
        raise ResourceError(
            f"Flow file {path} is corrupt: expected {expected} bytes of flow "
            f"for {rows}x{cols}, got {len(payload)}"
        )

    flow = np.frombuffer(payload, dtype=_FLOW_DTYPE).reshape(rows, cols, 2)
    return flow.astype(np.float32)


@dataclass
class FrameCache:
    """Flow and flow inputs carried from one video frame to the next.

    All fields are None when no previous frame is available.
    """

    flow: np.ndarray | None = None
    primary: np.ndarray | None = None
    secondary: np.ndarray | None = None


def load_frame_cache(prev_frame_dir: str | Path | None) -> FrameCache:
    """Load the previous frame's cache.

    Args:
        prev_frame_dir: Output directory of the previous frame, or None when
            there is no previous frame (not an error).

    Returns:
        Populated FrameCache, or an empty one if prev_frame_dir is None.

    Raises:
        ResourceError: If prev_frame_dir is set but any cache file is missing
            or unreadable.
    """
    if prev_frame_dir is None:
        return FrameCache()

    prev_frame_dir = Path(prev_frame_dir)
    logger.info("Reading previous frame flow from %s", prev_frame_dir)
    return FrameCache(
        flow=load_flow(prev_frame_dir / FLOW_FILENAME),
        primary=read_image(prev_frame_dir / PRIMARY_FILENAME, ImreadMode.UNCHANGED),
        secondary=read_image(prev_frame_dir / SECONDARY_FILENAME, ImreadMode.UNCHANGED),
    )


def save_frame_cache(
    output_dir: str | Path,
    flow: np.ndarray,
    primary: np.ndarray,
    secondary: np.ndarray,
) -> None:
    """Write the flow and its two input images for the next frame."""
    output_dir = Path(output_dir)
    logger.info("Saving bottom-secondary flow and images to %s", output_dir)
    save_flow(output_dir / FLOW_FILENAME, flow)
    write_image(output_dir / PRIMARY_FILENAME, primary)
    write_image(output_dir / SECONDARY_FILENAME, secondary)


__all__ = [
    "FLOW_FILENAME",
    "PRIMARY_FILENAME",
    "SECONDARY_FILENAME",
    "FrameCache",
    "save_flow",
    "load_flow",
    "load_frame_cache",
    "save_frame_cache",
]
