"""Camera rig metadata needed for bottom image fusion."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ResourceError

logger = logging.getLogger(__name__)

BOTTOM_GROUP = "bottom"


@dataclass(frozen=True)
class CameraModel:
    """Per-camera metadata as loaded from the rig description.

    Attributes:
        camera_id: Camera identifier; also the image and pole mask file stem.
        usable_pixels_radius: Radius in pixels, measured from the image
            centre, inside which the fisheye image is usable.
        flip180: Whether the image must be rotated 180 degrees to line up
            with its counterpart.
        image_size: Image dimensions as (width, height), or None if unknown.
        camera_group: Rig group name (e.g., "bottom", "side", "top").
        extra: Remaining calibration fields, passed through untouched.
    """

    camera_id: str
    usable_pixels_radius: float
    flip180: bool = False
    image_size: tuple[int, int] | None = None
    camera_group: str = ""
    extra: dict[str, Any] = field(default_factory=dict, compare=False)


def _camera_from_dict(entry: dict[str, Any]) -> CameraModel:
    known = {"id", "usable_pixels_radius", "flip180", "image_size", "group"}
    image_size = entry.get("image_size")
    return CameraModel(
        camera_id=str(entry["id"]),
        usable_pixels_radius=float(entry["usable_pixels_radius"]),
        flip180=bool(entry.get("flip180", False)),
        image_size=tuple(image_size) if image_size is not None else None,
        camera_group=str(entry.get("group", "")),
        extra={k: v for k, v in entry.items() if k not in known},
    )


def load_camera_rig(path: str | Path) -> dict[str, CameraModel]:
    """Load camera models from a rig JSON file.

    The file holds ``{"cameras": [{"id": ..., "usable_pixels_radius": ...,
    "flip180": ..., "group": ...}, ...]}``. Unrecognised per-camera keys are
    kept in ``CameraModel.extra``.

    Args:
        path: Path to the rig JSON file.

    Returns:
        Dict of camera_id -> CameraModel, in file order.

    Raises:
        ResourceError: If the file is missing, is not valid JSON, or an entry
            lacks a required field.
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ResourceError(f"Camera rig file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise ResourceError(f"Invalid JSON in camera rig file {path}: {e}") from e

    entries = data.get("cameras") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise ResourceError(f"Camera rig file {path} has no 'cameras' list")

    cameras = {}
    for i, entry in enumerate(entries):
        try:
            camera = _camera_from_dict(entry)
        except (KeyError, TypeError, ValueError) as e:
            raise ResourceError(
                f"Bad camera entry #{i} in rig file {path}: {e!r}"
            ) from e
        cameras[camera.camera_id] = camera

    logger.info("Loaded %d camera(s) from %s", len(cameras), path)
    return cameras


def get_bottom_cameras(
    cameras: dict[str, CameraModel],
    primary_id: str | None = None,
    secondary_id: str | None = None,
) -> tuple[CameraModel, CameraModel]:
    """Select the primary and secondary bottom cameras.

    Explicit ids take precedence. Otherwise the cameras in the "bottom"
    group are sorted by id and the first two are used (primary first).

    Args:
        cameras: Dict of camera_id -> CameraModel.
        primary_id: Optional explicit primary camera id.
        secondary_id: Optional explicit secondary camera id.

    Returns:
        Tuple of (primary, secondary).

    Raises:
        ValueError: If an explicit id is unknown or fewer than two bottom
            cameras are available.
    """
    for camera_id in (primary_id, secondary_id):
        if camera_id is not None and camera_id not in cameras:
            raise ValueError(
                f"Camera {camera_id!r} not found in rig. "
                f"Known cameras: {sorted(cameras)}"
            )

    candidates = sorted(
        name for name, cam in cameras.items() if cam.camera_group == BOTTOM_GROUP
    )
    if primary_id is None:
        remaining = [c for c in candidates if c != secondary_id]
        if not remaining:
            raise ValueError("No primary bottom camera available in rig")
        primary_id = remaining[0]
    if secondary_id is None:
        remaining = [c for c in candidates if c != primary_id]
        if not remaining:
            raise ValueError("No secondary bottom camera available in rig")
        secondary_id = remaining[0]

    if primary_id == secondary_id:
        raise ValueError(
            f"Primary and secondary bottom camera are the same: {primary_id!r}"
        )

    return cameras[primary_id], cameras[secondary_id]


__all__ = [
    "BOTTOM_GROUP",
    "CameraModel",
    "load_camera_rig",
    "get_bottom_cameras",
]
