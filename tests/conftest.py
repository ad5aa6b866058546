"""Shared pytest fixtures for pole removal tests."""

import json
from pathlib import Path

import cv2
import numpy as np
import pytest

from poleremoval.config import PoleRemovalConfig
from poleremoval.errors import FlowComputationError
from poleremoval.flow import register_flow_provider, unregister_flow_provider

IMAGE_SIZE = 96
RADIUS = 44.0
PRIMARY_ID = "cam_b1"
SECONDARY_ID = "cam_b2"
RED = (0, 0, 255)


def make_textured_image(height: int, width: int, seed: int = 0) -> np.ndarray:
    """Smooth random BGR texture spanning the full 0..255 range.

    Args:
        height: Image height in pixels.
        width: Image width in pixels.
        seed: Random seed.

    Returns:
        BGR image (height, width, 3) uint8.
    """
    rng = np.random.default_rng(seed)
    noise = rng.uniform(0, 255, size=(height, width, 3)).astype(np.float32)
    smooth = cv2.GaussianBlur(noise, (0, 0), sigmaX=2.0)
    smooth -= smooth.min()
    smooth *= 255.0 / smooth.max()
    return smooth.astype(np.uint8)


def make_pole_mask(height: int, width: int, cols: slice, rows: slice) -> np.ndarray:
    """Black BGR mask with a red rectangle painted over the pole."""
    mask = np.zeros((height, width, 3), dtype=np.uint8)
    mask[rows, cols] = RED
    return mask


def write_rig(path: Path, flip180: bool = False) -> Path:
    """Write a two-camera bottom rig plus one side camera."""
    rig = {
        "cameras": [
            {
                "id": SECONDARY_ID,
                "usable_pixels_radius": RADIUS,
                "flip180": flip180,
                "group": "bottom",
            },
            {
                "id": PRIMARY_ID,
                "usable_pixels_radius": RADIUS,
                "flip180": False,
                "group": "bottom",
            },
            {"id": "cam_s1", "usable_pixels_radius": 500.0, "group": "side"},
        ]
    }
    path.write_text(json.dumps(rig))
    return path


class RecordingFlowProvider:
    """Zero-flow provider that records every call it receives.

    State lives on the class because the registry creates a fresh instance
    per frame.
    """

    calls: list[dict] = []
    closed = 0
    fail = False

    def __init__(self, **params):
        self.params = params

    def compute_flow(self, image_a, image_b, prior_flow, prior_a, prior_b, hint):
        cls = type(self)
        cls.calls.append(
            {
                "shape": image_a.shape,
                "prior_flow": prior_flow,
                "prior_a": prior_a,
                "prior_b": prior_b,
                "hint": hint,
                "params": self.params,
            }
        )
        if cls.fail:
            raise FlowComputationError("solver diverged")
        return np.zeros(image_a.shape[:2] + (2,), dtype=np.float32)

    def close(self):
        type(self).closed += 1


@pytest.fixture
def recording_flow():
    """Register RecordingFlowProvider as "recording" for one test."""
    RecordingFlowProvider.calls = []
    RecordingFlowProvider.closed = 0
    RecordingFlowProvider.fail = False
    register_flow_provider("recording")(RecordingFlowProvider)
    yield RecordingFlowProvider
    unregister_flow_provider("recording")


@pytest.fixture
def scene() -> np.ndarray:
    """Textured BGR scene seen identically by both bottom cameras."""
    return make_textured_image(IMAGE_SIZE, IMAGE_SIZE)


@pytest.fixture
def frame_config(
    tmp_path: Path, scene: np.ndarray, recording_flow
) -> PoleRemovalConfig:
    """Config pointing at one synthetic frame on disk.

    Both cameras see the same scene. The primary pole runs down from the
    centre, the secondary pole up from it, so the two never overlap.
    """
    images_dir = tmp_path / "images"
    mask_dir = tmp_path / "masks"
    images_dir.mkdir()
    mask_dir.mkdir()

    cv2.imwrite(str(images_dir / f"{PRIMARY_ID}.png"), scene)
    cv2.imwrite(str(images_dir / f"{SECONDARY_ID}.png"), scene)
    cv2.imwrite(
        str(mask_dir / f"{PRIMARY_ID}.png"),
        make_pole_mask(IMAGE_SIZE, IMAGE_SIZE, slice(44, 52), slice(52, IMAGE_SIZE)),
    )
    cv2.imwrite(
        str(mask_dir / f"{SECONDARY_ID}.png"),
        make_pole_mask(IMAGE_SIZE, IMAGE_SIZE, slice(44, 52), slice(0, 40)),
    )
    rig_path = write_rig(tmp_path / "rig.json")

    return PoleRemovalConfig.model_validate(
        {
            "paths": {
                "images_dir": str(images_dir),
                "pole_mask_dir": str(mask_dir),
                "output_dir": str(tmp_path / "output"),
                "prev_frame_dir": "NONE",
                "rig_path": str(rig_path),
            },
            "alignment": {"flow_algorithm": "recording"},
            "blending": {"alpha_feather_size": 4, "color_min_samples": 16},
        }
    )
