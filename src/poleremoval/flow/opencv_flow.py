"""Dense optical flow providers backed by OpenCV (Farneback and DIS)."""

import logging

import cv2
import numpy as np

from ..errors import DimensionMismatchError, FlowComputationError
from .protocol import DirectionHint
from .registry import register_flow_provider

logger = logging.getLogger(__name__)


def to_flow_gray(image: np.ndarray) -> np.ndarray:
    """Convert a BGR(A) image to grayscale, darkened by its alpha channel.

    Transparent regions (outside the usable circle, under the pole) become
    black so the solver does not lock onto them.

    Args:
        image: BGR (H, W, 3) or BGRA (H, W, 4) uint8 image.

    Returns:
        Grayscale image (H, W) uint8.
    """
    if image.ndim == 2:
        return image
    gray = cv2.cvtColor(image[:, :, :3], cv2.COLOR_BGR2GRAY)
    if image.shape[2] == 4:
        weight = image[:, :, 3].astype(np.float32) / 255.0
        gray = (gray.astype(np.float32) * weight).astype(np.uint8)
    return gray


def static_region(
    gray_a: np.ndarray,
    gray_b: np.ndarray,
    prior_a: np.ndarray,
    prior_b: np.ndarray,
    threshold: float,
) -> np.ndarray:
    """Pixels that did not change in either image since the previous frame.

    Returns:
        Boolean array (H, W), True where both absolute differences are at
        most threshold.
    """
    diff_a = cv2.absdiff(gray_a, prior_a)
    diff_b = cv2.absdiff(gray_b, prior_b)
    return (diff_a <= threshold) & (diff_b <= threshold)


def hint_seed_flow(
    shape: tuple[int, int], hint: DirectionHint, magnitude: float
) -> np.ndarray | None:
    """Uniform starting field pointing along the hinted direction.

    The seed only tilts where the solver begins its search. The solved field
    is returned unchanged, so motion against the hint is still recovered.

    Args:
        shape: Field size (H, W).
        hint: Expected motion direction.
        magnitude: Seed length in pixels. 0 disables the seed.

    Returns:
        Displacement field (H, W, 2) float32, or None when there is no hint.
    """
    if hint is DirectionHint.NONE or magnitude <= 0.0:
        return None
    seed = np.empty(tuple(shape) + (2,), dtype=np.float32)
    seed[:] = hint.vector * magnitude
    return seed


class OpenCVFlowProvider:
    """Shared preprocessing, warm start and hint seeding for OpenCV solvers.

    Subclasses implement ``_solve``.

    Args:
        hint_seed: Length in pixels of the starting field laid along the
            direction hint where no previous flow applies. 0 disables it.
        static_threshold: Max grayscale change (0..255) for a pixel to reuse
            the previous frame's flow as its initial estimate.
    """

    name = "opencv"

    def __init__(self, hint_seed: float = 0.5, static_threshold: float = 8.0):
        self.hint_seed = hint_seed
        self.static_threshold = static_threshold

    def _solve(
        self, gray_a: np.ndarray, gray_b: np.ndarray, init_flow: np.ndarray | None
    ) -> np.ndarray:
        raise NotImplementedError

    def initial_flow(
        self,
        gray_a: np.ndarray,
        gray_b: np.ndarray,
        prior_flow: np.ndarray | None,
        prior_a: np.ndarray | None,
        prior_b: np.ndarray | None,
        hint: DirectionHint = DirectionHint.NONE,
    ) -> np.ndarray | None:
        """Starting field for the solver, or None to start cold.

        Pixels unchanged since the previous frame reuse its flow. Every other
        pixel starts from the hint seed (zero without a hint).
        """
        seed = hint_seed_flow(gray_a.shape, DirectionHint(hint), self.hint_seed)
        if prior_flow is None or prior_a is None or prior_b is None:
            return seed
        if prior_flow.size == 0 or prior_a.size == 0 or prior_b.size == 0:
            return seed

        shape = gray_a.shape
        prior_shapes = {prior_flow.shape[:2], prior_a.shape[:2], prior_b.shape[:2]}
        if prior_shapes != {shape}:
            logger.warning(
                "Previous frame data has size %s, current frame %s; ignoring it",
                prior_flow.shape[:2],
                shape,
            )
            return seed

        static = static_region(
            gray_a,
            gray_b,
            to_flow_gray(prior_a),
            to_flow_gray(prior_b),
            self.static_threshold,
        )
        logger.debug(
            "Warm start: reusing previous flow on %.1f%% of pixels",
            100.0 * static.mean(),
        )
        fallback = seed if seed is not None else 0.0
        return np.where(static[:, :, None], prior_flow, fallback).astype(np.float32)

    def compute_flow(
        self,
        image_a: np.ndarray,
        image_b: np.ndarray,
        prior_flow: np.ndarray | None,
        prior_a: np.ndarray | None,
        prior_b: np.ndarray | None,
        hint: DirectionHint,
    ) -> np.ndarray:
        if image_a.shape[:2] != image_b.shape[:2]:
            raise DimensionMismatchError(
                f"Flow inputs differ in size: {image_a.shape[:2]} "
                f"vs {image_b.shape[:2]}"
            )

        gray_a = to_flow_gray(image_a)
        gray_b = to_flow_gray(image_b)
        init = self.initial_flow(gray_a, gray_b, prior_flow, prior_a, prior_b, hint)

        try:
            flow = self._solve(gray_a, gray_b, init)
        except cv2.error as e:
            raise FlowComputationError(f"{self.name} flow failed: {e}") from e

        return flow.astype(np.float32)

    def close(self) -> None:
        pass


@register_flow_provider("farneback")
class FarnebackFlowProvider(OpenCVFlowProvider):
    """Gunnar Farneback's polynomial-expansion flow."""

    name = "farneback"

    def __init__(
        self,
        pyr_scale: float = 0.5,
        levels: int = 5,
        winsize: int = 21,
        iterations: int = 5,
        poly_n: int = 7,
        poly_sigma: float = 1.5,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.pyr_scale = pyr_scale
        self.levels = levels
        self.winsize = winsize
        self.iterations = iterations
        self.poly_n = poly_n
        self.poly_sigma = poly_sigma

    def _solve(self, gray_a, gray_b, init_flow):
        flags = cv2.OPTFLOW_FARNEBACK_GAUSSIAN
        if init_flow is not None:
            flow = init_flow.copy()
            flags |= cv2.OPTFLOW_USE_INITIAL_FLOW
        else:
            flow = None
        return cv2.calcOpticalFlowFarneback(
            gray_a,
            gray_b,
            flow,
            self.pyr_scale,
            self.levels,
            self.winsize,
            self.iterations,
            self.poly_n,
            self.poly_sigma,
            flags,
        )


@register_flow_provider("dis_ultrafast", preset=cv2.DISOPTICAL_FLOW_PRESET_ULTRAFAST)
@register_flow_provider("dis_fast", preset=cv2.DISOPTICAL_FLOW_PRESET_FAST)
@register_flow_provider("dis_medium", preset=cv2.DISOPTICAL_FLOW_PRESET_MEDIUM)
class DISFlowProvider(OpenCVFlowProvider):
    """Dense Inverse Search flow (OpenCV presets)."""

    name = "dis"

    def __init__(self, preset: int = cv2.DISOPTICAL_FLOW_PRESET_MEDIUM, **kwargs):
        super().__init__(**kwargs)
        self.preset = preset
        self._dis = cv2.DISOpticalFlow_create(preset)

    def _solve(self, gray_a, gray_b, init_flow):
        if self._dis is None:
            raise FlowComputationError("DIS flow provider used after close()")
        flow = init_flow.copy() if init_flow is not None else None
        return self._dis.calc(gray_a, gray_b, flow)

    def close(self) -> None:
        self._dis = None
