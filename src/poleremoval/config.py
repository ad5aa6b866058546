"""Configuration management for the pole removal pipeline."""

import logging
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .flow import DirectionHint, available_flow_providers

logger = logging.getLogger(__name__)

# Legacy sentinel meaning "there is no previous frame".
NO_PREVIOUS_FRAME = "NONE"


class _WarnExtraMixin(BaseModel):
    model_config = ConfigDict(extra="allow")

    @model_validator(mode="after")
    def warn_extra_fields(self):
        """Warn about unknown configuration keys."""
        if self.__pydantic_extra__:
            logger.warning(
                "Unknown config keys in %s (ignored): %s",
                type(self).__name__,
                list(self.__pydantic_extra__.keys()),
            )
        return self


class PathsConfig(_WarnExtraMixin):
    """Input and output locations.

    Attributes:
        images_dir: Directory holding {camera_id}.png for both bottom cameras.
        pole_mask_dir: Directory holding painted pole masks {camera_id}.png.
        output_dir: Directory for the result, debug images and flow cache.
        prev_frame_dir: Output directory of the previous frame, or None when
            there is no previous frame. The string "NONE" is accepted as None.
        rig_path: Camera rig JSON file.
    """

    images_dir: str = ""
    pole_mask_dir: str = ""
    output_dir: str = ""
    prev_frame_dir: str | None = None
    rig_path: str = ""

    @field_validator("prev_frame_dir", mode="before")
    @classmethod
    def normalize_no_previous_frame(cls, v: Any) -> Any:
        """Map the legacy "NONE" sentinel and empty strings to None."""
        if isinstance(v, str) and v.strip() in ("", NO_PREVIOUS_FRAME):
            return None
        return v


class CameraSelectionConfig(_WarnExtraMixin):
    """Which rig cameras are the primary and secondary bottom cameras.

    Attributes:
        primary_camera_id: Primary bottom camera, or None to pick the first
            camera in the rig's "bottom" group.
        secondary_camera_id: Secondary bottom camera, or None to pick the
            next one.
    """

    primary_camera_id: str | None = None
    secondary_camera_id: str | None = None


class AlignmentConfig(_WarnExtraMixin):
    """Optical flow alignment of the secondary onto the primary image.

    Attributes:
        flow_algorithm: Registered flow provider name.
        direction_hint: Expected motion direction of the secondary camera.
        hint_seed: Length in pixels of the starting flow laid along the hint
            where no previous frame flow applies. 0 starts from zero flow.
        static_threshold: Grayscale change (0..255) under which a pixel
            reuses the previous frame's flow as its starting estimate.
    """

    flow_algorithm: str = "dis_medium"
    direction_hint: DirectionHint = DirectionHint.DOWN
    hint_seed: float = Field(default=0.5, ge=0.0, le=4.0)
    static_threshold: float = Field(default=8.0, ge=0.0, le=255.0)

    @field_validator("flow_algorithm")
    @classmethod
    def validate_flow_algorithm(cls, v: str) -> str:
        """Validate that the flow algorithm is registered."""
        valid = available_flow_providers()
        if v not in valid:
            raise ValueError(
                f"Invalid flow algorithm: {v!r}. Valid algorithms: {valid}"
            )
        return v


class BlendingConfig(_WarnExtraMixin):
    """Alpha feathering and colour matching.

    Attributes:
        alpha_feather_size: Width in pixels of the alpha ramp at mask edges.
        color_method: Colour transfer method ("mean_std" or "histogram").
        color_min_samples: Minimum overlapping pixels for a colour fit.
    """

    alpha_feather_size: int = Field(default=20, ge=0)
    color_method: Literal["mean_std", "histogram"] = "mean_std"
    color_min_samples: int = Field(default=64, ge=1)


class RuntimeConfig(_WarnExtraMixin):
    """Runtime switches.

    Attributes:
        save_debug_images: Write intermediate images to output_dir.
        save_flow_for_next_frame: Write the flow cache for temporal warm start.
        quiet: Suppress progress output.
    """

    save_debug_images: bool = False
    save_flow_for_next_frame: bool = False
    quiet: bool = False


class PoleRemovalConfig(_WarnExtraMixin):
    """Top-level configuration for bottom image pole removal."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    cameras: CameraSelectionConfig = Field(default_factory=CameraSelectionConfig)
    alignment: AlignmentConfig = Field(default_factory=AlignmentConfig)
    blending: BlendingConfig = Field(default_factory=BlendingConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "PoleRemovalConfig":
        """Load configuration from a YAML file.

        Missing fields use their default values.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Loaded configuration with defaults filled in.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            ValueError: If validation fails (with all errors collected).
        """
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}

        for section in ("paths", "cameras", "alignment", "blending", "runtime"):
            if section not in data:
                logger.info("Using default: %s (all defaults)", section)

        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            raise ValueError(
                f"Configuration validation failed:\n{format_validation_errors(e)}"
            ) from None

        return config

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file, defaults included."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(mode="json")

        with open(path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


def format_validation_errors(error: ValidationError) -> str:
    """Format Pydantic validation errors with YAML-style paths.

    Args:
        error: Pydantic ValidationError.

    Returns:
        Formatted error string with YAML paths and messages.
    """
    lines = []
    for err in error.errors():
        path_parts = []
        for part in err["loc"]:
            if isinstance(part, int) and path_parts:
                path_parts[-1] = f"{path_parts[-1]}[{part}]"
            else:
                path_parts.append(str(part))

        lines.append(f"  {'.'.join(path_parts)}: {err['msg']}")

    return "\n".join(lines)


__all__ = [
    "NO_PREVIOUS_FRAME",
    "PathsConfig",
    "CameraSelectionConfig",
    "AlignmentConfig",
    "BlendingConfig",
    "RuntimeConfig",
    "PoleRemovalConfig",
    "format_validation_errors",
]
