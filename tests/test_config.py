"""Tests for configuration system."""

import logging

import pytest
import yaml
from pydantic import ValidationError

from poleremoval.config import (
    AlignmentConfig,
    BlendingConfig,
    CameraSelectionConfig,
    PathsConfig,
    PoleRemovalConfig,
    RuntimeConfig,
)
from poleremoval.flow import DirectionHint


class TestPathsConfig:
    """Tests for PathsConfig."""

    def test_defaults(self):
        """Test default values."""
        config = PathsConfig()
        assert config.images_dir == ""
        assert config.prev_frame_dir is None

    def test_none_sentinel(self):
        """The literal "NONE" means no previous frame."""
        assert PathsConfig(prev_frame_dir="NONE").prev_frame_dir is None
        assert PathsConfig(prev_frame_dir="").prev_frame_dir is None

    def test_prev_frame_dir_kept(self):
        """A real directory is kept as given."""
        config = PathsConfig(prev_frame_dir="/data/frame_0001")
        assert config.prev_frame_dir == "/data/frame_0001"


class TestAlignmentConfig:
    """Tests for AlignmentConfig."""

    def test_defaults(self):
        """Test default values."""
        config = AlignmentConfig()
        assert config.flow_algorithm == "dis_medium"
        assert config.direction_hint is DirectionHint.DOWN
        assert config.hint_seed == 0.5
        assert config.static_threshold == 8.0

    def test_hint_from_string(self):
        """Direction hints parse from their lowercase names."""
        assert AlignmentConfig(direction_hint="left").direction_hint is (
            DirectionHint.LEFT
        )

    def test_invalid_flow_algorithm(self):
        """Unregistered algorithms are rejected."""
        with pytest.raises(ValidationError, match="Invalid flow algorithm"):
            AlignmentConfig(flow_algorithm="raft")

    def test_hint_seed_range(self):
        """hint_seed must lie in [0, 4] pixels."""
        with pytest.raises(ValidationError):
            AlignmentConfig(hint_seed=-0.5)
        with pytest.raises(ValidationError):
            AlignmentConfig(hint_seed=10.0)

    def test_invalid_hint(self):
        """Unknown hint names are rejected."""
        with pytest.raises(ValidationError):
            AlignmentConfig(direction_hint="sideways")


class TestBlendingConfig:
    """Tests for BlendingConfig."""

    def test_defaults(self):
        """Test default values."""
        config = BlendingConfig()
        assert config.alpha_feather_size == 20
        assert config.color_method == "mean_std"
        assert config.color_min_samples == 64

    def test_invalid_color_method(self):
        """Only known colour methods validate."""
        with pytest.raises(ValidationError):
            BlendingConfig(color_method="reinhard")

    def test_negative_feather(self):
        """Feather size cannot be negative."""
        with pytest.raises(ValidationError):
            BlendingConfig(alpha_feather_size=-1)


def test_runtime_and_camera_defaults():
    """Runtime switches are off and cameras are auto-selected by default."""
    runtime = RuntimeConfig()
    assert runtime.save_debug_images is False
    assert runtime.save_flow_for_next_frame is False
    cameras = CameraSelectionConfig()
    assert cameras.primary_camera_id is None
    assert cameras.secondary_camera_id is None


def test_unknown_keys_warn(caplog):
    """Unknown keys are accepted with a warning."""
    with caplog.at_level(logging.WARNING):
        BlendingConfig(alpha_feather_size=5, blend_gamma=2.2)
    assert "Unknown config keys" in caplog.text
    assert "blend_gamma" in caplog.text


class TestPoleRemovalConfigYaml:
    """Tests for YAML loading and saving."""

    def test_round_trip(self, tmp_path):
        """A saved config loads back equal."""
        config = PoleRemovalConfig()
        config.paths.images_dir = "/data/images"
        config.alignment.direction_hint = DirectionHint.RIGHT
        config.blending.color_method = "histogram"
        path = tmp_path / "config.yaml"

        config.to_yaml(path)
        loaded = PoleRemovalConfig.from_yaml(path)

        assert loaded == config
        assert loaded.alignment.direction_hint is DirectionHint.RIGHT

    def test_yaml_is_plain(self, tmp_path):
        """Saved YAML holds plain strings, not Python objects."""
        path = tmp_path / "config.yaml"
        PoleRemovalConfig().to_yaml(path)
        data = yaml.safe_load(path.read_text())
        assert data["alignment"]["direction_hint"] == "down"
        assert data["paths"]["prev_frame_dir"] is None

    def test_partial_yaml(self, tmp_path, caplog):
        """Missing sections fall back to defaults and are logged."""
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump({"paths": {"images_dir": "/x", "prev_frame_dir": "NONE"}})
        )

        with caplog.at_level(logging.INFO):
            config = PoleRemovalConfig.from_yaml(path)

        assert config.paths.images_dir == "/x"
        assert config.paths.prev_frame_dir is None
        assert config.blending.alpha_feather_size == 20
        assert "Using default: blending" in caplog.text

    def test_empty_yaml(self, tmp_path):
        """An empty file yields the default config."""
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert PoleRemovalConfig.from_yaml(path) == PoleRemovalConfig()

    def test_validation_errors_collected(self, tmp_path):
        """All validation errors are reported with YAML paths."""
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "alignment": {"flow_algorithm": "raft"},
                    "blending": {"alpha_feather_size": -3},
                }
            )
        )

        with pytest.raises(ValueError) as exc_info:
            PoleRemovalConfig.from_yaml(path)

        message = str(exc_info.value)
        assert "Configuration validation failed" in message
        assert "alignment.flow_algorithm" in message
        assert "blending.alpha_feather_size" in message

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            PoleRemovalConfig.from_yaml(tmp_path / "absent.yaml")
