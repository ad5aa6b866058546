"""Tests for debug image rendering."""

import numpy as np

from poleremoval.io import ImreadMode, read_image
from poleremoval.visualization import flow_to_color, save_debug_images


def test_flow_to_color():
    """Magnitude maps onto viridis: zero is dark purple, max is yellow."""
    flow = np.zeros((4, 4, 2), dtype=np.float32)
    flow[0, 0] = (3.0, 4.0)

    colored = flow_to_color(flow)

    assert colored.shape == (4, 4, 3)
    assert colored.dtype == np.uint8
    # viridis(1.0) is yellow: high red and green, low blue (BGR order)
    b, g, r = colored[0, 0]
    assert r > 200 and g > 200 and b < 100
    # viridis(0.0) is dark purple: blue dominates green
    b, g, r = colored[1, 1]
    assert b > g


def test_flow_to_color_zero_field():
    """An all-zero field renders without dividing by zero."""
    colored = flow_to_color(np.zeros((3, 3, 2), dtype=np.float32))
    assert np.all(colored == colored[0, 0])


def test_save_debug_images(tmp_path):
    """Each named image is written as {name}.png."""
    images = {
        "bottomImage": np.full((5, 5, 4), 10, dtype=np.uint8),
        "bottomFlow": np.full((5, 5, 3), 20, dtype=np.uint8),
    }
    output_dir = tmp_path / "debug"

    save_debug_images(output_dir, images)

    loaded = read_image(output_dir / "bottomImage.png", ImreadMode.UNCHANGED)
    assert loaded.shape == (5, 5, 4)
    assert (output_dir / "bottomFlow.png").exists()
