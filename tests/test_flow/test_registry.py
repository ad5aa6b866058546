"""Tests for the flow provider registry."""

import logging

import numpy as np
import pytest

from poleremoval.flow import (
    FlowProvider,
    available_flow_providers,
    flow_provider,
    make_flow_provider,
    register_flow_provider,
    unregister_flow_provider,
)
from poleremoval.flow.opencv_flow import DISFlowProvider, FarnebackFlowProvider


class _DummyProvider:
    instances = []

    def __init__(self, scale=1.0, **kwargs):
        self.scale = scale
        self.kwargs = kwargs
        self.closed = False
        _DummyProvider.instances.append(self)

    def compute_flow(self, image_a, image_b, prior_flow, prior_a, prior_b, hint):
        return np.zeros(image_a.shape[:2] + (2,), dtype=np.float32)

    def close(self):
        self.closed = True


@pytest.fixture
def dummy():
    """Register _DummyProvider under "dummy" with a default scale."""
    _DummyProvider.instances = []
    register_flow_provider("dummy", scale=2.0)(_DummyProvider)
    yield _DummyProvider
    unregister_flow_provider("dummy")


def test_builtin_providers_registered():
    """OpenCV algorithms are available by name."""
    names = available_flow_providers()
    for name in ("farneback", "dis_ultrafast", "dis_fast", "dis_medium"):
        assert name in names
    assert names == sorted(names)


def test_make_builtin():
    """Built-in names create the matching provider classes."""
    assert isinstance(make_flow_provider("farneback"), FarnebackFlowProvider)
    provider = make_flow_provider("dis_fast", hint_seed=0.2)
    assert isinstance(provider, DISFlowProvider)
    assert provider.hint_seed == 0.2
    assert isinstance(provider, FlowProvider)


def test_unknown_name():
    """Unregistered names raise ValueError listing valid ones."""
    with pytest.raises(ValueError, match="Unknown flow algorithm"):
        make_flow_provider("raft")


def test_defaults_and_overrides(dummy):
    """Registered defaults apply; call parameters override them."""
    assert make_flow_provider("dummy").scale == 2.0
    assert make_flow_provider("dummy", scale=3.0, extra=1).scale == 3.0
    assert dummy.instances[-1].kwargs == {"extra": 1}


def test_reregistration_warns(dummy, caplog):
    """Registering an existing name logs a warning."""
    with caplog.at_level(logging.WARNING):
        register_flow_provider("dummy")(_DummyProvider)
    assert "re-registered" in caplog.text


def test_unregister_absent_is_noop():
    """Removing an unknown name does nothing."""
    unregister_flow_provider("never-registered")


class TestFlowProviderScope:
    """Tests for the flow_provider() context manager."""

    def test_closed_after_block(self, dummy):
        """The provider is released when the block exits."""
        with flow_provider("dummy") as provider:
            assert not provider.closed
        assert provider.closed

    def test_closed_on_error(self, dummy):
        """The provider is released even when the block raises."""
        with pytest.raises(RuntimeError):
            with flow_provider("dummy"):
                raise RuntimeError("boom")
        assert dummy.instances[-1].closed

    def test_fresh_instance_per_scope(self, dummy):
        """Each scope acquires its own provider."""
        with flow_provider("dummy") as first:
            pass
        with flow_provider("dummy") as second:
            pass
        assert first is not second
