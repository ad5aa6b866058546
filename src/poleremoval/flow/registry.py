"""Name-keyed registry of flow providers."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from .protocol import FlowProvider

logger = logging.getLogger(__name__)

_REGISTRY: dict[str, tuple[Callable[..., FlowProvider], dict[str, Any]]] = {}


def register_flow_provider(name: str, **defaults: Any):
    """Class decorator registering a flow provider under ``name``.

    The same class may be registered several times under different names
    with different default constructor arguments.

    Args:
        name: Algorithm name used in configuration.
        **defaults: Keyword arguments passed to the constructor.

    Returns:
        Decorator that returns the class unchanged.
    """

    def decorator(factory):
        if name in _REGISTRY:
            logger.warning("Flow provider %r re-registered", name)
        _REGISTRY[name] = (factory, dict(defaults))
        return factory

    return decorator


def unregister_flow_provider(name: str) -> None:
    """Remove a provider from the registry (no-op if absent)."""
    _REGISTRY.pop(name, None)


def available_flow_providers() -> list[str]:
    """Registered algorithm names, sorted."""
    return sorted(_REGISTRY)


def make_flow_provider(name: str, **params: Any) -> FlowProvider:
    """Create a flow provider by algorithm name.

    Args:
        name: Registered algorithm name (e.g., "dis_medium").
        **params: Constructor overrides merged over the registered defaults.

    Returns:
        New provider instance.

    Raises:
        ValueError: If name is not registered.
    """
    if name not in _REGISTRY:
        raise ValueError(
            f"Unknown flow algorithm: {name!r}. "
            f"Valid algorithms: {available_flow_providers()}"
        )
    factory, defaults = _REGISTRY[name]
    return factory(**{**defaults, **params})


@contextmanager
def flow_provider(name: str, **params: Any) -> Iterator[FlowProvider]:
    """Acquire a flow provider for the duration of a ``with`` block.

    The provider is closed on every exit path, including exceptions.
    """
    provider = make_flow_provider(name, **params)
    logger.debug("Acquired flow provider %r", name)
    try:
        yield provider
    finally:
        provider.close()
        logger.debug("Released flow provider %r", name)
