# src/actor/client_factory.py
"""Factory: instantiate the remote actor client from the configured backend.

Adapters are registered by class path and imported lazily.
"""

from __future__ import annotations

import importlib
import logging

from realtycrm.actor.base_actor import BaseActorClient
from realtycrm.config.settings import Settings

logger = logging.getLogger(__name__)

# Registry of backend name → adapter class path (lazy import).
_BACKEND_REGISTRY: dict[str, str] = {
    "http": "realtycrm.actor.http_actor.HttpActorClient",
}


class UnsupportedBackendError(ValueError):
    """Raised when an actor backend is not registered."""


def create_actor_client(
    settings: Settings | None = None,
    principal: str | None = None,
    **kwargs: object,
) -> BaseActorClient:
    """Instantiate the actor client for ``settings.actor_backend``.

    Args:
        settings: Application settings. Defaults are used when None.
        principal: Caller principal; falls back to ``settings.principal``.
        **kwargs: Additional adapter-specific arguments (e.g. ``transport``).

    Returns:
        Configured BaseActorClient instance.

    Raises:
        UnsupportedBackendError: If the backend is not registered.
    """
    settings = settings or Settings(_env_file=None)  # type: ignore[call-arg]
    backend = settings.actor_backend

    if backend not in _BACKEND_REGISTRY:
        raise UnsupportedBackendError(
            f"Unsupported actor backend: {backend!r}. "
            f"Available: {', '.join(sorted(_BACKEND_REGISTRY))}"
        )

    adapter_cls = _import_class(_BACKEND_REGISTRY[backend])

    init_kwargs = dict(kwargs)
    init_kwargs.setdefault("principal", principal or settings.principal or None)
    if backend == "http":
        init_kwargs.setdefault("rpc_url", settings.rpc_url)
        init_kwargs.setdefault("timeout_s", settings.backend_timeout_s)

    logger.debug("Creating actor client: backend=%s", backend)
    return adapter_cls(**init_kwargs)


def register_backend(name: str, class_path: str) -> None:
    """Register a custom actor backend.

    Args:
        name: Backend identifier.
        class_path: Fully qualified class path implementing BaseActorClient.
    """
    _BACKEND_REGISTRY[name] = class_path
    logger.info("Registered actor backend: %s -> %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
