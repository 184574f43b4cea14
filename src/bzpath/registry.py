"""Capability registry for wiring the compression method.

Components are bound to keys (usually the protocol or class they satisfy)
and created lazily on first lookup; every key resolves to a single shared
instance afterwards.

Example:
    >>> registry = ComponentRegistry()
    >>> register_bzip2_components(registry)
    >>> compressor = registry.get(PathCompressor)
    >>> compressor is registry.get(Bzip2CompressionMethod)
    True
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from bzpath.archive import TarballArchiver
from bzpath.base import Archiver, PathCompressor, StreamCompressor, StringCodec
from bzpath.config import CompressionMethodConfig
from bzpath.filesystem import FileManager
from bzpath.method import Bzip2CompressionMethod

logger = logging.getLogger(__name__)

Factory = Callable[["ComponentRegistry"], Any]


class ComponentRegistry:
    """Lazily constructed singletons keyed by capability.

    A binding is either a factory taking the registry, or another key that
    the lookup is forwarded to (an alias).
    """

    def __init__(self) -> None:
        self._bindings: dict[Any, Factory | Any] = {}
        self._aliases: set[Any] = set()
        self._instances: dict[Any, Any] = {}
        self._lock = threading.RLock()

    def bind(self, key: Any, factory: Factory) -> None:
        """Bind ``key`` to a factory, dropping any cached instance."""
        with self._lock:
            self._bindings[key] = factory
            self._aliases.discard(key)
            self._instances.pop(key, None)

    def alias(self, key: Any, target: Any) -> None:
        """Resolve ``key`` to whatever ``target`` resolves to."""
        if key == target:
            raise ValueError(f"Cannot alias {key!r} to itself")
        with self._lock:
            self._bindings[key] = target
            self._aliases.add(key)
            self._instances.pop(key, None)

    def unbind(self, key: Any) -> None:
        with self._lock:
            self._bindings.pop(key, None)
            self._aliases.discard(key)
            self._instances.pop(key, None)

    def has(self, key: Any) -> bool:
        return key in self._bindings

    def get(self, key: Any) -> Any:
        """Get the instance bound to ``key``.

        Raises:
            KeyError: If nothing is bound to ``key``.
        """
        with self._lock:
            seen = []
            while key in self._aliases:
                if key in seen:
                    raise ValueError(f"Alias cycle: {' -> '.join(map(repr, seen))}")
                seen.append(key)
                key = self._bindings[key]

            if key in self._instances:
                return self._instances[key]
            if key not in self._bindings:
                raise KeyError(f"Nothing is bound to {key!r}")

            instance = self._bindings[key](self)
            self._instances[key] = instance
            logger.debug(f"Created {type(instance).__name__} for {key!r}")
            return instance


def register_bzip2_components(
    registry: ComponentRegistry,
    config: CompressionMethodConfig | None = None,
) -> ComponentRegistry:
    """Bind the bzip2 compression method and its collaborators.

    The generic capability keys are pointed at the bzip2 method unless all of
    them are already bound, so an application can keep another method as its
    default.

    Args:
        registry: Registry to populate.
        config: Configuration for the method; read from the environment when
            omitted.

    Returns:
        The populated registry.
    """
    if not registry.has(FileManager):
        registry.bind(FileManager, lambda r: FileManager())
    if not registry.has(Archiver):
        registry.bind(
            Archiver,
            lambda r: TarballArchiver(
                r.get(FileManager),
                r.get(CompressionMethodConfig).conflict_strategy,
            ),
        )
    if config is not None or not registry.has(CompressionMethodConfig):
        registry.bind(
            CompressionMethodConfig,
            lambda r: config or CompressionMethodConfig.from_environment(),
        )

    capabilities = (StringCodec, StreamCompressor, PathCompressor)
    if not all(registry.has(capability) for capability in capabilities):
        for capability in capabilities:
            registry.alias(capability, Bzip2CompressionMethod)

    registry.bind(
        Bzip2CompressionMethod,
        lambda r: Bzip2CompressionMethod(
            r.get(FileManager),
            r.get(Archiver),
            config=r.get(CompressionMethodConfig),
        ),
    )
    return registry
