"""Configuration for the bzip2 compression method.

Configuration is fixed at construction time. Values can be given directly or
read from environment variables:

    BZPATH_COMPRESSION_LEVEL=9
    BZPATH_CHUNK_SIZE=1048576
    BZPATH_CONFLICT_STRATEGY=rename

Example:
    >>> from bzpath.config import CompressionMethodConfig
    >>> config = CompressionMethodConfig.from_environment()
    >>> config.validate()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any

from bzpath.base import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_COMPRESSION_LEVEL,
    MAX_COMPRESSION_LEVEL,
    MIN_COMPRESSION_LEVEL,
    ConfigError,
    PathConflictStrategy,
)


@dataclass(frozen=True)
class CompressionMethodConfig:
    """Configuration for compression operations.

    Attributes:
        compression_level: Block size (1-9) for string compression. Does not
            affect compression of files and directories.
        chunk_size: Number of bytes moved per read/write when streaming.
        conflict_strategy: How existing destination paths are handled.
    """

    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    chunk_size: int = DEFAULT_CHUNK_SIZE
    conflict_strategy: PathConflictStrategy = PathConflictStrategy.ERROR

    def validate(self) -> None:
        """Validate configuration.

        Raises:
            ConfigError: If a value is out of range.
        """
        errors = []
        if not isinstance(self.compression_level, int) or not (
            MIN_COMPRESSION_LEVEL <= self.compression_level <= MAX_COMPRESSION_LEVEL
        ):
            errors.append(
                f"compression_level must be between {MIN_COMPRESSION_LEVEL} "
                f"and {MAX_COMPRESSION_LEVEL}, got {self.compression_level!r}"
            )
        if not isinstance(self.chunk_size, int) or self.chunk_size <= 0:
            errors.append(f"chunk_size must be positive, got {self.chunk_size!r}")
        if not isinstance(self.conflict_strategy, PathConflictStrategy):
            errors.append(f"Unknown conflict strategy {self.conflict_strategy!r}")
        if errors:
            raise ConfigError(f"Configuration validation failed: {', '.join(errors)}")

    def with_overrides(self, **overrides: Any) -> "CompressionMethodConfig":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_environment(cls, prefix: str = "BZPATH") -> "CompressionMethodConfig":
        """Load configuration from environment variables.

        Args:
            prefix: Environment variable prefix.

        Returns:
            Configuration with defaults for unset variables.

        Raises:
            ConfigError: If a variable cannot be parsed.
        """
        level = _get_int(f"{prefix}_COMPRESSION_LEVEL", DEFAULT_COMPRESSION_LEVEL)
        chunk_size = _get_int(f"{prefix}_CHUNK_SIZE", DEFAULT_CHUNK_SIZE)
        strategy = os.getenv(f"{prefix}_CONFLICT_STRATEGY")

        return cls(
            compression_level=level,
            chunk_size=chunk_size,
            conflict_strategy=(
                PathConflictStrategy.from_string(strategy)
                if strategy
                else PathConflictStrategy.ERROR
            ),
        )


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")
