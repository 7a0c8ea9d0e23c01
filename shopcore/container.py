"""Dependency injection container for shopcore.

Provides centralized configuration and ownership of process-wide
services such as the event broker.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar

from shopcore.events.broker import DEFAULT_MAX_LISTENERS, EventBroker
from shopcore.logging_config import configure_from_context

T = TypeVar("T")

ENV_PREFIX = "SHOPCORE_"


@dataclass
class AppContext:
    """Application context with all configuration."""

    base_dir: Path

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    log_file: Path | None = None

    # Events
    max_listeners: int = DEFAULT_MAX_LISTENERS

    service_name: str = "shopcore"

    def __post_init__(self):
        if self.max_listeners < 0:
            raise ValueError("max_listeners must be >= 0")

    @classmethod
    def from_env(cls, base_dir: Path | None = None) -> AppContext:
        """Load configuration from environment variables.

        Values from ``config/events.env`` under the base directory are used
        when the matching environment variable is not set.

        Args:
            base_dir: Base directory (detected if not provided)

        Returns:
            AppContext instance
        """
        if base_dir is None:
            base_dir = cls._detect_base_dir()

        values = cls._load_env_file(base_dir / "config" / "events.env")
        values.update(
            {key: value for key, value in os.environ.items() if key.startswith(ENV_PREFIX)}
        )

        def get(name: str, default: str | None = None) -> str | None:
            return values.get(ENV_PREFIX + name, default)

        log_file = get("LOG_FILE")
        max_listeners = get("MAX_LISTENERS", str(DEFAULT_MAX_LISTENERS))
        try:
            max_listeners_value = int(max_listeners)
        except ValueError:
            raise ValueError(
                f"{ENV_PREFIX}MAX_LISTENERS must be an integer, got {max_listeners!r}"
            ) from None

        return cls(
            base_dir=base_dir,
            log_level=get("LOG_LEVEL", "INFO").upper(),
            log_json=_truthy(get("LOG_JSON", "0")),
            log_file=Path(log_file) if log_file else None,
            max_listeners=max_listeners_value,
            service_name=get("SERVICE_NAME", "shopcore"),
        )

    @staticmethod
    def _detect_base_dir() -> Path:
        """Detect base directory from environment or filesystem."""
        if base := os.environ.get(f"{ENV_PREFIX}BASE_DIR"):
            return Path(base)

        cwd = Path.cwd()
        for path in [cwd, *list(cwd.parents)]:
            if (path / "config" / "events.env").exists():
                return path

        return cwd

    @staticmethod
    def _load_env_file(path: Path) -> dict[str, str]:
        """Load a KEY=value file."""
        if not path.exists():
            return {}

        values: dict[str, str] = {}
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[7:]
            if "=" in line:
                key, value = line.split("=", 1)
                values[key.strip()] = value.strip().strip('"').strip("'")

        return values


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


class Container:
    """Dependency injection container.

    Usage:
        container = Container(context)
        container.setup_defaults()
        broker = container.get(EventBroker)
    """

    def __init__(self, context: AppContext):
        """Initialize container with application context.

        Args:
            context: Application context with configuration
        """
        self.context = context
        self._singletons: dict[type, Any] = {}
        self._factories: dict[type, Callable[[], Any]] = {}

    def register(self, interface: type[T], factory: Callable[[], T]) -> None:
        """Register a factory for a type.

        Args:
            interface: Type to register factory for
            factory: Factory callable that creates instances
        """
        self._factories[interface] = factory

    def register_singleton(self, interface: type[T], instance: T) -> None:
        """Register a singleton instance.

        Args:
            interface: Type to register instance for
            instance: Pre-created instance
        """
        self._singletons[interface] = instance

    def get(self, interface: type[T]) -> T:
        """Get instance of a type.

        Args:
            interface: Type to get instance of

        Returns:
            Instance of requested type

        Raises:
            ValueError: If no factory registered for type
        """
        if interface in self._singletons:
            return self._singletons[interface]

        if interface in self._factories:
            instance = self._factories[interface]()
            self._singletons[interface] = instance
            return instance

        raise ValueError(f"No factory registered for {interface}")

    def has(self, interface: type) -> bool:
        """Check if a type is registered."""
        return interface in self._singletons or interface in self._factories

    def setup_defaults(self) -> None:
        """Setup default factories for shared services."""
        self.register(
            EventBroker,
            lambda: EventBroker(max_listeners=self.context.max_listeners),
        )

    def reset(self) -> None:
        """Clear all singletons (useful for testing)."""
        self._singletons.clear()


# Global container instance
_container: Container | None = None


def get_container() -> Container:
    """Get global container instance.

    Returns:
        Global Container instance (created on first call)
    """
    global _container
    if _container is None:
        context = AppContext.from_env()
        _container = Container(context)
        _container.setup_defaults()
    return _container


def bootstrap(context: AppContext | None = None) -> Container:
    """Build the process container and configure logging from its context.

    Args:
        context: Application context (loaded from the environment if omitted)

    Returns:
        The new global Container
    """
    global _container
    if context is None:
        context = AppContext.from_env()
    configure_from_context(context)
    _container = Container(context)
    _container.setup_defaults()
    return _container


def get_context() -> AppContext:
    """Get global application context."""
    return get_container().context


def get_broker() -> EventBroker:
    """Get the process-wide event broker owned by the global container."""
    return get_container().get(EventBroker)


def reset_container() -> None:
    """Reset global container (for testing)."""
    global _container
    _container = None
