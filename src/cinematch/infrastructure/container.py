"""Dependency injection container."""

import inspect
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from ..config import Config, ConfigManager
from ..core.interfaces import (
    ICatalogService,
    IChatOrchestrator,
    ILLMService,
    IMovieStore,
    ISimilarityResolver,
    IUserStore,
    IWatchlistService,
)
from ..utils import ConfigurationError

T = TypeVar("T")


class Container:
    """Dependency injection container using registry pattern."""

    def __init__(self, config_manager: Optional[ConfigManager] = None) -> None:
        """Initialize container.

        Args:
            config_manager: Configuration manager instance. If None, creates default.
        """
        self._services: Dict[Type, Any] = {}
        self._factories: Dict[Type, Callable[[], Any]] = {}
        self._singletons: Dict[Type, Any] = {}
        self._config_manager = config_manager or ConfigManager()
        self._logger = logging.getLogger(__name__)

    def register_singleton(self, interface: Type[T], implementation: Type[Any]) -> None:
        """Register a singleton service.

        Args:
            interface: Interface type.
            implementation: Implementation type.
        """
        self._services[interface] = implementation
        self._logger.debug(
            f"Registered singleton: {interface.__name__} -> {implementation.__name__}"
        )

    def register_factory(self, interface: Type[T], factory: Callable[[], T]) -> None:
        """Register a factory function.

        Args:
            interface: Interface type.
            factory: Factory function that creates instances.
        """
        self._factories[interface] = factory
        self._logger.debug(f"Registered factory: {interface.__name__}")

    def register_instance(self, interface: Type[T], instance: T) -> None:
        """Register a specific instance.

        Args:
            interface: Interface type.
            instance: Pre-created instance.
        """
        self._singletons[interface] = instance
        self._logger.debug(f"Registered instance: {interface.__name__}")

    def get(self, interface: Type[T]) -> T:
        """Get service instance.

        Args:
            interface: Interface type to resolve.

        Returns:
            Service instance.

        Raises:
            ValueError: If service is not registered.
        """
        if interface in self._singletons:
            return self._singletons[interface]  # type: ignore

        if interface in self._factories:
            return self._factories[interface]()  # type: ignore

        if interface in self._services:
            implementation = self._services[interface]
            self._singletons[interface] = self._create_instance(implementation)
            return self._singletons[interface]  # type: ignore

        raise ValueError(f"Service not registered: {interface.__name__}")

    def is_registered(self, interface: Type) -> bool:
        """Check whether an interface can be resolved."""
        return (
            interface in self._services
            or interface in self._factories
            or interface in self._singletons
        )

    def _create_instance(self, implementation: Type[T]) -> T:
        """Create instance with dependency injection.

        Constructor parameters are resolved by annotation: ``Config`` from the
        config manager, registered interfaces from the container.

        Args:
            implementation: Implementation class to instantiate.

        Returns:
            Created instance with dependencies injected.
        """
        sig = inspect.signature(implementation.__init__)
        kwargs = {}

        for param_name, param in sig.parameters.items():
            if param_name == "self":
                continue

            if param.annotation == Config:
                kwargs[param_name] = self.get_config()
            elif hasattr(param.annotation, "__origin__"):
                # Generic annotations are never registered
                continue
            elif self.is_registered(param.annotation):
                kwargs[param_name] = self.get(param.annotation)
            elif param.default is not inspect.Parameter.empty:
                continue
            else:
                self._logger.warning(
                    f"Cannot resolve dependency: {param_name} of type {param.annotation}"
                )

        return implementation(**kwargs)

    @lru_cache(maxsize=1)
    def get_config(self) -> Config:
        """Get configuration instance.

        Returns:
            Configuration instance.
        """
        return self._config_manager.get_config()

    def configure_default_services(self) -> None:
        """Configure default service registrations.

        Raises:
            ConfigurationError: If the LLM provider is unsupported.
        """
        from ..core.services import (
            AnthropicLLMService,
            CatalogService,
            ChatOrchestrator,
            OpenAILLMService,
            SimilarityResolver,
            WatchlistService,
        )
        from .document_store import JsonMovieStore, JsonUserStore

        config = self.get_config()

        if config.llm.provider == "openai":
            self.register_singleton(ILLMService, OpenAILLMService)  # type: ignore
        elif config.llm.provider == "anthropic":
            self.register_singleton(ILLMService, AnthropicLLMService)  # type: ignore
        else:
            raise ConfigurationError(f"Unsupported LLM provider: {config.llm.provider}")

        # Stores are shared so the JSON documents are loaded once per process
        self.register_instance(
            IMovieStore, JsonMovieStore(Path(config.store.catalog_path))  # type: ignore
        )
        self.register_instance(
            IUserStore, JsonUserStore(Path(config.store.users_path))  # type: ignore
        )

        self.register_singleton(ICatalogService, CatalogService)  # type: ignore
        self.register_singleton(ISimilarityResolver, SimilarityResolver)  # type: ignore
        self.register_singleton(IChatOrchestrator, ChatOrchestrator)  # type: ignore
        self.register_singleton(IWatchlistService, WatchlistService)  # type: ignore

        self._logger.info("Default services configured")

    def reset(self) -> None:
        """Reset container state."""
        self._services.clear()
        self._factories.clear()
        self._singletons.clear()
        self.get_config.cache_clear()
        self._logger.debug("Container reset")

    def __enter__(self) -> "Container":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.reset()
