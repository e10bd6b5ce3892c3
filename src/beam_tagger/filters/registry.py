"""Registry for validity filter implementations.

Mirrors the context generator registry. Filters that need data (such as a
tag dictionary) load it in their ``from_config`` class method.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from beam_tagger.exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from beam_tagger.config import BeamTaggerConfig
    from beam_tagger.filters.base import ValidityFilter


class ValidityFilterRegistry:
    """Registry mapping string names to ValidityFilter classes.

    Built-in filters register via the
    ``@ValidityFilterRegistry.register()`` decorator.
    """

    _registry: ClassVar[dict[str, type[ValidityFilter]]] = {}

    @classmethod
    def register(
        cls, name: str
    ) -> Callable[[type[ValidityFilter]], type[ValidityFilter]]:
        """Decorator that registers a ValidityFilter class under *name*.

        Args:
            name: Identifier used in config ``validity_filter``.

        Returns:
            Decorator that registers the class and returns it unchanged.

        Raises:
            ValueError: If *name* is already registered.
        """

        def decorator(klass: type[ValidityFilter]) -> type[ValidityFilter]:
            if name in cls._registry:
                raise ValueError(f"Validity filter '{name}' is already registered")
            cls._registry[name] = klass
            return klass

        return decorator

    @classmethod
    def get(cls, name: str) -> type[ValidityFilter]:
        """Return the filter class registered under *name*.

        Raises:
            KeyError: If *name* is not registered.
        """
        if name not in cls._registry:
            available = ", ".join(sorted(cls._registry)) or "(none)"
            raise KeyError(f"Unknown validity filter '{name}'. Available: {available}")
        return cls._registry[name]

    @classmethod
    def build(cls, config: BeamTaggerConfig) -> ValidityFilter:
        """Instantiate the filter named by *config.validity_filter*.

        Raises:
            ConfigurationError: If the name is not registered.
        """
        try:
            klass = cls.get(config.validity_filter)
        except KeyError as exc:
            raise ConfigurationError(str(exc.args[0])) from exc
        return klass.from_config(config)

    @classmethod
    def list_registered(cls) -> list[str]:
        """Return sorted list of registered filter names."""
        return sorted(cls._registry)
