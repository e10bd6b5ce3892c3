"""Registry for context generator implementations.

Uses a decorator pattern for registration. ``build()`` delegates to each
class's ``from_config`` so generators that need resources (such as a
common-word dictionary) can load them from the configured paths.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from beam_tagger.exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from beam_tagger.config import BeamTaggerConfig
    from beam_tagger.context.base import ContextGenerator


class ContextGeneratorRegistry:
    """Registry mapping string names to ContextGenerator classes.

    Built-in generators register via the
    ``@ContextGeneratorRegistry.register()`` decorator.
    """

    _registry: ClassVar[dict[str, type[ContextGenerator]]] = {}

    @classmethod
    def register(
        cls, name: str
    ) -> Callable[[type[ContextGenerator]], type[ContextGenerator]]:
        """Decorator that registers a ContextGenerator class under *name*.

        Args:
            name: Identifier used in config ``context_generator``.

        Returns:
            Decorator that registers the class and returns it unchanged.

        Raises:
            ValueError: If *name* is already registered.
        """

        def decorator(klass: type[ContextGenerator]) -> type[ContextGenerator]:
            if name in cls._registry:
                raise ValueError(f"Context generator '{name}' is already registered")
            cls._registry[name] = klass
            return klass

        return decorator

    @classmethod
    def get(cls, name: str) -> type[ContextGenerator]:
        """Return the generator class registered under *name*.

        Raises:
            KeyError: If *name* is not registered.
        """
        if name not in cls._registry:
            available = ", ".join(sorted(cls._registry)) or "(none)"
            raise KeyError(f"Unknown context generator '{name}'. Available: {available}")
        return cls._registry[name]

    @classmethod
    def build(cls, config: BeamTaggerConfig) -> ContextGenerator:
        """Instantiate the generator named by *config.context_generator*.

        Raises:
            ConfigurationError: If the name is not registered.
        """
        try:
            klass = cls.get(config.context_generator)
        except KeyError as exc:
            raise ConfigurationError(str(exc.args[0])) from exc
        return klass.from_config(config)

    @classmethod
    def list_registered(cls) -> list[str]:
        """Return sorted list of registered generator names."""
        return sorted(cls._registry)
