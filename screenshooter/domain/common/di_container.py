#screenshooter/domain/common/di_container.py

"""
Small dependency injection container used by the composition root.

Services are registered against their interface type either as ready
instances, as factories called on every resolve, or as singletons whose
factory runs once on first use.
"""
from typing import Dict, Any, Type, TypeVar, Callable


T = TypeVar('T')
TBase = TypeVar('TBase')


class DIContainer:
    """Maps interface types to instances or factories."""

    def __init__(self):
        self._instance_registrations: Dict[type, Any] = {}
        self._factory_registrations: Dict[type, Callable[[], Any]] = {}
        self._singleton_types = set()
        self._resolving = set()  # types currently being resolved, for cycle detection

    def register_instance(self, base_type: Type[TBase], instance: TBase) -> None:
        """Register an instance returned whenever base_type is requested."""
        self._instance_registrations[base_type] = instance

    def register_factory(self, base_type: Type[TBase], factory: Callable[[], TBase]) -> None:
        """Register a factory called on every resolve of base_type."""
        self._factory_registrations[base_type] = factory
        self._singleton_types.discard(base_type)

    def register_singleton(self, base_type: Type[TBase], factory: Callable[[], TBase]) -> None:
        """Register a factory whose first product is cached and reused."""
        self._factory_registrations[base_type] = factory
        self._singleton_types.add(base_type)

    def resolve(self, base_type: Type[T]) -> T:
        """
        Resolve a type to its registered instance or create a new one.

        Raises:
            ValueError: If the type is not registered or there's a circular dependency
        """
        if base_type in self._resolving:
            raise ValueError(f"Circular dependency detected while resolving {base_type.__name__}")

        if base_type in self._instance_registrations:
            return self._instance_registrations[base_type]

        if base_type in self._factory_registrations:
            self._resolving.add(base_type)
            try:
                instance = self._factory_registrations[base_type]()
            finally:
                self._resolving.remove(base_type)

            if base_type in self._singleton_types:
                self._instance_registrations[base_type] = instance
            return instance

        raise ValueError(f"No registration found for {base_type.__name__}")
