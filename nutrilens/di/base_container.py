# Standard library imports
from typing import Any, Callable, Dict, Union

Key = Union[type, str]


class BaseContainer:
    """
    Minimal dependency registry.

    Singletons are stored instances; factories are called on every ``get``.
    Keys are either an interface type or a name.
    """

    def __init__(self) -> None:
        self._singletons: Dict[Key, Any] = {}
        self._factories: Dict[Key, Callable[[], Any]] = {}

    def register_singleton(self, key: Key, instance: Any) -> None:
        self._singletons[key] = instance

    def register_factory(self, key: Key, factory: Callable[[], Any]) -> None:
        self._factories[key] = factory

    def is_registered(self, key: Key) -> bool:
        return key in self._singletons or key in self._factories

    def get(self, key: Key) -> Any:
        """
        Resolve a dependency

        Raises:
            ValueError: If nothing is registered under key
        """
        if key in self._singletons:
            return self._singletons[key]
        if key in self._factories:
            return self._factories[key]()
        name = key.__name__ if isinstance(key, type) else key
        raise ValueError(f"Dependency not registered: {name}")
