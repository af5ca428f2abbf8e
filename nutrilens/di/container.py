# Standard library imports
from typing import Optional

# Local application imports
from .base_container import BaseContainer
from .providers import (
    DatabaseProvider,
    ExternalServiceProvider,
    ProcessingProvider,
    RepositoryProvider,
    UseCaseProvider,
)


class DIContainer(BaseContainer):
    """
    Main dependency injection container.
    Composes all providers in the correct order.

    Registration order is important:
    1. Database connections (DatabaseProvider)
    2. Repositories (RepositoryProvider) - depends on database
    3. External clients (ExternalServiceProvider)
    4. Worker pool, pipelines, session manager (ProcessingProvider) - depend on 2 and 3
    5. Use cases (UseCaseProvider) - depend on everything above
    """

    def __init__(self) -> None:
        super().__init__()
        self.setup()

    def setup(self) -> None:
        DatabaseProvider.register(self)
        RepositoryProvider.register(self)
        ExternalServiceProvider.register(self)
        ProcessingProvider.register(self)
        UseCaseProvider.register(self)


# Global container instance (singleton pattern)
_container: Optional[DIContainer] = None


def get_container() -> DIContainer:
    """
    Get the global DI container instance (singleton pattern)

    Returns:
        DIContainer instance with all dependencies registered
    """
    global _container
    if _container is None:
        _container = DIContainer()
    return _container
