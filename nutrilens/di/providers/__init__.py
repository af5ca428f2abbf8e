from .database_provider import DatabaseProvider
from .repository_provider import RepositoryProvider
from .external_service_provider import ExternalServiceProvider
from .processing_provider import ProcessingProvider
from .use_case_provider import UseCaseProvider


__all__ = [
    "DatabaseProvider",
    "RepositoryProvider",
    "ExternalServiceProvider",
    "ProcessingProvider",
    "UseCaseProvider",
]
