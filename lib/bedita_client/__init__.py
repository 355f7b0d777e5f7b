from .client import BEditaClient
from .base import BaseClient
from .config_types import ClientConfig
from .errors import (
    ApiError,
    BEditaClientError,
    ConfigurationError,
    FileError,
    PreconditionError,
    ProtocolError,
    TransportError,
    ValidationError,
)
from .http_log import LoggingHttpLogger, NullHttpLogger
from .tokens import TokenPair

__all__ = [
    "BEditaClient",
    "BaseClient",
    "ClientConfig",
    "TokenPair",
    "ApiError",
    "BEditaClientError",
    "ConfigurationError",
    "FileError",
    "PreconditionError",
    "ProtocolError",
    "TransportError",
    "ValidationError",
    "LoggingHttpLogger",
    "NullHttpLogger",
]
