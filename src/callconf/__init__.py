"""Deferred, per-call request configuration with interceptor pipelines."""

from .builder import RequestBuilder, merge_config
from .errors import (
    CallAbortedError,
    CallConfigError,
    HttpClientError,
    HttpStatusError,
    InvalidStateError,
    RequestTimeoutError,
    RetryableHttpError,
    TransportError,
    UnknownDataSourceError,
)
from .models import (
    DataSource,
    DataSourceResolver,
    StaticDataSourceResolver,
    model_method,
)
from .registry import GlobalRegistry, RegistryEntry
from .state import GlobalDefaults, MergedConfig
from .types import CONTINUE, Abort, Err, Ok, Result

__version__ = "0.1.0"

__all__ = [
    "CONTINUE",
    "Abort",
    "CallAbortedError",
    "CallConfigError",
    "DataSource",
    "DataSourceResolver",
    "Err",
    "GlobalDefaults",
    "GlobalRegistry",
    "HttpClientError",
    "HttpStatusError",
    "InvalidStateError",
    "MergedConfig",
    "Ok",
    "RegistryEntry",
    "RequestBuilder",
    "RequestTimeoutError",
    "Result",
    "RetryableHttpError",
    "StaticDataSourceResolver",
    "TransportError",
    "UnknownDataSourceError",
    "merge_config",
    "model_method",
]
