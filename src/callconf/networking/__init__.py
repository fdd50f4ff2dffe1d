from .client import HttpClient, HttpResponse, RequestsTransport
from .config import HttpClientConfig

__all__ = [
    "HttpClient",
    "HttpClientConfig",
    "HttpResponse",
    "RequestsTransport",
]
