"""A small virtual-hosting Gemini server built on AnyIO."""

from .status import StatusCode, StatusCategory
from .errors import (
    Failure,
    GeminiError,
    LineEnding,
    NotFound,
    Forbidden,
    ProxyRefused,
    Gone,
    Redirect,
    Internal,
    failure_status,
)
from .paths import canonicalize
from .request import GeminiRequest
from .response import GeminiResponse, ResponseHeader, media_type_for
from .config import ConfigError, RedirectRule, ServerConfig, Settings, VirtualHostConfig
from .resolver import resolve
from .handler import ConnectionHandler
from .server import VirtualHostServer, serve

__all__ = [
    # Protocol
    "StatusCode",
    "StatusCategory",
    "GeminiRequest",
    "GeminiResponse",
    "ResponseHeader",
    "media_type_for",
    # Failures
    "Failure",
    "GeminiError",
    "LineEnding",
    "NotFound",
    "Forbidden",
    "ProxyRefused",
    "Gone",
    "Redirect",
    "Internal",
    "failure_status",
    # Configuration
    "ConfigError",
    "RedirectRule",
    "ServerConfig",
    "Settings",
    "VirtualHostConfig",
    "canonicalize",
    # Serving
    "resolve",
    "ConnectionHandler",
    "VirtualHostServer",
    "serve",
]
