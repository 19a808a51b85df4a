"""
Heroku Client Library.

A generic client for the Heroku Platform API. Resources are any objects with
a ``path()`` method; the client turns them into requests and decodes the
responses back into them.

Example usage:
    ```python
    from pydantic import BaseModel
    from heroku_client import Client, Collection, join_path

    class App(BaseModel):
        id: str = ""
        name: str = ""
        maintenance: bool = False

        def path(self) -> str:
            return join_path("apps", self.id or self.name)

    with Client.from_url("https://:token@api.heroku.com") as client:
        app = App(name="myapp")
        client.fetch(app)

        apps = client.list(App)
    ```
"""

__version__ = "0.1.0"

# Session and CRUD operations
from heroku_client.client import Client, parse_session_url

# Configuration
from heroku_client.config import DEFAULT_HOST, USER_AGENT, ClientSettings, get_settings

# Request building and response decoding (for advanced usage)
from heroku_client.http import RequestBuilder, Transport, decode_response

# Payload and sink kinds
from heroku_client.payloads import (
    ABSENT,
    DISCARD,
    Absent,
    Discard,
    RawBytes,
    RawSink,
    Structured,
    as_payload,
    as_sink,
)

# Resource contract
from heroku_client.resource import (
    Collection,
    Resource,
    collection_path,
    join_path,
    resolve_collection_path,
)

# Exceptions
from heroku_client.exceptions import (
    HerokuClientError,
    ConfigError,
    BuildError,
    TransportError,
    DecodeError,
    InvalidPathError,
    TypeContractError,
    StatusError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    UnprocessableEntityError,
    RateLimitError,
    ServerError,
    status_error_from_response,
)

__all__ = [
    # Version
    "__version__",
    # Client
    "Client",
    "parse_session_url",
    # Configuration
    "DEFAULT_HOST",
    "USER_AGENT",
    "ClientSettings",
    "get_settings",
    # HTTP
    "RequestBuilder",
    "Transport",
    "decode_response",
    # Payloads
    "ABSENT",
    "DISCARD",
    "Absent",
    "Discard",
    "RawBytes",
    "RawSink",
    "Structured",
    "as_payload",
    "as_sink",
    # Resources
    "Collection",
    "Resource",
    "collection_path",
    "join_path",
    "resolve_collection_path",
    # Exceptions
    "HerokuClientError",
    "ConfigError",
    "BuildError",
    "TransportError",
    "DecodeError",
    "InvalidPathError",
    "TypeContractError",
    "StatusError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "UnprocessableEntityError",
    "RateLimitError",
    "ServerError",
    "status_error_from_response",
]
