"""
Main Heroku API client.

This module provides the Client class, a session holding the API host and
credential, and the generic CRUD operations that work on any resource
exposing a ``path()`` method.
"""

from typing import Any, Optional, Tuple, Type, TypeVar, Union
from urllib.parse import urlsplit
import logging

import httpx

from heroku_client.config import DEFAULT_HOST, USER_AGENT, ClientSettings, get_settings
from heroku_client.exceptions import ConfigError, TransportError
from heroku_client.http import RequestBuilder, Transport, decode_response
from heroku_client.payloads import ABSENT, DISCARD, Payload, Sink, Structured
from heroku_client.resource import Collection, Resource, collection_path, item_path

logger = logging.getLogger(__name__)

R = TypeVar("R")


def parse_session_url(url: str) -> Tuple[str, Optional[str]]:
    """
    Split a session URL into (host, token).

    The URL has the form ``https://:<token>@<host>``. An empty string selects
    the default host and no token.

    Raises:
        ConfigError: If the URL is malformed, not https, or has no host
    """
    if url == "":
        return DEFAULT_HOST, None
    try:
        parts = urlsplit(url)
        host = parts.netloc.rpartition("@")[2]
        token = parts.password
    except ValueError as e:
        raise ConfigError(f"invalid URL: {e}") from e
    if parts.scheme != "https":
        raise ConfigError(f"invalid scheme {parts.scheme!r}", details={"scheme": parts.scheme})
    if not host:
        raise ConfigError("URL has no host")
    return host, token


class Client:
    """
    Session for the Heroku API.

    Example usage:
        ```python
        with Client.from_url("https://:token@api.heroku.com") as client:
            app = App(name="myapp")
            client.fetch(app)

            client.create(App(name="other"))
            client.update(App(name="myapp", maintenance=True))
            client.destroy(App(name="myapp"))

            apps = client.list(App)
        ```

    The client holds no mutable state beyond its configuration and can be
    shared between threads when the transport can.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        token: Optional[str] = None,
        *,
        transport: Optional[Transport] = None,
        api_version: str = "3",
        user_agent: str = USER_AGENT,
        timeout: float = 30.0,
    ):
        """
        Initialize the client.

        Args:
            host: API host, e.g. "api.heroku.com"
            token: API token, sent as the basic auth password
            transport: Transport for sending requests; an httpx.Client
                owned by this client is created if omitted
            api_version: Version token for the Accept header
            user_agent: User-Agent header value
            timeout: Timeout in seconds for the default transport
        """
        self.host = host
        self.token = token
        self._builder = RequestBuilder(
            host,
            token,
            api_version=api_version,
            user_agent=user_agent,
        )
        self._owns_transport = transport is None
        self.transport: Transport = transport or httpx.Client(timeout=httpx.Timeout(timeout))

    @classmethod
    def from_url(cls, url: str, *, transport: Optional[Transport] = None, **kwargs: Any) -> "Client":
        """
        Create a client from a session URL ``https://:<token>@<host>``.

        If url is the empty string, DEFAULT_HOST is used with no token.

        Raises:
            ConfigError: If the URL does not use the https scheme
        """
        host, token = parse_session_url(url)
        return cls(host, token, transport=transport, **kwargs)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ClientSettings] = None,
        *,
        transport: Optional[Transport] = None,
    ) -> "Client":
        """Create a client from ClientSettings, loading them from the environment if omitted."""
        settings = settings or get_settings()
        return cls.from_url(
            settings.url,
            transport=transport,
            api_version=settings.api_version,
            user_agent=settings.user_agent,
            timeout=settings.timeout,
        )

    def __repr__(self) -> str:
        return f"Client(host={self.host!r}, authenticated={self.token is not None})"

    def close(self) -> None:
        """Close the default transport. Injected transports are left open."""
        if self._owns_transport and isinstance(self.transport, httpx.Client):
            self.transport.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Requests
    # =========================================================================

    def new_request(self, method: str, path: str, payload: Any = None) -> httpx.Request:
        """
        Build a request suitable for sending to the API.

        See RequestBuilder.build for how the payload is encoded.
        """
        return self._builder.build(method, path, payload)

    def do(self, request: httpx.Request, sink: Any = None) -> None:
        """
        Send a request, check its response, and decode the body into ``sink``.

        See decode_response for how the sink is handled.

        Raises:
            TransportError: If the transport fails
            StatusError: If the response status is outside 2xx
            DecodeError: If the body cannot be decoded into the sink
        """
        logger.debug("%s %s", request.method, request.url)
        try:
            response = self.transport.send(request, stream=True)
        except (httpx.HTTPError, OSError) as e:
            raise TransportError(f"{request.method} {request.url} failed: {e}", original=e) from e
        decode_response(response, sink)

    def _call(self, method: str, path: str, payload: Payload, sink: Sink) -> None:
        self.do(self.new_request(method, path, payload), sink)

    # =========================================================================
    # CRUD
    # =========================================================================

    def fetch(self, resource: Resource) -> None:
        """Load a resource from its own path into itself."""
        self._call("GET", item_path(resource), ABSENT, Structured(resource))

    def create(self, resource: Resource) -> None:
        """
        Create a resource in its collection.

        The response is decoded back into ``resource``, so server-assigned
        fields such as the id are populated in place.

        Raises:
            InvalidPathError: If the resource path has no separator
        """
        path = collection_path(item_path(resource))
        self._call("POST", path, Structured(resource), Structured(resource))

    def update(self, resource: Resource) -> None:
        """Send a resource to its own path with PATCH. The response is ignored."""
        self._call("PATCH", item_path(resource), Structured(resource), DISCARD)

    def destroy(self, resource: Resource) -> None:
        """Delete a resource at its own path."""
        self._call("DELETE", item_path(resource), ABSENT, DISCARD)

    def list(self, handle: Union[Collection[R], Type[R]]) -> Collection[R]:
        """
        List every resource of a type.

        ``handle`` is either a Collection, whose contents are replaced, or a
        resource type, for which a new Collection is created. The list path
        comes from the element type, so the collection may be empty.

        Returns:
            The populated collection

        Raises:
            TypeContractError: If the element type does not satisfy the
                resource contract
        """
        if not isinstance(handle, Collection):
            handle = Collection(handle)
        self._call("GET", handle.path(), ABSENT, Structured(handle))
        return handle
