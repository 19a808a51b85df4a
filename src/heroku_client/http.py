"""
Request building and response decoding for the Heroku API.

This module provides:
- The Transport protocol the client sends requests through
- RequestBuilder, which turns (method, path, payload) into an httpx.Request
  with auth and content negotiation headers
- decode_response, which checks the status and writes the body into a sink
"""

from dataclasses import fields, is_dataclass
from typing import Any, Dict, Optional, Protocol, Tuple, runtime_checkable
import json
import logging

import httpx
from pydantic import BaseModel, PydanticSchemaGenerationError, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError, to_json

from heroku_client.exceptions import (
    BuildError,
    InvalidPathError,
    DecodeError,
    status_error_from_response,
    status_line,
)
from heroku_client.payloads import (
    Absent,
    Discard,
    RawBytes,
    RawSink,
    as_payload,
    as_sink,
)
from heroku_client.resource import Collection, zero_value

logger = logging.getLogger(__name__)

ACCEPT_TEMPLATE = "application/vnd.heroku+json; version={version}"


@runtime_checkable
class Transport(Protocol):
    """
    Anything that executes one request and returns one response.

    ``httpx.Client`` satisfies this protocol. Implementations raise
    ``httpx.HTTPError`` or ``OSError`` on network failures.
    """

    def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response:
        ...


class RequestBuilder:
    """
    Builds requests suitable for sending to the Heroku API.

    Every request carries:

        Accept: application/vnd.heroku+json; version=3
        User-Agent: <user_agent>
        Authorization: Basic <":" + token>
    """

    def __init__(
        self,
        host: str,
        token: Optional[str] = None,
        *,
        api_version: str = "3",
        user_agent: str,
    ):
        self.host = host
        self.token = token
        self.api_version = api_version
        self.user_agent = user_agent
        self._auth = httpx.BasicAuth("", token or "")

    @property
    def accept(self) -> str:
        return ACCEPT_TEMPLATE.format(version=self.api_version)

    def url(self, path: str) -> str:
        return f"https://{self.host}{path}"

    def _encode_body(self, payload: Any) -> Tuple[Optional[bytes], Optional[str]]:
        """Return (body, content type) for a payload of any kind."""
        payload = as_payload(payload)

        if isinstance(payload, Absent):
            return None, None

        if isinstance(payload, RawBytes):
            try:
                return payload.read(), None
            except OSError as e:
                raise BuildError(f"Failed to read request body: {e}") from e

        try:
            body = to_json(payload.value, by_alias=True, exclude_none=True)
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise BuildError(
                f"Cannot serialize {type(payload.value).__name__} to JSON: {e}",
                details={"payload_type": type(payload.value).__name__},
            ) from e
        return body, "application/json"

    def build(self, method: str, path: str, payload: Any = None) -> httpx.Request:
        """
        Build a request for ``path`` on the configured host.

        The payload kind determines the body:

            Absent / None        no body
            RawBytes / bytes, IO body is sent verbatim
            Structured / other   body is encoded as application/json

        Raises:
            InvalidPathError: If ``path`` does not start with "/"
            BuildError: If the payload cannot be encoded or the URL is invalid
        """
        # an unrooted path would extend the host and send the token elsewhere
        if not isinstance(path, str) or not path.startswith("/"):
            raise InvalidPathError(str(path), message=f"path must start with '/': {path!r}")

        body, content_type = self._encode_body(payload)

        headers: Dict[str, str] = {
            "Accept": self.accept,
            "User-Agent": self.user_agent,
        }
        if content_type:
            headers["Content-Type"] = content_type

        try:
            request = httpx.Request(method, self.url(path), headers=headers, content=body)
        except (httpx.InvalidURL, TypeError) as e:
            raise BuildError(f"Invalid request URL for path {path!r}: {e}") from e

        return next(self._auth.auth_flow(request))


# =============================================================================
# Decoding
# =============================================================================


def _adapter_for(target_type: type) -> TypeAdapter:
    try:
        return TypeAdapter(target_type)
    except PydanticSchemaGenerationError as e:
        raise DecodeError(f"Cannot decode into {target_type.__name__}: {e}") from e


def _validate_as(target_type: type, data: Any, adapter: Optional[TypeAdapter] = None) -> Any:
    adapter = adapter or _adapter_for(target_type)
    try:
        return adapter.validate_python(data)
    except PydanticValidationError as e:
        raise DecodeError(
            f"Response does not match {target_type.__name__}: {e}",
            details={"errors": e.errors(include_url=False)},
        ) from e


def _merge_into_model(target: BaseModel, data: Any) -> None:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object for {type(target).__name__}, got {type(data).__name__}")
    current = target.model_dump(by_alias=True, exclude_unset=True)
    merged = _validate_as(type(target), {**current, **data})
    try:
        for name in merged.model_fields_set:
            setattr(target, name, getattr(merged, name))
    except PydanticValidationError as e:
        # frozen models reject assignment
        raise DecodeError(f"Cannot update {type(target).__name__} in place: {e}") from e


def _merge_into_dataclass(target: Any, data: Any) -> None:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object for {type(target).__name__}, got {type(data).__name__}")
    current = {f.name: getattr(target, f.name) for f in fields(target) if hasattr(target, f.name)}
    merged = _validate_as(type(target), {**current, **data})
    for f in fields(target):
        if f.name in data:
            setattr(target, f.name, getattr(merged, f.name))


def _merge_into_object(target: Any, data: Any) -> None:
    """Set the keys of ``data`` that name existing instance attributes. No validation."""
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object for {type(target).__name__}, got {type(data).__name__}")
    try:
        attributes = vars(target)
    except TypeError as e:
        raise DecodeError(f"Cannot decode JSON into {type(target).__name__}: {e}") from e
    for key, value in data.items():
        if key in attributes:
            setattr(target, key, value)


def _is_plain_object(target: Any) -> bool:
    return not isinstance(target, (BaseModel, type)) and not is_dataclass(target) and hasattr(target, "__dict__")


def _decode_items(resource_type: type, data: list) -> list:
    if issubclass(resource_type, BaseModel) or is_dataclass(resource_type):
        adapter = _adapter_for(resource_type)
        return [_validate_as(resource_type, item, adapter) for item in data]
    items = []
    for item in data:
        element = zero_value(resource_type)
        _merge_into_object(element, item)
        items.append(element)
    return items


def write_into(target: Any, data: Any) -> None:
    """
    Write decoded JSON into a structured target in place.

    Collections and lists have their contents replaced, dicts are updated,
    models and dataclasses have the fields present in ``data`` overwritten.
    Other objects get the keys that match one of their instance attributes.
    """
    if isinstance(target, Collection):
        if not isinstance(data, list):
            raise DecodeError(f"Expected a JSON array, got {type(data).__name__}")
        target[:] = _decode_items(target.resource_type, data)
    elif isinstance(target, list):
        if not isinstance(data, list):
            raise DecodeError(f"Expected a JSON array, got {type(data).__name__}")
        target[:] = data
    elif isinstance(target, dict):
        if not isinstance(data, dict):
            raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")
        target.update(data)
    elif isinstance(target, BaseModel):
        _merge_into_model(target, data)
    elif is_dataclass(target) and not isinstance(target, type):
        _merge_into_dataclass(target, data)
    elif _is_plain_object(target) and callable(getattr(target, "path", None)):
        _merge_into_object(target, data)
    else:
        raise DecodeError(f"Cannot decode JSON into {type(target).__name__}")


def decode_response(response: httpx.Response, sink: Any = None) -> None:
    """
    Check a response and write its body into ``sink``.

    The sink kind determines how the body is handled:

        Discard / None         body is drained and dropped
        RawSink / writer       body is copied into the writer
        Structured / other     body is decoded as JSON into the value

    The response is closed on every path.

    Raises:
        StatusError: If the status is outside 2xx (the body is not parsed)
        DecodeError: If the body cannot be copied or decoded into the sink
    """
    try:
        logger.debug("Response %s for %s", status_line(response), _describe(response))
        if not response.is_success:
            logger.warning("Bad status %s for %s", status_line(response), _describe(response))
            raise status_error_from_response(response)

        sink = as_sink(sink)
        status_code = response.status_code

        if isinstance(sink, Discard):
            try:
                response.read()
            except httpx.HTTPError as e:
                raise DecodeError(f"Failed to drain response body: {e}", status_code=status_code) from e
            return

        if isinstance(sink, RawSink):
            try:
                for chunk in response.iter_bytes():
                    sink.writer.write(chunk)
            except (httpx.HTTPError, OSError, TypeError, ValueError) as e:
                raise DecodeError(f"Failed to copy response body: {e}", status_code=status_code) from e
            return

        try:
            response.read()
            data = response.json()
        except httpx.HTTPError as e:
            raise DecodeError(f"Failed to read response body: {e}", status_code=status_code) from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(f"Malformed JSON in response: {e}", status_code=status_code) from e
        write_into(sink.value, data)
    finally:
        response.close()


def _describe(response: httpx.Response) -> str:
    try:
        request = response.request
    except RuntimeError:
        return "<unknown request>"
    return f"{request.method} {request.url}"
