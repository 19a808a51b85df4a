"""
The resource contract and the path rules built on it.

A resource is any object with a ``path()`` method returning its item path,
e.g. ``/apps/my-app``. Creating and listing go to the collection path, which
is the item path with its last segment removed (``/apps/``). Listing has no
item to ask, so the path comes from a zero-valued template of the element
type.
"""

from typing import Any, Generic, Iterable, Protocol, Type, TypeVar, runtime_checkable
from urllib.parse import quote

from pydantic import BaseModel

from heroku_client.exceptions import InvalidPathError, TypeContractError

R = TypeVar("R")


@runtime_checkable
class Resource(Protocol):
    """Anything that can compute its own endpoint path."""

    def path(self) -> str:
        ...


def join_path(*segments: Any) -> str:
    """
    Join path segments into a URL path beginning with "/".

    Each segment is percent-escaped, so identifiers containing "/" or
    spaces stay a single segment.
    """
    return "".join("/" + quote(str(s), safe="") for s in segments)


def collection_path(path: str) -> str:
    """
    Strip the last segment from an item path, keeping the separator.

    >>> collection_path("/apps/my-app")
    '/apps/'
    """
    i = path.rfind("/")
    if i == -1:
        raise InvalidPathError(path)
    return path[: i + 1]


def _is_resource_type(resource_type: Any) -> bool:
    return isinstance(resource_type, type) and callable(getattr(resource_type, "path", None))


def zero_value(resource_type: Type[R]) -> R:
    """Instantiate a resource type with every field at its default."""
    if not _is_resource_type(resource_type):
        raise TypeContractError(
            f"{resource_type!r} is not a resource type: it must be a class with a path() method",
            resource_type=resource_type,
        )
    if issubclass(resource_type, BaseModel):
        return resource_type.model_construct()
    try:
        return resource_type()
    except TypeError as e:
        raise TypeContractError(
            f"cannot create a template {resource_type.__name__}: {e}",
            resource_type=resource_type,
        ) from e


def item_path(resource: Any) -> str:
    """
    Call a resource's ``path()`` and check that it returned a string.

    Raises:
        TypeContractError: If ``path()`` is missing, fails or returns a non-string
    """
    name = type(resource).__name__
    try:
        path = resource.path()
    except (AttributeError, TypeError, ValueError, KeyError) as e:
        raise TypeContractError(f"{name}.path() failed: {e}", resource_type=type(resource)) from e
    if not isinstance(path, str):
        raise TypeContractError(
            f"{name}.path() returned {type(path).__name__}, expected str",
            resource_type=type(resource),
        )
    return path


def resolve_collection_path(resource_type: Type[Any]) -> str:
    """
    Derive the list endpoint of a resource type without a live element.

    Raises:
        TypeContractError: If the type cannot produce a template path
        InvalidPathError: If the template path has no separator
    """
    return collection_path(item_path(zero_value(resource_type)))


class Collection(list, Generic[R]):
    """
    A list of resources that remembers its element type.

    The element type carries the path logic, so an empty collection can be
    listed:

        apps = Collection(App)
        client.list(apps)
    """

    def __init__(self, resource_type: Type[R], items: Iterable[R] = ()):
        if not _is_resource_type(resource_type):
            raise TypeContractError(
                f"{resource_type!r} is not a resource type: it must be a class with a path() method",
                resource_type=resource_type,
            )
        super().__init__(items)
        self.resource_type = resource_type

    def path(self) -> str:
        """The list endpoint for this collection's element type."""
        return resolve_collection_path(self.resource_type)

    def __repr__(self) -> str:
        return f"Collection({self.resource_type.__name__}, {list.__repr__(self)})"
