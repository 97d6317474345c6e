from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Any

from payment_session.domain.models import SecurityContext


_request_attributes: ContextVar[MappingProxyType[str, Any]] = ContextVar(
    "request_attributes",
    default=MappingProxyType({}),
)


class RequestAttributes:
    """
    Request-scoped attribute store backed by a context variable.

    Each asyncio task sees the attributes of the request it was spawned in.
    Attribute maps are never mutated in place: ``set_attribute`` swaps in a
    copy, so tasks copied from the same context do not leak writes into
    each other.
    """

    def get_attribute(self, key: str) -> Any:
        return _request_attributes.get().get(key)

    def set_attribute(self, key: str, value: Any) -> None:
        _request_attributes.set(MappingProxyType({**_request_attributes.get(), key: value}))

    def snapshot(self) -> dict[str, Any]:
        return dict(_request_attributes.get())

    @contextmanager
    def scope(self, **attributes: Any) -> Iterator["RequestAttributes"]:
        token = _request_attributes.set(MappingProxyType({**_request_attributes.get(), **attributes}))
        try:
            yield self
        finally:
            _request_attributes.reset(token)


class RequestSecurityContextProvider:
    """Reads the caller's security context out of the current request attributes."""

    def __init__(self, attributes: RequestAttributes) -> None:
        self._attributes = attributes

    def get_attribute(self, key: str) -> SecurityContext | None:
        value = self._attributes.get_attribute(key)
        if value is None or isinstance(value, SecurityContext):
            return value
        if isinstance(value, str):
            return SecurityContext(token=value) if value else None
        raise TypeError(f"Request attribute {key!r} does not hold a security context: {type(value).__name__}")
