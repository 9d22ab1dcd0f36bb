"""Binding of request parameters to typed values, with error collection.

A :class:`ValueBinder` reads single values through ``value_func`` and stores
each converted value in its :attr:`ValueBinder.bound` mapping. Failures are
collected rather than raised. With ``fail_fast`` set, the default, binding
stops at the first failure, and :meth:`ValueBinder.bind_error` hands that
failure back.
"""

from __future__ import annotations

import uuid as _uuid
from datetime import datetime as _datetime
from datetime import timezone as _timezone
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, runtime_checkable

__all__ = [
    "DATE_ONLY",
    "TIME_ONLY",
    "HTTPError",
    "BindingError",
    "Bindable",
    "ValueBinder",
    "new_binding_error",
    "form_field_binder",
    "query_params_binder",
    "path_params_binder",
]

DATE_ONLY = "%Y-%m-%d"
TIME_ONLY = "%H:%M:%S"

_MSG_REQUIRED = "required field value is empty"
_MSG_UUID = "invalid uuid value"
_MSG_TIME = "failed to bind field to value Time"
_MSG_BOOL = "failed to bind field value to bool"
_MSG_CUSTOM = "failed to bind field value to IBindable"

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class HTTPError(Exception):
    """An error carrying an HTTP status code and a message for the client."""

    def __init__(self, code: int, message: Any, internal: Optional[BaseException] = None) -> None:
        super().__init__(code, message, internal)
        self.code = code
        self.message = message
        self.internal = internal

    def __str__(self) -> str:
        if self.internal is None:
            return f"code={self.code}, message={self.message}"
        return f"code={self.code}, message={self.message}, internal={self.internal}"


class BindingError(HTTPError):
    """A request value that could not be bound to its field."""

    def __init__(
        self,
        field: str,
        values: Optional[Sequence[str]],
        code: int,
        message: Any,
        internal: Optional[BaseException] = None,
    ) -> None:
        super().__init__(code, message, internal)
        self.field = field
        self.values = list(values) if values is not None else None

    def __str__(self) -> str:
        return f"{super().__str__()}, field={self.field}"


def new_binding_error(
    source_param: str,
    values: Optional[Sequence[str]],
    message: Any,
    internal: Optional[BaseException],
) -> BindingError:
    """Create a 400 Bad Request binding error for ``source_param``."""
    return BindingError(source_param, values, 400, message, internal)


@runtime_checkable
class Bindable(Protocol):
    """An object that fills itself from a request string."""

    def parse(self, value: str) -> None:
        """Read ``value`` into this object; raise on invalid input."""


ErrorFunc = Callable[[str, Optional[Sequence[str]], Any, Optional[BaseException]], BaseException]


def _parse_bool(value: str) -> bool:
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"invalid boolean value {value!r}")


class ValueBinder:
    """Binds request parameters one by one, collecting failures."""

    def __init__(
        self,
        value_func: Callable[[str], str],
        values_func: Optional[Callable[[str], Optional[list[str]]]] = None,
        error_func: ErrorFunc = new_binding_error,
        fail_fast: bool = True,
    ) -> None:
        self.value_func = value_func
        self.values_func = values_func
        self.error_func = error_func
        self.fail_fast = fail_fast
        self.bound: dict[str, Any] = {}
        self._errors: list[BaseException] = []

    def bind_error(self) -> Optional[BaseException]:
        """Return the first collected error, or None, and clear the collection."""
        if not self._errors:
            return None
        first = self._errors[0]
        self._errors = []
        return first

    def _halted(self) -> bool:
        return self.fail_fast and bool(self._errors)

    def _fail(self, key: str, values: Optional[Sequence[str]], message: Any,
              internal: Optional[BaseException] = None) -> None:
        self._errors.append(self.error_func(key, values, message, internal))

    def _bind(
        self,
        key: str,
        name: Optional[str],
        convert: Callable[[str], Any],
        must_exist: bool,
        message: str,
        keep_internal: bool = True,
        empty_values: Optional[list[str]] = None,
    ) -> "ValueBinder":
        if self._halted():
            return self
        value = self.value_func(key)
        if value == "":
            if must_exist:
                self._fail(key, [value] if empty_values is None else empty_values, _MSG_REQUIRED)
            return self
        try:
            result = convert(value)
        except (ValueError, TypeError) as exc:
            self._fail(key, [value], message, exc if keep_internal else None)
            return self
        self.bound[key if name is None else name] = result
        return self

    # UUIDs

    def should_uuid(self, key: str, name: Optional[str] = None) -> "ValueBinder":
        """Bind an optional UUID parameter."""
        return self._bind(key, name, _uuid.UUID, False, _MSG_UUID, keep_internal=False)

    def uuid(self, key: str, name: Optional[str] = None) -> "ValueBinder":
        """Bind a required UUID parameter."""
        return self._bind(key, name, _uuid.UUID, True, _MSG_UUID, keep_internal=False)

    # Times

    @staticmethod
    def _time_parser(layout: str) -> Callable[[str], _datetime]:
        def parse(value: str) -> _datetime:
            parsed = _datetime.strptime(value, layout)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=_timezone.utc)
            return parsed

        return parse

    def should_time(self, key: str, layout: str, name: Optional[str] = None) -> "ValueBinder":
        """Bind an optional time parameter using a ``strptime`` layout; zone-less times are UTC."""
        return self._bind(key, name, self._time_parser(layout), False, _MSG_TIME)

    def time(self, key: str, layout: str, name: Optional[str] = None) -> "ValueBinder":
        """Bind a required time parameter using a ``strptime`` layout; zone-less times are UTC."""
        return self._bind(key, name, self._time_parser(layout), True, _MSG_TIME)

    def should_date(self, key: str, name: Optional[str] = None) -> "ValueBinder":
        """Bind an optional YYYY-MM-DD date parameter."""
        return self.should_time(key, DATE_ONLY, name)

    def date(self, key: str, name: Optional[str] = None) -> "ValueBinder":
        """Bind a required YYYY-MM-DD date parameter."""
        return self.time(key, DATE_ONLY, name)

    def should_time_only(self, key: str, name: Optional[str] = None) -> "ValueBinder":
        """Bind an optional HH:MM:SS time-of-day parameter."""
        return self.should_time(key, TIME_ONLY, name)

    def time_only(self, key: str, name: Optional[str] = None) -> "ValueBinder":
        """Bind a required HH:MM:SS time-of-day parameter."""
        return self.time(key, TIME_ONLY, name)

    # Strings

    def should_string(self, key: str, name: Optional[str] = None) -> "ValueBinder":
        """Bind an optional string parameter; empty values are skipped."""
        return self._bind(key, name, str, False, _MSG_REQUIRED)

    def string(self, key: str, name: Optional[str] = None) -> "ValueBinder":
        """Bind a required string parameter."""
        return self._bind(key, name, str, True, _MSG_REQUIRED)

    # Booleans

    def should_bool(self, key: str, name: Optional[str] = None) -> "ValueBinder":
        """Bind an optional boolean parameter (1/t/true or 0/f/false, in their usual cases)."""
        return self._bind(key, name, _parse_bool, False, _MSG_BOOL, empty_values=[])

    def bool(self, key: str, name: Optional[str] = None) -> "ValueBinder":
        """Bind a required boolean parameter."""
        return self._bind(key, name, _parse_bool, True, _MSG_BOOL, empty_values=[])

    # Custom types

    def _custom(self, key: str, parse: Callable[[str], Any], must_exist: bool) -> "ValueBinder":
        if self._halted():
            return self
        value = self.value_func(key)
        if value == "":
            if must_exist:
                self._fail(key, [value], _MSG_REQUIRED)
            return self
        try:
            parse(value)
        except Exception as exc:  # any failure of user parsing is a binding failure
            self._fail(key, [value], _MSG_CUSTOM, exc)
        return self

    def should_custom(self, key: str, dest: Bindable) -> "ValueBinder":
        """Let ``dest`` parse an optional parameter."""
        return self._custom(key, dest.parse, False)

    def custom(self, key: str, dest: Bindable) -> "ValueBinder":
        """Let ``dest`` parse a required parameter."""
        return self._custom(key, dest.parse, True)

    def custom_func(self, key: str, fn: Callable[[str], Any]) -> "ValueBinder":
        """Pass a required parameter to ``fn``, which raises on invalid input."""
        return self._custom(key, fn, True)


def form_field_binder(request: Any) -> ValueBinder:
    """Binder over form fields of a werkzeug request.

    Body form values come before URL query values, and take precedence.
    """

    def values(key: str) -> Optional[list[str]]:
        found = request.form.getlist(key) + request.args.getlist(key)
        return found or None

    def value(key: str) -> str:
        found = values(key)
        return found[0] if found else ""

    return ValueBinder(value, values, new_binding_error, True)


def query_params_binder(request: Any) -> ValueBinder:
    """Binder over URL query parameters of a werkzeug request."""

    def value(key: str) -> str:
        return request.args.get(key, "")

    def values(key: str) -> Optional[list[str]]:
        if key not in request.args:
            return None
        return request.args.getlist(key)

    return ValueBinder(value, values, new_binding_error, True)


def path_params_binder(params: Mapping[str, str]) -> ValueBinder:
    """Binder over matched path parameters."""

    def value(key: str) -> str:
        return params.get(key, "") or ""

    def values(key: str) -> Optional[list[str]]:
        found = value(key)
        return [found] if found else None

    return ValueBinder(value, values, new_binding_error, True)