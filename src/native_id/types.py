"""Type tokens and text conversion for native identifiers.

Native identifiers are persisted as a (type token, text) pair. Common types
get a short alias; anything else is written under its fully qualified name
and rebuilt by calling the type with its text form.

All conversions are locale-independent so a file written on one host parses
back identically on another.
"""

import importlib
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable

from src.native_id.errors import (
    NativeIdError,
    NativeIdFormatError,
    UnknownNativeIdTypeError,
)


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    raise ValueError(f"not a boolean: {text!r}")


@dataclass(frozen=True)
class _Codec:
    type_: type
    parse: Callable[[str], Any]
    format: Callable[[Any], str]


def qualified_name(type_: type) -> str:
    """Fully qualified ``module.QualName`` of a type."""
    return f"{type_.__module__}.{type_.__qualname__}"


def _import_type(token: str) -> type | None:
    """Resolve a fully qualified name by importing its longest module prefix."""
    parts = token.split(".")
    for i in range(len(parts) - 1, 0, -1):
        try:
            obj: Any = importlib.import_module(".".join(parts[:i]))
        except Exception:
            # Missing, empty or broken module names all mean "try a shorter prefix"
            continue
        try:
            for attr in parts[i:]:
                obj = getattr(obj, attr)
        except AttributeError:
            return None
        return obj if isinstance(obj, type) else None
    return None


class TypeRegistry:
    """Maps native id types to short aliases and converts values to text.

    Usage:
        registry = TypeRegistry()
        registry.register("ticket", TicketId, parse=TicketId.from_str)
        token = registry.token_for(value)
        text = registry.to_text(value)
        assert registry.from_text(token, text) == value
    """

    def __init__(self) -> None:
        self._by_alias: dict[str, _Codec] = {}
        self._alias_by_type: dict[type, str] = {}

    def register(
        self,
        alias: str,
        type_: type,
        parse: Callable[[str], Any] | None = None,
        format: Callable[[Any], str] | None = None,
    ) -> None:
        """Register a short alias for a type.

        Args:
            alias: Token written to disk instead of the qualified name
            type_: The native id type
            parse: Text to value converter (defaults to ``type_(text)``)
            format: Value to text converter (defaults to ``str``)
        """
        if not alias or "." in alias:
            raise ValueError(f"Invalid type alias: {alias!r}")
        existing = self._by_alias.get(alias)
        if existing is not None and existing.type_ is not type_:
            raise ValueError(
                f"Alias {alias!r} already registered for {qualified_name(existing.type_)}"
            )
        self._by_alias[alias] = _Codec(type_, parse or type_, format or str)
        self._alias_by_type[type_] = alias

    def alias_for(self, type_: type) -> str | None:
        """Short alias registered for exactly this type, if any."""
        return self._alias_by_type.get(type_)

    def token_for(self, value: Any) -> str:
        """Type token to persist alongside ``value``."""
        type_ = type(value)
        return self.alias_for(type_) or qualified_name(type_)

    def resolve(self, token: str) -> type:
        """Resolve a type token (alias or qualified name) to a type."""
        codec = self._by_alias.get(token)
        if codec is not None:
            return codec.type_
        type_ = _import_type(token) if token else None
        if type_ is None:
            raise UnknownNativeIdTypeError(token)
        return type_

    def to_text(self, value: Any) -> str:
        """Render a native id as text."""
        type_ = type(value)
        alias = self.alias_for(type_)
        formatter = self._by_alias[alias].format if alias else str
        try:
            return formatter(value)
        except Exception as exc:
            raise NativeIdFormatError(self.token_for(value), repr(value), str(exc)) from exc

    def from_text(self, token: str, text: str) -> Any:
        """Rebuild a native id from its type token and text."""
        codec = self._by_alias.get(token)
        try:
            parse = codec.parse if codec is not None else self.resolve(token)
            return parse(text)
        except NativeIdError:
            raise
        except Exception as exc:
            raise NativeIdFormatError(token, text, str(exc)) from exc

    def encode(self, value: Any) -> tuple[str, str]:
        """Type token and text of a native id that is known to parse back.

        Raises:
            NativeIdError: The value cannot be rendered, or its text does not
                rebuild an equal value of the same type.
        """
        token = self.token_for(value)
        text = self.to_text(value)
        restored = self.from_text(token, text)
        if type(restored) is not type(value) or restored != value:
            raise NativeIdFormatError(
                token, text, f"parses back as {restored!r}, not {value!r}"
            )
        return token, text


def _build_default_registry() -> TypeRegistry:
    registry = TypeRegistry()
    registry.register("str", str)
    registry.register("int", int)
    registry.register("float", float, format=repr)
    registry.register("bool", bool, parse=_parse_bool)
    registry.register("decimal", Decimal)
    registry.register("uuid", uuid.UUID)
    registry.register(
        "datetime", datetime, parse=datetime.fromisoformat, format=datetime.isoformat
    )
    registry.register("date", date, parse=date.fromisoformat, format=date.isoformat)
    return registry


# Shared registry used by storages created without an explicit one
default_registry = _build_default_registry()
