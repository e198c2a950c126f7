from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from filestore.config import settings
from filestore.core.errors import DecodeError, EncodeError

V = TypeVar("V")


class JsonCodec(Generic[V]):
    """Canonical UTF-8 JSON encoding for values of one type."""

    def __init__(self, value_type: Any, *, indent: int | None = None):
        self.value_type = value_type
        self._adapter: TypeAdapter[V] = TypeAdapter(value_type)
        if indent is None:
            indent = settings.FILESTORE_JSON_INDENT
        self.indent = indent or None

    def encode(self, value: V) -> bytes:
        """
        Serialize value as V. A value that is not a V, or whose JSON would not
        decode back as V (e.g. NaN in a float field, written as null), is an
        EncodeError: the bytes returned always pass decode().
        """
        try:
            data = self._adapter.dump_json(value, indent=self.indent, warnings="error")
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise EncodeError(f"cannot encode value of type {type(value).__name__}: {e}") from e
        try:
            self._adapter.validate_json(data)
        except ValidationError as e:
            raise EncodeError(
                f"value of type {type(value).__name__} does not encode as a valid {self.type_name}"
            ) from e
        return data

    def decode(self, data: bytes) -> V:
        try:
            return self._adapter.validate_json(data)
        except ValidationError as e:
            raise DecodeError(
                f"invalid {self.type_name} payload ({e.error_count()} error(s))",
                error_count=e.error_count(),
            ) from e

    @property
    def type_name(self) -> str:
        return getattr(self.value_type, "__name__", None) or repr(self.value_type)
