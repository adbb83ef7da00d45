"""JSON serialization provider backed by pydantic."""
import logging
from functools import lru_cache
from typing import Any, Optional, Protocol, Type, TypeVar, Union

from pydantic import BaseModel, Field, PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from webhelpers.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SerializationError(ValueError):
    """Data could not be serialized or deserialized."""
    pass


class SerializerOptions(BaseModel):
    """Options for a single serialize/deserialize call."""
    indent: Optional[int] = Field(None, ge=0, description="Indentation, None for compact output")
    exclude_none: bool = Field(True, description="Omit fields whose value is None")
    by_alias: bool = Field(False, description="Use field aliases as JSON keys")
    strict: bool = Field(False, description="Disable type coercion when deserializing")

    @classmethod
    def from_settings(cls) -> "SerializerOptions":
        return cls(
            indent=settings.serializer_indent,
            exclude_none=settings.serializer_exclude_none
        )


class SerializationProvider(Protocol):
    """Serialize values to JSON and back."""

    def serialize(self, data: Any, options: Optional[SerializerOptions] = None) -> str: ...

    def serialize_to_bytes(self, data: Any, options: Optional[SerializerOptions] = None) -> bytes: ...

    def deserialize(self, data: str, type_: Type[T], options: Optional[SerializerOptions] = None) -> T: ...

    def deserialize_from_bytes(
        self, data: bytes, type_: Type[T], options: Optional[SerializerOptions] = None
    ) -> T: ...


@lru_cache(maxsize=256)
def _adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


class JsonSerializationProvider:
    """SerializationProvider using pydantic TypeAdapter for any supported type."""

    def __init__(self, default_options: Optional[SerializerOptions] = None):
        self.default_options = default_options or SerializerOptions.from_settings()

    def serialize(self, data: Any, options: Optional[SerializerOptions] = None) -> str:
        return self.serialize_to_bytes(data, options).decode("utf-8")

    def serialize_to_bytes(self, data: Any, options: Optional[SerializerOptions] = None) -> bytes:
        """
        Serialize data to UTF-8 JSON.

        Pydantic models, dataclasses, TypedDicts and plain containers are
        supported; the value's runtime type drives the encoding.

        Raises:
            SerializationError: If data cannot be represented as JSON
        """
        opts = options or self.default_options
        try:
            return _adapter(type(data)).dump_json(
                data,
                indent=opts.indent,
                exclude_none=opts.exclude_none,
                by_alias=opts.by_alias
            )
        except (PydanticSchemaGenerationError, PydanticSerializationError) as e:
            logger.warning(f"Failed to serialize {type(data).__name__}: {e}")
            raise SerializationError(f"Cannot serialize {type(data).__name__}: {e}") from e

    def deserialize(self, data: str, type_: Type[T], options: Optional[SerializerOptions] = None) -> T:
        return self._validate(data, type_, options)

    def deserialize_from_bytes(
        self, data: bytes, type_: Type[T], options: Optional[SerializerOptions] = None
    ) -> T:
        return self._validate(data, type_, options)

    def _validate(self, data: Union[str, bytes], type_: Type[T], options: Optional[SerializerOptions]) -> T:
        opts = options or self.default_options
        try:
            return _adapter(type_).validate_json(data, strict=opts.strict)
        except ValidationError as e:
            raise SerializationError(f"Invalid JSON for {getattr(type_, '__name__', type_)}: {e}") from e
