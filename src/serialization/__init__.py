"""Built-ins serialization entry points."""

from serialization.errors import (
    ArtifactWriteError,
    MalformedSymbolError,
    SerializationError,
    UnsupportedSymbolError,
    WireFormatError,
)
from serialization.serializer import BuiltInsSerializer, SerializationResult
from serialization.string_table import StringTable

__all__ = [
    "ArtifactWriteError",
    "BuiltInsSerializer",
    "MalformedSymbolError",
    "SerializationError",
    "SerializationResult",
    "StringTable",
    "UnsupportedSymbolError",
    "WireFormatError",
]
