"""Exceptions raised while serializing built-in descriptors."""

from __future__ import annotations


class SerializationError(Exception):
    """Base class for fatal serialization failures."""


class MalformedSymbolError(SerializationError):
    """Raised when the descriptor input cannot be serialized as given."""


class UnsupportedSymbolError(MalformedSymbolError):
    """Raised when a symbol kind has no encoding in the message schema."""


class ArtifactWriteError(SerializationError):
    """Raised when an output file cannot be written."""


class WireFormatError(SerializationError):
    """Raised when encoded bytes cannot be parsed."""


__all__ = [
    "ArtifactWriteError",
    "MalformedSymbolError",
    "SerializationError",
    "UnsupportedSymbolError",
    "WireFormatError",
]
