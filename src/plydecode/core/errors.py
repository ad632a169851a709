"""Exceptions raised while decoding a PLY document."""

from __future__ import annotations


class PlyDecodeError(Exception):
    """Raised when a PLY document cannot be decoded into a geometry container."""


class MissingRequiredElementError(PlyDecodeError):
    """Raised when a mesh is requested but the faces cannot be decoded."""


class InvalidParameterError(PlyDecodeError, ValueError):
    """Raised when vertex properties are missing or have unsupported types."""


class PlyIOError(PlyDecodeError, OSError):
    """Raised when a PLY file or buffer cannot be read or parsed."""
